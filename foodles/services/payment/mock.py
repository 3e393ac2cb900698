"""
Mock Payment Service Implementation

Simulates Razorpay payment lookups without making real API calls.
Used in development mode (ENV_MODE=development) to exercise the complete
checkout flow locally.

Behavior:
    - Signature verification is real (HMAC over "order|payment")
    - Simulates response latency
    - Randomly reports payments as failed (simulates declines)
    - Payment ids must look like Razorpay ids (pay_xxx)
"""

import asyncio
import random
import logging
import time
from typing import Optional

from foodles.services.payment.base import BasePaymentService, PaymentDetails

logger = logging.getLogger(__name__)

MOCK_KEY_SECRET = "mock_razorpay_secret"


class MockPaymentService(BasePaymentService):
    """
    Mock implementation of the payment gateway.

    Attributes:
        failure_rate: Probability that a looked-up payment is "failed" (0.0-1.0)
        min_latency: Minimum simulated response time in seconds
        max_latency: Maximum simulated response time in seconds
        amount_paise: Amount reported for every mock payment, in paise
    """

    def __init__(
        self,
        key_secret: Optional[str] = None,
        failure_rate: float = 0.10,
        min_latency: float = 0.1,
        max_latency: float = 0.4,
        amount_paise: int = 49900,
    ):
        super().__init__(key_secret or MOCK_KEY_SECRET)
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency
        self.amount_paise = amount_paise

        logger.info(
            f"MockPaymentService initialized "
            f"(failure_rate={failure_rate:.0%}, "
            f"latency={min_latency}-{max_latency}s)"
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "mock"

    async def _simulate_latency(self) -> None:
        if self.max_latency > 0:
            await asyncio.sleep(random.uniform(self.min_latency, self.max_latency))

    def _should_fail(self) -> bool:
        return random.random() < self.failure_rate

    async def fetch_payment(self, payment_id: str) -> PaymentDetails:
        """
        Simulate fetching a payment.

        Ids that do not start with "pay_" are rejected the way the real
        gateway rejects unknown ids.
        """
        await self._simulate_latency()

        if not payment_id.startswith("pay_"):
            logger.debug(f"Mock: Unknown payment id {payment_id}")
            return PaymentDetails(
                success=False,
                payment_id=payment_id,
                error_message="The id provided does not exist",
            )

        status = "failed" if self._should_fail() else "captured"
        logger.info(f"Mock: Payment {payment_id} is {status}")

        return PaymentDetails(
            success=True,
            payment_id=payment_id,
            status=status,
            amount=self.amount_paise / 100,
            currency="INR",
            method="upi",
            captured_at=int(time.time()) if status == "captured" else None,
        )

    async def health_check(self) -> bool:
        """Mock health check always returns True."""
        return True
