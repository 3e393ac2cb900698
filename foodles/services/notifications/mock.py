"""
Mock Notification Services

Simulate email and telephony for development.
No actual messages are sent or calls placed - just logged and recorded,
so tests can assert on what would have gone out.
"""

import asyncio
import random
import uuid
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from foodles.services.notifications.base import (
    BaseMailService,
    BaseTelephonyService,
    DeliveryResult,
)

logger = logging.getLogger(__name__)


@dataclass
class SentMessage:
    """Record of one mock send."""
    kind: str
    to: str
    subject: Optional[str] = None
    body: Optional[str] = None
    restaurant_id: Optional[str] = None


class _MockBehaviour:
    """Latency and random-failure knobs shared by the mock services."""

    def __init__(self, failure_rate: float, min_latency: float, max_latency: float):
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency
        self.sent: list[SentMessage] = []

    async def _simulate_latency(self) -> None:
        if self.max_latency > 0:
            await asyncio.sleep(random.uniform(self.min_latency, self.max_latency))

    def _should_fail(self) -> bool:
        return random.random() < self.failure_rate

    def sent_to(self, to: str) -> list[SentMessage]:
        return [m for m in self.sent if m.to == to]


class MockMailService(_MockBehaviour, BaseMailService):
    """
    Mock mail transport.

    Addresses in ``rejected_recipients`` are accepted by the transport and
    then bounced, the way an SMTP server rejects an unknown mailbox.
    """

    def __init__(
        self,
        failure_rate: float = 0.05,
        min_latency: float = 0.1,
        max_latency: float = 0.3,
        rejected_recipients: Iterable[str] = (),
    ):
        super().__init__(failure_rate, min_latency, max_latency)
        self.rejected_recipients = {r.lower() for r in rejected_recipients}
        logger.info(f"MockMailService initialized (failure_rate={failure_rate:.0%})")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def send_email(
        self,
        to_email: str,
        subject: str,
        body_html: str,
        body_text: Optional[str] = None,
    ) -> DeliveryResult:
        """Simulate sending email."""
        await self._simulate_latency()

        if self._should_fail():
            logger.warning(f"Mock email failed (simulated) to {to_email}")
            return DeliveryResult(
                success=False,
                error_message="Simulated email failure",
                provider="mock",
            )

        if to_email.lower() in self.rejected_recipients:
            logger.warning(f"Mock email rejected by recipient server: {to_email}")
            return DeliveryResult(
                success=False,
                error_message=f"Recipient address rejected: {to_email}",
                provider="mock",
            )

        message_id = f"email_mock_{uuid.uuid4().hex[:12]}"
        self.sent.append(SentMessage("email", to_email, subject, body_html))
        logger.info(f"Mock email sent to {to_email}: {subject} (ID: {message_id})")

        return DeliveryResult(success=True, message_id=message_id, provider="mock")

    async def health_check(self) -> bool:
        return True


class MockTelephonyService(_MockBehaviour, BaseTelephonyService):
    """
    Mock telephony provider.

    Only restaurants listed in ``restaurant_ids`` count as configured;
    numbers in ``failing_numbers`` get a provider error.
    """

    def __init__(
        self,
        restaurant_ids: Iterable[str] = ("1", "2", "3"),
        failure_rate: float = 0.05,
        min_latency: float = 0.1,
        max_latency: float = 0.3,
        failing_numbers: Iterable[str] = (),
    ):
        super().__init__(failure_rate, min_latency, max_latency)
        self._restaurant_ids = [str(r) for r in restaurant_ids]
        self.failing_numbers = set(failing_numbers)
        logger.info(
            f"MockTelephonyService initialized "
            f"(restaurants={self._restaurant_ids}, failure_rate={failure_rate:.0%})"
        )

    @property
    def provider_name(self) -> str:
        return "mock"

    @property
    def configured_restaurants(self) -> list[str]:
        return list(self._restaurant_ids)

    async def _deliver(self, kind: str, to_phone: str, restaurant_id: str, body: Optional[str] = None) -> DeliveryResult:
        await self._simulate_latency()

        if not self.is_configured(restaurant_id):
            return DeliveryResult.not_attempted(
                f"Telephony not configured for restaurant {restaurant_id}",
                provider="mock",
            )

        if self._should_fail() or to_phone in self.failing_numbers:
            logger.warning(f"Mock {kind} failed (simulated) to {to_phone}")
            return DeliveryResult(
                success=False,
                error_message=f"Simulated {kind} failure",
                provider="mock",
            )

        message_id = f"{kind}_mock_{uuid.uuid4().hex[:12]}"
        self.sent.append(SentMessage(kind, to_phone, body=body, restaurant_id=str(restaurant_id)))
        logger.info(f"Mock {kind} to {to_phone} for restaurant {restaurant_id} (ID: {message_id})")

        return DeliveryResult(success=True, message_id=message_id, provider="mock")

    async def place_missed_call(self, to_phone: str, restaurant_id: str) -> DeliveryResult:
        return await self._deliver("call", to_phone, restaurant_id)

    async def send_sms(self, to_phone: str, message: str, restaurant_id: str) -> DeliveryResult:
        return await self._deliver("sms", to_phone, restaurant_id, body=message)

    async def health_check(self) -> bool:
        return True
