"""
Razorpay Payment Service Implementation

Production implementation using the official Razorpay SDK.
Used when ENV_MODE=production or ENV_MODE=staging.

Requirements:
    - razorpay package installed
    - RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET must be set in environment

Security Notes:
    - The key secret doubles as the checkout signature key; never log it
    - Amounts come back in paise and are converted to rupees here
"""

import asyncio
import logging
from typing import Optional

import razorpay
from razorpay.errors import BadRequestError, GatewayError, ServerError
from requests.exceptions import RequestException

from foodles.core.config import get_settings
from foodles.services.payment.base import BasePaymentService, PaymentDetails

logger = logging.getLogger(__name__)


class RazorpayPaymentService(BasePaymentService):
    """
    Production Razorpay gateway.

    The SDK is synchronous, so every call runs in a worker thread.

    Configuration:
        Requires RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET.

    Example:
        >>> service = RazorpayPaymentService()
        >>> details = await service.fetch_payment("pay_29QQoUBi66xm2f")
        >>> details.is_captured
        True
    """

    def __init__(self):
        """
        Initialize the Razorpay client from settings.

        Raises:
            ValueError: If Razorpay credentials are not configured
        """
        settings = get_settings()

        if not settings.razorpay_key_id or not settings.razorpay_key_secret:
            raise ValueError(
                "RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET are required for "
                f"{settings.env_mode.value} mode. "
                "Set them in your .env file or environment variables."
            )

        super().__init__(settings.razorpay_key_secret)
        self._key_id = settings.razorpay_key_id
        self.razorpay_client = razorpay.Client(auth=(self._key_id, self._key_secret))

        logger.info(f"RazorpayPaymentService initialized (key_id={self._key_id[:8]}...)")

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "razorpay"

    @staticmethod
    def _convert_from_paise(paise: Optional[int]) -> Optional[float]:
        """Razorpay reports amounts in the smallest currency unit."""
        if paise is None:
            return None
        return paise / 100.0

    async def fetch_payment(self, payment_id: str) -> PaymentDetails:
        """Fetch a payment with the SDK's payment.fetch()."""
        try:
            payment = await asyncio.to_thread(self.razorpay_client.payment.fetch, payment_id)

        except BadRequestError as e:
            # Unknown ids and bad credentials land here with the gateway's description
            logger.warning(f"Razorpay: Lookup of {payment_id} failed - {e}")
            return PaymentDetails(
                success=False,
                payment_id=payment_id,
                error_message=str(e),
            )
        except (ServerError, GatewayError) as e:
            logger.error(f"Razorpay: Gateway error - {e}")
            return PaymentDetails(
                success=False,
                payment_id=payment_id,
                error_message="Payment service temporarily unavailable",
            )
        except RequestException as e:
            logger.error(f"Razorpay: Connection error - {e}")
            return PaymentDetails(
                success=False,
                payment_id=payment_id,
                error_message="Payment service temporarily unavailable",
            )

        logger.info(f"Razorpay: Payment {payment_id} status={payment.get('status')}")

        return PaymentDetails(
            success=True,
            payment_id=payment.get("id", payment_id),
            status=payment.get("status"),
            amount=self._convert_from_paise(payment.get("amount")),
            currency=payment.get("currency", "INR"),
            method=payment.get("method"),
            captured_at=payment.get("captured_at") or payment.get("created_at"),
        )

    async def health_check(self) -> bool:
        """
        Verify Razorpay API connectivity.

        Lists a single payment, the lightest authenticated call available.
        """
        try:
            await asyncio.to_thread(self.razorpay_client.payment.all, {"count": 1})
            return True
        except (BadRequestError, ServerError, GatewayError, RequestException) as e:
            logger.error(f"Razorpay: Health check failed - {e}")
            return False
