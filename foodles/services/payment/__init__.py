"""
Payment Service Factory

Provides a single entry point for obtaining a payment service instance.
The factory pattern allows the rest of the application to remain agnostic
about which implementation is being used.

Usage:
    from foodles.services.payment import get_payment_service

    payment_service = get_payment_service()
    verified = payment_service.verify_signature(order_id, payment_id, signature)

Environment Switching:
    - ENV_MODE=development → MockPaymentService (no API calls)
    - ENV_MODE=staging → RazorpayPaymentService (test keys)
    - ENV_MODE=production → RazorpayPaymentService (live keys)
"""

import logging
from functools import lru_cache

from foodles.core.config import get_settings
from foodles.services.payment.base import (
    BasePaymentService,
    PaymentDetails,
    CAPTURED_STATUSES,
)
from foodles.services.payment.mock import MockPaymentService
from foodles.services.payment.razorpay import RazorpayPaymentService
from foodles.services.payment.signature import (
    generate_payment_signature,
    verify_payment_signature,
)

logger = logging.getLogger(__name__)


@lru_cache()
def get_payment_service() -> BasePaymentService:
    """
    Get the configured payment service instance.

    The instance is cached so every request sees the same gateway client.

    Raises:
        ValueError: If real mode but Razorpay keys are not configured
    """
    settings = get_settings()

    if settings.is_development:
        logger.info("Payment Service: Using MockPaymentService (development mode)")
        return MockPaymentService(key_secret=settings.razorpay_key_secret)
    else:
        logger.info(
            f"Payment Service: Using RazorpayPaymentService "
            f"({settings.env_mode.value} mode)"
        )
        return RazorpayPaymentService()


def reset_payment_service() -> None:
    """
    Clear the cached payment service instance.

    The next call to get_payment_service() will create a new instance.
    """
    get_payment_service.cache_clear()
    logger.debug("Payment service cache cleared")


__all__ = [
    "get_payment_service",
    "reset_payment_service",
    "BasePaymentService",
    "PaymentDetails",
    "CAPTURED_STATUSES",
    "MockPaymentService",
    "RazorpayPaymentService",
    "generate_payment_signature",
    "verify_payment_signature",
]
