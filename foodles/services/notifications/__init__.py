"""
Notification Service Factory

Returns Mock or Real mail/telephony services based on ENV_MODE.
"""

import logging
from functools import lru_cache

from foodles.core.config import get_settings
from foodles.services.notifications.base import (
    BaseMailService,
    BaseTelephonyService,
    DeliveryResult,
)
from foodles.services.notifications.channels import (
    NotificationChannel,
    CustomerEmailChannel,
    VendorEmailChannel,
    VendorCallChannel,
    is_valid_email,
)
from foodles.services.notifications.mock import MockMailService, MockTelephonyService
from foodles.services.notifications.phone import normalize_phone_number
from foodles.services.notifications.real import SendGridMailService, TwilioTelephonyService

logger = logging.getLogger(__name__)


@lru_cache()
def get_mail_service() -> BaseMailService:
    """Get the configured mail transport."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Mail Service: Using MockMailService (development mode)")
        return MockMailService(failure_rate=0.05)
    else:
        logger.info(f"Mail Service: Using SendGridMailService ({settings.env_mode.value} mode)")
        return SendGridMailService()


@lru_cache()
def get_telephony_service() -> BaseTelephonyService:
    """Get the configured telephony provider."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Telephony Service: Using MockTelephonyService (development mode)")
        return MockTelephonyService(
            restaurant_ids=settings.tracked_restaurant_ids_list,
            failure_rate=0.05,
        )
    else:
        logger.info(f"Telephony Service: Using TwilioTelephonyService ({settings.env_mode.value} mode)")
        return TwilioTelephonyService()


def reset_notification_services() -> None:
    """Clear the cached service instances."""
    get_mail_service.cache_clear()
    get_telephony_service.cache_clear()


__all__ = [
    "get_mail_service",
    "get_telephony_service",
    "reset_notification_services",
    "BaseMailService",
    "BaseTelephonyService",
    "DeliveryResult",
    "NotificationChannel",
    "CustomerEmailChannel",
    "VendorEmailChannel",
    "VendorCallChannel",
    "MockMailService",
    "MockTelephonyService",
    "SendGridMailService",
    "TwilioTelephonyService",
    "is_valid_email",
    "normalize_phone_number",
]
