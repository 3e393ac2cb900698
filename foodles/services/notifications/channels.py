"""
Notification Channels

The three ways an order is announced, behind one contract:

    result = await channel.deliver(target, job)

- CustomerEmailChannel: confirmation email to the customer
- VendorEmailChannel: new-order email to the restaurant
- VendorCallChannel: missed-call ping to the restaurant's phone

A channel never raises for expected problems; it returns a DeliveryResult.
``attempted=False`` marks "nothing to do" (no target, no credentials),
which is reported separately from a failure.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Optional

from foodles.core.config import get_settings
from foodles.services.notifications.base import (
    BaseMailService,
    BaseTelephonyService,
    DeliveryResult,
)
from foodles.services.notifications.phone import normalize_phone_number
from foodles.services.notifications.templates import (
    render_customer_email,
    render_vendor_email,
)
from foodles.services.orders.models import ChannelKind, OrderNotificationJob

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(address: Optional[str]) -> bool:
    return bool(address) and EMAIL_PATTERN.match(address.strip()) is not None


class NotificationChannel(ABC):
    """One way of telling someone about an order."""

    kind: ChannelKind

    @abstractmethod
    async def deliver(self, target: Optional[str], job: OrderNotificationJob) -> DeliveryResult:
        pass


class _EmailChannel(NotificationChannel):

    def __init__(self, mail_service: BaseMailService):
        self.mail_service = mail_service

    @abstractmethod
    def render(self, job: OrderNotificationJob) -> tuple[str, str, str]:
        pass

    async def deliver(self, target: Optional[str], job: OrderNotificationJob) -> DeliveryResult:
        if not is_valid_email(target):
            logger.warning(f"Order {job.order_id}: invalid {self.kind.value} email {target!r}")
            return DeliveryResult(
                success=False,
                error_message=f"Invalid email address: {target!r}",
                provider=self.mail_service.provider_name,
            )

        subject, body_html, body_text = self.render(job)
        return await self.mail_service.send_email(
            to_email=target.strip(),
            subject=subject,
            body_html=body_html,
            body_text=body_text,
        )


class CustomerEmailChannel(_EmailChannel):
    kind = ChannelKind.CUSTOMER

    def render(self, job: OrderNotificationJob) -> tuple[str, str, str]:
        return render_customer_email(job)


class VendorEmailChannel(_EmailChannel):
    kind = ChannelKind.VENDOR

    def render(self, job: OrderNotificationJob) -> tuple[str, str, str]:
        return render_vendor_email(job)

    async def deliver(self, target: Optional[str], job: OrderNotificationJob) -> DeliveryResult:
        if not target:
            return DeliveryResult.not_attempted(
                "No vendor email configured",
                provider=self.mail_service.provider_name,
            )
        return await super().deliver(target, job)


class VendorCallChannel(NotificationChannel):
    """
    Missed-call ping to the vendor.

    The raw number is normalized first; the call goes out through the
    telephony account of ``job.restaurant_id``.
    """
    kind = ChannelKind.CALL

    def __init__(self, telephony_service: BaseTelephonyService, country_code: Optional[str] = None):
        self.telephony_service = telephony_service
        self.country_code = country_code or get_settings().phone_country_code

    async def deliver(self, target: Optional[str], job: OrderNotificationJob) -> DeliveryResult:
        provider = self.telephony_service.provider_name

        if not target:
            return DeliveryResult.not_attempted("No vendor phone configured", provider=provider)

        phone = normalize_phone_number(target, self.country_code)
        if not phone:
            logger.warning(f"Order {job.order_id}: invalid vendor phone {target!r}")
            return DeliveryResult(
                success=False,
                error_message=f"Invalid phone number: {target!r}",
                provider=provider,
            )

        if not self.telephony_service.is_configured(job.restaurant_id):
            logger.error(f"❌ No telephony configuration found for restaurant: {job.restaurant_id}")
            return DeliveryResult.not_attempted(
                f"Telephony not configured for restaurant {job.restaurant_id}",
                provider=provider,
            )

        logger.info(f"🔄 Order {job.order_id}: missed call to {phone} (restaurant {job.restaurant_id})")
        return await self.telephony_service.place_missed_call(phone, str(job.restaurant_id))
