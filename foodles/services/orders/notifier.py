"""
Order Notifier

Runs once per verified payment, in the background, and tells everyone
about the order:

    1. customer confirmation email
    2. vendor new-order email (if the restaurant has one)
    3. vendor missed call (only after the vendor email went out)

Steps run in order and are never retried. A failing step is recorded
and the next applicable step still runs; the only dependency is 2 → 3.
The call is a reinforcement of the vendor email rather than a channel of
its own.

Repeated requests for the same order id join the first run instead of
sending everything twice.
"""

import logging
from functools import lru_cache
from typing import Optional

from foodles.services.notifications import get_mail_service, get_telephony_service
from foodles.services.notifications.base import DeliveryResult
from foodles.services.notifications.channels import (
    NotificationChannel,
    CustomerEmailChannel,
    VendorEmailChannel,
    VendorCallChannel,
)
from foodles.services.orders import get_status_store
from foodles.services.orders.models import (
    CallStatus,
    EmailError,
    NotificationOutcome,
    OrderNotificationJob,
)
from foodles.services.orders.status_store import NotificationStatusStore

logger = logging.getLogger(__name__)


class OrderNotifier:
    """
    Fan-out orchestrator.

    Args:
        store: Where outcomes are published for polling
        customer_channel: Customer email channel
        vendor_channel: Vendor email channel
        call_channel: Vendor missed-call channel
    """

    def __init__(
        self,
        store: NotificationStatusStore,
        customer_channel: NotificationChannel,
        vendor_channel: NotificationChannel,
        call_channel: NotificationChannel,
    ):
        self.store = store
        self.customer_channel = customer_channel
        self.vendor_channel = vendor_channel
        self.call_channel = call_channel

    async def notify(self, job: OrderNotificationJob) -> NotificationOutcome:
        """
        Notify customer and vendor about ``job``.

        Never raises. Returns a copy of the final outcome; duplicates get
        the outcome of the run they joined.
        """
        started, outcome = await self.store.begin(job.order_id)
        if not started:
            logger.info(f"Order {job.order_id}: notification already in progress or done, skipping")
            return await self.store.wait(job.order_id)

        logger.info(f"📧 Order {job.order_id}: starting notifications")
        try:
            await self._run(job, outcome)
        finally:
            await self.store.record(job.order_id, outcome)

        logger.info(
            f"✅ Order {job.order_id}: {outcome.emails_sent} email(s) sent, "
            f"{len(outcome.email_errors)} error(s), "
            f"call={outcome.missed_call_status.value if outcome.missed_call_status else None}"
        )
        return outcome.copy()

    async def _run(self, job: OrderNotificationJob, outcome: NotificationOutcome) -> None:
        result = await self._attempt(self.customer_channel, job.customer_email, job)
        self._record_email(outcome, self.customer_channel, result)

        if not job.vendor_email:
            logger.info(f"Order {job.order_id}: no vendor email, vendor not notified")
            return

        result = await self._attempt(self.vendor_channel, job.vendor_email, job)
        self._record_email(outcome, self.vendor_channel, result)
        if not result.success:
            return

        if job.vendor_phone:
            result = await self._attempt(self.call_channel, job.vendor_phone, job)
            if result.attempted:
                outcome.missed_call_status = CallStatus.SUCCESS if result.success else CallStatus.FAILED
            else:
                logger.warning(f"Order {job.order_id}: missed call skipped - {result.error_message}")

    @staticmethod
    def _record_email(
        outcome: NotificationOutcome,
        channel: NotificationChannel,
        result: DeliveryResult,
    ) -> None:
        if result.success:
            outcome.emails_sent += 1
        elif result.attempted:
            outcome.email_errors.append(
                EmailError(type=channel.kind, error=result.error_message or "Unknown error")
            )

    @staticmethod
    async def _attempt(
        channel: NotificationChannel,
        target: Optional[str],
        job: OrderNotificationJob,
    ) -> DeliveryResult:
        try:
            result = await channel.deliver(target, job)
        except Exception as e:
            logger.exception(f"Order {job.order_id}: {channel.kind.value} channel crashed")
            return DeliveryResult(success=False, error_message=str(e) or type(e).__name__)

        if not result.success and result.attempted:
            logger.warning(
                f"Order {job.order_id}: {channel.kind.value} delivery failed - {result.error_message}"
            )
        return result


@lru_cache()
def get_order_notifier() -> OrderNotifier:
    """Process-wide notifier wired to the configured providers."""
    mail_service = get_mail_service()
    return OrderNotifier(
        store=get_status_store(),
        customer_channel=CustomerEmailChannel(mail_service),
        vendor_channel=VendorEmailChannel(mail_service),
        call_channel=VendorCallChannel(get_telephony_service()),
    )
