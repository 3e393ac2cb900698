"""
Tests for the order notification fan-out.

Covers the three-step sequence (customer email, vendor email, vendor
missed call), its failure isolation, and duplicate suppression.
"""

import asyncio

from foodles.services.notifications import VendorCallChannel, VendorEmailChannel
from foodles.services.notifications.base import DeliveryResult
from foodles.services.notifications.channels import NotificationChannel
from foodles.services.orders import CallStatus, ChannelKind, EmailError, JobState
from foodles.services.orders.notifier import OrderNotifier

from conftest import REJECTED_VENDOR_EMAIL, VENDOR_EMAIL


class ExplodingChannel(NotificationChannel):
    kind = ChannelKind.CUSTOMER

    async def deliver(self, target, job) -> DeliveryResult:
        raise RuntimeError("transport exploded")


class TestOrderNotifier:

    def test_full_success(self, notifier, make_job, mail_service, telephony_service):
        """Vendor email and phone present, restaurant has telephony."""
        outcome = asyncio.run(notifier.notify(make_job(order_id="X1")))

        assert outcome.emails_sent == 2
        assert outcome.email_errors == []
        assert outcome.missed_call_status == CallStatus.SUCCESS
        assert len(mail_service.sent_to("asha@example.com")) == 1
        assert len(mail_service.sent_to(VENDOR_EMAIL)) == 1
        assert len(telephony_service.sent_to("+919876543210")) == 1

    def test_vendor_rejection_skips_the_call(self, notifier, make_job, telephony_service):
        outcome = asyncio.run(notifier.notify(make_job(vendor_email=REJECTED_VENDOR_EMAIL)))

        assert outcome.emails_sent == 1
        assert len(outcome.email_errors) == 1
        assert outcome.email_errors[0].type == ChannelKind.VENDOR
        assert outcome.missed_call_status is None
        assert telephony_service.sent == []

    def test_customer_failure_does_not_stop_vendor(self, notifier, make_job):
        outcome = asyncio.run(notifier.notify(make_job(customer_email="broken")))

        assert outcome.emails_sent == 1
        assert [e.type for e in outcome.email_errors] == [ChannelKind.CUSTOMER]
        assert outcome.missed_call_status == CallStatus.SUCCESS

    def test_no_vendor_email_notifies_customer_only(self, notifier, make_job, telephony_service):
        outcome = asyncio.run(notifier.notify(make_job(vendor_email=None)))

        assert outcome.emails_sent == 1
        assert outcome.email_errors == []
        assert outcome.missed_call_status is None
        assert telephony_service.sent == []

    def test_no_vendor_phone_leaves_call_status_empty(self, notifier, make_job):
        outcome = asyncio.run(notifier.notify(make_job(vendor_phone=None)))

        assert outcome.emails_sent == 2
        assert outcome.missed_call_status is None

    def test_unconfigured_restaurant_is_not_a_failure(self, notifier, make_job):
        outcome = asyncio.run(notifier.notify(make_job(restaurant_id="3")))

        assert outcome.emails_sent == 2
        assert outcome.email_errors == []
        assert outcome.missed_call_status is None

    def test_call_failure_is_recorded(self, notifier, make_job):
        outcome = asyncio.run(notifier.notify(make_job(vendor_phone="99999 99999")))

        assert outcome.emails_sent == 2
        assert outcome.missed_call_status == CallStatus.FAILED

    def test_invalid_vendor_phone_is_a_failed_call(self, notifier, make_job):
        outcome = asyncio.run(notifier.notify(make_job(vendor_phone="n/a")))

        assert outcome.missed_call_status == CallStatus.FAILED

    def test_outcome_is_published_to_store(self, notifier, status_store, make_job):
        asyncio.run(notifier.notify(make_job(order_id="X9")))

        assert status_store.state("X9") == JobState.COMPLETED
        assert status_store.read("X9").to_dict() == {
            "emailsSent": 2,
            "emailErrors": [],
            "missedCallStatus": "success",
        }

    def test_crashing_channel_is_recorded_and_fan_out_continues(
        self, status_store, mail_service, telephony_service, make_job
    ):
        notifier = OrderNotifier(
            store=status_store,
            customer_channel=ExplodingChannel(),
            vendor_channel=VendorEmailChannel(mail_service),
            call_channel=VendorCallChannel(telephony_service, country_code="91"),
        )

        outcome = asyncio.run(notifier.notify(make_job()))

        assert outcome.emails_sent == 1
        assert outcome.email_errors == [EmailError(ChannelKind.CUSTOMER, "transport exploded")]
        assert outcome.missed_call_status == CallStatus.SUCCESS


class TestDuplicateSuppression:

    def test_concurrent_duplicates_run_once(self, notifier, make_job, mail_service, telephony_service):
        job = make_job(order_id="DUP1")

        async def scenario():
            return await asyncio.gather(notifier.notify(job), notifier.notify(job))

        first, second = asyncio.run(scenario())

        assert first == second
        assert first.emails_sent == 2
        assert len(mail_service.sent) == 2
        assert len(telephony_service.sent) == 1

    def test_repeat_after_completion_returns_recorded_outcome(self, notifier, make_job, mail_service):
        job = make_job(order_id="DUP2")

        async def scenario():
            first = await notifier.notify(job)
            second = await notifier.notify(job)
            return first, second

        first, second = asyncio.run(scenario())

        assert first == second
        assert len(mail_service.sent) == 2
