"""
Shared pytest fixtures for the Foodles backend tests.

Every fixture builds a fresh, deterministic instance: mock providers never
fail at random and never sleep, flags are static and time is a fake clock.
"""

import os

import pytest

os.environ.setdefault("ENV_MODE", "development")

from fastapi.testclient import TestClient

from foodles.main import app
from foodles.services.notifications import (
    CustomerEmailChannel,
    MockMailService,
    MockTelephonyService,
    VendorCallChannel,
    VendorEmailChannel,
    get_mail_service,
    get_telephony_service,
)
from foodles.services.orders import NotificationStatusStore, OrderNotificationJob, get_status_store
from foodles.services.orders.notifier import OrderNotifier, get_order_notifier
from foodles.services.payment import MockPaymentService, get_payment_service
from foodles.services.restaurants import (
    Broadcaster,
    RestaurantStatusCache,
    RestaurantStatusMonitor,
    StaticFlagSource,
    get_broadcaster,
    get_status_cache,
    get_status_monitor,
)

KEY_SECRET = "test_key_secret"
VENDOR_EMAIL = "kitchen@babaji.example"
REJECTED_VENDOR_EMAIL = "bounced@babaji.example"
FAILING_PHONE = "+919999999999"


class FakeClock:
    """Epoch-seconds clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# =============================================================================
# Providers
# =============================================================================

@pytest.fixture
def payment_service() -> MockPaymentService:
    return MockPaymentService(key_secret=KEY_SECRET, failure_rate=0.0, min_latency=0.0, max_latency=0.0)


@pytest.fixture
def mail_service() -> MockMailService:
    """Mail transport that bounces REJECTED_VENDOR_EMAIL and accepts everything else."""
    return MockMailService(
        failure_rate=0.0,
        min_latency=0.0,
        max_latency=0.0,
        rejected_recipients=[REJECTED_VENDOR_EMAIL],
    )


@pytest.fixture
def telephony_service() -> MockTelephonyService:
    """Restaurants 1 and 2 have telephony credentials, 3 does not."""
    return MockTelephonyService(
        restaurant_ids=("1", "2"),
        failure_rate=0.0,
        min_latency=0.0,
        max_latency=0.0,
        failing_numbers=[FAILING_PHONE],
    )


# =============================================================================
# Order notifications
# =============================================================================

@pytest.fixture
def status_store() -> NotificationStatusStore:
    return NotificationStatusStore(retention_seconds=60.0)


@pytest.fixture
def notifier(status_store, mail_service, telephony_service) -> OrderNotifier:
    return OrderNotifier(
        store=status_store,
        customer_channel=CustomerEmailChannel(mail_service),
        vendor_channel=VendorEmailChannel(mail_service),
        call_channel=VendorCallChannel(telephony_service, country_code="91"),
    )


@pytest.fixture
def order_details() -> dict:
    return {
        "items": [
            {"name": "Paneer Butter Masala", "quantity": 2, "price": 240},
            {"name": "Butter Naan", "quantity": 4, "price": 45},
        ],
        "subtotal": 660,
        "deliveryFee": 30,
        "convenienceFee": 10,
        "dogDonation": 0,
        "grandTotal": 700,
    }


@pytest.fixture
def make_job(order_details):
    """Factory for jobs; defaults describe a fully configured restaurant."""

    def _make(**overrides) -> OrderNotificationJob:
        fields = {
            "order_id": "X1",
            "customer_name": "Asha Verma",
            "customer_email": "asha@example.com",
            "order_details": order_details,
            "vendor_email": VENDOR_EMAIL,
            "vendor_phone": "9876543210",
            "restaurant_id": "1",
        }
        fields.update(overrides)
        return OrderNotificationJob(**fields)

    return _make


# =============================================================================
# Restaurant status
# =============================================================================

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def flag_source() -> StaticFlagSource:
    return StaticFlagSource({"1": True, "2": False, "3": True})


@pytest.fixture
def status_cache(flag_source, clock) -> RestaurantStatusCache:
    return RestaurantStatusCache(flag_source, ttl_seconds=10.0, clock=clock)


@pytest.fixture
def broadcaster() -> Broadcaster:
    return Broadcaster()


@pytest.fixture
def status_monitor(flag_source, broadcaster, clock) -> RestaurantStatusMonitor:
    monitor = RestaurantStatusMonitor(
        flag_source,
        broadcaster,
        restaurant_ids=["1", "2", "3"],
        interval_seconds=1.0,
        clock=clock,
    )
    monitor.prime()
    return monitor


# =============================================================================
# HTTP
# =============================================================================

@pytest.fixture
def client(
    payment_service,
    mail_service,
    telephony_service,
    status_store,
    notifier,
    status_cache,
    broadcaster,
    status_monitor,
):
    """TestClient with every provider and shared-state dependency overridden."""
    app.dependency_overrides.update({
        get_payment_service: lambda: payment_service,
        get_mail_service: lambda: mail_service,
        get_telephony_service: lambda: telephony_service,
        get_status_store: lambda: status_store,
        get_order_notifier: lambda: notifier,
        get_status_cache: lambda: status_cache,
        get_broadcaster: lambda: broadcaster,
        get_status_monitor: lambda: status_monitor,
    })
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
