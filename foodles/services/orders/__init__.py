"""
Order notification domain: job/outcome types and the status store.

The OrderNotifier lives in foodles.services.orders.notifier; it is not
re-exported here because it depends on the notification channels, which
themselves depend on these types.
"""

import logging
from functools import lru_cache

from foodles.core.config import get_settings
from foodles.services.orders.models import (
    CallStatus,
    ChannelKind,
    EmailError,
    JobState,
    NotificationOutcome,
    OrderNotificationJob,
)
from foodles.services.orders.status_store import NotificationStatusStore

logger = logging.getLogger(__name__)


@lru_cache()
def get_status_store() -> NotificationStatusStore:
    """Process-wide notification status store."""
    return NotificationStatusStore(
        retention_seconds=get_settings().notification_retention_seconds,
    )


__all__ = [
    "get_status_store",
    "CallStatus",
    "ChannelKind",
    "EmailError",
    "JobState",
    "NotificationOutcome",
    "OrderNotificationJob",
    "NotificationStatusStore",
]
