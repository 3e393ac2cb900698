"""
Order notification domain types.

An OrderNotificationJob is built once per verified payment and consumed by
the OrderNotifier; the NotificationOutcome it produces is the only thing
that survives, and only for the retention window.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional


class ChannelKind(str, Enum):
    """Notification channels; the value tags failure records."""
    CUSTOMER = "customer"
    VENDOR = "vendor"
    CALL = "call"


class CallStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


class JobState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass
class OrderNotificationJob:
    """
    Everything needed to notify both sides about one paid order.

    ``order_details`` is rendered into the emails and never inspected
    by the fan-out logic.
    """
    order_id: str
    customer_name: str
    customer_email: str
    order_details: dict[str, Any] = field(default_factory=dict)
    vendor_email: Optional[str] = None
    vendor_phone: Optional[str] = None
    restaurant_id: Optional[str] = None


@dataclass(frozen=True)
class EmailError:
    """One failed email channel."""
    type: ChannelKind
    error: str


@dataclass
class NotificationOutcome:
    emails_sent: int = 0
    email_errors: list[EmailError] = field(default_factory=list)
    missed_call_status: Optional[CallStatus] = None

    def copy(self) -> "NotificationOutcome":
        return replace(self, email_errors=list(self.email_errors))

    def to_dict(self) -> dict:
        return {
            "emailsSent": self.emails_sent,
            "emailErrors": [
                {"type": e.type.value, "error": e.error} for e in self.email_errors
            ],
            "missedCallStatus": self.missed_call_status.value if self.missed_call_status else None,
        }
