"""
Notification Status Store

Process-wide, in-memory map from order id to the outcome of its
notification fan-out, polled by GET /email-status/{order_id}.

Each entry walks NOT_STARTED → IN_PROGRESS → COMPLETED and is evicted a
fixed time after completion. Unknown or evicted orders read as the zeroed
default outcome, because the frontend starts polling before the fan-out
has finished (or even started).
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from foodles.services.orders.models import JobState, NotificationOutcome

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    state: JobState
    outcome: NotificationOutcome = field(default_factory=NotificationOutcome)
    done: Optional[asyncio.Future] = None
    eviction: Optional[asyncio.TimerHandle] = None


class NotificationStatusStore:
    """
    Owned by the OrderNotifier; read by anyone.

    Args:
        retention_seconds: How long a completed outcome stays readable
    """

    def __init__(self, retention_seconds: float = 60.0):
        self.retention_seconds = retention_seconds
        self._entries: dict[str, _Entry] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, order_id: str) -> bool:
        return order_id in self._entries

    async def begin(self, order_id: str) -> tuple[bool, NotificationOutcome]:
        """
        Claim an order for notification.

        Returns:
            (True, live outcome) if the caller now owns the fan-out,
            (False, live outcome) if it is already in flight or done.
        """
        async with self._lock:
            entry = self._entries.get(order_id)
            if entry is not None:
                return False, entry.outcome

            entry = _Entry(
                state=JobState.IN_PROGRESS,
                done=asyncio.get_running_loop().create_future(),
            )
            self._entries[order_id] = entry
            return True, entry.outcome

    async def record(self, order_id: str, outcome: NotificationOutcome) -> None:
        """Store the final outcome and schedule its eviction."""
        async with self._lock:
            entry = self._entries.get(order_id)
            if entry is None:
                entry = _Entry(state=JobState.IN_PROGRESS)
                self._entries[order_id] = entry
            elif entry.state == JobState.COMPLETED:
                logger.warning(f"Order {order_id}: outcome already recorded, ignoring")
                return

            entry.state = JobState.COMPLETED
            entry.outcome = outcome
            if entry.done is not None and not entry.done.done():
                entry.done.set_result(outcome)

            loop = asyncio.get_running_loop()
            entry.eviction = loop.call_later(self.retention_seconds, self._evict, order_id, entry)

    async def wait(self, order_id: str) -> NotificationOutcome:
        """Wait for an in-flight order to complete and return a copy of its outcome."""
        entry = self._entries.get(order_id)
        if entry is None:
            return NotificationOutcome()
        if entry.done is not None:
            await asyncio.shield(entry.done)
        return entry.outcome.copy()

    def read(self, order_id: str) -> NotificationOutcome:
        """Snapshot of the current outcome, or the zeroed default."""
        entry = self._entries.get(order_id)
        if entry is None:
            return NotificationOutcome()
        return entry.outcome.copy()

    def state(self, order_id: str) -> JobState:
        entry = self._entries.get(order_id)
        return entry.state if entry else JobState.NOT_STARTED

    def _evict(self, order_id: str, entry: _Entry) -> None:
        if self._entries.get(order_id) is entry:
            del self._entries[order_id]
            logger.debug(f"Order {order_id}: notification status expired")

    def clear(self) -> None:
        """Drop every entry; waiters on unfinished orders get the partial outcome."""
        for entry in self._entries.values():
            if entry.eviction is not None:
                entry.eviction.cancel()
            if entry.done is not None and not entry.done.done():
                entry.done.set_result(entry.outcome)
        self._entries.clear()
