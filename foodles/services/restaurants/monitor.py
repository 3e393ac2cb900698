"""
Restaurant Status Monitor

Background task that re-samples a fixed set of restaurant flags every
tick and pushes the flips to all status subscribers:

    {"type": "status_change", "changes": [{restaurantId, previousStatus, isOpen, timestamp}]}

New subscribers first get the full picture:

    {"type": "initial_status", "statuses": {"1": true, ...}, "timestamp": ...}
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

from foodles.services.restaurants.broadcast import Broadcaster, Subscriber
from foodles.services.restaurants.flags import FlagSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusChange:
    restaurant_id: str
    previous_status: Optional[bool]
    is_open: bool
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "restaurantId": self.restaurant_id,
            "previousStatus": self.previous_status,
            "isOpen": self.is_open,
            "timestamp": self.timestamp.isoformat(),
        }


class RestaurantStatusMonitor:
    """
    Change detector and push source.

    Args:
        flag_source: Where the open/closed flags come from
        broadcaster: Subscriber fan-out
        restaurant_ids: Restaurants to watch
        interval_seconds: Tick period
        clock: Returns the current time as epoch seconds
    """

    def __init__(
        self,
        flag_source: FlagSource,
        broadcaster: Broadcaster,
        restaurant_ids: Iterable[str],
        interval_seconds: float = 1.0,
        clock: Callable[[], float] = time.time,
    ):
        self.flag_source = flag_source
        self.broadcaster = broadcaster
        self.restaurant_ids = [str(r) for r in restaurant_ids]
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._last_seen: dict[str, bool] = {}
        self._task: Optional[asyncio.Task] = None
        # Serializes ticks with subscriber joins
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self._clock(), tz=timezone.utc)

    def _sample(self) -> dict[str, bool]:
        return {r: self.flag_source.is_open(r) for r in self.restaurant_ids}

    def prime(self) -> None:
        """Record the current flags as the baseline, without emitting anything."""
        self._last_seen = self._sample()
        logger.info(f"Restaurant status baseline: {self._last_seen}")

    def snapshot(self) -> dict[str, bool]:
        return dict(self._last_seen)

    def snapshot_message(self) -> dict[str, Any]:
        return {
            "type": "initial_status",
            "statuses": self.snapshot(),
            "timestamp": self._now().isoformat(),
        }

    async def tick(self) -> list[StatusChange]:
        """Sample once, remember the new values and broadcast any flips."""
        async with self._lock:
            return await self._tick()

    async def _tick(self) -> list[StatusChange]:
        now = self._now()
        changes = []

        for restaurant_id, is_open in self._sample().items():
            previous = self._last_seen.get(restaurant_id)
            if previous == is_open:
                continue
            self._last_seen[restaurant_id] = is_open
            changes.append(StatusChange(restaurant_id, previous, is_open, now))

        if changes:
            logger.info(
                "Restaurant status changed: "
                + ", ".join(f"{c.restaurant_id}→{'open' if c.is_open else 'closed'}" for c in changes)
            )
            await self.broadcaster.broadcast({
                "type": "status_change",
                "changes": [c.to_dict() for c in changes],
            })

        return changes

    async def subscribe(self, subscriber: Subscriber) -> None:
        """
        Send the current snapshot, then add the subscriber to the fan-out.

        No tick runs in between, so every flip after the snapshot reaches it.
        """
        async with self._lock:
            if not self._last_seen:
                self.prime()
            await self.broadcaster.connect(subscriber, self.snapshot_message())

    def unsubscribe(self, subscriber: Subscriber) -> None:
        self.broadcaster.disconnect(subscriber)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.tick()
            except Exception:
                logger.exception("Restaurant status tick failed")

    def start(self) -> None:
        if self.is_running:
            return
        if not self._last_seen:
            self.prime()
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info(
            f"Restaurant status monitor started "
            f"(every {self.interval_seconds}s, restaurants={self.restaurant_ids})"
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Restaurant status monitor stopped")
