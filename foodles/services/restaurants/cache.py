"""
Restaurant Status Cache

Serves GET /api/restaurants/status. Flags are sampled as one batch and the
batch is reused until it is older than the freshness window.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable

from foodles.services.restaurants.flags import FlagSource

logger = logging.getLogger(__name__)

OPEN_MESSAGE = "Open"
CLOSED_MESSAGE = "Temporarily Closed"


def _as_datetime(timestamp: float) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


@dataclass(frozen=True)
class RestaurantStatus:
    is_open: bool
    message: str
    last_checked: datetime

    @classmethod
    def from_flag(cls, is_open: bool, checked_at: float) -> "RestaurantStatus":
        return cls(
            is_open=is_open,
            message=OPEN_MESSAGE if is_open else CLOSED_MESSAGE,
            last_checked=_as_datetime(checked_at),
        )


@dataclass(frozen=True)
class StatusBatch:
    """Result of a batch read."""
    statuses: dict[str, RestaurantStatus]
    is_from_cache: bool
    last_updated: datetime
    next_update: datetime


class RestaurantStatusCache:
    """
    Batch-sampled, time-boxed cache of restaurant flags.

    Args:
        flag_source: Where the open/closed flags come from
        ttl_seconds: Freshness window
        clock: Returns the current time as epoch seconds
    """

    def __init__(
        self,
        flag_source: FlagSource,
        ttl_seconds: float = 10.0,
        clock: Callable[[], float] = time.time,
    ):
        self.flag_source = flag_source
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._statuses: dict[str, RestaurantStatus] = {}
        self._sampled_at: float = 0.0
        self._lock = asyncio.Lock()

    def _is_fresh(self, now: float) -> bool:
        return bool(self._statuses) and now - self._sampled_at <= self.ttl_seconds

    async def get_all_statuses(self, restaurant_ids: Iterable[str]) -> StatusBatch:
        """
        Statuses for ``restaurant_ids``.

        A stale cache, or one missing a requested id, is re-sampled as a
        whole (requested ids plus those already cached) before answering.
        """
        ids = [str(r) for r in restaurant_ids]

        async with self._lock:
            now = self._clock()
            from_cache = self._is_fresh(now) and all(r in self._statuses for r in ids)

            if not from_cache:
                batch_ids = dict.fromkeys([*ids, *self._statuses])
                self._statuses = {
                    r: RestaurantStatus.from_flag(self.flag_source.is_open(r), now)
                    for r in batch_ids
                }
                self._sampled_at = now
                logger.debug(f"Restaurant status re-sampled for {list(batch_ids)}")

            return StatusBatch(
                statuses={r: self._statuses[r] for r in ids},
                is_from_cache=from_cache,
                last_updated=_as_datetime(self._sampled_at),
                next_update=_as_datetime(self._sampled_at + self.ttl_seconds),
            )

    async def get_status(self, restaurant_id: str) -> RestaurantStatus:
        batch = await self.get_all_statuses([restaurant_id])
        return batch.statuses[str(restaurant_id)]
