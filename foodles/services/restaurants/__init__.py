"""
Restaurant Status Services

Shared, process-wide instances of the status cache, broadcaster and
change monitor, all reading the same flag source.
"""

import logging
from functools import lru_cache

from foodles.core.config import get_settings
from foodles.services.restaurants.broadcast import (
    Broadcaster,
    Subscriber,
    WebSocketSubscriber,
)
from foodles.services.restaurants.cache import (
    RestaurantStatus,
    RestaurantStatusCache,
    StatusBatch,
    OPEN_MESSAGE,
    CLOSED_MESSAGE,
)
from foodles.services.restaurants.flags import (
    FlagSource,
    EnvironmentFlagSource,
    StaticFlagSource,
)
from foodles.services.restaurants.monitor import RestaurantStatusMonitor, StatusChange

logger = logging.getLogger(__name__)


@lru_cache()
def get_flag_source() -> FlagSource:
    return EnvironmentFlagSource()


@lru_cache()
def get_status_cache() -> RestaurantStatusCache:
    settings = get_settings()
    return RestaurantStatusCache(
        flag_source=get_flag_source(),
        ttl_seconds=settings.status_cache_ttl_seconds,
    )


@lru_cache()
def get_broadcaster() -> Broadcaster:
    return Broadcaster()


@lru_cache()
def get_status_monitor() -> RestaurantStatusMonitor:
    settings = get_settings()
    return RestaurantStatusMonitor(
        flag_source=get_flag_source(),
        broadcaster=get_broadcaster(),
        restaurant_ids=settings.tracked_restaurant_ids_list,
        interval_seconds=settings.status_monitor_interval_seconds,
    )


def reset_restaurant_services() -> None:
    """Clear the cached instances."""
    for factory in (get_flag_source, get_status_cache, get_broadcaster, get_status_monitor):
        factory.cache_clear()


__all__ = [
    "get_flag_source",
    "get_status_cache",
    "get_broadcaster",
    "get_status_monitor",
    "reset_restaurant_services",
    "Broadcaster",
    "Subscriber",
    "WebSocketSubscriber",
    "RestaurantStatus",
    "RestaurantStatusCache",
    "StatusBatch",
    "RestaurantStatusMonitor",
    "StatusChange",
    "FlagSource",
    "EnvironmentFlagSource",
    "StaticFlagSource",
    "OPEN_MESSAGE",
    "CLOSED_MESSAGE",
]
