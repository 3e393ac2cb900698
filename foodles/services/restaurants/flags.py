"""
Restaurant open/closed flag sources.

Operators open and close a restaurant by flipping RESTAURANT_<ID>_OPEN in
the process environment. The flag is read on every sample; whether a
change made outside the process becomes visible without a restart is up
to whoever manages that environment.
"""

import os
from typing import Mapping, Optional, Protocol


class FlagSource(Protocol):
    def is_open(self, restaurant_id: str) -> bool:
        ...


class EnvironmentFlagSource:
    """Reads ``RESTAURANT_<ID>_OPEN``; only "true" (any case) means open."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = os.environ if environ is None else environ

    @staticmethod
    def variable_name(restaurant_id: str) -> str:
        return f"RESTAURANT_{str(restaurant_id).upper()}_OPEN"

    def is_open(self, restaurant_id: str) -> bool:
        value = self._environ.get(self.variable_name(restaurant_id), "")
        return value.strip().lower() == "true"


class StaticFlagSource:
    """In-memory flags, settable at runtime (tests and local demos)."""

    def __init__(self, flags: Optional[Mapping[str, bool]] = None):
        self.flags = dict(flags or {})

    def set(self, restaurant_id: str, is_open: bool) -> None:
        self.flags[str(restaurant_id)] = is_open

    def is_open(self, restaurant_id: str) -> bool:
        return self.flags.get(str(restaurant_id), False)
