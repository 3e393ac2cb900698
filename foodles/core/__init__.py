"""
Core module initialization.
Exports configuration and logging utilities.
"""

from foodles.core.config import (
    get_settings,
    setup_logging,
    Settings,
    EnvironmentMode,
    TwilioCredentials,
)

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "TwilioCredentials",
]
