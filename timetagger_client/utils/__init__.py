"""
Utilities package for the TimeTagger client.

Exports shared helpers for logging and time conversion.
Keep this package lightweight and free of domain-specific logic.
"""

from timetagger_client.utils.clock import (
    EPOCH,
    MAX_INSTANT,
    from_fractional_seconds,
    from_unix_millis,
    from_unix_seconds,
    to_unix_seconds,
    utc_now,
)
from timetagger_client.utils.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "EPOCH",
    "MAX_INSTANT",
    "from_fractional_seconds",
    "from_unix_millis",
    "from_unix_seconds",
    "to_unix_seconds",
    "utc_now",
]
