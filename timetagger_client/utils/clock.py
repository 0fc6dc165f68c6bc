"""
Time conversion helpers for the TimeTagger client.

The service speaks Unix seconds (and milliseconds for the update feed's server
time). Domain values use timezone-aware UTC datetimes. Naive datetimes handed in
by callers are interpreted as local time, matching ``datetime.timestamp()``.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Far-future sentinel used for open-ended ranges and records without an end.
MAX_INSTANT = datetime.max.replace(tzinfo=timezone.utc)

_ONE_SECOND = timedelta(seconds=1)
_MAX_SECONDS = (MAX_INSTANT - EPOCH) // _ONE_SECOND


def utc_now() -> datetime:
    """Return the current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _as_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        try:
            return value.astimezone()
        except (OverflowError, OSError, ValueError):
            # Local time near datetime.min/max can fall outside the supported range.
            return MAX_INSTANT if value.year > EPOCH.year else datetime.min.replace(tzinfo=timezone.utc)
    return value


def to_unix_seconds(value: datetime) -> int:
    """
    Convert a datetime to whole Unix seconds, flooring sub-second precision.

    Values past the far-future sentinel are clamped to it.
    """
    return min((_as_aware(value) - EPOCH) // _ONE_SECOND, _MAX_SECONDS)


def from_unix_seconds(seconds: int) -> datetime:
    """Convert whole Unix seconds to an aware UTC datetime."""
    return EPOCH + timedelta(seconds=seconds)


def from_unix_millis(millis: int) -> datetime:
    """Convert Unix milliseconds to an aware UTC datetime."""
    return EPOCH + timedelta(milliseconds=millis)


def from_fractional_seconds(seconds: float) -> datetime:
    """
    Convert fractional Unix seconds to a datetime with millisecond precision.

    The value is scaled to milliseconds and truncated before conversion.
    """
    return from_unix_millis(int(seconds * 1000))


def now_like(value: datetime) -> datetime:
    """Return "now" with the same awareness as ``value`` so they can be subtracted."""
    if value.tzinfo is None:
        return datetime.now()
    return datetime.now(value.tzinfo)


__all__ = [
    "EPOCH",
    "MAX_INSTANT",
    "utc_now",
    "to_unix_seconds",
    "from_unix_seconds",
    "from_unix_millis",
    "from_fractional_seconds",
    "now_like",
]
