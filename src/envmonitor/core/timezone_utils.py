"""Timezone utilities for the dashboard.

Chart points carry epoch milliseconds; InfluxDB returns timezone-aware UTC
datetimes, and everything shown to the user is rendered in the configured
display timezone.
"""

from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

# Timezone constants
UTC_TZ = ZoneInfo("UTC")
EPOCH = datetime(1970, 1, 1, tzinfo=UTC_TZ)

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
UPDATED_AT_FORMAT = "%Y/%m/%d %H:%M:%S"
TICK_FORMAT = "%H:%M"


def ensure_utc(dt: datetime) -> datetime:
    """Ensure a datetime is in UTC timezone.

    Args:
        dt: Datetime that may be naive or in any timezone

    Returns:
        Datetime converted to UTC timezone
    """
    if dt.tzinfo is None:
        # Assume naive datetimes are UTC (database timestamps)
        return dt.replace(tzinfo=UTC_TZ)
    else:
        return dt.astimezone(UTC_TZ)


def to_epoch_ms(dt: datetime) -> int:
    """Convert a datetime to integer epoch milliseconds without float rounding."""
    return (ensure_utc(dt) - EPOCH) // timedelta(milliseconds=1)


def from_epoch_ms(ms: int, tz: Optional[ZoneInfo] = None) -> datetime:
    """Convert epoch milliseconds to an aware datetime in ``tz`` (UTC by default)."""
    dt = EPOCH + timedelta(milliseconds=ms)
    return dt.astimezone(tz or UTC_TZ)


def to_local_naive(ms: int, tz: ZoneInfo) -> datetime:
    """Wall-clock time in ``tz`` with tzinfo dropped, as plotly date axes expect."""
    return from_epoch_ms(ms, tz).replace(tzinfo=None)


def format_local_datetime(ms: int, tz: ZoneInfo, fmt: str = DATETIME_FORMAT) -> str:
    """Full local date-time, e.g. ``2024-05-01 09:05:00``."""
    return from_epoch_ms(ms, tz).strftime(fmt)
