"""Core dashboard components."""

from .timezone_utils import (
    ensure_utc,
    to_epoch_ms,
    from_epoch_ms,
    to_local_naive,
    format_local_datetime,
    UTC_TZ
)
from .service import PollController

__all__ = [
    "PollController",
    "ensure_utc",
    "to_epoch_ms",
    "from_epoch_ms",
    "to_local_naive",
    "format_local_datetime",
    "UTC_TZ"
]
