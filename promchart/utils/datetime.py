"""
Duration and timestamp helpers for promchart.

Durations are handled in milliseconds and written the way Prometheus writes
them ("1h 10m"). Timestamp formatters render chart axis ticks and tooltip
headers in local time.
"""

import logging
import math
import re
from datetime import datetime
from typing import NamedTuple, Union

logger = logging.getLogger("promchart.datetime")

# Conversions between units and milliseconds, largest first
SECOND = 1000
MINUTE = SECOND * 60
HOUR = MINUTE * 60
DAY = HOUR * 24
WEEK = DAY * 7
UNITS = {"w": WEEK, "d": DAY, "h": HOUR, "m": MINUTE, "s": SECOND}

_DURATION_TOKEN = re.compile(r"^(\d+)([wdhms])$")

MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

Instant = Union[datetime, int, float]


class Duration(NamedTuple):
    days: int
    hours: int
    minutes: int
    seconds: int


def parse_duration(duration: str) -> int:
    """
    Convert a duration like "1h 10m 23s" to milliseconds.

    Returns 0 if any part of the text can't be parsed.
    """
    if not isinstance(duration, str):
        return 0

    total = 0
    for part in duration.strip().split():
        match = _DURATION_TOKEN.match(part)
        if not match:
            logger.debug(f"Invalid duration token {part!r} in {duration!r}")
            return 0
        total += int(match.group(1)) * UNITS[match.group(2)]
    return total


def format_duration(ms) -> str:
    """Format a duration in milliseconds like "1h 10m"."""
    if isinstance(ms, bool) or not isinstance(ms, (int, float)):
        return ""
    if not math.isfinite(ms) or ms < 0:
        return ""

    remaining = ms
    parts = []
    for unit, factor in UNITS.items():
        n = int(remaining // factor)
        if n > 0:
            parts.append(f"{n}{unit}")
            remaining -= n * factor
    return " ".join(parts)


def get_duration(ms) -> Duration:
    """Split milliseconds into days, hours, minutes and seconds."""
    if isinstance(ms, bool) or not isinstance(ms, (int, float)) or not math.isfinite(ms) or ms < 0:
        ms = 0
    seconds = int(ms // 1000)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)
    return Duration(days, hours, minutes, seconds)


def to_datetime(value: Instant) -> datetime:
    """Accept a datetime or epoch milliseconds."""
    if isinstance(value, datetime):
        return value
    return datetime.fromtimestamp(value / 1000)


def is_valid_instant(value) -> bool:
    return isinstance(value, datetime)


def _clock(dt: datetime, show_seconds: bool = False) -> str:
    hour = dt.hour % 12 or 12
    suffix = "AM" if dt.hour < 12 else "PM"
    if show_seconds:
        return f"{hour}:{dt.minute:02d}:{dt.second:02d} {suffix}"
    return f"{hour}:{dt.minute:02d} {suffix}"


def format_time(value: Instant) -> str:
    """Axis tick label, e.g. '2:05 PM'."""
    return _clock(to_datetime(value))


def format_date(value: Instant) -> str:
    """Short date, e.g. 'Oct 18, 2026'."""
    dt = to_datetime(value)
    return f"{MONTH_NAMES[dt.month - 1]} {dt.day}, {dt.year}"


def format_datetime_with_seconds(value: Instant) -> str:
    """Tooltip header, e.g. 'Oct 18, 2026, 2:05:09 PM'."""
    dt = to_datetime(value)
    return f"{format_date(dt)}, {_clock(dt, show_seconds=True)}"
