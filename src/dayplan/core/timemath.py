"""Pure time arithmetic - minutes since midnight, HH:MM strings, display formats."""

import math
import re
from datetime import datetime

DAY_MINUTES = 24 * 60
SNAP_MINUTES = 15
LATEST_START = 23 * 60 + 45

_HHMM_PATTERN = re.compile(r"^\d{2}:\d{2}$")


def _pad(n: int) -> str:
    return f"{n:02d}"


def clamp(value, low, high):
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def is_valid_hhmm(value: str) -> bool:
    """Strict HH:MM check (00:00-23:59)."""
    if not isinstance(value, str) or not _HHMM_PATTERN.match(value):
        return False
    hours, minutes = (int(part) for part in value.split(":"))
    return hours < 24 and minutes < 60


def to_minutes(hhmm: str) -> int:
    """'HH:MM' -> minutes since midnight."""
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def to_hhmm(minutes: int) -> str:
    """Minutes since midnight -> zero-padded 'HH:MM'."""
    minutes = int(minutes) % DAY_MINUTES
    return f"{_pad(minutes // 60)}:{_pad(minutes % 60)}"


def _twelve_hour(hours: int) -> tuple[int, str]:
    period = "PM" if hours >= 12 else "AM"
    if hours == 0:
        return 12, period
    return (hours - 12 if hours > 12 else hours), period


def to_12_hour(hhmm: str) -> str:
    """'14:05' -> '2:05 PM'."""
    return minutes_to_12_hour(to_minutes(hhmm))


def minutes_to_12_hour(minutes: int) -> str:
    """Minutes since midnight -> 'h:mm AM/PM'."""
    hour12, period = _twelve_hour(minutes // 60)
    return f"{hour12}:{_pad(minutes % 60)} {period}"


def format_hour_marker(hour: int) -> str:
    """Hour of day -> calendar marker label ('9AM', '12PM')."""
    hour12, period = _twelve_hour(hour)
    return f"{hour12}{period}"


def format_clock(moment: datetime) -> str:
    """Wall clock with seconds, 12h format."""
    hour12, period = _twelve_hour(moment.hour)
    return f"{hour12}:{_pad(moment.minute)}:{_pad(moment.second)} {period}"


def overlap_minutes(a1: int, a2: int, b1: int, b2: int) -> int:
    """Overlap in minutes between [a1, a2) and [b1, b2) on a shared axis."""
    return max(0, min(a2, b2) - max(a1, b1))


def format_duration(minutes: int) -> str:
    """90 -> '1h 30m', 120 -> '2h', 45 -> '45m'."""
    hours = int(minutes // 60)
    mins = round_half_up(minutes % 60)
    if hours > 0 and mins > 0:
        return f"{hours}h {mins}m"
    if hours > 0:
        return f"{hours}h"
    return f"{mins}m"


def format_elapsed(seconds: int) -> str:
    """Timer display: 'M:SS', or 'H:MM:SS' past the hour."""
    seconds = max(0, int(seconds))
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    if hours > 0:
        return f"{hours}:{_pad(minutes)}:{_pad(secs)}"
    return f"{minutes}:{_pad(secs)}"


def snap_to_grid(minutes: float, grid: int = SNAP_MINUTES, latest: int = LATEST_START) -> int:
    """Snap to the nearest grid line and keep the start inside the day."""
    snapped = round_half_up(minutes / grid) * grid
    return clamp(snapped, 0, latest)
