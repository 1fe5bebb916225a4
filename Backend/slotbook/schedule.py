"""
Weekly schedule lookups.

Pure functions over a staff member's ScheduleEntry and TimeOff rows. Day of
week follows the booking UI convention: 0=Sunday .. 6=Saturday.
"""

from datetime import date
from typing import Iterable, Optional

from .errors import ValidationError
from .models import ScheduleEntry, TimeOff


def day_of_week(value: date) -> int:
    """0=Sunday .. 6=Saturday (Python's weekday() starts on Monday)."""
    return (value.weekday() + 1) % 7


def validate_day_of_week(value: int) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= 6:
        raise ValidationError(f"day_of_week must be between 0 and 6, got {value!r}")
    return value


def _recency(entry: ScheduleEntry) -> tuple:
    updated = entry.updated_at.timestamp() if entry.updated_at else float("-inf")
    return (updated, entry.id or 0)


def pick_schedule_entry(
    entries: Iterable[ScheduleEntry],
    weekday: int,
) -> Optional[ScheduleEntry]:
    """
    The working window for a weekday, or None when closed.

    Duplicate entries for the same day resolve to the most recently updated
    one (highest id on ties). A non-working entry means closed.
    """
    validate_day_of_week(weekday)
    candidates = [entry for entry in entries if entry.day_of_week == weekday]
    if not candidates:
        return None
    entry = max(candidates, key=_recency)
    if not entry.is_working:
        return None
    return entry


def is_blocked_by_time_off(time_off: Iterable[TimeOff], on_date: date) -> bool:
    return any(block.start_date <= on_date <= block.end_date for block in time_off)
