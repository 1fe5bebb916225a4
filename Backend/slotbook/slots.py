"""
Time-of-day arithmetic and slot generation.

Times are carried as "HH:MM" strings at the edges and as minutes since
midnight internally. Dates are "YYYY-MM-DD".
"""

import re
from datetime import date, datetime
from typing import List

from .errors import ValidationError


MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * MINUTES_PER_HOUR
END_OF_DAY = "24:00"
DEFAULT_INTERVAL_MINUTES = 30

_TIME_RE = re.compile(r"^(\d{2}):(\d{2})$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_time(value: str) -> int:
    """Parse "HH:MM" into minutes since midnight."""
    match = _TIME_RE.match(value or "")
    if not match:
        raise ValidationError(f"Invalid time '{value}', expected HH:MM")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValidationError(f"Invalid time '{value}', expected HH:MM")
    return hour * MINUTES_PER_HOUR + minute


def parse_end_time(value: str) -> int:
    """Like parse_time, but also accepts "24:00" for a window closing at midnight."""
    if value == END_OF_DAY:
        return MINUTES_PER_DAY
    return parse_time(value)


def format_time(minutes: int) -> str:
    """Format minutes since midnight as zero-padded "HH:MM"."""
    minutes %= MINUTES_PER_DAY
    return f"{minutes // MINUTES_PER_HOUR:02d}:{minutes % MINUTES_PER_HOUR:02d}"


def parse_date(value: str) -> date:
    if not _DATE_RE.match(value or ""):
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD")
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD")


def add_minutes(time_str: str, minutes: int) -> str:
    """
    Add minutes to an "HH:MM" time.

    Wraps past midnight ("23:50" + 30 -> "00:20"); no date arithmetic.
    """
    return format_time(parse_time(time_str) + minutes)


def generate_slots(
    start_time: str,
    end_time: str,
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
) -> List[str]:
    """
    Candidate slot starts in [start_time, end_time), ascending. end_time may
    be "24:00".

    A slot is not required to fit a particular service before end_time;
    the availability resolver applies that check.
    """
    if interval_minutes <= 0:
        raise ValidationError("Slot interval must be a positive number of minutes")

    start = parse_time(start_time)
    end = parse_end_time(end_time)
    return [format_time(minute) for minute in range(start, end, interval_minutes)]


def interval_end(start_minutes: int, end_time: str) -> int:
    """End of a stored [start, end) interval, unwrapped past midnight."""
    end = parse_time(end_time)
    if end <= start_minutes:
        end += MINUTES_PER_DAY
    return end


def overlaps(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    return start_a < end_b and start_b < end_a
