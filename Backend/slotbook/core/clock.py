"""
Clock abstraction.

Availability and past-date rejection depend on "today". Every caller receives
a Clock instead of reading the system date, so tests can pin the date.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Protocol
from zoneinfo import ZoneInfo

from .config import get_settings


class Clock(Protocol):
    def today(self) -> date: ...


class SystemClock:
    """Wall-clock "today" in the business's local time zone."""

    def __init__(self, tz_name: str):
        self.tz = ZoneInfo(tz_name)

    def today(self) -> date:
        return datetime.now(self.tz).date()


@dataclass(frozen=True)
class FixedClock:
    current: date

    def today(self) -> date:
        return self.current


def get_clock() -> Clock:
    """FastAPI dependency; override in tests with a FixedClock."""
    return SystemClock(get_settings().business_timezone)
