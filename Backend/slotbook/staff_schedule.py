"""
Staff calendar management: weekly schedule replacement and time-off.

A staff member has at most one schedule entry per weekday. Replacing the
schedule rejects duplicates up front instead of letting lookups guess.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from .errors import NotFoundError, ValidationError
from .models import ScheduleEntry, Staff, TimeOff
from .schedule import validate_day_of_week
from .slots import parse_end_time, parse_time
from .tenancy.queries import get_staff_by_id, get_time_off_by_id


logger = logging.getLogger(__name__)


@dataclass
class WorkingHours:
    day_of_week: int
    start_time: str
    end_time: str
    is_working: bool = True


def validate_working_hours(entries: Iterable[WorkingHours]) -> List[WorkingHours]:
    seen = set()
    validated = []
    for entry in entries:
        validate_day_of_week(entry.day_of_week)
        if entry.day_of_week in seen:
            raise ValidationError(
                "Only one schedule entry per day is allowed",
                details={"day_of_week": entry.day_of_week},
            )
        seen.add(entry.day_of_week)
        start, end = parse_time(entry.start_time), parse_end_time(entry.end_time)
        if entry.is_working and start >= end:
            raise ValidationError(
                "Start time must be before end time",
                details={"day_of_week": entry.day_of_week},
            )
        validated.append(entry)
    return validated


async def _require_staff(session: AsyncSession, business_id: int, staff_id: int) -> Staff:
    staff = await get_staff_by_id(session, business_id, staff_id)
    if not staff:
        raise NotFoundError("Staff member not found", details={"staff_id": staff_id})
    return staff


async def replace_staff_schedule(
    session: AsyncSession,
    business_id: int,
    staff_id: int,
    entries: Iterable[WorkingHours],
) -> List[ScheduleEntry]:
    """Swap a staff member's whole weekly schedule in one transaction."""
    validated = validate_working_hours(entries)
    staff = await _require_staff(session, business_id, staff_id)

    # Old rows must be gone before inserts (one entry per staff and day).
    staff.schedules.clear()
    await session.flush()
    rows = [
        ScheduleEntry(
            staff_id=staff_id,
            day_of_week=entry.day_of_week,
            start_time=entry.start_time,
            end_time=entry.end_time,
            is_working=entry.is_working,
        )
        for entry in sorted(validated, key=lambda e: e.day_of_week)
    ]
    staff.schedules.extend(rows)
    await session.commit()
    logger.info("schedule replaced staff=%s days=%s", staff_id, [r.day_of_week for r in rows])
    return rows


async def add_time_off(
    session: AsyncSession,
    business_id: int,
    staff_id: int,
    start_date: date,
    end_date: date,
    reason: Optional[str] = None,
) -> TimeOff:
    if end_date < start_date:
        raise ValidationError("Time off cannot end before it starts")
    await _require_staff(session, business_id, staff_id)

    block = TimeOff(
        staff_id=staff_id,
        start_date=start_date,
        end_date=end_date,
        reason=(reason or "").strip() or None,
    )
    session.add(block)
    await session.commit()
    logger.info("time off added staff=%s %s..%s", staff_id, start_date, end_date)
    return block


async def delete_time_off(
    session: AsyncSession,
    business_id: int,
    time_off_id: int,
) -> None:
    block = await get_time_off_by_id(session, business_id, time_off_id)
    if not block:
        raise NotFoundError("Time off not found", details={"time_off_id": time_off_id})
    await session.delete(block)
    await session.commit()
