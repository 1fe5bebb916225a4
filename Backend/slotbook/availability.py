"""
Availability resolution.

Turns a staff member's weekly schedule, time-off and existing bookings into the
ordered list of start times a customer may book for a given service.

The pure functions (resolve_staff_slots, union_slots) take plain data and are
deterministic. The async wrappers load that data for one business and apply
them per staff member.
"""

import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from .core.clock import Clock
from .core.config import get_settings
from .errors import NotFoundError, ValidationError
from .models import Booking, ScheduleEntry, Service, Staff, TimeOff
from .schedule import day_of_week, is_blocked_by_time_off, pick_schedule_entry
from .slots import (
    DEFAULT_INTERVAL_MINUTES,
    generate_slots,
    interval_end,
    overlaps,
    parse_end_time,
    parse_time,
)
from .tenancy.queries import (
    get_service_by_id,
    get_staff_by_id,
    list_active_bookings,
    list_active_staff,
)


logger = logging.getLogger(__name__)

# (start_time, end_time) of an existing booking, "HH:MM" each.
BookedInterval = Tuple[str, str]


def booked_intervals(bookings: Iterable[Booking]) -> List[BookedInterval]:
    return [(booking.start_time, booking.end_time) for booking in bookings]


def resolve_staff_slots(
    schedules: Iterable[ScheduleEntry],
    time_off: Iterable[TimeOff],
    on_date: date,
    booked: Iterable[BookedInterval],
    service_duration: int,
    today: date,
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
) -> List[str]:
    """
    Bookable start times for one staff member on one date.

    1. Past dates and time-off days are empty.
    2. The weekday's working entry defines the window; none means closed.
    3. Candidate slots come from generate_slots over the window.
    4. A slot must leave room for the whole service before the window closes.
    5. A slot whose service interval collides with an existing booking is
       dropped; an identical start time always collides.
    """
    if service_duration <= 0:
        raise ValidationError("Service duration must be positive")
    if on_date < today:
        return []
    if is_blocked_by_time_off(time_off, on_date):
        return []

    entry = pick_schedule_entry(schedules, day_of_week(on_date))
    if entry is None:
        return []

    window_end = parse_end_time(entry.end_time)
    taken = []
    for start_time, end_time in booked:
        start = parse_time(start_time)
        taken.append((start, interval_end(start, end_time)))

    slots = []
    for slot in generate_slots(entry.start_time, entry.end_time, interval_minutes):
        start = parse_time(slot)
        end = start + service_duration
        if end > window_end:
            continue
        if any(overlaps(start, end, b_start, b_end) for b_start, b_end in taken):
            continue
        slots.append(slot)
    return slots


def union_slots(per_staff: Iterable[Sequence[str]]) -> List[str]:
    """Any-staff mode: every time at least one staff member can take, ascending."""
    merged = set()
    for slots in per_staff:
        merged.update(slots)
    # Zero-padded HH:MM sorts chronologically as text.
    return sorted(merged)


def staff_slots(
    staff: Staff,
    on_date: date,
    bookings: Iterable[Booking],
    service: Service,
    today: date,
    interval_minutes: int,
) -> List[str]:
    """resolve_staff_slots for a loaded Staff row and that day's bookings."""
    return resolve_staff_slots(
        staff.schedules,
        staff.time_off,
        on_date,
        booked_intervals(b for b in bookings if b.staff_id == staff.id),
        service.duration_minutes,
        today,
        interval_minutes,
    )


async def get_active_service(
    session: AsyncSession,
    business_id: int,
    service_id: int,
) -> Service:
    service = await get_service_by_id(session, business_id, service_id)
    if not service or not service.is_active:
        raise NotFoundError("Service not found", details={"service_id": service_id})
    return service


async def get_availability(
    session: AsyncSession,
    business_id: int,
    service_id: int,
    on_date: date,
    clock: Clock,
    staff_id: Optional[int] = None,
    interval_minutes: Optional[int] = None,
) -> List[str]:
    """
    Offerable slot start times for a service on a date.

    With staff_id, the result is that staff member's slots. Without it, the
    union across every active staff member; no staff is bound until the
    booking is created.
    """
    interval = interval_minutes or get_settings().slot_interval_minutes
    service = await get_active_service(session, business_id, service_id)
    today = clock.today()

    if staff_id is not None:
        staff = await get_staff_by_id(session, business_id, staff_id)
        if not staff or not staff.is_active:
            raise NotFoundError("Staff member not found", details={"staff_id": staff_id})
        candidates = [staff]
    else:
        candidates = list(await list_active_staff(session, business_id))

    if not candidates or on_date < today:
        return []

    bookings = await list_active_bookings(
        session, business_id, on_date, staff_ids=[staff.id for staff in candidates]
    )
    per_staff = [
        staff_slots(staff, on_date, bookings, service, today, interval)
        for staff in candidates
    ]
    result = per_staff[0] if staff_id is not None else union_slots(per_staff)
    logger.debug(
        "availability business=%s service=%s date=%s staff=%s slots=%d",
        business_id, service_id, on_date, staff_id, len(result),
    )
    return result


def get_bookable_dates(
    clock: Clock,
    days: Optional[int] = None,
    closed_days: Optional[Sequence[int]] = None,
) -> List[date]:
    """The next `days` calendar days from today, skipping closed weekdays."""
    settings = get_settings()
    if days is None:
        days = settings.booking_window_days
    if closed_days is None:
        closed_days = settings.closed_days_list

    today = clock.today()
    dates = []
    for offset in range(days):
        candidate = today + timedelta(days=offset)
        if day_of_week(candidate) not in closed_days:
            dates.append(candidate)
    return dates


async def get_booked_start_times(
    session: AsyncSession,
    business_id: int,
    on_date: date,
) -> List[str]:
    """Start times already held by an active booking on a date, any staff."""
    bookings = await list_active_bookings(session, business_id, on_date)
    return [booking.start_time for booking in bookings]
