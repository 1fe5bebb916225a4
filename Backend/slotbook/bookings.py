"""
Booking write path.

create_booking, reschedule_booking and set_booking_status are the only code
that inserts or moves bookings. Each re-checks the target slot right before
committing, inside a lock keyed by (business_id, date); the partial unique
index on bookings(staff_id, date, start_time) backs that check across worker
processes. An IntegrityError from that index surfaces as ConflictError.

A slot is never swapped for another on the caller's behalf. The one fallback
is any-staff mode, where the next free staff member is tried for the same
time.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .availability import get_active_service, staff_slots
from .core.clock import Clock
from .core.config import get_settings
from .customers import get_or_create_customer, normalize_email, validate_customer_phone
from .errors import ConflictError, NotFoundError, ValidationError
from .locking import calendar_locks
from .models import ACTIVE_STATUSES, Booking, BookingStatus, Service, Staff
from .slots import add_minutes, interval_end, overlaps, parse_time
from .tenancy.queries import (
    get_booking_by_id,
    get_service_by_id,
    get_staff_by_id,
    list_active_bookings,
    list_active_staff,
    list_bookings_on_date,
)


logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = "This time slot is no longer available"
ACTIVE_SLOT_INDEX = "uq_bookings_active_slot"


@dataclass
class CustomerInfo:
    name: str
    phone: str
    email: Optional[str] = None


def _validate_customer(customer: CustomerInfo) -> CustomerInfo:
    name = (customer.name or "").strip()
    if not name:
        raise ValidationError("Customer name is required")
    return CustomerInfo(
        name=name,
        phone=validate_customer_phone(customer.phone),
        email=normalize_email(customer.email),
    )


def _reject_past(on_date: date, clock: Clock) -> None:
    if on_date < clock.today():
        raise ValidationError("Date is in the past", details={"date": on_date.isoformat()})


def _is_slot_collision(exc: IntegrityError) -> bool:
    text = str(getattr(exc, "orig", exc))
    # Postgres names the index; SQLite lists the indexed columns.
    return ACTIVE_SLOT_INDEX in text or "bookings.staff_id" in text


async def _find_collision(
    session: AsyncSession,
    business_id: int,
    staff_id: int,
    on_date: date,
    start_time: str,
    duration_minutes: int,
    exclude_booking_id: Optional[uuid.UUID] = None,
) -> Optional[Booking]:
    """An active booking for this staff whose interval meets [start, start + duration)."""
    start = parse_time(start_time)
    end = start + duration_minutes
    existing = await list_active_bookings(
        session,
        business_id,
        on_date,
        staff_ids=[staff_id],
        exclude_booking_id=exclude_booking_id,
    )
    for booking in existing:
        b_start = parse_time(booking.start_time)
        if overlaps(start, end, b_start, interval_end(b_start, booking.end_time)):
            return booking
    return None


async def _ensure_slot_free(
    session: AsyncSession,
    business_id: int,
    staff_id: int,
    on_date: date,
    start_time: str,
    duration_minutes: int,
    exclude_booking_id: Optional[uuid.UUID] = None,
) -> None:
    collision = await _find_collision(
        session, business_id, staff_id, on_date, start_time, duration_minutes, exclude_booking_id
    )
    if collision is not None:
        logger.info(
            "slot conflict staff=%s date=%s time=%s held_by=%s",
            staff_id, on_date, start_time, collision.id,
        )
        raise ConflictError(
            SLOT_TAKEN_MESSAGE,
            details={"staff_id": staff_id, "date": on_date.isoformat(), "time": start_time},
        )


async def _pick_free_staff(
    session: AsyncSession,
    business_id: int,
    service: Service,
    on_date: date,
    start_time: str,
    today: date,
) -> Staff:
    """First active staff member (by id) who can take this time right now."""
    interval = get_settings().slot_interval_minutes
    candidates = await list_active_staff(session, business_id)
    bookings = await list_active_bookings(
        session, business_id, on_date, staff_ids=[staff.id for staff in candidates]
    )
    for staff in candidates:
        if start_time in staff_slots(staff, on_date, bookings, service, today, interval):
            return staff
        logger.debug("staff %s not free at %s %s", staff.id, on_date, start_time)
    raise NotFoundError(
        "No staff available",
        details={"date": on_date.isoformat(), "time": start_time},
    )


async def _commit_slot(session: AsyncSession) -> None:
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if _is_slot_collision(exc):
            raise ConflictError(SLOT_TAKEN_MESSAGE) from exc
        raise


async def create_booking(
    session: AsyncSession,
    business_id: int,
    service_id: int,
    on_date: date,
    start_time: str,
    customer: CustomerInfo,
    clock: Clock,
    staff_id: Optional[int] = None,
    notes: Optional[str] = None,
) -> Booking:
    """
    Claim a slot and create a confirmed booking.

    Raises:
        ValidationError: bad time, phone or name; past date; unknown or
            inactive staff_id
        NotFoundError: service missing or inactive; no staff free (any-staff)
        ConflictError: the slot was taken since it was offered
    """
    parse_time(start_time)
    customer = _validate_customer(customer)
    _reject_past(on_date, clock)

    service = await get_active_service(session, business_id, service_id)

    staff = None
    if staff_id is not None:
        staff = await get_staff_by_id(session, business_id, staff_id)
        if not staff or not staff.is_active:
            raise ValidationError(
                "Staff member not available for this business",
                details={"staff_id": staff_id},
            )

    async with calendar_locks.hold((business_id, on_date)):
        if staff is None:
            staff = await _pick_free_staff(
                session, business_id, service, on_date, start_time, clock.today()
            )
        else:
            await _ensure_slot_free(
                session, business_id, staff.id, on_date, start_time, service.duration_minutes
            )

        record = await get_or_create_customer(
            session, business_id, customer.phone, customer.name, customer.email
        )
        booking = Booking(
            business_id=business_id,
            staff_id=staff.id,
            service_id=service.id,
            customer_id=record.id,
            customer_name=customer.name,
            customer_phone=customer.phone,
            customer_email=customer.email,
            date=on_date,
            start_time=start_time,
            end_time=add_minutes(start_time, service.duration_minutes),
            status=BookingStatus.CONFIRMED,
            notes=(notes or "").strip() or None,
        )
        session.add(booking)
        await _commit_slot(session)

    logger.info(
        "booking created id=%s business=%s staff=%s date=%s %s-%s",
        booking.id, business_id, booking.staff_id, on_date, booking.start_time, booking.end_time,
    )
    return booking


async def reschedule_booking(
    session: AsyncSession,
    business_id: int,
    booking_id: uuid.UUID,
    on_date: date,
    start_time: str,
    clock: Clock,
) -> Booking:
    """
    Move a booking to a new date/time with the same staff member.

    The end time is recomputed from the service's current duration. The
    booking's own slot never counts as a conflict, so moving onto the same
    time succeeds.
    """
    parse_time(start_time)
    _reject_past(on_date, clock)

    booking = await get_booking_by_id(session, business_id, booking_id)
    if not booking:
        raise NotFoundError("Booking not found", details={"booking_id": str(booking_id)})
    service = await get_service_by_id(session, business_id, booking.service_id)
    if not service:
        raise NotFoundError("Service not found", details={"service_id": booking.service_id})

    async with calendar_locks.hold((business_id, on_date)):
        await _ensure_slot_free(
            session,
            business_id,
            booking.staff_id,
            on_date,
            start_time,
            service.duration_minutes,
            exclude_booking_id=booking.id,
        )
        previous = (booking.date, booking.start_time)
        booking.date = on_date
        booking.start_time = start_time
        booking.end_time = add_minutes(start_time, service.duration_minutes)
        booking.status = BookingStatus.RESCHEDULED
        await _commit_slot(session)

    logger.info(
        "booking rescheduled id=%s from=%s %s to=%s %s",
        booking.id, previous[0], previous[1], booking.date, booking.start_time,
    )
    return booking


def parse_status(value: str) -> BookingStatus:
    try:
        return BookingStatus(value)
    except ValueError:
        allowed = ", ".join(status.value for status in BookingStatus)
        raise ValidationError(f"Invalid status '{value}', expected one of: {allowed}")


async def set_booking_status(
    session: AsyncSession,
    business_id: int,
    booking_id: uuid.UUID,
    status: str,
) -> Booking:
    """
    Change a booking's status.

    Any status may move to any other. Reviving a cancelled or finished
    booking re-checks its slot, since the slot may have been re-booked.
    """
    new_status = parse_status(status)
    booking = await get_booking_by_id(session, business_id, booking_id)
    if not booking:
        raise NotFoundError("Booking not found", details={"booking_id": str(booking_id)})

    previous = booking.status
    if new_status in ACTIVE_STATUSES and previous not in ACTIVE_STATUSES:
        async with calendar_locks.hold((business_id, booking.date)):
            await _ensure_slot_free(
                session,
                business_id,
                booking.staff_id,
                booking.date,
                booking.start_time,
                _stored_duration(booking),
                exclude_booking_id=booking.id,
            )
            booking.status = new_status
            await _commit_slot(session)
    else:
        booking.status = new_status
        await session.commit()

    logger.info("booking status id=%s %s -> %s", booking.id, previous.value, new_status.value)
    return booking


def _stored_duration(booking: Booking) -> int:
    start = parse_time(booking.start_time)
    return interval_end(start, booking.end_time) - start


async def list_bookings_for_day(
    session: AsyncSession,
    business_id: int,
    on_date: date,
) -> Sequence[Booking]:
    """Dashboard view: every booking on a date, any status, by start time."""
    return await list_bookings_on_date(session, business_id, on_date)


def booking_with_details(booking: Booking) -> dict:
    """to_dict plus the service and staff names the dashboard list shows."""
    data = booking.to_dict()
    data["service"] = {
        "name": booking.service.name,
        "duration_minutes": booking.service.duration_minutes,
        "price": booking.service.price,
    }
    data["staff"] = {"name": booking.staff.name}
    return data


def bookings_to_dicts(bookings: Sequence[Booking]) -> List[dict]:
    """Only for bookings from list_bookings_for_day, which loads service and staff."""
    return [booking_with_details(booking) for booking in bookings]
