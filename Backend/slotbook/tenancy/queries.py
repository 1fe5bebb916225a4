"""
Tenant-scoped query helpers.

These functions provide business-isolated database queries.
ALL queries for tenant data MUST use these helpers or include explicit
business_id filtering.

Usage:
    from slotbook.tenancy.queries import get_service_by_id, list_active_staff, scoped_select

    service = await get_service_by_id(session, business_id, service_id)
    staff = await list_active_staff(session, business_id)

    # Or using composable helpers:
    stmt = scoped_select(Service, business_id).where(Service.is_active.is_(True))
"""

import uuid
from datetime import date
from typing import Iterable, Optional, Sequence, Type, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import DeclarativeBase, selectinload

from ..models import (
    ACTIVE_STATUSES,
    Booking,
    Business,
    Service,
    Staff,
    TimeOff,
)

T = TypeVar("T", bound=DeclarativeBase)


# ────────────────────────────────────────────────────────────────
# Composable Query Helpers
# ────────────────────────────────────────────────────────────────

def scoped_select(model: Type[T], business_id: int) -> Select:
    """
    Create a SELECT statement pre-filtered by business_id.

    Usage:
        stmt = scoped_select(Service, business_id).where(Service.is_active.is_(True))
        result = await session.execute(stmt)
    """
    return select(model).where(model.business_id == business_id)


def tenant_filter(model: Type[T], business_id: int):
    """Return a SQLAlchemy filter clause for business_id."""
    return model.business_id == business_id


async def require_owned(
    session: AsyncSession,
    model: Type[T],
    entity_id,
    business_id: int,
) -> Optional[T]:
    """
    Fetch an entity by ID, validating business ownership.
    Returns None if not found or owned by another business.
    """
    result = await session.execute(
        select(model).where(
            model.id == entity_id,
            model.business_id == business_id,
        )
    )
    return result.scalar_one_or_none()


# ────────────────────────────────────────────────────────────────
# Business Queries
# ────────────────────────────────────────────────────────────────

async def get_business_by_slug(session: AsyncSession, slug: str) -> Optional[Business]:
    result = await session.execute(select(Business).where(Business.slug == slug))
    return result.scalar_one_or_none()


# ────────────────────────────────────────────────────────────────
# Service Queries (Tenant-Scoped)
# ────────────────────────────────────────────────────────────────

async def get_service_by_id(
    session: AsyncSession,
    business_id: int,
    service_id: int,
) -> Optional[Service]:
    return await require_owned(session, Service, service_id, business_id)


async def list_active_services(
    session: AsyncSession,
    business_id: int,
) -> Sequence[Service]:
    result = await session.execute(
        scoped_select(Service, business_id)
        .where(Service.is_active.is_(True))
        .order_by(Service.id)
    )
    return result.scalars().all()


# ────────────────────────────────────────────────────────────────
# Staff Queries (Tenant-Scoped)
# ────────────────────────────────────────────────────────────────

def _with_calendar(stmt: Select) -> Select:
    # Schedules and time-off are read on every availability check; refresh
    # them even when the Staff row is already in the identity map.
    return stmt.options(
        selectinload(Staff.schedules),
        selectinload(Staff.time_off),
    ).execution_options(populate_existing=True)


async def get_staff_by_id(
    session: AsyncSession,
    business_id: int,
    staff_id: int,
) -> Optional[Staff]:
    """Get a staff member with schedule and time-off loaded, scoped to business."""
    result = await session.execute(
        _with_calendar(
            scoped_select(Staff, business_id).where(Staff.id == staff_id)
        )
    )
    return result.scalar_one_or_none()


async def list_active_staff(
    session: AsyncSession,
    business_id: int,
) -> Sequence[Staff]:
    """Active staff in stable id order, with schedule and time-off loaded."""
    result = await session.execute(
        _with_calendar(
            scoped_select(Staff, business_id)
            .where(Staff.is_active.is_(True))
            .order_by(Staff.id)
        )
    )
    return result.scalars().all()


async def get_time_off_by_id(
    session: AsyncSession,
    business_id: int,
    time_off_id: int,
) -> Optional[TimeOff]:
    """Time-off rows are owned through their staff member."""
    result = await session.execute(
        select(TimeOff)
        .join(Staff, Staff.id == TimeOff.staff_id)
        .where(TimeOff.id == time_off_id, tenant_filter(Staff, business_id))
    )
    return result.scalar_one_or_none()


# ────────────────────────────────────────────────────────────────
# Booking Queries (Tenant-Scoped)
# ────────────────────────────────────────────────────────────────

async def get_booking_by_id(
    session: AsyncSession,
    business_id: int,
    booking_id: uuid.UUID,
) -> Optional[Booking]:
    return await require_owned(session, Booking, booking_id, business_id)


async def list_active_bookings(
    session: AsyncSession,
    business_id: int,
    on_date: date,
    staff_ids: Optional[Iterable[int]] = None,
    exclude_booking_id: Optional[uuid.UUID] = None,
) -> Sequence[Booking]:
    """Bookings that hold a slot on a date, optionally for specific staff."""
    stmt = scoped_select(Booking, business_id).where(
        Booking.date == on_date,
        Booking.status.in_(sorted(ACTIVE_STATUSES)),
    )
    if staff_ids is not None:
        stmt = stmt.where(Booking.staff_id.in_(list(staff_ids)))
    if exclude_booking_id is not None:
        stmt = stmt.where(Booking.id != exclude_booking_id)
    result = await session.execute(stmt.order_by(Booking.start_time))
    return result.scalars().all()


async def list_bookings_on_date(
    session: AsyncSession,
    business_id: int,
    on_date: date,
) -> Sequence[Booking]:
    """Every booking on a date regardless of status, with service and staff loaded."""
    result = await session.execute(
        scoped_select(Booking, business_id)
        .where(Booking.date == on_date)
        .options(selectinload(Booking.service), selectinload(Booking.staff))
        .order_by(Booking.start_time, Booking.created_at)
        .execution_options(populate_existing=True)
    )
    return result.scalars().all()
