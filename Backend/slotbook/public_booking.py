"""
Public booking API.

Customer-facing endpoints for one business, addressed by slug:
services, bookable dates, availability, booked times and booking creation.
Every handler resolves the business first and passes its id explicitly to
the core; nothing here decides availability on its own.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from .availability import get_availability, get_booked_start_times, get_bookable_dates
from .bookings import CustomerInfo, create_booking
from .core.clock import Clock, get_clock
from .core.db import get_session
from .core.responses import success_response
from .slots import parse_date
from .tenancy.context import BusinessContext, get_business_context
from .tenancy.queries import list_active_services


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/b/{slug}", tags=["public-booking"])


class ServiceResponse(BaseModel):
    id: int
    name: str
    duration_minutes: int
    price: int


class BusinessResponse(BaseModel):
    id: int
    slug: str
    name: str
    services: list[ServiceResponse]


class CreateBookingRequest(BaseModel):
    """
    Booking request as submitted by the booking form.

    staff_id is optional; without it the first free staff member is assigned.
    """
    service_id: int
    date: str = Field(..., description="Date in YYYY-MM-DD format")
    time: str = Field(..., description="Time in HH:MM format 24-hour")
    staff_id: Optional[int] = None
    customer_name: str = Field(..., max_length=255)
    customer_phone: str = Field(..., max_length=32)
    customer_email: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=1000)


@router.get("")
async def business_info(
    ctx: BusinessContext = Depends(get_business_context),
    session: AsyncSession = Depends(get_session),
):
    services = await list_active_services(session, ctx.business_id)
    payload = BusinessResponse(
        id=ctx.business_id,
        slug=ctx.slug,
        name=ctx.name,
        services=[
            ServiceResponse(
                id=service.id,
                name=service.name,
                duration_minutes=service.duration_minutes,
                price=service.price,
            )
            for service in services
        ],
    )
    return success_response(payload.model_dump())


@router.get("/dates")
async def bookable_dates(
    ctx: BusinessContext = Depends(get_business_context),
    clock: Clock = Depends(get_clock),
):
    return success_response([day.isoformat() for day in get_bookable_dates(clock)])


@router.get("/availability")
async def availability(
    service_id: int,
    date: str,
    staff_id: Optional[int] = Query(None),
    ctx: BusinessContext = Depends(get_business_context),
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    slots = await get_availability(
        session,
        ctx.business_id,
        service_id,
        parse_date(date),
        clock,
        staff_id=staff_id,
    )
    return success_response(slots)


@router.get("/booked")
async def booked_times(
    date: str,
    ctx: BusinessContext = Depends(get_business_context),
    session: AsyncSession = Depends(get_session),
):
    times = await get_booked_start_times(session, ctx.business_id, parse_date(date))
    return success_response(times)


@router.post("/bookings", status_code=status.HTTP_201_CREATED)
async def book(
    payload: CreateBookingRequest,
    ctx: BusinessContext = Depends(get_business_context),
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    booking = await create_booking(
        session,
        ctx.business_id,
        payload.service_id,
        parse_date(payload.date),
        payload.time,
        CustomerInfo(
            name=payload.customer_name,
            phone=payload.customer_phone,
            email=payload.customer_email,
        ),
        clock,
        staff_id=payload.staff_id,
        notes=payload.notes,
    )
    return success_response(
        {
            "booking_id": str(booking.id),
            "staff_id": booking.staff_id,
            "date": booking.date.isoformat(),
            "start_time": booking.start_time,
            "end_time": booking.end_time,
        }
    )
