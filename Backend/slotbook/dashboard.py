"""
Owner dashboard API: day bookings, reschedule, status changes and staff
calendars. All routes require a dashboard session for the business in the URL.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from .bookings import (
    bookings_to_dicts,
    list_bookings_for_day,
    reschedule_booking,
    set_booking_status,
)
from .core.clock import Clock, get_clock
from .core.db import get_session
from .core.responses import success_response
from .slots import parse_date
from .staff_schedule import WorkingHours, add_time_off, delete_time_off, replace_staff_schedule
from .tenancy.context import BusinessContext, require_dashboard_access


router = APIRouter(prefix="/b/{slug}/dashboard", tags=["dashboard"])


class RescheduleRequest(BaseModel):
    date: str = Field(..., description="Date in YYYY-MM-DD format")
    time: str = Field(..., description="Time in HH:MM format 24-hour")


class StatusRequest(BaseModel):
    status: str


class ScheduleEntryRequest(BaseModel):
    day_of_week: int = Field(..., description="0=Sunday .. 6=Saturday")
    start_time: str
    end_time: str
    is_working: bool = True


class TimeOffRequest(BaseModel):
    start_date: str
    end_date: str
    reason: Optional[str] = Field(None, max_length=255)


@router.get("/bookings")
async def day_bookings(
    date: str,
    ctx: BusinessContext = Depends(require_dashboard_access),
    session: AsyncSession = Depends(get_session),
):
    bookings = await list_bookings_for_day(session, ctx.business_id, parse_date(date))
    return success_response(bookings_to_dicts(bookings))


@router.post("/bookings/{booking_id}/reschedule")
async def reschedule(
    booking_id: uuid.UUID,
    payload: RescheduleRequest,
    ctx: BusinessContext = Depends(require_dashboard_access),
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    booking = await reschedule_booking(
        session, ctx.business_id, booking_id, parse_date(payload.date), payload.time, clock
    )
    return success_response(booking.to_dict())


@router.patch("/bookings/{booking_id}/status")
async def change_status(
    booking_id: uuid.UUID,
    payload: StatusRequest,
    ctx: BusinessContext = Depends(require_dashboard_access),
    session: AsyncSession = Depends(get_session),
):
    booking = await set_booking_status(session, ctx.business_id, booking_id, payload.status)
    return success_response(booking.to_dict())


@router.put("/staff/{staff_id}/schedule")
async def put_schedule(
    staff_id: int,
    payload: list[ScheduleEntryRequest],
    ctx: BusinessContext = Depends(require_dashboard_access),
    session: AsyncSession = Depends(get_session),
):
    rows = await replace_staff_schedule(
        session,
        ctx.business_id,
        staff_id,
        [WorkingHours(**entry.model_dump()) for entry in payload],
    )
    return success_response(
        [
            {
                "day_of_week": row.day_of_week,
                "start_time": row.start_time,
                "end_time": row.end_time,
                "is_working": row.is_working,
            }
            for row in rows
        ]
    )


@router.post("/staff/{staff_id}/time-off", status_code=status.HTTP_201_CREATED)
async def post_time_off(
    staff_id: int,
    payload: TimeOffRequest,
    ctx: BusinessContext = Depends(require_dashboard_access),
    session: AsyncSession = Depends(get_session),
):
    block = await add_time_off(
        session,
        ctx.business_id,
        staff_id,
        parse_date(payload.start_date),
        parse_date(payload.end_date),
        payload.reason,
    )
    return success_response(
        {
            "id": block.id,
            "staff_id": block.staff_id,
            "start_date": block.start_date.isoformat(),
            "end_date": block.end_date.isoformat(),
            "reason": block.reason,
        }
    )


@router.delete("/staff/time-off/{time_off_id}")
async def remove_time_off(
    time_off_id: int,
    ctx: BusinessContext = Depends(require_dashboard_access),
    session: AsyncSession = Depends(get_session),
):
    await delete_time_off(session, ctx.business_id, time_off_id)
    return success_response({"deleted": time_off_id})
