from __future__ import annotations

import re

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from .core.config import get_settings
from .errors import ValidationError
from .models import Customer


def normalize_phone(phone: str) -> str:
    """Strip spaces, dashes and brackets; keep a leading +."""
    phone = (phone or "").strip()
    if phone.startswith("+"):
        return "+" + re.sub(r"\D", "", phone[1:])
    return re.sub(r"\D", "", phone)


def validate_customer_phone(phone: str) -> str:
    normalized = normalize_phone(phone)
    pattern = get_settings().customer_phone_pattern
    if not re.match(pattern, normalized):
        raise ValidationError("Invalid phone number", details={"phone": phone})
    return normalized


def normalize_email(email: str | None) -> str | None:
    if not email or not email.strip():
        return None
    return email.strip().lower()


async def get_customer_by_phone(
    session: AsyncSession, business_id: int, phone: str
) -> Customer | None:
    result = await session.execute(
        select(Customer).where(Customer.business_id == business_id, Customer.phone == phone)
    )
    return result.scalar_one_or_none()


async def get_or_create_customer(
    session: AsyncSession,
    business_id: int,
    phone: str,
    name: str,
    email: str | None = None,
) -> Customer:
    """
    Find a customer by phone within a business, refreshing name and email.

    A missing email never clears one already on file.
    """
    customer = await get_customer_by_phone(session, business_id, phone)
    if customer is None:
        # A concurrent booking from the same phone may insert first.
        insert = sqlite_insert if session.get_bind().dialect.name == "sqlite" else pg_insert
        stmt = (
            insert(Customer)
            .values(business_id=business_id, phone=phone, name=name, email=email)
            .on_conflict_do_nothing(index_elements=["business_id", "phone"])
        )
        await session.execute(stmt)
        customer = await get_customer_by_phone(session, business_id, phone)

    customer.name = name
    customer.email = email or customer.email
    return customer
