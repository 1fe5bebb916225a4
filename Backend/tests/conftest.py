"""
Pytest configuration and fixtures for async database testing.

Each test gets its own SQLite database file under tmp_path, so sessions from
the same factory can run concurrently against shared state.
"""
from dataclasses import dataclass
from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from slotbook.core.clock import FixedClock
from slotbook.core.db import Base
from slotbook.models import Business, ScheduleEntry, Service, Staff


# Wednesday. The following Monday is 2025-01-06.
TODAY = date(2025, 1, 1)
NEXT_MONDAY = date(2025, 1, 6)

MON_TO_SAT = {day: ("10:00", "19:00") for day in range(1, 7)}


@dataclass
class ShopData:
    business_id: int
    slug: str
    service_id: int
    staff_id: int


@pytest.fixture
async def async_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine):
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FixedClock(TODAY)


@pytest.fixture
def make_staff(session):
    """Create a staff member with {day_of_week: (start, end)} working hours."""

    async def _make_staff(business_id, name, hours=None, is_active=True):
        staff = Staff(
            business_id=business_id,
            name=name,
            is_active=is_active,
            schedules=[
                ScheduleEntry(day_of_week=day, start_time=start, end_time=end, is_working=True)
                for day, (start, end) in (hours or {}).items()
            ],
        )
        session.add(staff)
        await session.commit()
        return staff

    return _make_staff


@pytest.fixture
def make_service(session):
    async def _make_service(business_id, name="Haircut", duration_minutes=30, is_active=True):
        service = Service(
            business_id=business_id,
            name=name,
            duration_minutes=duration_minutes,
            price=3000,
            is_active=is_active,
        )
        session.add(service)
        await session.commit()
        return service

    return _make_service


@pytest.fixture
def make_business(session):
    async def _make_business(slug, name=None):
        business = Business(slug=slug, name=name or slug.replace("-", " ").title())
        session.add(business)
        await session.commit()
        return business

    return _make_business


@pytest.fixture
async def shop(make_business, make_service, make_staff):
    """One business, a 30 minute Haircut, and Armen working Mon-Sat 10:00-19:00."""
    business = await make_business("test-shop", "Test Shop")
    service = await make_service(business.id)
    armen = await make_staff(business.id, "Armen", MON_TO_SAT)
    return ShopData(
        business_id=business.id,
        slug=business.slug,
        service_id=service.id,
        staff_id=armen.id,
    )


@pytest.fixture
async def client(session, clock):
    """
    FastAPI AsyncClient bound to the test session and a fixed clock.
    """
    from slotbook.core.clock import get_clock
    from slotbook.core.db import get_session
    from slotbook.main import app

    async def override_get_session():
        yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_clock] = lambda: clock

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
