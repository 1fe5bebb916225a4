from sqlalchemy import select

from .models import Business, ScheduleEntry, Service, Staff


DEMO_BUSINESS_SLUG = "admin-shop"


async def seed_initial_data(session):
    result = await session.execute(select(Business).where(Business.slug == DEMO_BUSINESS_SLUG))
    business = result.scalar_one_or_none()

    if not business:
        business = Business(
            slug=DEMO_BUSINESS_SLUG,
            name="Admin Shop",
            phone="+37412345678",
        )
        session.add(business)
        await session.flush()

    # Seed services if missing
    result = await session.execute(select(Service).where(Service.business_id == business.id))
    services = result.scalars().all()
    if not services:
        session.add_all(
            [
                Service(
                    business_id=business.id,
                    name="Haircut",
                    duration_minutes=30,
                    price=3000,
                ),
                Service(
                    business_id=business.id,
                    name="Beard Trim",
                    duration_minutes=20,
                    price=2000,
                ),
            ]
        )

    result = await session.execute(select(Staff).where(Staff.business_id == business.id))
    staff = result.scalars().all()
    if not staff:
        armen = Staff(business_id=business.id, name="Armen", is_active=True)
        session.add(armen)
        await session.flush()
        # Monday..Saturday, Sunday closed
        session.add_all(
            [
                ScheduleEntry(
                    staff_id=armen.id,
                    day_of_week=day,
                    start_time="10:00",
                    end_time="19:00",
                    is_working=True,
                )
                for day in range(1, 7)
            ]
        )

    await session.commit()
