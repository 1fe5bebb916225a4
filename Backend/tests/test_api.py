"""
HTTP API tests for the public booking and dashboard routers.

Run with: pytest Backend/tests/test_api.py -v
"""

import uuid

import pytest

from conftest import NEXT_MONDAY


def booking_payload(shop, time="10:00", **overrides):
    payload = {
        "service_id": shop.service_id,
        "date": NEXT_MONDAY.isoformat(),
        "time": time,
        "staff_id": shop.staff_id,
        "customer_name": "Ani",
        "customer_phone": "+37499123456",
    }
    payload.update(overrides)
    return payload


def dashboard_headers(shop):
    return {"Cookie": f"business_session={shop.business_id}"}


# ============================================================================
# PUBLIC
# ============================================================================

class TestPublicRoutes:

    @pytest.mark.asyncio
    async def test_business_info(self, client, shop):
        response = await client.get(f"/b/{shop.slug}")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["data"]["name"] == "Test Shop"
        assert [s["name"] for s in body["data"]["services"]] == ["Haircut"]

    @pytest.mark.asyncio
    async def test_unknown_slug(self, client, shop):
        response = await client.get("/b/no-such-shop/availability", params={
            "service_id": shop.service_id, "date": NEXT_MONDAY.isoformat(),
        })
        assert response.status_code == 404
        body = response.json()
        assert body["status"] == "error"
        assert body["error"]["code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_bookable_dates(self, client, shop):
        response = await client.get(f"/b/{shop.slug}/dates")
        assert response.status_code == 200
        dates = response.json()["data"]
        assert dates[0] == "2025-01-01"
        assert "2025-01-05" not in dates

    @pytest.mark.asyncio
    async def test_availability(self, client, shop):
        response = await client.get(f"/b/{shop.slug}/availability", params={
            "service_id": shop.service_id, "date": NEXT_MONDAY.isoformat(),
        })
        assert response.status_code == 200
        slots = response.json()["data"]
        assert len(slots) == 18
        assert slots[0] == "10:00"

    @pytest.mark.asyncio
    async def test_availability_bad_date(self, client, shop):
        response = await client.get(f"/b/{shop.slug}/availability", params={
            "service_id": shop.service_id, "date": "06/01/2025",
        })
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_availability_missing_service_id(self, client, shop):
        response = await client.get(f"/b/{shop.slug}/availability", params={
            "date": NEXT_MONDAY.isoformat(),
        })
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_book_then_conflict(self, client, shop):
        first = await client.post(f"/b/{shop.slug}/bookings", json=booking_payload(shop))
        assert first.status_code == 201
        data = first.json()["data"]
        assert data["start_time"] == "10:00"
        assert data["end_time"] == "10:30"
        assert data["staff_id"] == shop.staff_id
        uuid.UUID(data["booking_id"])

        second = await client.post(
            f"/b/{shop.slug}/bookings",
            json=booking_payload(shop, customer_name="Davit", customer_phone="+37477123456"),
        )
        assert second.status_code == 409
        assert second.json()["error"]["code"] == "CONFLICT"

        booked = await client.get(f"/b/{shop.slug}/booked", params={"date": NEXT_MONDAY.isoformat()})
        assert booked.json()["data"] == ["10:00"]

    @pytest.mark.asyncio
    async def test_book_bad_phone(self, client, shop):
        response = await client.post(
            f"/b/{shop.slug}/bookings", json=booking_payload(shop, customer_phone="555-0100")
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


# ============================================================================
# DASHBOARD
# ============================================================================

class TestDashboardRoutes:

    @pytest.mark.asyncio
    async def test_requires_session(self, client, shop):
        response = await client.get(
            f"/b/{shop.slug}/dashboard/bookings", params={"date": NEXT_MONDAY.isoformat()}
        )
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_session_for_other_business(self, client, shop):
        response = await client.get(
            f"/b/{shop.slug}/dashboard/bookings",
            params={"date": NEXT_MONDAY.isoformat()},
            headers={"Cookie": f"business_session={shop.business_id + 100}"},
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_day_bookings_and_reschedule(self, client, shop):
        created = await client.post(f"/b/{shop.slug}/bookings", json=booking_payload(shop))
        booking_id = created.json()["data"]["booking_id"]

        listing = await client.get(
            f"/b/{shop.slug}/dashboard/bookings",
            params={"date": NEXT_MONDAY.isoformat()},
            headers=dashboard_headers(shop),
        )
        assert listing.status_code == 200
        assert [b["id"] for b in listing.json()["data"]] == [booking_id]
        row = listing.json()["data"][0]
        assert row["service"] == {"name": "Haircut", "duration_minutes": 30, "price": 3000}
        assert row["staff"] == {"name": "Armen"}

        moved = await client.post(
            f"/b/{shop.slug}/dashboard/bookings/{booking_id}/reschedule",
            json={"date": NEXT_MONDAY.isoformat(), "time": "16:00"},
            headers=dashboard_headers(shop),
        )
        assert moved.status_code == 200
        assert moved.json()["data"]["start_time"] == "16:00"
        assert moved.json()["data"]["status"] == "rescheduled"

    @pytest.mark.asyncio
    async def test_status_change(self, client, shop):
        created = await client.post(f"/b/{shop.slug}/bookings", json=booking_payload(shop))
        booking_id = created.json()["data"]["booking_id"]

        ok = await client.patch(
            f"/b/{shop.slug}/dashboard/bookings/{booking_id}/status",
            json={"status": "completed"},
            headers=dashboard_headers(shop),
        )
        assert ok.status_code == 200
        assert ok.json()["data"]["status"] == "completed"

        bad = await client.patch(
            f"/b/{shop.slug}/dashboard/bookings/{booking_id}/status",
            json={"status": "finished"},
            headers=dashboard_headers(shop),
        )
        assert bad.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_booking(self, client, shop):
        response = await client.patch(
            f"/b/{shop.slug}/dashboard/bookings/{uuid.uuid4()}/status",
            json={"status": "cancelled"},
            headers=dashboard_headers(shop),
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_schedule_and_time_off(self, client, shop):
        schedule = await client.put(
            f"/b/{shop.slug}/dashboard/staff/{shop.staff_id}/schedule",
            json=[{"day_of_week": 1, "start_time": "12:00", "end_time": "13:00"}],
            headers=dashboard_headers(shop),
        )
        assert schedule.status_code == 200
        assert schedule.json()["data"] == [
            {"day_of_week": 1, "start_time": "12:00", "end_time": "13:00", "is_working": True}
        ]

        slots = await client.get(f"/b/{shop.slug}/availability", params={
            "service_id": shop.service_id, "date": NEXT_MONDAY.isoformat(),
        })
        assert slots.json()["data"] == ["12:00", "12:30"]

        block = await client.post(
            f"/b/{shop.slug}/dashboard/staff/{shop.staff_id}/time-off",
            json={"start_date": NEXT_MONDAY.isoformat(), "end_date": NEXT_MONDAY.isoformat()},
            headers=dashboard_headers(shop),
        )
        assert block.status_code == 201
        time_off_id = block.json()["data"]["id"]

        removed = await client.delete(
            f"/b/{shop.slug}/dashboard/staff/time-off/{time_off_id}",
            headers=dashboard_headers(shop),
        )
        assert removed.status_code == 200
        assert removed.json()["data"] == {"deleted": time_off_id}

    @pytest.mark.asyncio
    async def test_duplicate_schedule_day_rejected(self, client, shop):
        response = await client.put(
            f"/b/{shop.slug}/dashboard/staff/{shop.staff_id}/schedule",
            json=[
                {"day_of_week": 1, "start_time": "09:00", "end_time": "12:00"},
                {"day_of_week": 1, "start_time": "13:00", "end_time": "18:00"},
            ],
            headers=dashboard_headers(shop),
        )
        assert response.status_code == 400
