"""Test the public available-slots listing."""

from datetime import datetime, time, timedelta

from conftest import booking_payload
from swasthya.features.appointments.service import AppointmentService
from swasthya.features.schedules.models import DoctorLeave


async def get_slots(client, seed, **params):
    query = {"doctor_id": seed.doctor_id, "date": seed.date}
    query.update(params)
    return await client.get(f"/api/clinic/{seed.clinic_id}/slots", params=query)


async def test_slots_follow_schedule(client, seed):
    response = await get_slots(client, seed)

    assert response.status_code == 200
    body = response.json()
    assert [(s["start"], s["end"]) for s in body["slots"]] == [
        ("09:00", "09:30"), ("09:30", "10:00"), ("10:00", "10:30"),
        ("10:30", "11:00"), ("11:00", "11:30"), ("11:30", "12:00"),
    ]
    assert all(s["available"] and s["bookedCount"] == 0 and s["maxPatients"] == 1 for s in body["slots"])
    assert body["doctor"] == {"id": seed.doctor_id, "name": "Dr. Anil Shrestha", "type": "DOCTOR"}
    assert body["clinic"] == {"id": seed.clinic_id, "name": "Patan Family Clinic"}
    assert body["date"] == seed.date
    assert body["dayOfWeek"] == seed.schedule.day_of_week
    assert body["schedule"] == {"startTime": "09:00", "endTime": "12:00", "slotDuration": 30}
    assert "message" not in body


async def test_booked_and_leave_slots_are_unavailable(client, seed):
    await client.post("/api/appointments", json=booking_payload(seed, timeSlot="09:00-09:30"))
    await DoctorLeave(
        clinic_id=seed.clinic_id,
        doctor_id=seed.doctor_id,
        leave_date=seed.date,
        start_time="10:00",
        end_time="11:00",
        reason="Hospital rounds",
    ).insert()

    slots = {s["start"]: s for s in (await get_slots(client, seed)).json()["slots"]}

    assert slots["09:00"]["available"] is False
    assert slots["09:00"]["bookedCount"] == 1
    assert slots["09:30"]["available"] is True
    assert slots["10:00"]["available"] is False
    assert slots["10:30"]["available"] is False
    assert slots["10:30"]["bookedCount"] == 0
    assert slots["11:00"]["available"] is True


async def test_no_schedule_returns_empty_list(client, seed):
    other_day = (datetime.fromisoformat(seed.date) + timedelta(days=1)).date().isoformat()

    response = await get_slots(client, seed, date=other_day)

    assert response.status_code == 200
    body = response.json()
    assert body["slots"] == []
    assert body["message"] == "Doctor has no schedule for this day"
    assert body["doctor"]["name"] == "Dr. Anil Shrestha"


async def test_same_day_slots_close_before_start(seed):
    booking_day = datetime.fromisoformat(seed.date).date()

    listing = await AppointmentService.get_available_slots(
        seed.clinic_id, seed.doctor_id, seed.date, now=datetime.combine(booking_day, time(9, 50))
    )

    available = {s.start: s.available for s in listing.slots}
    assert available["09:00"] is False
    assert available["09:30"] is False
    assert available["10:00"] is False
    assert available["10:30"] is True


async def test_slot_query_errors(client, seed):
    response = await client.get(f"/api/clinic/{seed.clinic_id}/slots", params={"date": seed.date})
    assert response.status_code == 400
    assert response.json() == {"error": "doctor_id query parameter is required"}

    response = await client.get(f"/api/clinic/{seed.clinic_id}/slots", params={"doctor_id": seed.doctor_id})
    assert response.json() == {"error": "date query parameter is required (format: YYYY-MM-DD)"}

    response = await get_slots(client, seed, date="2020-01-01")
    assert response.json() == {"error": "Cannot get slots for past dates"}

    response = await client.get(
        "/api/clinic/665f1c2e9b1e8a3d4c2b1a99/slots",
        params={"doctor_id": seed.doctor_id, "date": seed.date},
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Clinic not found"}
