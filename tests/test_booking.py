"""Test POST /api/appointments end to end against the in-memory database."""

from datetime import datetime, time, timedelta

import pytest
from beanie import PydanticObjectId

from conftest import auth_headers, booking_payload, create_clinic, create_user
from swasthya.features.appointments.models import Appointment, AppointmentStatus, SlotReservation
from swasthya.features.appointments.schemas import CreateAppointmentRequest
from swasthya.features.appointments.service import AppointmentService
from swasthya.features.doctors.models import Professional
from swasthya.features.family.models import FamilyMember, FamilyRelation
from swasthya.features.patients.models import Patient
from swasthya.features.schedules.models import DoctorLeave
from swasthya.shared.exceptions import SlotUnavailableException


async def book(client, seed, **overrides):
    return await client.post("/api/appointments", json=booking_payload(seed, **overrides))


async def test_first_booking_returns_confirmation(client, seed):
    response = await book(client, seed)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["tokenNumber"] == 1
    assert body["date"] == seed.date
    assert body["timeSlot"] == "09:00-09:30"
    assert body["doctorName"] == "Dr. Anil Shrestha"
    assert body["doctorType"] == "DOCTOR"
    assert body["clinicName"] == "Patan Family Clinic"
    assert body["clinicAddress"] == "Pulchowk, Lalitpur"
    assert body["clinicPhone"] == "015551234"
    assert body["patientName"] == "Ram Bahadur Thapa"
    assert body["patientPhone"] == "9812345678"

    appointment = await Appointment.get(PydanticObjectId(body["appointmentId"]))
    assert appointment.status == AppointmentStatus.SCHEDULED
    assert appointment.type.value == "NEW"
    assert appointment.source.value == "ONLINE"
    assert appointment.chief_complaint == "Fever for three days"
    assert appointment.time_slot_start == "09:00"
    assert appointment.time_slot_end == "09:30"


async def test_tokens_increase_per_clinic_and_date(client, seed):
    first = await book(client, seed, timeSlot="09:00-09:30")
    second = await book(client, seed, timeSlot="10:00-10:30", patientPhone="9841000000")

    assert first.status_code == 200
    assert second.status_code == 200
    assert first.json()["tokenNumber"] == 1
    assert second.json()["tokenNumber"] == 2


async def test_full_slot_is_rejected(client, seed):
    """With one patient per slot the second booking of the same slot fails."""
    assert (await book(client, seed)).status_code == 200

    response = await book(client, seed, patientPhone="9841000000", patientName="Hari Karki")

    assert response.status_code == 400
    assert response.json() == {"error": "SLOT_UNAVAILABLE", "message": "This time slot is fully booked"}
    assert await Appointment.find_all().count() == 1


async def test_slot_capacity_above_one(client, seed):
    seed.schedule.max_patients_per_slot = 2
    await seed.schedule.save()

    assert (await book(client, seed, patientPhone="9841000001")).status_code == 200
    assert (await book(client, seed, patientPhone="9841000002")).status_code == 200
    third = await book(client, seed, patientPhone="9841000003")

    assert third.status_code == 400
    assert third.json()["message"] == "This time slot is fully booked"


async def test_slot_outside_schedule(client, seed):
    for slot in ["08:00-08:30", "11:45-12:15"]:
        response = await book(client, seed, timeSlot=slot)
        assert response.status_code == 400
        assert response.json() == {"error": "SLOT_UNAVAILABLE", "message": "Time slot is outside doctor's schedule"}


async def test_full_day_leave_blocks_every_slot(client, seed):
    await DoctorLeave(
        clinic_id=seed.clinic_id,
        doctor_id=seed.doctor_id,
        leave_date=seed.date,
        reason="Conference",
    ).insert()

    for slot in ["09:00-09:30", "10:30-11:00", "11:30-12:00"]:
        response = await book(client, seed, timeSlot=slot)
        assert response.status_code == 400
        assert response.json()["message"] == "Doctor is on leave during this time"


async def test_partial_leave_blocks_overlapping_slots(client, seed):
    await DoctorLeave(
        clinic_id=seed.clinic_id,
        doctor_id=seed.doctor_id,
        leave_date=seed.date,
        start_time="10:00",
        end_time="11:00",
        reason="Hospital rounds",
    ).insert()

    blocked = await book(client, seed, timeSlot="10:30-11:00")
    allowed = await book(client, seed, timeSlot="11:00-11:30")

    assert blocked.json()["message"] == "Doctor is on leave during this time"
    assert allowed.status_code == 200


async def test_day_without_schedule(client, seed):
    other_day = (datetime.fromisoformat(seed.date) + timedelta(days=1)).date().isoformat()

    response = await book(client, seed, date=other_day)

    assert response.status_code == 400
    assert response.json() == {"error": "SLOT_UNAVAILABLE", "message": "Doctor has no schedule for this day"}


async def test_expired_or_inactive_schedule_is_ignored(client, seed):
    seed.schedule.effective_to = (datetime.fromisoformat(seed.date) - timedelta(days=1)).date().isoformat()
    await seed.schedule.save()

    assert (await book(client, seed)).json()["message"] == "Doctor has no schedule for this day"

    seed.schedule.effective_to = None
    seed.schedule.is_active = False
    await seed.schedule.save()

    assert (await book(client, seed)).json()["message"] == "Doctor has no schedule for this day"


async def test_unknown_clinic(client, seed):
    for clinic_id in ["665f1c2e9b1e8a3d4c2b1a99", "not-an-id"]:
        response = await book(client, seed, clinicId=clinic_id)
        assert response.status_code == 404
        assert response.json() == {"error": "Clinic not found"}


async def test_unverified_clinic(client, seed):
    owner = await create_user(email="new.owner@example.com")
    pending = await create_clinic(owner, name="Bhaktapur Care Center", verified=False)

    response = await book(client, seed, clinicId=str(pending.id))

    assert response.status_code == 400
    assert response.json() == {"error": "Clinic is not verified"}


async def test_doctor_not_affiliated(client, seed):
    stranger = Professional(full_name="Dr. Maya Gurung", registration_number="NMC-20001")
    await stranger.insert()

    response = await book(client, seed, doctorId=str(stranger.id))

    assert response.status_code == 400
    assert response.json() == {"error": "Doctor is not affiliated with this clinic"}


async def test_validation_errors_use_error_envelope(client, seed):
    response = await client.post("/api/appointments", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "clinicId is required"}

    response = await book(client, seed, patientPhone="1234567890")
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid phone number format. Must be 10 digits starting with 98 or 97."}

    response = await book(client, seed, date="2020-01-01")
    assert response.json() == {"error": "Cannot book appointments for past dates"}


async def test_reversed_slot_does_not_crash(client, seed):
    response = await book(client, seed, timeSlot="10:30-10:00")

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid timeSlot. End time must be after start time"}


async def test_returning_patient_is_reused(client, seed):
    """The same phone at the same clinic keeps one patient row with the latest details."""
    await book(client, seed, timeSlot="09:00-09:30", patientName="Ram Thapa", patientEmail="ram@old.example.com")
    await book(client, seed, timeSlot="09:30-10:00", patientName="Ram Bahadur Thapa", patientEmail="ram@new.example.com")
    await book(client, seed, timeSlot="10:00-10:30", patientName="Ram Bahadur Thapa", patientEmail=None)

    patients = await Patient.find(Patient.clinic_id == seed.clinic_id).to_list()
    assert len(patients) == 1
    assert patients[0].full_name == "Ram Bahadur Thapa"
    assert patients[0].email == "ram@new.example.com"
    assert patients[0].patient_number == "P-000001"

    appointments = await Appointment.find(Appointment.patient_id == str(patients[0].id)).to_list()
    assert len(appointments) == 3


async def test_new_patients_get_sequential_numbers(client, seed):
    await book(client, seed, timeSlot="09:00-09:30", patientPhone="9841000001")
    await book(client, seed, timeSlot="09:30-10:00", patientPhone="9841000002")

    numbers = sorted(p.patient_number for p in await Patient.find_all().to_list())
    assert numbers == ["P-000001", "P-000002"]


async def test_same_day_cutoff(seed):
    """Today, a slot 10 minutes away is closed and one 20 minutes away is open."""
    booking_day = datetime.fromisoformat(seed.date).date()

    def payload(slot):
        return CreateAppointmentRequest(**booking_payload(seed, timeSlot=slot, patientEmail=None))

    with pytest.raises(SlotUnavailableException) as exc_info:
        await AppointmentService.book_appointment(payload("10:00-10:30"), now=datetime.combine(booking_day, time(9, 50)))
    assert exc_info.value.message == "This time slot has already passed"

    confirmation = await AppointmentService.book_appointment(
        payload("10:00-10:30"), now=datetime.combine(booking_day, time(9, 40))
    )
    assert confirmation.token_number == 1


async def test_failed_write_releases_reservation(client, seed, monkeypatch):
    async def broken_token(clinic_id, appointment_date):
        raise RuntimeError("counter unavailable")

    monkeypatch.setattr("swasthya.features.appointments.service.generate_token_number", broken_token)

    response = await book(client, seed)

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to create appointment"}
    reservation = await SlotReservation.find_one(SlotReservation.time_slot == "09:00-09:30")
    assert reservation.booked == 0
    assert await Appointment.find_all().count() == 0


# ============== Booking for a family member ==============

async def add_family_member(user, name="Gita Thapa", relation=FamilyRelation.SPOUSE):
    member = FamilyMember(user_id=str(user.id), name=name, relation=relation)
    await member.insert()
    return member


async def test_family_booking_requires_sign_in(client, seed):
    response = await book(client, seed, familyMemberId="665f1c2e9b1e8a3d4c2b1a99")

    assert response.status_code == 401
    assert response.json() == {"error": "Authentication required to book for a family member"}
    assert await Appointment.find_all().count() == 0


async def test_family_member_of_another_user(client, seed):
    owner = await create_user(name="Hari Karki", email="hari@example.com")
    member = await add_family_member(owner)
    someone_else = await create_user(name="Ram Bahadur Thapa", email="ram@example.com")

    response = await client.post(
        "/api/appointments",
        json=booking_payload(seed, familyMemberId=str(member.id)),
        headers=auth_headers(someone_else),
    )

    assert response.status_code == 404
    assert response.json() == {"error": "Family member not found"}
    assert await SlotReservation.find_all().count() == 0


async def test_booking_for_family_member(client, seed):
    user = await create_user(name="Ram Bahadur Thapa", email="ram.thapa@example.com", phone="9812345678")
    member = await add_family_member(user, name="Gita Thapa")

    response = await client.post(
        "/api/appointments",
        json=booking_payload(seed, familyMemberId=str(member.id)),
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    assert response.json()["familyMemberName"] == "Gita Thapa"
    appointment = await Appointment.get(PydanticObjectId(response.json()["appointmentId"]))
    assert appointment.family_member_id == str(member.id)

    history = await client.get("/api/appointments", headers=auth_headers(user))
    assert history.json()["appointments"][0]["family_member"] == {
        "id": str(member.id),
        "name": "Gita Thapa",
        "relation": "SPOUSE",
    }


async def test_own_booking_has_no_family_member(client, seed):
    response = await book(client, seed)

    assert response.json()["familyMemberName"] is None
