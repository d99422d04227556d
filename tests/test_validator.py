"""Test the booking admission rules that need no database."""

from datetime import date, datetime
from types import SimpleNamespace

import pytest

from swasthya.features.appointments.schemas import CreateAppointmentRequest
from swasthya.features.appointments.validator import (
    find_blocking_leave,
    has_capacity,
    is_past_cutoff,
    is_within_schedule,
    parse_booking_request,
)
from swasthya.shared.exceptions import BadRequestException


TODAY = date(2025, 6, 2)


def request(**overrides) -> CreateAppointmentRequest:
    payload = {
        "clinicId": "clinic-1",
        "doctorId": "doctor-1",
        "date": "2025-06-09",
        "timeSlot": "09:00-09:30",
        "patientName": "Ram Bahadur Thapa",
        "patientPhone": "9812345678",
    }
    payload.update(overrides)
    return CreateAppointmentRequest(**payload)


def rejection(**overrides) -> str:
    with pytest.raises(BadRequestException) as exc_info:
        parse_booking_request(request(**overrides), TODAY)
    assert exc_info.value.status_code == 400
    return exc_info.value.detail


def schedule(start="09:00", end="12:00", max_patients=1):
    return SimpleNamespace(start_time=start, end_time=end, max_patients_per_slot=max_patients)


def test_valid_request_is_normalized():
    booking = parse_booking_request(
        request(
            patientName="  Ram Bahadur Thapa ",
            patientPhone="981 234 5678",
            patientEmail=" ram@example.com ",
            chiefComplaint="  ",
        ),
        TODAY,
    )

    assert booking.appointment_date == date(2025, 6, 9)
    assert booking.slot_start == "09:00"
    assert booking.slot_end == "09:30"
    assert booking.time_slot == "09:00-09:30"
    assert booking.patient_name == "Ram Bahadur Thapa"
    assert booking.patient_phone == "9812345678"
    assert booking.patient_email == "ram@example.com"
    assert booking.chief_complaint is None


def test_required_fields():
    test_cases = [
        ("clinicId", "clinicId is required"),
        ("doctorId", "doctorId is required"),
        ("date", "date is required (format: YYYY-MM-DD)"),
        ("timeSlot", "timeSlot is required (format: HH:MM-HH:MM)"),
        ("patientName", "patientName is required"),
        ("patientPhone", "patientPhone is required"),
    ]
    for field, message in test_cases:
        assert rejection(**{field: None}) == message
        assert rejection(**{field: ""}) == message


def test_blank_patient_name_is_rejected():
    assert rejection(patientName="   ") == "patientName is required"


def test_phone_format():
    """Only 10-digit numbers starting with 98 or 97 are accepted."""
    assert parse_booking_request(request(patientPhone="9812345678"), TODAY).patient_phone == "9812345678"
    assert parse_booking_request(request(patientPhone="9701234567"), TODAY).patient_phone == "9701234567"

    message = "Invalid phone number format. Must be 10 digits starting with 98 or 97."
    for phone in ["1234567890", "981234567", "98123456789", "9612345678", "98-1234-5678"]:
        assert rejection(patientPhone=phone) == message, phone


def test_email_format():
    assert rejection(patientEmail="not-an-email") == "Invalid email format"
    assert rejection(patientEmail="ram@localhost") == "Invalid email format"
    assert parse_booking_request(request(patientEmail=""), TODAY).patient_email is None


def test_date_rules():
    assert rejection(date="09-06-2025") == "Invalid date format. Use YYYY-MM-DD"
    assert rejection(date="2025-6-9") == "Invalid date format. Use YYYY-MM-DD"
    assert rejection(date="2025-02-30") == "Invalid date"
    assert rejection(date="2025-06-01") == "Cannot book appointments for past dates"
    assert parse_booking_request(request(date="2025-06-02"), TODAY).appointment_date == TODAY


def test_time_slot_format():
    message = "Invalid timeSlot format. Use HH:MM-HH:MM"
    for slot in ["09:00", "9:00-9:30", "09:00 - 09:30", "24:00-24:30", "09:60-10:00", "abc"]:
        assert rejection(timeSlot=slot) == message, slot


def test_reversed_time_slot_is_rejected():
    """A slot must end after it starts; reversed or empty ranges get a 400."""
    message = "Invalid timeSlot. End time must be after start time"
    assert rejection(timeSlot="10:30-10:00") == message
    assert rejection(timeSlot="10:00-10:00") == message


def test_slot_within_schedule():
    hours = schedule("09:00", "12:00")

    assert is_within_schedule("09:00", "09:30", hours)
    assert is_within_schedule("11:30", "12:00", hours)
    assert not is_within_schedule("08:00", "08:30", hours)
    assert not is_within_schedule("08:45", "09:15", hours)
    assert not is_within_schedule("11:45", "12:15", hours)


def test_find_blocking_leave():
    morning = SimpleNamespace(start_time="09:00", end_time="10:00")
    evening = SimpleNamespace(start_time="16:00", end_time="18:00")

    assert find_blocking_leave("09:30", "10:00", [evening, morning]) is morning
    assert find_blocking_leave("11:00", "11:30", [evening, morning]) is None
    assert find_blocking_leave("11:00", "11:30", []) is None


def test_capacity():
    assert has_capacity(0, schedule(max_patients=1))
    assert not has_capacity(1, schedule(max_patients=1))
    assert has_capacity(2, schedule(max_patients=3))
    assert not has_capacity(3, schedule(max_patients=3))


def test_same_day_cutoff():
    """Slots starting within 15 minutes of now are closed for today only."""
    now = datetime(2025, 6, 2, 9, 50)

    assert is_past_cutoff(TODAY, "09:00", now)
    assert is_past_cutoff(TODAY, "10:00", now)       # 10 minutes away
    assert is_past_cutoff(TODAY, "10:05", now)       # exactly at the cutoff
    assert not is_past_cutoff(TODAY, "10:10", now)   # 20 minutes away
    assert not is_past_cutoff(date(2025, 6, 3), "08:00", now)
