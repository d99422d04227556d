"""Shared fixtures: in-memory MongoDB, HTTP client and a bookable clinic."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

import pytest
from beanie import init_beanie
from httpx import AsyncClient, ASGITransport
from mongomock_motor import AsyncMongoMockClient

from swasthya.database import document_models
from swasthya.main import app
from swasthya.features.auth.models import User, UserRole
from swasthya.features.auth.service import AuthService
from swasthya.features.clinic.models import Clinic
from swasthya.features.doctors.models import Professional, ClinicDoctor
from swasthya.features.schedules.models import DoctorSchedule
from swasthya.features.appointments.time_utils import day_of_week, local_now


@dataclass
class Seed:
    owner: User
    clinic: Clinic
    doctor: Professional
    schedule: DoctorSchedule
    date: str

    @property
    def clinic_id(self) -> str:
        return str(self.clinic.id)

    @property
    def doctor_id(self) -> str:
        return str(self.doctor.id)


async def create_user(
    name: str = "Sita Sharma",
    email: str = "owner@example.com",
    phone: str = None,
    role: UserRole = UserRole.USER,
) -> User:
    user = User(name=name, email=email, phone=phone, role=role)
    await user.insert()
    return user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {AuthService.issue_token(user)}"}


async def create_clinic(owner: User, name: str = "Patan Family Clinic", verified: bool = True) -> Clinic:
    slug = name.lower().replace(" ", "-")
    clinic = Clinic(
        name=name,
        slug=slug,
        address="Pulchowk, Lalitpur",
        phone="015551234",
        claimed_by_id=str(owner.id),
        verified=verified,
        verified_at=datetime.utcnow() if verified else None,
    )
    await clinic.insert()
    return clinic


def booking_payload(seed: Seed, **overrides) -> dict:
    payload = {
        "clinicId": seed.clinic_id,
        "doctorId": seed.doctor_id,
        "date": seed.date,
        "timeSlot": "09:00-09:30",
        "patientName": "Ram Bahadur Thapa",
        "patientPhone": "9812345678",
        "patientEmail": "ram.thapa@example.com",
        "chiefComplaint": "Fever for three days",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
async def database():
    """A fresh in-memory database per test with every document registered."""
    client = AsyncMongoMockClient()
    db = client[f"swasthya_test_{uuid.uuid4().hex}"]
    await init_beanie(database=db, document_models=document_models())
    yield db


@pytest.fixture
async def client(database):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def seed(database) -> Seed:
    """Verified clinic with one affiliated doctor working 09:00-12:00 in 30 minute
    single-patient slots on the weekday one week from today."""
    owner = await create_user()
    clinic = await create_clinic(owner)

    doctor = Professional(
        full_name="Dr. Anil Shrestha",
        registration_number="NMC-10234",
        specialties=["General Medicine"],
    )
    await doctor.insert()
    await ClinicDoctor(clinic_id=str(clinic.id), doctor_id=str(doctor.id)).insert()

    booking_date = local_now().date() + timedelta(days=7)
    schedule = DoctorSchedule(
        clinic_id=str(clinic.id),
        doctor_id=str(doctor.id),
        day_of_week=day_of_week(booking_date),
        start_time="09:00",
        end_time="12:00",
        slot_duration_minutes=30,
        max_patients_per_slot=1,
        effective_from=(booking_date - timedelta(days=30)).isoformat(),
    )
    await schedule.insert()

    return Seed(owner=owner, clinic=clinic, doctor=doctor, schedule=schedule, date=booking_date.isoformat())
