"""MongoDB database connection manager."""

from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie
from typing import Optional

from swasthya.config import settings
from swasthya.core.logging import logger


def document_models() -> list:
    """Every Beanie document registered with the database."""
    from swasthya.features.auth.models import User, PhoneOtp
    from swasthya.features.clinic.models import Clinic
    from swasthya.features.doctors.models import Professional, ClinicDoctor
    from swasthya.features.schedules.models import DoctorSchedule, DoctorLeave
    from swasthya.features.patients.models import Patient
    from swasthya.features.appointments.models import Appointment, SlotReservation, Counter
    from swasthya.features.family.models import FamilyMember

    return [
        User,
        PhoneOtp,
        Clinic,
        Professional,
        ClinicDoctor,
        DoctorSchedule,
        DoctorLeave,
        Patient,
        Appointment,
        SlotReservation,
        Counter,
        FamilyMember,
    ]


class Database:
    """MongoDB database connection manager."""

    client: Optional[AsyncIOMotorClient] = None

    @classmethod
    async def connect_db(cls):
        """Connect to MongoDB and initialize Beanie (creates indexes)."""
        cls.client = AsyncIOMotorClient(settings.MONGODB_URL)

        await init_beanie(
            database=cls.client[settings.DATABASE_NAME],
            document_models=document_models(),
        )

        logger.info(f"Connected to MongoDB database: {settings.DATABASE_NAME}")

    @classmethod
    async def close_db(cls):
        """Close MongoDB connection."""
        if cls.client:
            cls.client.close()
            cls.client = None
            logger.info("Closed MongoDB connection")


async def get_database():
    """Dependency for database access."""
    return Database.client[settings.DATABASE_NAME]
