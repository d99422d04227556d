from beanie import Document, Indexed
from pymongo import ASCENDING, IndexModel
from typing import Optional
from datetime import datetime
from enum import Enum
from swasthya.shared.models import TimestampMixin


class UserRole(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class User(Document, TimestampMixin):
    """User document model.

    Clinic owners, staff and patients who sign in all share this model; a
    clinic is linked to its owner through ``Clinic.claimed_by_id``.
    """

    # Email is absent for accounts created through phone OTP
    email: Optional[str] = None
    phone: Optional[str] = None
    password_hash: Optional[str] = None
    name: str
    role: UserRole = UserRole.USER
    is_active: bool = True
    phone_verified: bool = False

    class Settings:
        name = "users"
        use_state_management = True
        indexes = [
            IndexModel([("email", ASCENDING)], name="user_email"),
            IndexModel([("phone", ASCENDING)], name="user_phone"),
        ]

    class Config:
        json_schema_extra = {
            "example": {
                "email": "owner@example.com",
                "phone": "9812345678",
                "name": "Sita Sharma",
                "role": "USER",
            }
        }


class PhoneOtp(Document, TimestampMixin):
    """One-time login code sent by SMS.

    Codes live in the database rather than process memory; the TTL index lets
    MongoDB drop them once ``expires_at`` has passed.
    """

    phone: Indexed(str)
    code_hash: str
    expires_at: datetime
    attempts: int = 0
    used: bool = False

    class Settings:
        name = "phone_otps"
        use_state_management = True
        indexes = [
            IndexModel([("expires_at", ASCENDING)], expireAfterSeconds=0, name="phone_otp_ttl"),
        ]
