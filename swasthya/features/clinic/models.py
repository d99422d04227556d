# Clinic Management Feature

from typing import Optional
from datetime import datetime
from beanie import Document, Indexed
from pymongo import ASCENDING, IndexModel
from swasthya.shared.models import TimestampMixin


class Clinic(Document, TimestampMixin):
    """Clinic document model.

    A clinic is registered by a user, stays unverified until an admin approves
    it, and only verified clinics accept bookings. Clinics are never deleted.
    """

    name: str
    slug: Indexed(str, unique=True)
    address: Optional[str] = ""
    phone: Optional[str] = ""
    email: Optional[str] = ""

    # Ownership and verification
    claimed_by_id: Optional[str] = None
    verified: bool = False
    verified_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    class Settings:
        name = "clinics"
        indexes = [IndexModel([("claimed_by_id", ASCENDING)], name="clinic_owner")]
        use_state_management = True

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Patan Family Clinic",
                "slug": "patan-family-clinic",
                "address": "Pulchowk, Lalitpur",
                "phone": "015551234",
                "email": "info@patanfamily.com.np",
                "verified": True,
            }
        }
