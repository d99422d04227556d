# Family Members Feature - Models

from typing import Optional
from enum import Enum
from beanie import Document, Indexed
from swasthya.shared.models import TimestampMixin


class FamilyRelation(str, Enum):
    SELF = "SELF"
    SPOUSE = "SPOUSE"
    CHILD = "CHILD"
    PARENT = "PARENT"
    SIBLING = "SIBLING"
    OTHER = "OTHER"


GENDERS = ("male", "female", "other")
BLOOD_GROUPS = ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")


class FamilyMember(Document, TimestampMixin):
    """A person a signed-in user books appointments for."""

    user_id: Indexed(str)
    name: str
    relation: FamilyRelation
    date_of_birth: Optional[str] = None  # YYYY-MM-DD
    gender: Optional[str] = None
    blood_group: Optional[str] = None
    phone: Optional[str] = None

    class Settings:
        name = "family_members"
        use_state_management = True

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Gita Thapa",
                "relation": "SPOUSE",
                "date_of_birth": "1990-04-12",
                "gender": "female",
                "blood_group": "B+",
            }
        }
