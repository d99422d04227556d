"""Clinic-scoped sequential identifiers.

Numbers come from an atomic ``$inc`` on a counter document, so two concurrent
requests never receive the same patient number or token.
"""

from typing import Optional
from datetime import datetime
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError
from swasthya.features.appointments.models import Counter, retention_deadline
from swasthya.core.logging import logger


async def next_sequence(key: str, expires_at: Optional[datetime] = None) -> int:
    """Increment the counter named ``key`` and return the new value (first call returns 1).

    ``expires_at`` is stored when the counter is created and lets the TTL index
    drop it later.
    """
    collection = Counter.get_motor_collection()
    update = {"$inc": {"value": 1}}
    if expires_at is not None:
        update["$setOnInsert"] = {"expires_at": expires_at}
    # Two first-time upserts on the same key can race; the loser retries and
    # increments the document the winner created.
    for attempt in range(3):
        try:
            document = await collection.find_one_and_update(
                {"key": key},
                update,
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
            return document["value"]
        except DuplicateKeyError:
            logger.debug(f"Counter {key} upsert collided (attempt {attempt + 1}), retrying")
    raise RuntimeError(f"Could not increment counter {key}")


async def generate_patient_number(clinic_id: str) -> str:
    """Next patient number for a clinic, formatted ``P-000001``."""
    number = await next_sequence(f"patient:{clinic_id}")
    return f"P-{number:06d}"


async def generate_token_number(clinic_id: str, appointment_date: str) -> int:
    """Next queue token for a clinic on a date, starting at 1 each day."""
    return await next_sequence(
        f"token:{clinic_id}:{appointment_date}",
        expires_at=retention_deadline(appointment_date),
    )
