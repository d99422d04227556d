"""Format checks shared by request parsing across features."""

import re
from datetime import date, datetime
from typing import Optional

# Nepali mobile numbers: 98XXXXXXXX / 97XXXXXXXX
PHONE_RE = re.compile(r"^(98|97)\d{8}$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
TIME_SLOT_RE = re.compile(r"^(\d{2}:\d{2})-(\d{2}:\d{2})$")


def normalize_phone(phone: str) -> str:
    """Strip all whitespace from a phone number."""
    return re.sub(r"\s", "", phone)


def is_valid_phone(phone: str) -> bool:
    return bool(PHONE_RE.match(phone))


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email))


def is_valid_time(value: str) -> bool:
    return bool(TIME_RE.match(value))


def parse_iso_date(value: str) -> Optional[date]:
    """Parse ``YYYY-MM-DD``; None when the shape or the calendar date is wrong."""
    if not DATE_RE.match(value):
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None
