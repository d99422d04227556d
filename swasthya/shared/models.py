from datetime import datetime

from pydantic import Field


class TimestampMixin:
    """Audit fields for stored documents, in naive UTC as MongoDB returns them.

    Business dates (appointment and leave days) are separate ``YYYY-MM-DD``
    strings in clinic local time; these two fields are never used for them.
    """

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def update_timestamp(self) -> None:
        self.updated_at = datetime.utcnow()
