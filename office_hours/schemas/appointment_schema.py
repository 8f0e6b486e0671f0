"""Appointment records and their enriched display shape."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from office_hours.clock import parse_iso
from office_hours.schemas.slot_schema import Slot
from office_hours.schemas.user_schema import User


class AppointmentStatus(str, Enum):
    BOOKED = "BOOKED"
    CANCELLED = "CANCELLED"
    ATTENDED = "ATTENDED"


class Appointment(BaseModel):
    """One student's reservation against a slot. Never deleted, only re-statused."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    slot_id: str
    student_id: str
    status: AppointmentStatus = AppointmentStatus.BOOKED
    notes: Optional[str] = None
    created_at: datetime
    cancelled_at: Optional[datetime] = None

    @field_validator("created_at", "cancelled_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return parse_iso(value) if value is not None else None

    def to_record(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AppointmentWithDetails(Appointment):
    """Appointment joined with its slot and both participants.

    ``slot`` is None only if the referenced slot record has gone missing.
    """

    slot: Optional[Slot] = None
    student: Optional[User] = None
    teacher: Optional[User] = None
