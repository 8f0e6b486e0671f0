"""Slot records, update payloads, and list filters."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from office_hours.clock import parse_iso
from office_hours.schemas.user_schema import User


class Slot(BaseModel):
    """A teacher-published bookable window with finite seats."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    teacher_id: str
    start_iso: datetime = Field(alias="startISO")
    end_iso: datetime = Field(alias="endISO")
    location: str = ""
    max_seats: int
    available_seats: int

    @field_validator("start_iso", "end_iso")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        return parse_iso(value)

    def to_record(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class SlotUpdate(BaseModel):
    """Partial slot edit; unset fields are left unchanged."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    teacher_id: Optional[str] = None
    start_iso: Optional[datetime] = Field(default=None, alias="startISO")
    end_iso: Optional[datetime] = Field(default=None, alias="endISO")
    location: Optional[str] = None
    max_seats: Optional[int] = None

    @field_validator("start_iso", "end_iso")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return parse_iso(value) if value is not None else None

    @property
    def changes_time(self) -> bool:
        return self.start_iso is not None or self.end_iso is not None


class SlotFilters(BaseModel):
    """Optional filters for listing slots; start_date/end_date bound the slot start."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    teacher_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    available: bool = False

    @field_validator("start_date", "end_date")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return parse_iso(value) if value is not None else None


class SlotWithTeacher(Slot):
    teacher: User
