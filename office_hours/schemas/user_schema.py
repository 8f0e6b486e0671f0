"""User records and the explicit per-session context."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from office_hours.utils import normalize_phone


class Role(str, Enum):
    STUDENT = "STUDENT"
    TEACHER = "TEACHER"


class User(BaseModel):
    """Identity record owned by the identity provider; read-only to the engine."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    role: Role
    email: str
    phone: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def _normalize_phone(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return normalize_phone(value)

    def public_profile(self) -> "User":
        """Copy without contact details beyond email, for display next to slots."""
        return self.model_copy(update={"phone": None})


class Session(BaseModel):
    """Signed-in user context passed explicitly into API calls."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    user_id: str
    role: Role
