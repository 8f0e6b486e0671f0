"""
User directory over the ``users`` collection.

Identity itself belongs to the sign-in provider; this is the seam the
engine uses to resolve ids to roles, plus registration for demo users.
"""

import logging
from typing import Optional

from office_hours.errors import (
    DuplicateUser,
    InvalidEmail,
    InvalidStudent,
    InvalidTeacher,
    UserNotFound,
)
from office_hours.logging_context import set_session_id
from office_hours.schemas.user_schema import Role, Session, User
from office_hours.storage import USERS, Storage
from office_hours.utils import is_valid_email, new_id

logger = logging.getLogger(__name__)


def find_user(records: list[dict], user_id: str) -> Optional[User]:
    """Return the user with ``user_id`` from already-loaded records."""
    for record in records:
        if record.get("id") == user_id:
            return User.model_validate(record)
    return None


def require_role(records: list[dict], user_id: str, role: Role) -> User:
    """Resolve ``user_id`` to a user holding ``role``.

    Raises:
        InvalidTeacher / InvalidStudent: If the id is unknown or the role differs.
    """
    user = find_user(records, user_id)
    if user is not None and user.role == role:
        return user
    if role == Role.TEACHER:
        raise InvalidTeacher(f"User '{user_id}' is not a teacher.")
    raise InvalidStudent(f"User '{user_id}' is not a student.")


class UserDirectory:
    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    def list_users(self, role: Optional[Role] = None) -> list[User]:
        users = [User.model_validate(r) for r in self.storage.load(USERS)]
        if role is not None:
            users = [u for u in users if u.role == role]
        return users

    def get_user(self, user_id: str) -> Optional[User]:
        return find_user(self.storage.load(USERS), user_id)

    def require_user(self, user_id: str, role: Role) -> User:
        return require_role(self.storage.load(USERS), user_id, role)

    def create_user(self, user: User) -> User:
        """Register a user; ids and emails are unique (emails case-insensitively)."""
        if not is_valid_email(user.email):
            raise InvalidEmail(f"'{user.email}' is not a valid email address.")

        records = self.storage.load(USERS)
        email = user.email.strip().lower()
        for record in records:
            if record.get("id") == user.id or str(record.get("email", "")).lower() == email:
                raise DuplicateUser(f"User '{user.id}' or email '{user.email}' already exists.")

        records.append(user.model_dump(mode="json"))
        self.storage.save(USERS, records)
        logger.info("User created: %s (%s)", user.id, user.role.value)
        return user

    def sign_in(self, user_id: str) -> Session:
        """Open an explicit session for ``user_id``; no global current-user state."""
        user = self.get_user(user_id)
        if user is None:
            raise UserNotFound(f"User '{user_id}' not found.")
        session = Session(session_id=new_id("SES"), user_id=user.id, role=user.role)
        set_session_id(session.session_id)
        logger.info("Signed in %s as %s", user.id, user.role.value)
        return session
