"""
Read-only joins of slots and appointments with user records.

Nothing here writes to storage or derives new rules; results are shaped
for list views (slot lists, "my appointments", a teacher's roster).
"""

import logging
from typing import Union

from office_hours.clock import Timestamp, is_past, parse_iso
from office_hours.errors import SlotNotFound
from office_hours.schemas.appointment_schema import Appointment, AppointmentWithDetails
from office_hours.schemas.slot_schema import Slot, SlotFilters, SlotWithTeacher
from office_hours.schemas.user_schema import Role, User
from office_hours.storage import APPOINTMENTS, SLOTS, USERS, Storage

logger = logging.getLogger(__name__)

UNKNOWN_TEACHER = User(id="", name="Unknown", role=Role.TEACHER, email="")


def _users_by_id(records: list[dict]) -> dict[str, User]:
    return {r["id"]: User.model_validate(r) for r in records}


def _with_teacher(slot: Slot, users: dict[str, User]) -> SlotWithTeacher:
    teacher = users.get(slot.teacher_id)
    profile = teacher.public_profile() if teacher else UNKNOWN_TEACHER
    return SlotWithTeacher(**slot.model_dump(), teacher=profile)


def _with_details(
    appointment: Appointment, slots: dict[str, Slot], users: dict[str, User]
) -> AppointmentWithDetails:
    slot = slots.get(appointment.slot_id)
    return AppointmentWithDetails(
        **appointment.model_dump(),
        slot=slot,
        student=users.get(appointment.student_id),
        teacher=users.get(slot.teacher_id) if slot else None,
    )


class ScheduleQueries:
    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    def list_slots(self, filters: Union[SlotFilters, dict, None] = None) -> list[SlotWithTeacher]:
        """Slots in storage order, filtered and joined with their teacher's profile."""
        if filters is None:
            filters = SlotFilters()
        elif not isinstance(filters, SlotFilters):
            filters = SlotFilters.model_validate(filters)

        data = self.storage.load_all(USERS, SLOTS)
        slots = [Slot.model_validate(r) for r in data[SLOTS]]

        if filters.teacher_id:
            slots = [s for s in slots if s.teacher_id == filters.teacher_id]
        if filters.start_date:
            slots = [s for s in slots if s.start_iso >= filters.start_date]
        if filters.end_date:
            slots = [s for s in slots if s.start_iso <= filters.end_date]
        if filters.available:
            slots = [s for s in slots if s.available_seats > 0]

        users = _users_by_id(data[USERS])
        logger.debug("Listed %d slots", len(slots))
        return [_with_teacher(s, users) for s in slots]

    def get_slot_with_teacher(self, slot_id: str) -> SlotWithTeacher:
        data = self.storage.load_all(USERS, SLOTS)
        for record in data[SLOTS]:
            if record.get("id") == slot_id:
                return _with_teacher(Slot.model_validate(record), _users_by_id(data[USERS]))
        raise SlotNotFound(f"Slot '{slot_id}' not found.")

    def list_appointments_for_user(
        self, user_id: str, role: Role
    ) -> list[AppointmentWithDetails]:
        """All of a user's appointments in every status.

        Students see appointments they booked; teachers see appointments
        against any slot they own.
        """
        data = self.storage.load_all(USERS, SLOTS, APPOINTMENTS)
        slots = {r["id"]: Slot.model_validate(r) for r in data[SLOTS]}
        appointments = [Appointment.model_validate(r) for r in data[APPOINTMENTS]]

        if role == Role.STUDENT:
            selected = [a for a in appointments if a.student_id == user_id]
        else:
            owned = {sid for sid, s in slots.items() if s.teacher_id == user_id}
            selected = [a for a in appointments if a.slot_id in owned]

        users = _users_by_id(data[USERS])
        logger.debug("Listed %d appointments for %s (%s)", len(selected), user_id, role.value)
        return [_with_details(a, slots, users) for a in selected]

    def list_slot_appointments(self, slot_id: str) -> list[AppointmentWithDetails]:
        """Roster for one slot, every status included."""
        data = self.storage.load_all(USERS, SLOTS, APPOINTMENTS)
        slots = {r["id"]: Slot.model_validate(r) for r in data[SLOTS]}
        users = _users_by_id(data[USERS])
        return [
            _with_details(Appointment.model_validate(r), slots, users)
            for r in data[APPOINTMENTS]
            if r.get("slotId") == slot_id
        ]


def upcoming_and_past(
    appointments: list[AppointmentWithDetails], now: Timestamp
) -> tuple[list[AppointmentWithDetails], list[AppointmentWithDetails]]:
    """Split appointments on whether their slot has ended, each side sorted by start.

    Appointments whose slot is missing are treated as past.
    """
    now = parse_iso(now)
    upcoming = [a for a in appointments if a.slot is not None and not is_past(a.slot.end_iso, now)]
    past = [a for a in appointments if a.slot is None or is_past(a.slot.end_iso, now)]

    def start_key(a: AppointmentWithDetails) -> float:
        return a.slot.start_iso.timestamp() if a.slot else 0.0

    return sorted(upcoming, key=start_key), sorted(past, key=start_key, reverse=True)
