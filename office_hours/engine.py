"""
Booking engine: slot capacity, overlap, and lead-time rules.

Every operation reads all the collections it needs up front, validates
in a fixed order (first failing rule wins), and then commits every
touched collection with a single ``save_many`` call. Operations never
suspend between that read and that write, which is what keeps
``availableSeats == maxSeats - <BOOKED or ATTENDED appointments>`` true
after each call.

Usage:
    engine = BookingEngine(MemoryStorage(), clock=lambda: frozen_now)
    slot = engine.create_slot("teacher1", start, end, "Room 301", max_seats=2)
    appt = engine.book_appointment(slot.id, "student1", notes="project review")
    engine.cancel_appointment(appt.id, acting_user_id="student1")
"""

from datetime import datetime
from typing import Callable, Optional, Union

from office_hours.clock import (
    Timestamp,
    is_booking_allowed,
    is_cancellation_allowed,
    parse_iso,
    ranges_overlap,
    utc_now,
)
from office_hours.config import PolicyConfig, settings
from office_hours.directory import require_role
from office_hours.errors import (
    AppointmentNotFound,
    ConflictingAppointment,
    InvalidNotes,
    InvalidSeatCount,
    InvalidTimeRange,
    NotAuthorized,
    OverlappingSlot,
    SlotFull,
    SlotHasBookings,
    SlotNotFound,
    TooLateToBook,
    TooLateToCancel,
)
from office_hours.lifecycle import LifecycleTrigger, next_status
from office_hours.logging_context import get_session_logger
from office_hours.schemas.appointment_schema import Appointment, AppointmentStatus
from office_hours.schemas.slot_schema import Slot, SlotUpdate
from office_hours.schemas.user_schema import Role
from office_hours.storage import APPOINTMENTS, SLOTS, USERS, Storage
from office_hours.utils import new_id

logger = get_session_logger(__name__)

SEAT_HOLDING = (AppointmentStatus.BOOKED.value, AppointmentStatus.ATTENDED.value)


def _index_of(records: list[dict], record_id: str) -> int:
    for i, record in enumerate(records):
        if record.get("id") == record_id:
            return i
    return -1


def booked_count(appointments: list[dict], slot_id: str) -> int:
    """Number of BOOKED appointments in ``slot_id``; these block time edits and deletion."""
    return sum(
        1 for a in appointments
        if a.get("slotId") == slot_id and a.get("status") == AppointmentStatus.BOOKED.value
    )


def seats_held(appointments: list[dict], slot_id: str) -> int:
    """Seats consumed in ``slot_id``: BOOKED plus ATTENDED appointments."""
    return sum(
        1 for a in appointments
        if a.get("slotId") == slot_id and a.get("status") in SEAT_HOLDING
    )


class BookingEngine:
    """
    Enforces slot and appointment invariants over a ``Storage``.

    Args:
        storage: Backend holding the users, slots, and appointments collections.
        clock: Zero-argument callable returning the current time. Read once per
            operation unless ``now`` is passed explicitly.
        policy: Booking/cancellation windows and limits; defaults to settings.
    """

    def __init__(
        self,
        storage: Storage,
        clock: Optional[Callable[[], datetime]] = None,
        policy: Optional[PolicyConfig] = None,
    ) -> None:
        self.storage = storage
        self.clock = clock or utc_now
        self.policy = policy or settings.policy

    def _resolve_now(self, now: Optional[Timestamp]) -> datetime:
        return parse_iso(now if now is not None else self.clock())

    def _validate_seats(self, max_seats: int) -> None:
        if isinstance(max_seats, bool) or not isinstance(max_seats, int):
            raise InvalidSeatCount(f"Seats must be a whole number, got {max_seats!r}.")
        if max_seats < 1 or max_seats > self.policy.max_seats_limit:
            raise InvalidSeatCount(
                f"Seats must be between 1 and {self.policy.max_seats_limit}, got {max_seats}."
            )

    # --- Reads ---

    def get_slot(self, slot_id: str) -> Slot:
        slots = self.storage.load(SLOTS)
        idx = _index_of(slots, slot_id)
        if idx == -1:
            raise SlotNotFound(f"Slot '{slot_id}' not found.")
        return Slot.model_validate(slots[idx])

    def get_appointment(self, appointment_id: str) -> Appointment:
        appointments = self.storage.load(APPOINTMENTS)
        idx = _index_of(appointments, appointment_id)
        if idx == -1:
            raise AppointmentNotFound(f"Appointment '{appointment_id}' not found.")
        return Appointment.model_validate(appointments[idx])

    # --- Slots ---

    def create_slot(
        self,
        teacher_id: str,
        start_iso: Timestamp,
        end_iso: Timestamp,
        location: str,
        max_seats: int,
    ) -> Slot:
        """Publish a new slot for ``teacher_id`` with every seat available.

        Raises:
            InvalidTeacher, InvalidTimeRange, InvalidSeatCount, OverlappingSlot
        """
        data = self.storage.load_all(USERS, SLOTS)
        require_role(data[USERS], teacher_id, Role.TEACHER)

        start, end = parse_iso(start_iso), parse_iso(end_iso)
        if end <= start:
            raise InvalidTimeRange("End time must be after start time.")
        self._validate_seats(max_seats)

        slots = data[SLOTS]
        for record in slots:
            if record.get("teacherId") != teacher_id:
                continue
            if ranges_overlap(record["startISO"], record["endISO"], start, end):
                raise OverlappingSlot(
                    f"This slot overlaps with existing slot '{record['id']}'."
                )

        slot = Slot(
            id=new_id("SLT"),
            teacher_id=teacher_id,
            start_iso=start,
            end_iso=end,
            location=location.strip(),
            max_seats=max_seats,
            available_seats=max_seats,
        )
        slots.append(slot.to_record())
        self.storage.save_many({SLOTS: slots})
        logger.info("Slot created: %s for %s at %s", slot.id, teacher_id, slot.start_iso.isoformat())
        return slot

    def update_slot(
        self,
        slot_id: str,
        updates: Union[SlotUpdate, dict],
        acting_user_id: Optional[str] = None,
    ) -> Slot:
        """Edit a slot.

        Time fields and ownership are frozen while any BOOKED appointment
        references the slot. Capacity may change but never below the number
        of seats already taken. Unlike ``create_slot``, edits are not checked
        for overlap against the teacher's other slots.

        Raises:
            SlotNotFound, NotAuthorized, SlotHasBookings, InvalidTimeRange,
            InvalidSeatCount, InvalidTeacher
        """
        if not isinstance(updates, SlotUpdate):
            updates = SlotUpdate.model_validate(updates)

        data = self.storage.load_all(USERS, SLOTS, APPOINTMENTS)
        slots = data[SLOTS]
        idx = _index_of(slots, slot_id)
        if idx == -1:
            raise SlotNotFound(f"Slot '{slot_id}' not found.")
        slot = Slot.model_validate(slots[idx])

        if acting_user_id is not None and acting_user_id != slot.teacher_id:
            raise NotAuthorized("Only the owning teacher can edit this slot.")

        booked = booked_count(data[APPOINTMENTS], slot_id)
        if booked and updates.changes_time:
            raise SlotHasBookings("Cannot change time of a slot that has bookings.")

        changes: dict = {}

        if updates.teacher_id is not None and updates.teacher_id != slot.teacher_id:
            if booked:
                raise SlotHasBookings("Cannot reassign a slot that has bookings.")
            require_role(data[USERS], updates.teacher_id, Role.TEACHER)
            changes["teacher_id"] = updates.teacher_id

        start = updates.start_iso or slot.start_iso
        end = updates.end_iso or slot.end_iso
        if end <= start:
            raise InvalidTimeRange("End time must be after start time.")
        changes["start_iso"] = start
        changes["end_iso"] = end

        if updates.max_seats is not None:
            self._validate_seats(updates.max_seats)
            held = seats_held(data[APPOINTMENTS], slot_id)
            if updates.max_seats < held:
                raise InvalidSeatCount(
                    f"Cannot reduce seats to {updates.max_seats}; {held} already taken."
                )
            changes["max_seats"] = updates.max_seats
            changes["available_seats"] = slot.available_seats + (updates.max_seats - slot.max_seats)

        if updates.location is not None:
            changes["location"] = updates.location.strip()

        slot = slot.model_copy(update=changes)
        slots[idx] = slot.to_record()
        self.storage.save_many({SLOTS: slots})
        logger.info("Slot updated: %s", slot_id)
        return slot

    def delete_slot(self, slot_id: str, acting_user_id: Optional[str] = None) -> None:
        """Remove a slot with no BOOKED appointments.

        Cancelled and attended appointments for the slot are kept as history.

        Raises:
            SlotNotFound, NotAuthorized, SlotHasBookings
        """
        data = self.storage.load_all(SLOTS, APPOINTMENTS)
        slots = data[SLOTS]
        idx = _index_of(slots, slot_id)
        if idx == -1:
            raise SlotNotFound(f"Slot '{slot_id}' not found.")

        if acting_user_id is not None and acting_user_id != slots[idx].get("teacherId"):
            raise NotAuthorized("Only the owning teacher can delete this slot.")

        if booked_count(data[APPOINTMENTS], slot_id):
            raise SlotHasBookings("Cannot delete a slot that has bookings.")

        del slots[idx]
        self.storage.save_many({SLOTS: slots})
        logger.info("Slot deleted: %s", slot_id)

    # --- Appointments ---

    def book_appointment(
        self,
        slot_id: str,
        student_id: str,
        notes: Optional[str] = None,
        now: Optional[Timestamp] = None,
    ) -> Appointment:
        """Reserve one seat in ``slot_id`` for ``student_id``.

        Checks run in this order: student role, slot exists, a seat is free,
        the booking window has not closed, and the student holds no
        overlapping BOOKED appointment. The appointment and the seat
        decrement are committed together.

        Raises:
            InvalidStudent, SlotNotFound, SlotFull, TooLateToBook,
            ConflictingAppointment, InvalidNotes
        """
        now = self._resolve_now(now)
        data = self.storage.load_all(USERS, SLOTS, APPOINTMENTS)
        require_role(data[USERS], student_id, Role.STUDENT)

        slots = data[SLOTS]
        idx = _index_of(slots, slot_id)
        if idx == -1:
            raise SlotNotFound(f"Slot '{slot_id}' not found.")
        slot = Slot.model_validate(slots[idx])

        if slot.available_seats <= 0:
            raise SlotFull("This slot is fully booked.")

        if not is_booking_allowed(slot.start_iso, now, self.policy.booking_window_hours):
            raise TooLateToBook(
                "Cannot book appointments less than "
                f"{self.policy.booking_window_hours:g} hour(s) before start time."
            )

        appointments = data[APPOINTMENTS]
        slots_by_id = {record["id"]: record for record in slots}
        for record in appointments:
            if record.get("studentId") != student_id:
                continue
            if record.get("status") != AppointmentStatus.BOOKED.value:
                continue
            other = slots_by_id.get(record.get("slotId"))
            if other and ranges_overlap(slot.start_iso, slot.end_iso, other["startISO"], other["endISO"]):
                raise ConflictingAppointment("You have a conflicting appointment at this time.")

        cleaned = notes.strip() if notes else ""
        if len(cleaned) > self.policy.max_notes_length:
            raise InvalidNotes(
                f"Notes must be at most {self.policy.max_notes_length} characters."
            )

        appointment = Appointment(
            id=new_id("APT"),
            slot_id=slot_id,
            student_id=student_id,
            status=AppointmentStatus.BOOKED,
            notes=cleaned or None,
            created_at=now,
        )
        appointments.append(appointment.to_record())
        slots[idx] = slot.model_copy(update={"available_seats": slot.available_seats - 1}).to_record()

        self.storage.save_many({APPOINTMENTS: appointments, SLOTS: slots})
        logger.info(
            "Appointment booked: %s (slot %s, student %s, %d seat(s) left)",
            appointment.id, slot_id, student_id, slot.available_seats - 1,
        )
        return appointment

    def cancel_appointment(
        self,
        appointment_id: str,
        acting_user_id: str,
        now: Optional[Timestamp] = None,
    ) -> Appointment:
        """Cancel a BOOKED appointment and release its seat.

        The booking student may cancel only outside the cancellation window;
        the slot's teacher may cancel at any time.

        Raises:
            AppointmentNotFound, SlotNotFound, NotAuthorized, TooLateToCancel,
            InvalidStateTransition
        """
        now = self._resolve_now(now)
        data = self.storage.load_all(SLOTS, APPOINTMENTS)

        appointments = data[APPOINTMENTS]
        a_idx = _index_of(appointments, appointment_id)
        if a_idx == -1:
            raise AppointmentNotFound(f"Appointment '{appointment_id}' not found.")
        appointment = Appointment.model_validate(appointments[a_idx])

        slots = data[SLOTS]
        s_idx = _index_of(slots, appointment.slot_id)
        if s_idx == -1:
            # Only finished appointments outlive their slot.
            next_status(appointment.status, LifecycleTrigger.CANCEL)
            raise SlotNotFound(f"Associated slot '{appointment.slot_id}' not found.")
        slot = Slot.model_validate(slots[s_idx])

        is_student = acting_user_id == appointment.student_id
        is_teacher = acting_user_id == slot.teacher_id
        if not (is_student or is_teacher):
            raise NotAuthorized("You are not authorized to cancel this appointment.")

        in_window = not is_cancellation_allowed(
            slot.start_iso, now, self.policy.cancellation_window_hours
        )
        if is_student and in_window:
            raise TooLateToCancel(
                "Cannot cancel within "
                f"{self.policy.cancellation_window_hours:g} hours of appointment time."
            )

        status = next_status(appointment.status, LifecycleTrigger.CANCEL)

        appointment = appointment.model_copy(update={"status": status, "cancelled_at": now})
        appointments[a_idx] = appointment.to_record()
        seats = min(slot.max_seats, slot.available_seats + 1)
        slots[s_idx] = slot.model_copy(update={"available_seats": seats}).to_record()

        self.storage.save_many({APPOINTMENTS: appointments, SLOTS: slots})
        if is_teacher and in_window:
            logger.warning(
                "Teacher override: %s cancelled %s inside the cancellation window",
                acting_user_id, appointment_id,
            )
        logger.info("Appointment cancelled: %s by %s", appointment_id, acting_user_id)
        return appointment

    def mark_attended(
        self, appointment_id: str, acting_user_id: Optional[str] = None
    ) -> Appointment:
        """Record that a BOOKED appointment took place. The seat stays consumed.

        Raises:
            AppointmentNotFound, SlotNotFound, NotAuthorized, InvalidStateTransition
        """
        data = self.storage.load_all(SLOTS, APPOINTMENTS)
        appointments = data[APPOINTMENTS]
        idx = _index_of(appointments, appointment_id)
        if idx == -1:
            raise AppointmentNotFound(f"Appointment '{appointment_id}' not found.")
        appointment = Appointment.model_validate(appointments[idx])

        s_idx = _index_of(data[SLOTS], appointment.slot_id)
        if s_idx == -1:
            next_status(appointment.status, LifecycleTrigger.ATTEND)
            raise SlotNotFound(f"Associated slot '{appointment.slot_id}' not found.")

        if acting_user_id is not None and acting_user_id != data[SLOTS][s_idx].get("teacherId"):
            raise NotAuthorized("Only the slot's teacher can mark attendance.")

        status = next_status(appointment.status, LifecycleTrigger.ATTEND)
        appointment = appointment.model_copy(update={"status": status})
        appointments[idx] = appointment.to_record()

        self.storage.save_many({APPOINTMENTS: appointments})
        logger.info("Appointment attended: %s", appointment_id)
        return appointment
