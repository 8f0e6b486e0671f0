"""Tests for slot creation, editing, and deletion."""

import pytest

from office_hours.errors import (
    InvalidSeatCount,
    InvalidTeacher,
    InvalidTimeRange,
    NotAuthorized,
    OverlappingSlot,
    SlotHasBookings,
    SlotNotFound,
)
from office_hours.schemas.slot_schema import SlotUpdate
from tests.conftest import assert_seat_invariant, at


class TestCreateSlot:
    def test_new_slot_has_all_seats_available(self, engine):
        slot = engine.create_slot("smith", at(10), at(11), "Room 301", max_seats=3)
        assert slot.teacher_id == "smith"
        assert slot.max_seats == 3
        assert slot.available_seats == 3
        assert slot.id.startswith("SLT-")

    def test_slot_is_persisted_with_camel_case_fields(self, engine, storage):
        slot = engine.create_slot("smith", at(10), at(11), "Room 301", max_seats=1)
        record = storage.load("slots")[0]
        assert record["id"] == slot.id
        assert record["teacherId"] == "smith"
        assert record["maxSeats"] == 1
        assert record["availableSeats"] == 1
        assert "startISO" in record and "endISO" in record

    def test_accepts_iso_strings(self, engine):
        slot = engine.create_slot("smith", "2025-11-25T10:00:00Z", "2025-11-25T11:00:00Z", "Room", 1)
        assert slot.start_iso == at(10)

    def test_student_cannot_create_slot(self, engine):
        with pytest.raises(InvalidTeacher):
            engine.create_slot("alice", at(10), at(11), "Room", 1)

    def test_unknown_teacher(self, engine):
        with pytest.raises(InvalidTeacher):
            engine.create_slot("nobody", at(10), at(11), "Room", 1)

    def test_end_before_start(self, engine):
        with pytest.raises(InvalidTimeRange):
            engine.create_slot("smith", at(11), at(10), "Room", 1)

    def test_zero_length_range(self, engine):
        with pytest.raises(InvalidTimeRange):
            engine.create_slot("smith", at(10), at(10), "Room", 1)

    def test_zero_seats(self, engine):
        with pytest.raises(InvalidSeatCount):
            engine.create_slot("smith", at(10), at(11), "Room", 0)

    def test_seats_above_limit(self, engine):
        with pytest.raises(InvalidSeatCount):
            engine.create_slot("smith", at(10), at(11), "Room", engine.policy.max_seats_limit + 1)

    @pytest.mark.parametrize("seats", [1.5, "3", True, None])
    def test_non_integer_seats(self, engine, seats):
        with pytest.raises(InvalidSeatCount, match="whole number"):
            engine.create_slot("smith", at(10), at(11), "Room", seats)

    def test_overlapping_slot_same_teacher(self, engine):
        engine.create_slot("smith", at(10), at(11), "Room", 1)
        with pytest.raises(OverlappingSlot):
            engine.create_slot("smith", at(10, 30), at(11, 30), "Room", 1)

    def test_touching_slots_same_teacher(self, engine):
        engine.create_slot("smith", at(10), at(11), "Room", 1)
        slot = engine.create_slot("smith", at(11), at(12), "Room", 1)
        assert slot.start_iso == at(11)

    def test_identical_slot_other_teacher(self, engine):
        engine.create_slot("smith", at(10), at(11), "Room", 1)
        slot = engine.create_slot("chen", at(10), at(11), "Room", 1)
        assert slot.teacher_id == "chen"

    def test_rejected_create_writes_nothing(self, engine, storage):
        engine.create_slot("smith", at(10), at(11), "Room", 1)
        with pytest.raises(OverlappingSlot):
            engine.create_slot("smith", at(9), at(12), "Room", 1)
        assert len(storage.load("slots")) == 1


class TestUpdateSlot:
    @pytest.fixture(autouse=True)
    def _slot(self, engine):
        self.slot = engine.create_slot("smith", at(10), at(11), "Room 301", max_seats=2)

    def test_missing_slot(self, engine):
        with pytest.raises(SlotNotFound):
            engine.update_slot("SLT-MISSING", {"location": "x"})

    def test_change_location(self, engine):
        updated = engine.update_slot(self.slot.id, {"location": "Room 404"})
        assert updated.location == "Room 404"
        assert engine.get_slot(self.slot.id).location == "Room 404"

    def test_change_time_without_bookings(self, engine):
        updated = engine.update_slot(self.slot.id, SlotUpdate(start_iso=at(13), end_iso=at(14)))
        assert updated.start_iso == at(13)
        assert updated.end_iso == at(14)

    def test_accepts_camel_case_update(self, engine):
        updated = engine.update_slot(self.slot.id, {"endISO": "2025-11-25T11:30:00Z"})
        assert updated.end_iso == at(11, 30)

    def test_time_change_blocked_by_booking(self, engine):
        engine.book_appointment(self.slot.id, "alice")
        with pytest.raises(SlotHasBookings):
            engine.update_slot(self.slot.id, {"start_iso": at(9)})

    def test_location_change_allowed_with_booking(self, engine):
        engine.book_appointment(self.slot.id, "alice")
        updated = engine.update_slot(self.slot.id, {"location": "Library"})
        assert updated.location == "Library"

    def test_time_change_allowed_after_cancellation(self, engine):
        appt = engine.book_appointment(self.slot.id, "alice")
        engine.cancel_appointment(appt.id, "alice")
        updated = engine.update_slot(self.slot.id, {"start_iso": at(9)})
        assert updated.start_iso == at(9)

    def test_invalid_time_range_on_update(self, engine):
        with pytest.raises(InvalidTimeRange):
            engine.update_slot(self.slot.id, {"end_iso": at(9)})

    def test_update_skips_overlap_check(self, engine):
        other = engine.create_slot("smith", at(12), at(13), "Room", 1)
        updated = engine.update_slot(other.id, {"start_iso": at(10, 30)})
        assert updated.start_iso == at(10, 30)

    def test_raise_capacity_adds_free_seats(self, engine, storage):
        engine.book_appointment(self.slot.id, "alice")
        updated = engine.update_slot(self.slot.id, {"max_seats": 5})
        assert updated.max_seats == 5
        assert updated.available_seats == 4
        assert_seat_invariant(storage)

    def test_lower_capacity_to_booked_count(self, engine, storage):
        engine.book_appointment(self.slot.id, "alice")
        updated = engine.update_slot(self.slot.id, {"max_seats": 1})
        assert updated.available_seats == 0
        assert_seat_invariant(storage)

    def test_lower_capacity_below_booked_count(self, engine):
        engine.book_appointment(self.slot.id, "alice")
        engine.book_appointment(self.slot.id, "bob")
        with pytest.raises(InvalidSeatCount):
            engine.update_slot(self.slot.id, {"max_seats": 1})

    def test_attended_seats_count_against_capacity(self, engine):
        first = engine.book_appointment(self.slot.id, "alice")
        engine.mark_attended(first.id)
        engine.book_appointment(self.slot.id, "bob")
        with pytest.raises(InvalidSeatCount):
            engine.update_slot(self.slot.id, {"max_seats": 1})

    def test_reassign_teacher_without_bookings(self, engine):
        updated = engine.update_slot(self.slot.id, {"teacher_id": "chen"})
        assert updated.teacher_id == "chen"

    def test_reassign_to_student_rejected(self, engine):
        with pytest.raises(InvalidTeacher):
            engine.update_slot(self.slot.id, {"teacher_id": "alice"})

    def test_reassign_blocked_by_booking(self, engine):
        engine.book_appointment(self.slot.id, "alice")
        with pytest.raises(SlotHasBookings):
            engine.update_slot(self.slot.id, {"teacher_id": "chen"})

    def test_other_teacher_cannot_edit(self, engine):
        with pytest.raises(NotAuthorized):
            engine.update_slot(self.slot.id, {"location": "x"}, acting_user_id="chen")

    def test_unknown_field_rejected(self, engine):
        with pytest.raises(ValueError):
            engine.update_slot(self.slot.id, {"availableSeats": 99})


class TestDeleteSlot:
    def test_delete_unbooked_slot(self, engine, storage):
        slot = engine.create_slot("smith", at(10), at(11), "Room", 1)
        engine.delete_slot(slot.id)
        assert storage.load("slots") == []

    def test_delete_missing_slot(self, engine):
        with pytest.raises(SlotNotFound):
            engine.delete_slot("SLT-MISSING")

    def test_delete_blocked_by_booking(self, engine):
        slot = engine.create_slot("smith", at(10), at(11), "Room", 1)
        engine.book_appointment(slot.id, "alice")
        with pytest.raises(SlotHasBookings):
            engine.delete_slot(slot.id)

    def test_delete_after_attendance(self, engine, storage):
        slot = engine.create_slot("smith", at(10), at(11), "Room", 1)
        appt = engine.book_appointment(slot.id, "alice")
        engine.mark_attended(appt.id)
        engine.delete_slot(slot.id)
        assert storage.load("slots") == []
        assert len(storage.load("appointments")) == 1

    def test_other_teacher_cannot_delete(self, engine):
        slot = engine.create_slot("smith", at(10), at(11), "Room", 1)
        with pytest.raises(NotAuthorized):
            engine.delete_slot(slot.id, acting_user_id="chen")
