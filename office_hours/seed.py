"""
Demo data: a handful of students and teachers with two weeks of slots.

Everything is created through the directory and engine, so the seeded
seat counts obey the same invariants as live bookings. Slot dates are
relative to the ``now`` passed in.
"""

import logging
from datetime import timedelta

from office_hours.clock import Timestamp, combine_date_time, days_from_now, parse_iso
from office_hours.directory import UserDirectory
from office_hours.engine import BookingEngine
from office_hours.schemas.user_schema import Role, User
from office_hours.storage import SLOTS, USERS, Storage

logger = logging.getLogger(__name__)

DEMO_USERS: list[dict] = [
    {"id": "student1", "name": "Alice Johnson", "role": Role.STUDENT,
     "email": "alice.johnson@university.edu", "phone": "+1-555-0101"},
    {"id": "student2", "name": "Bob Martinez", "role": Role.STUDENT,
     "email": "bob.martinez@university.edu", "phone": "+1-555-0102"},
    {"id": "student3", "name": "Carol Wang", "role": Role.STUDENT,
     "email": "carol.wang@university.edu", "phone": "+1-555-0103"},
    {"id": "teacher1", "name": "Dr. Robert Smith", "role": Role.TEACHER,
     "email": "robert.smith@university.edu", "phone": "+1-555-0201"},
    {"id": "teacher2", "name": "Prof. Emily Chen", "role": Role.TEACHER,
     "email": "emily.chen@university.edu", "phone": "+1-555-0202"},
]

# (teacher, days ahead, [(start, end)], location, seats)
DEMO_SCHEDULE: list[tuple[str, int, list[tuple[str, str]], str, int]] = [
    ("teacher1", 1, [("10:00", "11:00"), ("14:00", "15:00")], "Room 301, Engineering Building", 1),
    ("teacher1", 2, [("11:00", "12:00"), ("15:00", "16:00")], "Room 301, Engineering Building", 1),
    ("teacher1", 3, [("10:00", "11:00"), ("13:00", "14:00")], "Room 301, Engineering Building", 1),
    ("teacher1", 8, [("10:00", "11:00"), ("14:00", "15:00")], "Room 301, Engineering Building", 1),
    ("teacher1", 9, [("11:00", "12:00"), ("15:00", "16:00")], "Room 301, Engineering Building", 1),
    ("teacher2", 1, [("09:00", "10:00"), ("14:00", "15:00")], "Room 205, Science Hall", 3),
    ("teacher2", 2, [("10:00", "11:00"), ("13:00", "14:00")], "Room 205, Science Hall", 2),
    ("teacher2", 4, [("09:00", "10:00"), ("11:00", "12:00")], "Room 205, Science Hall", 3),
    ("teacher2", 8, [("09:00", "10:00"), ("14:00", "15:00")], "Room 205, Science Hall", 3),
    ("teacher2", 11, [("10:00", "11:00"), ("13:00", "14:00")], "Room 205, Science Hall", 2),
]

# (student, teacher, days ahead, start, notes, booked hours before now)
DEMO_BOOKINGS: list[tuple[str, str, int, str, str, int]] = [
    ("student1", "teacher1", 1, "14:00",
     "I would like to discuss my final project proposal and get feedback on my research direction.", 24),
    ("student2", "teacher2", 2, "10:00",
     "Need help with calculus homework problem set 5.", 12),
    ("student3", "teacher2", 2, "10:00",
     "Same as Bob - working on problem set 5 together.", 6),
]


def is_seeded(storage: Storage) -> bool:
    return bool(storage.load(USERS))


def seed_demo_data(storage: Storage, now: Timestamp) -> dict[str, int]:
    """Populate an empty store. Returns counts of created records."""
    now = parse_iso(now)
    directory = UserDirectory(storage)
    engine = BookingEngine(storage, clock=lambda: now)

    for user in DEMO_USERS:
        directory.create_user(User(**user))

    slot_ids: dict[tuple[str, int, str], str] = {}
    for teacher_id, days, times, location, seats in DEMO_SCHEDULE:
        day = days_from_now(days, now).date()
        for start, end in times:
            slot = engine.create_slot(
                teacher_id,
                combine_date_time(day, start),
                combine_date_time(day, end),
                location,
                seats,
            )
            slot_ids[(teacher_id, days, start)] = slot.id

    for student_id, teacher_id, days, start, notes, hours_ago in DEMO_BOOKINGS:
        engine.book_appointment(
            slot_ids[(teacher_id, days, start)],
            student_id,
            notes=notes,
            now=now - timedelta(hours=hours_ago),
        )

    counts = {
        "users": len(DEMO_USERS),
        "slots": len(storage.load(SLOTS)),
        "appointments": len(DEMO_BOOKINGS),
    }
    logger.info("Seeded %(users)d users, %(slots)d slots, %(appointments)d appointments", counts)
    return counts
