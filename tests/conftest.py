"""Shared test fixtures and helpers."""

from datetime import datetime, timedelta, timezone

import pytest

from office_hours.config import ApiConfig, AppConfig
from office_hours.directory import UserDirectory
from office_hours.engine import BookingEngine
from office_hours.queries import ScheduleQueries
from office_hours.schemas.user_schema import Role, User
from office_hours.storage import MemoryStorage

NOW = datetime(2025, 11, 23, 10, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Callable clock that only moves when a test moves it."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def at(hour: int, minute: int = 0, day: int = 25) -> datetime:
    """A November 2025 timestamp in UTC."""
    return datetime(2025, 11, day, hour, minute, tzinfo=timezone.utc)


def make_user(user_id: str, role: Role, name: str = "") -> User:
    return User(
        id=user_id,
        name=name or user_id.title(),
        role=role,
        email=f"{user_id}@university.edu",
    )


@pytest.fixture
def storage():
    store = MemoryStorage()
    directory = UserDirectory(store)
    for student in ("alice", "bob", "carol", "dave"):
        directory.create_user(make_user(student, Role.STUDENT))
    for teacher in ("smith", "chen"):
        directory.create_user(make_user(teacher, Role.TEACHER))
    return store


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def engine(storage, clock):
    return BookingEngine(storage, clock=clock)


@pytest.fixture
def queries(storage):
    return ScheduleQueries(storage)


@pytest.fixture
def instant_config():
    return AppConfig(api=ApiConfig(network_delay_min_ms=0, network_delay_max_ms=0))


def seats_held_in(storage, slot_id: str) -> int:
    return sum(
        1 for a in storage.load("appointments")
        if a["slotId"] == slot_id and a["status"] in ("BOOKED", "ATTENDED")
    )


def assert_seat_invariant(storage) -> None:
    """availableSeats == maxSeats - seat-holding appointments, and within bounds."""
    for slot in storage.load("slots"):
        assert 0 <= slot["availableSeats"] <= slot["maxSeats"]
        assert slot["availableSeats"] == slot["maxSeats"] - seats_held_in(storage, slot["id"])
