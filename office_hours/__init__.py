from office_hours.api import MockApi
from office_hours.directory import UserDirectory
from office_hours.engine import BookingEngine
from office_hours.errors import BookingError
from office_hours.queries import ScheduleQueries
from office_hours.storage import JsonFileStorage, MemoryStorage, build_storage

__all__ = [
    "BookingEngine",
    "BookingError",
    "UserDirectory",
    "ScheduleQueries",
    "MockApi",
    "MemoryStorage",
    "JsonFileStorage",
    "build_storage",
]
