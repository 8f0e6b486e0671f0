from typing import Optional

from office_hours.config import StorageConfig, settings
from office_hours.storage.base import APPOINTMENTS, COLLECTIONS, SLOTS, USERS, Storage
from office_hours.storage.json_file import JsonFileStorage
from office_hours.storage.memory import MemoryStorage


def build_storage(config: Optional[StorageConfig] = None) -> Storage:
    """Create the storage backend selected in configuration."""
    config = config or settings.storage
    if config.backend == "json":
        return JsonFileStorage(config.data_path, key_prefix=config.key_prefix)
    return MemoryStorage()


__all__ = [
    "Storage",
    "MemoryStorage",
    "JsonFileStorage",
    "build_storage",
    "USERS",
    "SLOTS",
    "APPOINTMENTS",
    "COLLECTIONS",
]
