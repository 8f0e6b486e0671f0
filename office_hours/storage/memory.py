"""In-process storage, used by tests and the default configuration."""

import copy
import logging
from typing import Mapping

from office_hours.errors import StorageUnavailable
from office_hours.storage.base import Record, Storage

logger = logging.getLogger(__name__)


class MemoryStorage(Storage):
    """Dict-backed storage.

    ``fail_reads`` / ``fail_writes`` make the store behave like a disabled
    or full medium.
    """

    def __init__(self) -> None:
        self._collections: dict[str, list[Record]] = {}
        self.fail_reads = False
        self.fail_writes = False

    def load(self, name: str) -> list[Record]:
        if self.fail_reads:
            raise StorageUnavailable(f"Storage rejected read of '{name}'.")
        return copy.deepcopy(self._collections.get(name, []))

    def save_many(self, collections: Mapping[str, list[Record]]) -> None:
        if self.fail_writes:
            raise StorageUnavailable(
                f"Storage rejected write of {sorted(collections)}."
            )
        staged = {name: copy.deepcopy(list(records)) for name, records in collections.items()}
        self._collections.update(staged)
        logger.debug("Saved collections: %s", ", ".join(sorted(staged)))

    def clear(self) -> None:
        self._collections.clear()
