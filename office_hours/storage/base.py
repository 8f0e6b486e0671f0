"""
Storage contract for named record collections.

The engine only ever calls ``load`` and ``save_many``; a missing
collection reads as an empty list so first-run bootstrap needs no schema.
"""

import logging
from abc import ABC, abstractmethod
from typing import Mapping

logger = logging.getLogger(__name__)

USERS = "users"
SLOTS = "slots"
APPOINTMENTS = "appointments"

COLLECTIONS = (USERS, SLOTS, APPOINTMENTS)

Record = dict


class Storage(ABC):
    """Key-value store of ordered record lists."""

    @abstractmethod
    def load(self, name: str) -> list[Record]:
        """Return a copy of the named collection, ``[]`` if it was never written.

        Raises:
            StorageUnavailable: If the medium rejects the read.
        """

    @abstractmethod
    def save_many(self, collections: Mapping[str, list[Record]]) -> None:
        """Replace several collections as one logical write.

        Raises:
            StorageUnavailable: If the medium rejects the write. No collection
                is changed in that case.
        """

    @abstractmethod
    def clear(self) -> None:
        """Drop every collection."""

    def save(self, name: str, records: list[Record]) -> None:
        self.save_many({name: records})

    def load_all(self, *names: str) -> dict[str, list[Record]]:
        """Read every named collection up front, before any write happens."""
        return {name: self.load(name) for name in names}
