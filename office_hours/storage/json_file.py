"""
Single-file JSON storage.

All collections live in one JSON document keyed by ``<prefix><name>``
(``uas_slots``, ``uas_appointments``, ...). Each commit writes a temporary
file next to the target and swaps it in with ``os.replace``, so a
multi-collection save is either fully visible or not at all.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Mapping, Union

from office_hours.errors import StorageUnavailable
from office_hours.storage.base import Record, Storage

logger = logging.getLogger(__name__)


class JsonFileStorage(Storage):
    def __init__(self, path: Union[str, Path], key_prefix: str = "uas_") -> None:
        self.path = Path(path)
        self.key_prefix = key_prefix

    def _key(self, name: str) -> str:
        return f"{self.key_prefix}{name}"

    def _read_document(self) -> dict[str, list[Record]]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                document = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageUnavailable(f"Cannot read {self.path}: {exc}") from exc
        if not isinstance(document, dict):
            raise StorageUnavailable(f"Unexpected document shape in {self.path}.")
        return document

    def _write_document(self, document: dict[str, list[Record]]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(document, fh, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageUnavailable(f"Cannot write {self.path}: {exc}") from exc

    def load(self, name: str) -> list[Record]:
        records = self._read_document().get(self._key(name), [])
        if not isinstance(records, list):
            raise StorageUnavailable(f"Collection '{name}' in {self.path} is not a list.")
        return records

    def save_many(self, collections: Mapping[str, list[Record]]) -> None:
        document = self._read_document()
        for name, records in collections.items():
            document[self._key(name)] = list(records)
        self._write_document(document)
        logger.debug("Wrote %s to %s", ", ".join(sorted(collections)), self.path)

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageUnavailable(f"Cannot remove {self.path}: {exc}") from exc
