"""
In-memory record store.

Used by tests and by the default "memory" backend. Records are deep
copied on the way in and out so callers can never mutate stored state
by accident.
"""

import copy
from typing import Optional

from contabil.services.storage.interface import (
    Collection,
    DuplicateError,
    Record,
    RecordStore,
    record_id,
)


class InMemoryRecordStore(RecordStore):
    """Dict-of-dicts store; Python dicts keep insertion order."""

    def __init__(self, seed: Optional[dict[Collection, list[Record]]] = None):
        self._data: dict[Collection, dict[str, Record]] = {
            collection: {} for collection in Collection
        }
        for collection, records in (seed or {}).items():
            for record in records:
                self.save(collection, record)

    def get_all(self, collection: Collection) -> list[Record]:
        return [copy.deepcopy(r) for r in self._data[collection].values()]

    def get(self, collection: Collection, record_id_: str) -> Optional[Record]:
        record = self._data[collection].get(record_id_)
        return copy.deepcopy(record) if record is not None else None

    def save(self, collection: Collection, record: Record) -> None:
        self._data[collection][record_id(record)] = copy.deepcopy(record)

    def append(self, collection: Collection, record: Record) -> None:
        key = record_id(record)
        if key in self._data[collection]:
            raise DuplicateError(f"{collection.value} already has a record {key}")
        self._data[collection][key] = copy.deepcopy(record)

    def count(self, collection: Collection) -> int:
        return len(self._data[collection])
