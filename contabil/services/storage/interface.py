"""
Abstract Record Store Interface

DESIGN DECISION: The core never reaches into global state. Every
component receives a RecordStore in its constructor. This allows us to:
1. Move from Google Sheets to a database without touching the engines
2. Run every test against an in-memory store
3. Keep business logic decoupled from storage implementation

The interface is intentionally generic: collections of JSON-compatible
dicts keyed by "id", returned in insertion order. Components convert
records to and from the pydantic models themselves.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional


Record = dict[str, Any]


class Collection(str, Enum):
    """Record collections known to the core."""
    CLIENTS = "clients"
    DOCUMENTS = "documents"
    ENTRIES = "entries"
    TRANSACTIONS = "transactions"
    TAX_PERIODS = "tax_periods"
    MONTH_CLOSES = "month_closes"
    AUDIT_LOGS = "audit_logs"


class RecordStore(ABC):
    """
    Abstract interface for record storage.

    Any storage implementation (in-memory, Google Sheets, SQL...)
    must implement these methods. Failures raise StorageError
    subclasses; the core does not retry.
    """

    @abstractmethod
    def get_all(self, collection: Collection) -> list[Record]:
        """
        List every record of a collection.

        Returns:
            Records in insertion order (updates keep their position)
        """
        pass

    @abstractmethod
    def get(self, collection: Collection, record_id: str) -> Optional[Record]:
        """
        Retrieve a record by its id.

        Returns:
            The record if found, None otherwise
        """
        pass

    @abstractmethod
    def save(self, collection: Collection, record: Record) -> None:
        """
        Insert or replace a record, keyed by record["id"].

        Raises:
            StorageError: If the record has no id or the write fails
        """
        pass

    @abstractmethod
    def append(self, collection: Collection, record: Record) -> None:
        """
        Append a record to an append-only collection (the audit log).

        Raises:
            DuplicateError: If a record with the same id already exists
            StorageError: If the write fails
        """
        pass


def record_id(record: Record) -> str:
    """Extract a record's id, rejecting records without one."""
    value = record.get("id")
    if not value:
        raise StorageError("Record has no id")
    return str(value)


class StorageError(Exception):
    """Base exception for record store failures."""
    pass


class NotFoundError(StorageError):
    """A referenced record does not exist."""
    pass


class DuplicateError(StorageError):
    """An append-only collection already holds the id."""
    pass


class ConnectionError(StorageError):
    """The backend could not be reached; safe to retry."""
    pass
