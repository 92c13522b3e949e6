"""
Storage Services Package

Provides the abstract record store and its implementations.
The in-memory store backs tests and local use; Google Sheets is the
shared backend. Both are swappable behind RecordStore.
"""

from contabil.services.storage.interface import (
    Collection,
    ConnectionError,
    DuplicateError,
    NotFoundError,
    Record,
    RecordStore,
    StorageError,
)
from contabil.services.storage.memory import InMemoryRecordStore
from contabil.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
)

__all__ = [
    # Interface
    "Collection",
    "Record",
    "RecordStore",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemoryRecordStore",
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
]
