"""Services package."""

from contabil.services.storage import (
    Collection,
    ConnectionError,
    DuplicateError,
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    InMemoryRecordStore,
    NotFoundError,
    Record,
    RecordStore,
    StorageError,
)

__all__ = [
    # Storage services
    "Collection",
    "ConnectionError",
    "DuplicateError",
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
    "InMemoryRecordStore",
    "NotFoundError",
    "Record",
    "RecordStore",
    "StorageError",
]
