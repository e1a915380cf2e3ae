"""Services package."""

from financeflow.services.storage import (
    ConnectionError,
    DuplicateError,
    InMemoryRecordStore,
    JsonFileRecordStore,
    NotFoundError,
    RecordStore,
    StorageError,
)

__all__ = [
    "ConnectionError",
    "DuplicateError",
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "NotFoundError",
    "RecordStore",
    "StorageError",
]
