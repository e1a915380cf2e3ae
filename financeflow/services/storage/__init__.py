"""
Storage Services Package

Provides the abstract record store interface and concrete implementations.
JSON documents are the default backend, but the store is swappable.
"""

from financeflow.services.storage.interface import (
    ConnectionError,
    DuplicateError,
    NotFoundError,
    RecordPredicate,
    RecordStore,
    StorageError,
)
from financeflow.services.storage.json_file import JsonFileRecordStore
from financeflow.services.storage.memory import InMemoryRecordStore

__all__ = [
    # Interface
    "RecordPredicate",
    "RecordStore",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemoryRecordStore",
    "JsonFileRecordStore",
]
