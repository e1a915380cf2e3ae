"""
Abstract Record Store Interface

DESIGN DECISION: The ledger talks to storage through a small,
capability-based interface. This allows us to:
1. Keep records in JSON documents today and a table store later
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

The interface is intentionally simple - we're not building an ORM.
Five record kinds, create/read/update/delete, and a count.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional
from uuid import UUID

from pydantic import BaseModel, ValidationError

from financeflow.models.finance import RECORD_MODELS, Record, RecordKind


RecordPredicate = Callable[[Record], bool]


class RecordStore(ABC):
    """
    Abstract interface for record storage operations.

    Any storage implementation (JSON files, SQLite, etc.)
    must implement these methods.
    """

    @abstractmethod
    def list(self, kind: RecordKind) -> list[Record]:
        """
        List all records of a kind.

        Operations are returned newest first; every other kind
        keeps insertion order.

        Raises:
            StorageError: If the store cannot be read
        """
        pass

    @abstractmethod
    def insert(self, kind: RecordKind, record: Record) -> bool:
        """
        Insert a new record.

        Returns:
            True if saved successfully

        Raises:
            DuplicateError: If a record with the same id exists
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def update(self, kind: RecordKind, record_id: UUID, fields: dict[str, Any]) -> Record:
        """
        Apply a partial update to an existing record.

        The merged record is re-validated through its model.
        The id itself can never change.

        Returns:
            The updated record

        Raises:
            NotFoundError: If the record doesn't exist
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, kind: RecordKind, record_id: UUID) -> bool:
        """
        Delete a record by id.

        Returns:
            True if a record was deleted, False if none matched
        """
        pass

    @abstractmethod
    def count_by(
        self,
        kind: RecordKind,
        predicate: Optional[RecordPredicate] = None,
    ) -> int:
        """Count records of a kind, optionally only those matching predicate."""
        pass

    @abstractmethod
    def clear(self, kind: Optional[RecordKind] = None) -> None:
        """Remove every record of one kind, or of all kinds."""
        pass


def order_records(kind: RecordKind, records: Iterable[Record]) -> list[Record]:
    """Apply the listing order of the store contract."""
    records = list(records)
    if kind == RecordKind.OPERATIONS:
        # sorted() is stable, so same-date operations keep insertion order
        records.sort(key=lambda op: op.date, reverse=True)
    return records


def merge_fields(kind: RecordKind, record: BaseModel, fields: dict[str, Any]) -> Record:
    """
    Merge a partial update into a record and re-validate it.

    Raises:
        StorageError: If the update touches the id or produces an invalid record
    """
    if "id" in fields and fields["id"] != record.id:
        raise StorageError(f"Record id is immutable: {record.id}")

    model = RECORD_MODELS[kind]
    unknown = set(fields) - set(model.model_fields)
    if unknown:
        raise StorageError(f"Unknown fields for {kind.value}: {sorted(unknown)}")

    try:
        return model.model_validate({**record.model_dump(), **fields})
    except ValidationError as e:
        raise StorageError(f"Invalid update for {kind.value}: {e}") from e


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not reach the storage backend."""
    pass
