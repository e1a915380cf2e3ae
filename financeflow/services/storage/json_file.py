"""
JSON Document Storage Implementation

DESIGN DECISION: Records are kept as one JSON document per record kind
(`accounts.json`, `operations.json`, ...) in a data directory because:
1. Users can open and back up their data with any text editor
2. No database setup required
3. Easy to export/migrate later

TRADEOFFS:
- Every write rewrites the whole document (fine for personal use)
- No transactions across kinds (the ledger orders its writes carefully)
- Filtering happens in Python

Writes go to a temporary file that then replaces the document, so a
failed write never leaves a half-written file behind.

The implementation follows the abstract interface, so we can swap
to SQLite later without changing business logic.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Union
from uuid import UUID

import structlog
from pydantic import ValidationError

from financeflow.models.finance import RECORD_MODELS, Record, RecordKind
from financeflow.services.storage.interface import (
    ConnectionError,
    DuplicateError,
    NotFoundError,
    RecordPredicate,
    RecordStore,
    StorageError,
    merge_fields,
    order_records,
)


logger = structlog.get_logger(__name__)


class JsonFileRecordStore(RecordStore):
    """
    JSON-file implementation of the record store.

    Each document holds a JSON list of records serialized with
    pydantic's JSON mode (Decimals and UUIDs as strings, dates in ISO).
    """

    def __init__(self, data_dir: Union[str, Path]):
        self._data_dir = Path(data_dir)
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConnectionError(f"Cannot use data directory {self._data_dir}: {e}") from e

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, kind: RecordKind) -> Path:
        return self._data_dir / f"{kind.value}.json"

    def _read_rows(self, kind: RecordKind) -> list[dict]:
        """Read the raw rows of a document. A missing document is empty."""
        path = self.path_for(kind)
        if not path.exists():
            return []
        try:
            with path.open("r", encoding="utf-8") as fh:
                rows = json.load(fh)
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read {path.name}: {e}") from e
        if not isinstance(rows, list):
            raise StorageError(f"Malformed document {path.name}: expected a list")
        return rows

    def _entries(self, kind: RecordKind) -> list[tuple[dict, Optional[Record]]]:
        """
        Pair every raw row with its parsed record.

        Malformed rows are logged and paired with None. Writes carry
        them through untouched, so they stay in the document for the
        user to repair.
        """
        model = RECORD_MODELS[kind]
        entries = []
        for index, row in enumerate(self._read_rows(kind)):
            try:
                entries.append((row, model.model_validate(row)))
            except ValidationError as e:
                logger.warning(
                    "malformed_row_skipped",
                    kind=kind.value,
                    row_index=index,
                    error=str(e),
                )
                entries.append((row, None))
        return entries

    def _load(self, kind: RecordKind) -> list[Record]:
        return [record for _, record in self._entries(kind) if record is not None]

    def _write(self, kind: RecordKind, rows: list[Any]) -> None:
        path = self.path_for(kind)
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self._data_dir, prefix=f".{kind.value}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(rows, fh, ensure_ascii=False, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write {path.name}: {e}") from e

    def list(self, kind: RecordKind) -> list[Record]:
        return order_records(kind, self._load(kind))

    def insert(self, kind: RecordKind, record: Record) -> bool:
        entries = self._entries(kind)
        if any(existing is not None and existing.id == record.id for _, existing in entries):
            raise DuplicateError(f"{kind.value} record already exists: {record.id}")
        rows = [row for row, _ in entries]
        rows.append(record.model_dump(mode="json"))
        self._write(kind, rows)
        return True

    def update(self, kind: RecordKind, record_id: UUID, fields: dict[str, Any]) -> Record:
        entries = self._entries(kind)
        for idx, (_, existing) in enumerate(entries):
            if existing is not None and existing.id == record_id:
                updated = merge_fields(kind, existing, fields)
                rows = [row for row, _ in entries]
                rows[idx] = updated.model_dump(mode="json")
                self._write(kind, rows)
                return updated
        raise NotFoundError(f"{kind.value} record not found: {record_id}")

    def delete(self, kind: RecordKind, record_id: UUID) -> bool:
        entries = self._entries(kind)
        remaining = [
            row for row, record in entries
            if record is None or record.id != record_id
        ]
        if len(remaining) == len(entries):
            return False
        self._write(kind, remaining)
        return True

    def count_by(
        self,
        kind: RecordKind,
        predicate: Optional[RecordPredicate] = None,
    ) -> int:
        records = self._load(kind)
        if predicate is None:
            return len(records)
        return sum(1 for record in records if predicate(record))

    def clear(self, kind: Optional[RecordKind] = None) -> None:
        kinds = [kind] if kind else RecordKind
        for k in kinds:
            self._write(k, [])
