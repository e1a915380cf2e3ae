"""
In-Memory Record Store

Holds records in plain dicts keyed by id. Nothing survives the
process; used by the test suite and by `backend=memory` runs.
"""

from typing import Any, Optional
from uuid import UUID

from financeflow.models.finance import Record, RecordKind
from financeflow.services.storage.interface import (
    DuplicateError,
    NotFoundError,
    RecordPredicate,
    RecordStore,
    merge_fields,
    order_records,
)


class InMemoryRecordStore(RecordStore):
    """Dict-backed implementation of the record store."""

    def __init__(self):
        self._records: dict[RecordKind, dict[UUID, Record]] = {
            kind: {} for kind in RecordKind
        }

    def list(self, kind: RecordKind) -> list[Record]:
        records = [record.model_copy(deep=True) for record in self._records[kind].values()]
        return order_records(kind, records)

    def insert(self, kind: RecordKind, record: Record) -> bool:
        if record.id in self._records[kind]:
            raise DuplicateError(f"{kind.value} record already exists: {record.id}")
        self._records[kind][record.id] = record.model_copy(deep=True)
        return True

    def update(self, kind: RecordKind, record_id: UUID, fields: dict[str, Any]) -> Record:
        current = self._records[kind].get(record_id)
        if current is None:
            raise NotFoundError(f"{kind.value} record not found: {record_id}")
        updated = merge_fields(kind, current, fields)
        self._records[kind][record_id] = updated
        return updated.model_copy(deep=True)

    def delete(self, kind: RecordKind, record_id: UUID) -> bool:
        return self._records[kind].pop(record_id, None) is not None

    def count_by(
        self,
        kind: RecordKind,
        predicate: Optional[RecordPredicate] = None,
    ) -> int:
        records = self._records[kind].values()
        if predicate is None:
            return len(records)
        return sum(1 for record in records if predicate(record))

    def clear(self, kind: Optional[RecordKind] = None) -> None:
        kinds = [kind] if kind else list(RecordKind)
        for k in kinds:
            self._records[k].clear()
