"""
In-memory storage backend.

Keeps tables as dicts of rows keyed by id. Commits are applied to a working
copy of the affected tables and swapped in only once every operation and
uniqueness check has succeeded, so a failed commit leaves no trace.
"""

import copy
import logging
import threading
from typing import Any, Optional

from esgscope.errors import ConflictError, StorageError
from esgscope.repository.base import CommitResult, Operation, Store, TableSchema
from esgscope.repository.filters import Spec

logger = logging.getLogger(__name__)


class InMemoryStore(Store):
    """Thread-safe dict-backed store with commit-time unique constraints."""

    def __init__(self):
        self._tables: dict[str, dict[Any, dict]] = {}
        self._next_ids: dict[str, int] = {}
        self._lock = threading.Lock()

    def _rows(self, schema: TableSchema) -> list[dict]:
        with self._lock:
            table = self._tables.get(schema.name, {})
            # Ids are handed out in increasing order, so dict order is id order
            return [dict(row) for row in table.values()]

    def fetch_all(self, schema: TableSchema) -> list[dict]:
        return self._rows(schema)

    def fetch_by_id(self, schema: TableSchema, entity_id: Any) -> Optional[dict]:
        with self._lock:
            row = self._tables.get(schema.name, {}).get(entity_id)
            return dict(row) if row is not None else None

    def select(self, schema: TableSchema, spec: Spec) -> list[dict]:
        return [row for row in self._rows(schema) if spec.matches(row)]

    def count(self, schema: TableSchema, spec: Optional[Spec] = None) -> int:
        if spec is None:
            with self._lock:
                return len(self._tables.get(schema.name, {}))
        return len(self.select(schema, spec))

    def commit(self, operations: list[Operation]) -> CommitResult:
        with self._lock:
            tables = {
                name: copy.deepcopy(self._tables.get(name, {}))
                for name in {op.schema.name for op in operations}
            }
            next_ids = dict(self._next_ids)
            inserted_ids = []

            for op in operations:
                table = tables[op.schema.name]
                id_column = op.schema.id_column
                if op.kind == "insert":
                    new_id = next_ids.get(op.schema.name, 1)
                    next_ids[op.schema.name] = new_id + 1
                    row = {column: op.row.get(column) for column in op.schema.columns}
                    row[id_column] = new_id
                    table[new_id] = row
                    inserted_ids.append(new_id)
                elif op.kind == "update":
                    existing = table.get(op.row[id_column])
                    if existing is None:
                        raise ConflictError(
                            f"{op.schema.name} {op.row[id_column]} no longer exists"
                        )
                    for column in op.schema.columns:
                        if column == id_column or column in op.schema.insert_only:
                            continue
                        existing[column] = op.row.get(column)
                elif op.kind == "delete":
                    if table.pop(op.row[id_column], None) is None:
                        raise ConflictError(
                            f"{op.schema.name} {op.row[id_column]} no longer exists"
                        )
                else:
                    raise StorageError(f"Unknown operation: {op.kind}")

            for op in {op.schema.name: op for op in operations}.values():
                self._check_unique(op.schema, tables[op.schema.name])

            self._tables.update(tables)
            self._next_ids = next_ids

        logger.debug("In-memory commit applied %d operation(s)", len(operations))
        return CommitResult(affected=len(operations), inserted_ids=inserted_ids)

    @staticmethod
    def _check_unique(schema: TableSchema, table: dict[Any, dict]) -> None:
        for column in schema.unique_ci:
            seen: dict[str, Any] = {}
            for entity_id, row in table.items():
                value = row.get(column)
                if value is None:
                    continue
                key = str(value).upper()
                if key in seen:
                    raise ConflictError(
                        f"Duplicate {column} '{value}' in {schema.name} "
                        f"(already used by id {seen[key]})"
                    )
                seen[key] = entity_id
