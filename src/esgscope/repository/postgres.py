"""
PostgreSQL storage backend.

Filter specifications are rendered to parameterized SQL with psycopg.sql.
Each commit runs inside one transaction; the unique index on upper(symbol)
turns concurrent duplicate inserts into a UniqueViolation, which is
surfaced as ConflictError.
"""

import logging
from typing import Any, Optional

import psycopg
from psycopg import sql
from psycopg.errors import UniqueViolation
from psycopg.rows import dict_row

from esgscope import db
from esgscope.errors import ConflictError, StorageError
from esgscope.repository.base import CommitResult, Operation, Store, TableSchema
from esgscope.repository.filters import Filter, FilterGroup, Spec

logger = logging.getLogger(__name__)

OPERATORS = {
    "eq": "=",
    "ne": "<>",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
}


def render_spec(spec: Spec) -> tuple[sql.Composable, list]:
    """
    Render a filter specification to a SQL condition and its parameters.

    Returns:
        (condition, params) suitable for cur.execute()
    """
    if isinstance(spec, Filter):
        column = sql.Identifier(spec.field)
        if spec.comparator == "ieq":
            return sql.SQL("upper({}) = upper(%s)").format(column), [spec.value]
        return (
            sql.SQL("{} {} %s").format(column, sql.SQL(OPERATORS[spec.comparator])),
            [spec.value],
        )

    if isinstance(spec, FilterGroup):
        if not spec.specs:
            return sql.SQL("TRUE" if spec.operator == "and" else "FALSE"), []
        parts, params = [], []
        for child in spec.specs:
            condition, child_params = render_spec(child)
            parts.append(condition)
            params.extend(child_params)
        joiner = sql.SQL(" AND " if spec.operator == "and" else " OR ")
        return sql.SQL("({})").format(joiner.join(parts)), params

    raise TypeError(f"Not a filter specification: {spec!r}")


class PostgresStore(Store):
    """Store backed by a PostgreSQL database via the db helpers."""

    def __init__(self, database_url: str | None = None):
        self.database_url = database_url

    def _select(self, schema: TableSchema, where: sql.Composable | None = None, params=None):
        query = sql.SQL("SELECT {} FROM {}").format(
            sql.SQL(", ").join(sql.Identifier(c) for c in schema.columns),
            sql.Identifier(schema.name),
        )
        if where is not None:
            query += sql.SQL(" WHERE ") + where
        query += sql.SQL(" ORDER BY {}").format(sql.Identifier(schema.id_column))
        return db.fetch_all(query, tuple(params or ()), database_url=self.database_url)

    def fetch_all(self, schema: TableSchema) -> list[dict]:
        return self._select(schema)

    def fetch_by_id(self, schema: TableSchema, entity_id: Any) -> Optional[dict]:
        rows = self._select(
            schema,
            sql.SQL("{} = %s").format(sql.Identifier(schema.id_column)),
            [entity_id],
        )
        return rows[0] if rows else None

    def select(self, schema: TableSchema, spec: Spec) -> list[dict]:
        condition, params = render_spec(spec)
        return self._select(schema, condition, params)

    def count(self, schema: TableSchema, spec: Optional[Spec] = None) -> int:
        query = sql.SQL("SELECT COUNT(*) AS n FROM {}").format(sql.Identifier(schema.name))
        params: list = []
        if spec is not None:
            condition, params = render_spec(spec)
            query += sql.SQL(" WHERE ") + condition
        row = db.fetch_one(query, tuple(params), database_url=self.database_url)
        return row["n"] if row else 0

    def commit(self, operations: list[Operation]) -> CommitResult:
        inserted_ids = []
        affected = 0
        try:
            with db.get_connection(self.database_url) as conn:
                with conn.transaction():
                    with conn.cursor(row_factory=dict_row) as cur:
                        for op in operations:
                            if op.kind == "insert":
                                cur.execute(*self._insert(op))
                                inserted_ids.append(cur.fetchone()[op.schema.id_column])
                            elif op.kind == "update":
                                cur.execute(*self._update(op))
                            elif op.kind == "delete":
                                cur.execute(*self._delete(op))
                            else:
                                raise StorageError(f"Unknown operation: {op.kind}")

                            if cur.rowcount == 0:
                                raise ConflictError(
                                    f"{op.schema.name} {op.row.get(op.schema.id_column)} "
                                    "no longer exists"
                                )
                            affected += cur.rowcount
        except UniqueViolation as e:
            raise ConflictError(f"Uniqueness constraint violated: {e}") from e
        except psycopg.Error as e:
            raise StorageError(f"Commit failed: {e}") from e

        logger.debug("PostgreSQL commit applied %d operation(s)", len(operations))
        return CommitResult(affected=affected, inserted_ids=inserted_ids)

    @staticmethod
    def _insert(op: Operation):
        columns = [c for c in op.schema.columns if c != op.schema.id_column]
        # Let the column default fill in values the entity does not carry
        columns = [c for c in columns if op.row.get(c) is not None]
        query = sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING {}").format(
            sql.Identifier(op.schema.name),
            sql.SQL(", ").join(sql.Identifier(c) for c in columns),
            sql.SQL(", ").join(sql.Placeholder() for _ in columns),
            sql.Identifier(op.schema.id_column),
        )
        return query, tuple(op.row[c] for c in columns)

    @staticmethod
    def _update(op: Operation):
        columns = [
            c
            for c in op.schema.columns
            if c != op.schema.id_column and c not in op.schema.insert_only
        ]
        query = sql.SQL("UPDATE {} SET {} WHERE {} = %s").format(
            sql.Identifier(op.schema.name),
            sql.SQL(", ").join(
                sql.SQL("{} = %s").format(sql.Identifier(c)) for c in columns
            ),
            sql.Identifier(op.schema.id_column),
        )
        params = tuple(op.row.get(c) for c in columns) + (op.row[op.schema.id_column],)
        return query, params

    @staticmethod
    def _delete(op: Operation):
        query = sql.SQL("DELETE FROM {} WHERE {} = %s").format(
            sql.Identifier(op.schema.name),
            sql.Identifier(op.schema.id_column),
        )
        return query, (op.row[op.schema.id_column],)
