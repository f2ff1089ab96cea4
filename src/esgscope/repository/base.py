"""
Generic repository with unit-of-work semantics.

``Repository[T]`` is the contract every entity repository implements.
``UnitOfWorkRepository[T]`` is the concrete implementation: mutations are
staged in memory and only reach the ``Store`` when ``save_changes()`` commits
them, all at once, in a single atomic operation.

Entity specific knowledge (table, columns, row conversion) lives in an
``EntityMapper``; the repository itself knows nothing about any one entity.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

from esgscope.errors import ValidationError
from esgscope.repository.filters import Spec, fields_of

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# Storage contract
# =============================================================================


@dataclass(frozen=True)
class TableSchema:
    """
    Storage layout of one entity type.

    Args:
        name: Table (or collection) name
        columns: All column names, id included
        id_column: Column holding the store-assigned identity
        insert_only: Columns written on insert and never on update
        unique_ci: Columns that must be unique, compared case-insensitively
    """

    name: str
    columns: tuple
    id_column: str = "id"
    insert_only: tuple = ()
    unique_ci: tuple = ()

    def validate_spec(self, spec: Spec) -> None:
        unknown = fields_of(spec) - set(self.columns)
        if unknown:
            name = sorted(unknown)[0]
            raise ValidationError(f"Unknown filter field: {name}", parameter=name)


@dataclass
class Operation:
    """A staged insert, update or delete of a single row."""

    kind: str
    schema: TableSchema
    row: dict


@dataclass
class CommitResult:
    affected: int
    inserted_ids: list = field(default_factory=list)


class Store(ABC):
    """Storage backend. Rows are plain dicts keyed by column name."""

    @abstractmethod
    def fetch_all(self, schema: TableSchema) -> list[dict]:
        """All rows in natural (ascending id) order."""

    @abstractmethod
    def fetch_by_id(self, schema: TableSchema, entity_id: Any) -> Optional[dict]:
        """A single row, or None."""

    @abstractmethod
    def select(self, schema: TableSchema, spec: Spec) -> list[dict]:
        """Rows matching a filter specification, in natural order."""

    @abstractmethod
    def count(self, schema: TableSchema, spec: Optional[Spec] = None) -> int:
        """Number of rows, optionally restricted to a specification."""

    @abstractmethod
    def commit(self, operations: list[Operation]) -> CommitResult:
        """
        Apply operations atomically.

        Either every operation is applied or none is. Raises ConflictError
        when a uniqueness constraint is violated and StorageError for any
        other backend failure.
        """


# =============================================================================
# Repository contract
# =============================================================================


class Repository(ABC, Generic[T]):
    """CRUD and specification queries over a single entity type."""

    @abstractmethod
    def get_all(self) -> list[T]: ...

    @abstractmethod
    def get_by_id(self, entity_id: int) -> Optional[T]: ...

    @abstractmethod
    def find(self, spec: Spec) -> list[T]: ...

    @abstractmethod
    def first_or_default(self, spec: Spec) -> Optional[T]: ...

    @abstractmethod
    def add(self, entity: T) -> T: ...

    @abstractmethod
    def add_range(self, entities: Iterable[T]) -> list[T]: ...

    @abstractmethod
    def update(self, entity: T) -> None: ...

    @abstractmethod
    def delete(self, entity: T) -> None: ...

    @abstractmethod
    def delete_range(self, entities: Iterable[T]) -> None: ...

    @abstractmethod
    def save_changes(self) -> int: ...

    @abstractmethod
    def exists(self, spec: Spec) -> bool: ...

    @abstractmethod
    def count(self, spec: Optional[Spec] = None) -> int: ...


@dataclass(frozen=True)
class EntityMapper(Generic[T]):
    """Converts between entities of type T and store rows."""

    schema: TableSchema
    to_row: Callable[[T], dict]
    from_row: Callable[[dict], T]

    def get_id(self, entity: T) -> Any:
        return getattr(entity, self.schema.id_column)

    def set_id(self, entity: T, entity_id: Any) -> None:
        setattr(entity, self.schema.id_column, entity_id)


# =============================================================================
# Unit-of-work implementation
# =============================================================================


class UnitOfWorkRepository(Repository[T]):
    """
    Repository that stages mutations until save_changes().

    Reads always go to the store, so staged changes are invisible to
    everyone (this instance included) until they are committed.
    One instance is one unit of work; do not share it between callers.
    """

    def __init__(self, store: Store, mapper: EntityMapper[T]):
        self.store = store
        self.mapper = mapper
        self._staged: list[tuple[str, T]] = []

    @property
    def schema(self) -> TableSchema:
        return self.mapper.schema

    @property
    def pending(self) -> int:
        """Number of staged operations awaiting save_changes()."""
        return len(self._staged)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_all(self) -> list[T]:
        return [self.mapper.from_row(row) for row in self.store.fetch_all(self.schema)]

    def get_by_id(self, entity_id: int) -> Optional[T]:
        row = self.store.fetch_by_id(self.schema, entity_id)
        return self.mapper.from_row(row) if row is not None else None

    def find(self, spec: Spec) -> list[T]:
        self.schema.validate_spec(spec)
        return [self.mapper.from_row(row) for row in self.store.select(self.schema, spec)]

    def first_or_default(self, spec: Spec) -> Optional[T]:
        # "First" is the store's natural order (ascending id)
        matches = self.find(spec)
        return matches[0] if matches else None

    def exists(self, spec: Spec) -> bool:
        return self.count(spec) > 0

    def count(self, spec: Optional[Spec] = None) -> int:
        if spec is not None:
            self.schema.validate_spec(spec)
        return self.store.count(self.schema, spec)

    # -------------------------------------------------------------------------
    # Staging
    # -------------------------------------------------------------------------

    def add(self, entity: T) -> T:
        if self.mapper.get_id(entity) is not None:
            raise ValidationError("Cannot add an entity that already has an id")
        self._staged.append(("insert", entity))
        return entity

    def add_range(self, entities: Iterable[T]) -> list[T]:
        return [self.add(entity) for entity in entities]

    def update(self, entity: T) -> None:
        self._require_id(entity, "update")
        self._staged.append(("update", entity))

    def delete(self, entity: T) -> None:
        if self.mapper.get_id(entity) is None:
            # Deleting a never-committed entity simply cancels its insert
            before = len(self._staged)
            self._staged = [
                (kind, staged)
                for kind, staged in self._staged
                if not (kind == "insert" and staged is entity)
            ]
            if len(self._staged) == before:
                raise ValidationError("Cannot delete an entity without an id")
            return
        self._staged.append(("delete", entity))

    def delete_range(self, entities: Iterable[T]) -> None:
        for entity in entities:
            self.delete(entity)

    def discard_changes(self) -> None:
        """Drop every staged operation without touching the store."""
        self._staged.clear()

    def save_changes(self) -> int:
        """
        Commit all staged operations as one atomic unit.

        Returns:
            Number of affected entities

        Raises:
            ConflictError: a uniqueness constraint was violated; nothing
                was written and the staged operations are kept
            StorageError: any other backend failure, same guarantees
        """
        if not self._staged:
            return 0

        operations = [
            Operation(kind=kind, schema=self.schema, row=self.mapper.to_row(entity))
            for kind, entity in self._staged
        ]
        result = self.store.commit(operations)

        # Identities become visible on the entities only after a successful commit
        inserted = [entity for kind, entity in self._staged if kind == "insert"]
        for entity, entity_id in zip(inserted, result.inserted_ids):
            self.mapper.set_id(entity, entity_id)

        logger.debug(
            "Committed %d operation(s) on %s, %d row(s) affected",
            len(operations),
            self.schema.name,
            result.affected,
        )
        self._staged.clear()
        return result.affected

    def _require_id(self, entity: T, action: str) -> None:
        if self.mapper.get_id(entity) is None:
            raise ValidationError(f"Cannot {action} an entity without an id")
