"""
Repositories: Data Access Layer

The generic ``Repository[T]`` contract, its unit-of-work implementation,
filter specifications, and the storage backends they commit to.

Repositories answer "how do I get or store this data?". Business rules
(symbol uniqueness checks before writes, analysis) live in services.
"""

from esgscope.config import config
from esgscope.repository.base import (
    EntityMapper,
    Repository,
    Store,
    TableSchema,
    UnitOfWorkRepository,
)
from esgscope.repository.filters import Filter, FilterGroup, all_of, any_of
from esgscope.repository.memory import InMemoryStore

_default_store: Store | None = None


def create_store(backend: str | None = None) -> Store:
    """Build a new store for the given (or configured) backend name."""
    backend = (backend or config.storage_backend).lower()
    if backend == "memory":
        return InMemoryStore()
    if backend == "postgres":
        from esgscope.repository.postgres import PostgresStore

        return PostgresStore(config.database_url)
    raise ValueError(f"Unknown storage backend: {backend}. Valid: ['memory', 'postgres']")


def get_store() -> Store:
    """Process-wide store shared by every unit of work."""
    global _default_store
    if _default_store is None:
        _default_store = create_store()
    return _default_store


def set_store(store: Store | None) -> None:
    """Replace (or with None, reset) the process-wide store."""
    global _default_store
    _default_store = store


__all__ = [
    "EntityMapper",
    "Filter",
    "FilterGroup",
    "InMemoryStore",
    "Repository",
    "Store",
    "TableSchema",
    "UnitOfWorkRepository",
    "all_of",
    "any_of",
    "create_store",
    "get_store",
    "set_store",
]
