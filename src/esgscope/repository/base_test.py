"""
Tests for UnitOfWorkRepository staging and commit semantics.

Uses a minimal entity so the generic behavior is tested independently
of Company.

Run with: pytest src/esgscope/repository/base_test.py -v
"""
from dataclasses import dataclass
from typing import Optional
from unittest.mock import MagicMock

import pytest

from esgscope.errors import ConflictError, StorageError, ValidationError
from esgscope.repository.base import (
    CommitResult,
    EntityMapper,
    TableSchema,
    UnitOfWorkRepository,
)
from esgscope.repository.filters import Filter
from esgscope.repository.memory import InMemoryStore


@dataclass
class Widget:
    code: str
    size: int = 0
    id: Optional[int] = None


WIDGET_SCHEMA = TableSchema(name="widgets", columns=("id", "code", "size"), unique_ci=("code",))

WIDGET_MAPPER = EntityMapper(
    schema=WIDGET_SCHEMA,
    to_row=lambda w: {"id": w.id, "code": w.code, "size": w.size},
    from_row=lambda row: Widget(**row),
)


@pytest.fixture
def widget_store():
    return InMemoryStore()


@pytest.fixture
def widgets(widget_store):
    return UnitOfWorkRepository(widget_store, WIDGET_MAPPER)


def other(store) -> UnitOfWorkRepository:
    """A second, independent unit of work over the same store."""
    return UnitOfWorkRepository(store, WIDGET_MAPPER)


class TestStaging:
    """Staged operations stay invisible until save_changes()"""

    def test_add_is_invisible_until_commit(self, widgets, widget_store):
        widget = widgets.add(Widget("A"))

        assert widget.id is None
        assert widgets.count() == 0
        assert other(widget_store).get_all() == []
        assert widgets.pending == 1

        assert widgets.save_changes() == 1

        assert widget.id == 1
        assert other(widget_store).get_by_id(1) == Widget("A", 0, 1)
        assert widgets.pending == 0

    def test_update_is_invisible_until_commit(self, widgets, widget_store):
        widgets.add(Widget("A", size=1))
        widgets.save_changes()

        loaded = widgets.get_by_id(1)
        loaded.size = 99
        widgets.update(loaded)

        assert other(widget_store).get_by_id(1).size == 1
        widgets.save_changes()
        assert other(widget_store).get_by_id(1).size == 99

    def test_returned_entities_are_detached(self, widgets):
        widgets.add(Widget("A", size=1))
        widgets.save_changes()

        # Mutating a loaded entity without update() + save_changes() has no effect
        widgets.get_by_id(1).size = 50
        assert widgets.get_by_id(1).size == 1

    def test_delete_range(self, widgets):
        widgets.add_range([Widget("A"), Widget("B"), Widget("C")])
        widgets.save_changes()

        widgets.delete_range(widgets.find(Filter("code", "ne", "B")))
        assert widgets.count() == 3
        assert widgets.save_changes() == 2
        assert [w.code for w in widgets.get_all()] == ["B"]

    def test_delete_of_staged_insert_cancels_it(self, widgets):
        widget = widgets.add(Widget("A"))
        widgets.delete(widget)

        assert widgets.pending == 0
        assert widgets.save_changes() == 0

    def test_delete_without_id_raises(self, widgets):
        with pytest.raises(ValidationError):
            widgets.delete(Widget("A"))

    def test_update_without_id_raises(self, widgets):
        with pytest.raises(ValidationError):
            widgets.update(Widget("A"))

    def test_add_with_id_raises(self, widgets):
        with pytest.raises(ValidationError):
            widgets.add(Widget("A", id=5))

    def test_discard_changes(self, widgets):
        widgets.add(Widget("A"))
        widgets.discard_changes()
        assert widgets.save_changes() == 0
        assert widgets.count() == 0


class TestSaveChanges:
    """Atomicity of save_changes()"""

    def test_failed_commit_writes_nothing(self, widgets, widget_store):
        widgets.add(Widget("A"))
        widgets.save_changes()

        fresh = widgets.add(Widget("B"))
        widgets.add(Widget("a"))  # duplicate of "A", case-insensitive

        with pytest.raises(ConflictError):
            widgets.save_changes()

        assert [w.code for w in other(widget_store).get_all()] == ["A"]
        assert fresh.id is None
        # Staged operations are kept so the caller can fix and retry
        assert widgets.pending == 2

    def test_concurrent_units_of_work_conflict_at_commit(self, widget_store):
        first, second = other(widget_store), other(widget_store)
        first.add(Widget("DUP"))
        second.add(Widget("dup"))

        first.save_changes()
        with pytest.raises(ConflictError):
            second.save_changes()

        assert first.count() == 1

    def test_storage_error_propagates(self, widgets):
        store = MagicMock()
        store.commit.side_effect = StorageError("disk full")
        repo = UnitOfWorkRepository(store, WIDGET_MAPPER)
        widget = repo.add(Widget("A"))

        with pytest.raises(StorageError, match="disk full"):
            repo.save_changes()
        assert widget.id is None

    def test_ids_assigned_in_insert_order(self):
        store = MagicMock()
        store.commit.return_value = CommitResult(affected=2, inserted_ids=[10, 11])
        repo = UnitOfWorkRepository(store, WIDGET_MAPPER)
        a, b = repo.add_range([Widget("A"), Widget("B")])

        assert repo.save_changes() == 2
        assert (a.id, b.id) == (10, 11)

    def test_nothing_staged_does_not_touch_store(self):
        store = MagicMock()
        repo = UnitOfWorkRepository(store, WIDGET_MAPPER)

        assert repo.save_changes() == 0
        store.commit.assert_not_called()


class TestQueries:
    """Tests for find(), first_or_default(), exists() and count()"""

    @pytest.fixture(autouse=True)
    def seed_widgets(self, widgets):
        widgets.add_range([Widget("A", 3), Widget("B", 1), Widget("C", 3)])
        widgets.save_changes()

    def test_find(self, widgets):
        assert [w.code for w in widgets.find(Filter("size", "eq", 3))] == ["A", "C"]

    def test_first_or_default(self, widgets):
        assert widgets.first_or_default(Filter("size", "eq", 3)).code == "A"
        assert widgets.first_or_default(Filter("size", "gt", 10)) is None

    def test_exists(self, widgets):
        assert widgets.exists(Filter("code", "ieq", "b")) is True
        assert widgets.exists(Filter("code", "eq", "Z")) is False

    @pytest.mark.parametrize("spec,expected", [
        (None, 3),
        (Filter("size", "eq", 3), 2),
        (Filter("size", "lt", 0), 0),
    ])
    def test_count(self, widgets, spec, expected):
        assert widgets.count(spec) == expected

    def test_get_by_id_missing_returns_none(self, widgets):
        assert widgets.get_by_id(999) is None

    def test_unknown_field_raises(self, widgets):
        with pytest.raises(ValidationError, match="colour"):
            widgets.find(Filter("colour", "eq", "red"))
