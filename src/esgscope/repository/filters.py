"""
Filter specifications.

Queries against a repository are described with plain value objects rather
than callables, so every storage backend can translate them its own way:
the in-memory store evaluates them against rows, the PostgreSQL store
renders them to SQL.

    spec = Filter("esg_score", "gte", 70) & Filter("risk_level", "ieq", "low")
"""

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Union

from esgscope.errors import ValidationError


def _fold(value: Any) -> Any:
    return value.upper() if isinstance(value, str) else value


COMPARATORS: dict[str, Callable[[Any, Any], bool]] = {
    "eq": lambda left, right: left == right,
    "ieq": lambda left, right: _fold(left) == _fold(right),
    "ne": lambda left, right: left != right,
    "gt": lambda left, right: left is not None and left > right,
    "gte": lambda left, right: left is not None and left >= right,
    "lt": lambda left, right: left is not None and left < right,
    "lte": lambda left, right: left is not None and left <= right,
}


class _Composable:
    def __and__(self, other: "Spec") -> "FilterGroup":
        return all_of(self, other)

    def __or__(self, other: "Spec") -> "FilterGroup":
        return any_of(self, other)


@dataclass(frozen=True)
class Filter(_Composable):
    """A single ``field <comparator> value`` condition."""

    field: str
    comparator: str
    value: Any

    def __post_init__(self):
        if self.comparator not in COMPARATORS:
            raise ValidationError(
                f"Unknown comparator: {self.comparator}. Valid: {list(COMPARATORS)}"
            )

    def matches(self, row: Mapping[str, Any]) -> bool:
        if self.field not in row:
            raise ValidationError(f"Unknown filter field: {self.field}", parameter=self.field)
        return COMPARATORS[self.comparator](row[self.field], self.value)


@dataclass(frozen=True)
class FilterGroup(_Composable):
    """A conjunction (``and``) or disjunction (``or``) of specifications."""

    operator: str
    specs: tuple

    def __post_init__(self):
        if self.operator not in ("and", "or"):
            raise ValidationError(f"Unknown filter operator: {self.operator}")

    def matches(self, row: Mapping[str, Any]) -> bool:
        results = (spec.matches(row) for spec in self.specs)
        # An empty group matches everything for "and" and nothing for "or"
        return all(results) if self.operator == "and" else any(results)


Spec = Union[Filter, FilterGroup]


def all_of(*specs: Spec) -> FilterGroup:
    return FilterGroup("and", tuple(specs))


def any_of(*specs: Spec) -> FilterGroup:
    return FilterGroup("or", tuple(specs))


def fields_of(spec: Spec) -> set[str]:
    """Collect every field name referenced by a specification."""
    if isinstance(spec, Filter):
        return {spec.field}
    names = set()
    for child in spec.specs:
        names |= fields_of(child)
    return names
