from decimal import Decimal
from typing import Iterable, List, Optional

from esgscope.company.model import Company
from esgscope.repository import get_store
from esgscope.repository.base import (
    EntityMapper,
    Repository,
    Store,
    TableSchema,
    UnitOfWorkRepository,
)
from esgscope.repository.filters import Filter, Spec

ESG_PERFORMER_THRESHOLD = Decimal("70")

COMPANY_SCHEMA = TableSchema(
    name="companies",
    columns=(
        "id",
        "name",
        "symbol",
        "industry",
        "sector",
        "country",
        "risk_level",
        "market_cap",
        "revenue",
        "esg_score",
        "created_at",
        "ai_analysis",
        "investment_recommendation",
    ),
    insert_only=("created_at",),
    unique_ci=("symbol",),
)


def _company_to_row(company: Company) -> dict:
    return {column: getattr(company, column) for column in COMPANY_SCHEMA.columns}


def _row_to_company(row: dict) -> Company:
    values = dict(row)
    for column in ("market_cap", "revenue", "esg_score"):
        if values.get(column) is not None:
            values[column] = Decimal(str(values[column]))
    return Company(**values)


COMPANY_MAPPER = EntityMapper(
    schema=COMPANY_SCHEMA,
    to_row=_company_to_row,
    from_row=_row_to_company,
)


def _average(values: List[Decimal]) -> Decimal:
    # Empty datasets average to zero rather than raising
    if not values:
        return Decimal("0")
    return sum(values, Decimal("0")) / len(values)


class CompanyRepository(Repository[Company]):
    """
    Repository for company data access.

    Wraps a generic unit-of-work repository (every CRUD call is delegated
    to it) and adds the company specific queries and aggregates.

    Sorting and aggregation happen in Python on top of the store's
    natural order, so ties break identically on every backend.
    """

    def __init__(self, store: Optional[Store] = None):
        self._repo = UnitOfWorkRepository(store or get_store(), COMPANY_MAPPER)

    # -------------------------------------------------------------------------
    # Generic contract
    # -------------------------------------------------------------------------

    def get_all(self) -> List[Company]:
        return self._repo.get_all()

    def get_by_id(self, entity_id: int) -> Optional[Company]:
        return self._repo.get_by_id(entity_id)

    def find(self, spec: Spec) -> List[Company]:
        return self._repo.find(spec)

    def first_or_default(self, spec: Spec) -> Optional[Company]:
        return self._repo.first_or_default(spec)

    def add(self, entity: Company) -> Company:
        return self._repo.add(entity)

    def add_range(self, entities: Iterable[Company]) -> List[Company]:
        return self._repo.add_range(entities)

    def update(self, entity: Company) -> None:
        self._repo.update(entity)

    def delete(self, entity: Company) -> None:
        self._repo.delete(entity)

    def delete_range(self, entities: Iterable[Company]) -> None:
        self._repo.delete_range(entities)

    def save_changes(self) -> int:
        return self._repo.save_changes()

    def exists(self, spec: Spec) -> bool:
        return self._repo.exists(spec)

    def count(self, spec: Optional[Spec] = None) -> int:
        return self._repo.count(spec)

    # -------------------------------------------------------------------------
    # Business queries
    # -------------------------------------------------------------------------

    def get_top_esg_performers(self, count: int = 5) -> List[Company]:
        """Companies scoring at least 70, best first, at most `count` of them."""
        if count <= 0:
            return []
        performers = self.find(Filter("esg_score", "gte", ESG_PERFORMER_THRESHOLD))
        performers.sort(key=lambda c: c.esg_score, reverse=True)
        return performers[:count]

    def get_by_industry(self, industry: str) -> List[Company]:
        return self._by_name(Filter("industry", "ieq", industry))

    def get_by_risk_level(self, risk_level: str) -> List[Company]:
        return self._by_name(Filter("risk_level", "ieq", risk_level))

    def get_by_country(self, country: str) -> List[Company]:
        return self._by_name(Filter("country", "ieq", country))

    def get_with_esg_score_above(self, min_score: Decimal) -> List[Company]:
        """Companies with esg_score >= min_score, highest first."""
        companies = self.find(Filter("esg_score", "gte", Decimal(str(min_score))))
        companies.sort(key=lambda c: c.esg_score, reverse=True)
        return companies

    def get_with_market_cap_above(self, min_market_cap: Decimal) -> List[Company]:
        """Companies with market_cap >= min_market_cap, largest first."""
        companies = self.find(Filter("market_cap", "gte", Decimal(str(min_market_cap))))
        companies.sort(key=lambda c: c.market_cap, reverse=True)
        return companies

    def get_by_symbol(self, symbol: str) -> Optional[Company]:
        """Get company by symbol (case-insensitive)."""
        return self.first_or_default(Filter("symbol", "ieq", symbol.strip()))

    def is_symbol_unique(self, symbol: str, exclude_id: Optional[int] = None) -> bool:
        """
        True if no company other than `exclude_id` holds `symbol`.

        Pass exclude_id when validating an edit of an existing company.
        This is only a pre-check; the store enforces uniqueness at commit.
        """
        spec = Filter("symbol", "ieq", symbol.strip())
        if exclude_id is not None:
            spec = spec & Filter("id", "ne", exclude_id)
        return not self.exists(spec)

    # -------------------------------------------------------------------------
    # Analytics
    # -------------------------------------------------------------------------

    def get_average_esg_score(self) -> Decimal:
        return _average([c.esg_score for c in self.get_all()])

    def get_average_market_cap(self) -> Decimal:
        return _average([c.market_cap for c in self.get_all()])

    def get_total_count(self) -> int:
        return self.count()

    def _by_name(self, spec: Spec) -> List[Company]:
        companies = self.find(spec)
        companies.sort(key=lambda c: c.name.casefold())
        return companies
