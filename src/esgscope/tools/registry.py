"""
Tool registry.

A fixed table mapping tool names to their parameter schema, typed request
and handler. Handlers receive a ``ToolContext`` (the unit of work for this
call plus collaborators) and an already validated request, and return a
result envelope.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Callable, Optional

from esgscope.analysis import analyze
from esgscope.company.model import AnalysisResult, Company
from esgscope.company.repository import CompanyRepository
from esgscope.errors import NotFoundError
from esgscope.tools import envelope
from esgscope.tools.requests import (
    AnalyzeCompanyRequest,
    GetCompaniesByIndustryRequest,
    GetCompaniesByRiskRequest,
    GetCompaniesRequest,
    GetCompanyBySymbolRequest,
    GetEsgPerformersRequest,
    GetMarketAnalyticsRequest,
    ToolRequest,
    describe_parameters,
)

logger = logging.getLogger(__name__)

BILLION = Decimal("1000000000")
TWO_PLACES = Decimal("0.01")


@dataclass
class ToolContext:
    repo: CompanyRepository
    analyzer: Callable[[Company], AnalysisResult] = analyze
    clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    request_type: type[ToolRequest]
    handler: Callable[[ToolContext, ToolRequest], dict]

    def describe(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": describe_parameters(self.request_type),
        }


def _round(value: Decimal) -> float:
    return float(value.quantize(TWO_PLACES, rounding=ROUND_HALF_EVEN))


def _symbol_not_found(symbol: str) -> dict:
    return envelope.failure(NotFoundError(f"Company with symbol '{symbol}' not found"))


# =============================================================================
# Handlers
# =============================================================================


def get_companies(ctx: ToolContext, request: GetCompaniesRequest) -> dict:
    companies = ctx.repo.get_all()
    return envelope.success(data=[c.to_dict() for c in companies], count=len(companies))


def get_company_by_symbol(ctx: ToolContext, request: GetCompanyBySymbolRequest) -> dict:
    company = ctx.repo.get_by_symbol(request.symbol)
    if company is None:
        return _symbol_not_found(request.symbol)
    return envelope.success(data=company.to_dict())


def get_esg_performers(ctx: ToolContext, request: GetEsgPerformersRequest) -> dict:
    companies = ctx.repo.get_top_esg_performers(request.count)
    return envelope.success(
        data=[c.to_dict() for c in companies],
        count=len(companies),
        description=f"Top {request.count} ESG performing companies",
    )


def analyze_company(ctx: ToolContext, request: AnalyzeCompanyRequest) -> dict:
    company = ctx.repo.get_by_symbol(request.symbol)
    if company is None:
        return _symbol_not_found(request.symbol)

    result = ctx.analyzer(company)
    return envelope.success(
        company={
            "name": company.name,
            "symbol": company.symbol,
            "esgScore": float(company.esg_score),
            "riskLevel": company.risk_level,
        },
        analysis=result.to_dict(),
    )


def get_companies_by_risk(ctx: ToolContext, request: GetCompaniesByRiskRequest) -> dict:
    companies = ctx.repo.get_by_risk_level(request.risk_level)
    return envelope.success(
        data=[c.to_dict() for c in companies],
        count=len(companies),
        riskLevel=request.risk_level,
    )


def get_companies_by_industry(ctx: ToolContext, request: GetCompaniesByIndustryRequest) -> dict:
    companies = ctx.repo.get_by_industry(request.industry)
    return envelope.success(
        data=[c.to_dict() for c in companies],
        count=len(companies),
        industry=request.industry,
    )


def get_market_analytics(ctx: ToolContext, request: GetMarketAnalyticsRequest) -> dict:
    top = ctx.repo.get_top_esg_performers(3)
    return envelope.success(
        analytics={
            "totalCompanies": ctx.repo.get_total_count(),
            "averageESGScore": _round(ctx.repo.get_average_esg_score()),
            # Market cap is reported in billions
            "averageMarketCap": _round(ctx.repo.get_average_market_cap() / BILLION),
            "topESGPerformers": [
                {"name": c.name, "symbol": c.symbol, "esgScore": float(c.esg_score)}
                for c in top
            ],
            "lastUpdated": ctx.clock().isoformat(),
        }
    )


# =============================================================================
# Registry
# =============================================================================

TOOLS = (
    ToolDefinition(
        name="get_companies",
        description="Retrieve all companies in the investment database",
        request_type=GetCompaniesRequest,
        handler=get_companies,
    ),
    ToolDefinition(
        name="get_company_by_symbol",
        description="Get detailed company information by stock symbol",
        request_type=GetCompanyBySymbolRequest,
        handler=get_company_by_symbol,
    ),
    ToolDefinition(
        name="get_esg_performers",
        description="Get top ESG performing companies",
        request_type=GetEsgPerformersRequest,
        handler=get_esg_performers,
    ),
    ToolDefinition(
        name="analyze_company",
        description="Get automated analysis for a specific company",
        request_type=AnalyzeCompanyRequest,
        handler=analyze_company,
    ),
    ToolDefinition(
        name="get_companies_by_risk",
        description="Get companies filtered by risk level",
        request_type=GetCompaniesByRiskRequest,
        handler=get_companies_by_risk,
    ),
    ToolDefinition(
        name="get_companies_by_industry",
        description="Get companies filtered by industry",
        request_type=GetCompaniesByIndustryRequest,
        handler=get_companies_by_industry,
    ),
    ToolDefinition(
        name="get_market_analytics",
        description="Get market analytics and statistics",
        request_type=GetMarketAnalyticsRequest,
        handler=get_market_analytics,
    ),
)


class ToolRegistry:
    """Manages tool registration and case-insensitive lookup."""

    def __init__(self, tools: tuple = TOOLS):
        self._tools: dict[str, ToolDefinition] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: ToolDefinition) -> None:
        self._tools[tool.name.lower()] = tool
        logger.debug("Registered tool: %s", tool.name)

    def get(self, name: str) -> Optional[ToolDefinition]:
        """Get a tool by name (case-insensitive), or None."""
        return self._tools.get(name.strip().lower())

    def all(self) -> list[ToolDefinition]:
        return list(self._tools.values())

    def names(self) -> list[str]:
        return [tool.name for tool in self._tools.values()]
