"""
Company entity and its input/output shapes.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from esgscope.errors import ValidationError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_float(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def to_decimal(value: Any, name: str) -> Decimal:
    """Coerce a number or numeric string to Decimal, raising ValidationError."""
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number", parameter=name)
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{name} must be a number", parameter=name) from None
    if not result.is_finite():
        raise ValidationError(f"{name} must be a finite number", parameter=name)
    return result


@dataclass
class Company:
    name: str
    symbol: str
    industry: str
    sector: str
    country: str
    risk_level: str
    market_cap: Decimal = Decimal("0")
    revenue: Decimal = Decimal("0")
    esg_score: Decimal = Decimal("0")
    created_at: datetime = field(default_factory=_utcnow)
    ai_analysis: Optional[str] = None
    investment_recommendation: Optional[str] = None
    id: Optional[int] = None

    def to_dict(self) -> dict:
        """Serialize for JSON responses (camelCase keys)."""
        return {
            "id": self.id,
            "name": self.name,
            "symbol": self.symbol,
            "industry": self.industry,
            "sector": self.sector,
            "marketCap": _to_float(self.market_cap),
            "country": self.country,
            "revenue": _to_float(self.revenue),
            "esgScore": _to_float(self.esg_score),
            "riskLevel": self.risk_level,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "aiAnalysis": self.ai_analysis,
            "investmentRecommendation": self.investment_recommendation,
        }


@dataclass
class CompanyCreate:
    """Input shape for creating or editing a company."""

    name: str
    symbol: str
    industry: str
    sector: str
    country: str
    risk_level: str
    market_cap: Decimal
    revenue: Decimal
    esg_score: Decimal

    REQUIRED_STRINGS = ("name", "symbol", "industry", "sector", "country", "risk_level")
    NUMBERS = ("market_cap", "revenue", "esg_score")

    # Column limits of the companies table
    MAX_LENGTHS = {
        "name": 200,
        "symbol": 10,
        "industry": 100,
        "sector": 100,
        "country": 100,
        "risk_level": 50,
    }
    # (precision, scale) of the NUMERIC columns
    PRECISION = {
        "market_cap": (18, 2),
        "revenue": (18, 2),
        "esg_score": (5, 2),
    }

    # camelCase payload keys accepted by from_dict()
    ALIASES = {
        "riskLevel": "risk_level",
        "marketCap": "market_cap",
        "esgScore": "esg_score",
        "ESGScore": "esg_score",
    }

    def __post_init__(self):
        for name in self.REQUIRED_STRINGS:
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"{name} is required", parameter=name)
            value = value.strip()
            if len(value) > self.MAX_LENGTHS[name]:
                raise ValidationError(
                    f"{name} must be at most {self.MAX_LENGTHS[name]} characters", parameter=name
                )
            setattr(self, name, value)

        for name in self.NUMBERS:
            value = to_decimal(getattr(self, name), name)
            if value < 0:
                raise ValidationError(f"{name} must not be negative", parameter=name)
            precision, scale = self.PRECISION[name]
            if value.as_tuple().exponent < -scale:
                raise ValidationError(
                    f"{name} must have at most {scale} decimal places", parameter=name
                )
            if value >= Decimal(10) ** (precision - scale):
                raise ValidationError(
                    f"{name} must be less than 10^{precision - scale}", parameter=name
                )
            setattr(self, name, value)

        self.symbol = self.symbol.upper()

    @classmethod
    def from_dict(cls, data: dict) -> "CompanyCreate":
        """Build from a request payload, accepting snake_case or camelCase keys."""
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")

        values = {}
        for key, value in data.items():
            values[cls.ALIASES.get(key, key)] = value

        kwargs = {}
        for f in fields(cls):
            if f.name not in values:
                raise ValidationError(f"{f.name} is required", parameter=f.name)
            kwargs[f.name] = values[f.name]
        return cls(**kwargs)

    def to_company(self) -> Company:
        return Company(
            name=self.name,
            symbol=self.symbol,
            industry=self.industry,
            sector=self.sector,
            country=self.country,
            risk_level=self.risk_level,
            market_cap=self.market_cap,
            revenue=self.revenue,
            esg_score=self.esg_score,
        )

    def apply_to(self, company: Company) -> Company:
        """Copy the editable fields onto an existing company."""
        for f in fields(self):
            setattr(company, f.name, getattr(self, f.name))
        return company


@dataclass
class AnalysisResult:
    risk_assessment: str
    esg_analysis: str
    investment_recommendation: str
    analysis_date: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict:
        return {
            "riskAssessment": self.risk_assessment,
            "esgAnalysis": self.esg_analysis,
            "investmentRecommendation": self.investment_recommendation,
            "analysisDate": self.analysis_date.isoformat(),
        }
