"""
Rule-based company analysis.

Produces a risk assessment, an ESG commentary and an investment
recommendation from a company's risk level and ESG score. Deterministic
for a given company and analysis date.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from esgscope.company.model import AnalysisResult, Company

logger = logging.getLogger(__name__)

ESG_WEIGHT = Decimal("0.6")
RISK_BONUS = {"low": 40, "medium": 25}
DEFAULT_RISK_BONUS = 10

RECOMMENDATION_TIERS = [
    (80, "STRONG BUY", "{name} shows excellent fundamentals."),
    (70, "BUY", "{name} presents good investment opportunity."),
    (60, "HOLD", "{name} shows stable performance."),
]


def composite_score(company: Company) -> int:
    """0.6 x ESG score plus a risk bonus, truncated to an integer."""
    bonus = RISK_BONUS.get(company.risk_level.strip().lower(), DEFAULT_RISK_BONUS)
    return int(Decimal(str(company.esg_score)) * ESG_WEIGHT + bonus)


def risk_assessment(company: Company) -> str:
    level = company.risk_level.strip().lower()
    if level == "low":
        return f"{company.name} shows strong financial stability with low volatility expected."
    if level == "medium":
        return f"{company.name} presents moderate risk factors requiring monitoring."
    if level == "high":
        return f"{company.name} shows higher risk profile requiring careful consideration."
    return f"{company.name} requires detailed risk assessment."


def esg_analysis(company: Company) -> str:
    score = company.esg_score
    if score >= 80:
        return f"Excellent ESG performance! {company.name} scores {score}/100."
    if score >= 70:
        return f"Strong ESG credentials. {company.name} scores {score}/100."
    if score >= 60:
        return f"Moderate ESG performance. {company.name} scores {score}/100."
    return f"ESG concerns. {company.name} scores {score}/100."


def investment_recommendation(company: Company) -> str:
    score = composite_score(company)
    for threshold, label, template in RECOMMENDATION_TIERS:
        if score >= threshold:
            return f"{label}: " + template.format(name=company.name)
    return f"REVIEW: {company.name} requires detailed due diligence."


def analyze(company: Company, now: Optional[datetime] = None) -> AnalysisResult:
    logger.info("Analyzing %s (%s)", company.name, company.symbol)
    return AnalysisResult(
        risk_assessment=risk_assessment(company),
        esg_analysis=esg_analysis(company),
        investment_recommendation=investment_recommendation(company),
        analysis_date=now or datetime.now(timezone.utc),
    )
