"""
Unit tests for the rule-based analysis.

Run with: pytest src/esgscope/analysis_test.py -v
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from esgscope import analysis
from esgscope.company.model import Company


def make_company(risk_level: str, esg_score: str, name: str = "Acme") -> Company:
    return Company(
        name=name,
        symbol="ACME",
        industry="Industrials",
        sector="Machinery",
        country="Germany",
        risk_level=risk_level,
        esg_score=Decimal(esg_score),
    )


class TestCompositeScore:
    @pytest.mark.parametrize("risk_level,esg_score,expected", [
        ("Medium", "78.2", 71),  # 0.6 x 78.2 + 25 = 71.92
        ("Low", "82.5", 89),
        ("High", "45.0", 37),
        ("low", "50", 70),
        ("Unknown", "100", 70),
    ])
    def test_composite_score(self, risk_level, esg_score, expected):
        assert analysis.composite_score(make_company(risk_level, esg_score)) == expected


class TestRecommendation:
    @pytest.mark.parametrize("risk_level,esg_score,label", [
        ("Low", "92.0", "STRONG BUY"),
        ("Medium", "78.2", "BUY"),
        ("Medium", "60", "HOLD"),
        ("High", "45.0", "REVIEW"),
    ])
    def test_tiers(self, risk_level, esg_score, label):
        text = analysis.investment_recommendation(make_company(risk_level, esg_score))

        assert text.startswith(f"{label}:")


class TestAnalyze:
    def test_analyze_tesla(self):
        now = datetime(2024, 6, 1, tzinfo=timezone.utc)
        tesla = make_company("Medium", "78.2", name="Tesla Inc.")

        result = analysis.analyze(tesla, now=now)

        assert result.risk_assessment == "Tesla Inc. presents moderate risk factors requiring monitoring."
        assert result.esg_analysis == "Strong ESG credentials. Tesla Inc. scores 78.2/100."
        assert result.investment_recommendation == (
            "BUY: Tesla Inc. presents good investment opportunity."
        )
        assert result.analysis_date == now

    def test_deterministic(self):
        now = datetime(2024, 6, 1, tzinfo=timezone.utc)
        company = make_company("Low", "82.5")

        assert analysis.analyze(company, now=now) == analysis.analyze(company, now=now)

    @pytest.mark.parametrize("esg_score,prefix", [
        ("80", "Excellent"),
        ("70", "Strong"),
        ("60", "Moderate"),
        ("59.9", "ESG concerns"),
    ])
    def test_esg_tiers(self, esg_score, prefix):
        assert analysis.esg_analysis(make_company("Low", esg_score)).startswith(prefix)
