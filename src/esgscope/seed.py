"""Seed reference companies into an empty store."""

import logging
from decimal import Decimal

from esgscope.company.model import Company
from esgscope.company.repository import CompanyRepository

logger = logging.getLogger(__name__)

INITIAL_COMPANIES = [
    {
        "name": "Apple Inc.",
        "symbol": "AAPL",
        "industry": "Technology",
        "sector": "Consumer Electronics",
        "market_cap": Decimal("3000000000000"),
        "country": "United States",
        "revenue": Decimal("394328000000"),
        "esg_score": Decimal("82.5"),
        "risk_level": "Low",
        "ai_analysis": "Strong technological leadership with excellent ESG practices",
        "investment_recommendation": "STRONG BUY - Consistent growth and innovation",
    },
    {
        "name": "Tesla Inc.",
        "symbol": "TSLA",
        "industry": "Automotive",
        "sector": "Electric Vehicles",
        "market_cap": Decimal("800000000000"),
        "country": "United States",
        "revenue": Decimal("96773000000"),
        "esg_score": Decimal("78.2"),
        "risk_level": "Medium",
        "ai_analysis": "Leading EV manufacturer with strong environmental impact",
        "investment_recommendation": "BUY - High growth potential in sustainable transport",
    },
    {
        "name": "Microsoft Corporation",
        "symbol": "MSFT",
        "industry": "Technology",
        "sector": "Software",
        "market_cap": Decimal("2500000000000"),
        "country": "United States",
        "revenue": Decimal("211915000000"),
        "esg_score": Decimal("85.0"),
        "risk_level": "Low",
        "ai_analysis": "Dominant cloud computing position with excellent ESG credentials",
        "investment_recommendation": "STRONG BUY - Reliable growth and strong fundamentals",
    },
    {
        "name": "Unilever PLC",
        "symbol": "UL",
        "industry": "Consumer Goods",
        "sector": "Personal Care",
        "market_cap": Decimal("150000000000"),
        "country": "United Kingdom",
        "revenue": Decimal("60069000000"),
        "esg_score": Decimal("88.5"),
        "risk_level": "Low",
        "ai_analysis": "ESG leader with strong sustainable business practices",
        "investment_recommendation": "BUY - Excellent ESG profile with stable returns",
    },
    {
        "name": "NextEra Energy Inc.",
        "symbol": "NEE",
        "industry": "Utilities",
        "sector": "Renewable Energy",
        "market_cap": Decimal("160000000000"),
        "country": "United States",
        "revenue": Decimal("20956000000"),
        "esg_score": Decimal("92.0"),
        "risk_level": "Low",
        "ai_analysis": "Leading renewable energy company with top ESG score",
        "investment_recommendation": "STRONG BUY - Perfect ESG investment with growth potential",
    },
    {
        "name": "Saudi Aramco",
        "symbol": "2222.SR",
        "industry": "Energy",
        "sector": "Oil & Gas",
        "market_cap": Decimal("2100000000000"),
        "country": "Saudi Arabia",
        "revenue": Decimal("535000000000"),
        "esg_score": Decimal("45.0"),
        "risk_level": "High",
        "ai_analysis": "High revenue but significant ESG concerns in fossil fuel sector",
        "investment_recommendation": "HOLD - Monitor ESG improvements and energy transition",
    },
]


def seed_companies(repo: CompanyRepository | None = None) -> int:
    """
    Add the reference companies in one unit of work if the store is empty.

    Returns:
        Number of companies created (0 when data already exists)
    """
    repo = repo or CompanyRepository()
    if repo.count() > 0:
        logger.info("Data already exists, skipping seeding")
        return 0

    repo.add_range(Company(**company) for company in INITIAL_COMPANIES)
    created = repo.save_changes()
    logger.info("Seeded %d companies", created)
    return created
