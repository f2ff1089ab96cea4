"""
Company

This module provides the company entity, its repository and use cases.
"""

from esgscope.company.model import AnalysisResult, Company, CompanyCreate
from esgscope.company.repository import CompanyRepository
from esgscope.company.service import CompanyService

__all__ = [
    "AnalysisResult",
    "Company",
    "CompanyCreate",
    "CompanyRepository",
    "CompanyService",
]
