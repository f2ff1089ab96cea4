import logging
from typing import Callable, List

from esgscope import analysis
from esgscope.company.model import AnalysisResult, Company, CompanyCreate
from esgscope.company.repository import CompanyRepository
from esgscope.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


class CompanyService:
    """
    Company use cases: CRUD with symbol checks, rankings and analysis.

    Every method works in its own unit of work (a fresh repository from
    the factory), so one service instance can be shared across requests.
    """

    def __init__(self, repository_factory: Callable[[], CompanyRepository] = CompanyRepository):
        self.repository_factory = repository_factory

    def list(self) -> List[Company]:
        return self.repository_factory().get_all()

    def get(self, company_id: int) -> Company:
        company = self.repository_factory().get_by_id(company_id)
        if company is None:
            raise NotFoundError(f"Company with ID {company_id} not found")
        return company

    def create(self, data: CompanyCreate) -> Company:
        """
        Create a company.

        The uniqueness pre-check gives a friendly error in the common case;
        a concurrent create of the same symbol is still rejected by the
        store at commit time, also as ConflictError.
        """
        repo = self.repository_factory()
        if not repo.is_symbol_unique(data.symbol):
            raise ConflictError(f"Company with symbol '{data.symbol}' already exists")

        company = repo.add(data.to_company())
        repo.save_changes()
        logger.info("Created company %s (id=%s)", company.symbol, company.id)
        return company

    def update(self, company_id: int, data: CompanyCreate) -> Company:
        repo = self.repository_factory()
        company = repo.get_by_id(company_id)
        if company is None:
            raise NotFoundError(f"Company with ID {company_id} not found")
        if not repo.is_symbol_unique(data.symbol, exclude_id=company_id):
            raise ConflictError(f"Company with symbol '{data.symbol}' already exists")

        data.apply_to(company)
        repo.update(company)
        repo.save_changes()
        logger.info("Updated company %s (id=%s)", company.symbol, company.id)
        return company

    def delete(self, company_id: int) -> None:
        repo = self.repository_factory()
        company = repo.get_by_id(company_id)
        if company is None:
            raise NotFoundError(f"Company with ID {company_id} not found")

        repo.delete(company)
        repo.save_changes()
        logger.info("Deleted company %s (id=%s)", company.symbol, company_id)

    def top_esg_performers(self, count: int = 5) -> List[Company]:
        return self.repository_factory().get_top_esg_performers(count)

    def analyze(self, company_id: int) -> AnalysisResult:
        """Analyze a company and store the analysis texts on it."""
        repo = self.repository_factory()
        company = repo.get_by_id(company_id)
        if company is None:
            raise NotFoundError(f"Company with ID {company_id} not found")

        result = analysis.analyze(company)
        company.ai_analysis = f"{result.risk_assessment} {result.esg_analysis}"
        company.investment_recommendation = result.investment_recommendation
        repo.update(company)
        repo.save_changes()
        return result
