"""
Tool dispatcher.

Maps a tool name plus a loosely typed parameter mapping to a repository
call and returns a result envelope. Every call terminates with an envelope:
unknown tools, invalid parameters, conflicts and unexpected failures are all
reported in the envelope rather than raised.

The dispatcher keeps no state between calls. Each call that passes
validation opens its own unit of work through ``repository_factory``.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional

from esgscope.analysis import analyze
from esgscope.company.model import AnalysisResult, Company
from esgscope.company.repository import CompanyRepository
from esgscope.config import config
from esgscope.errors import UnknownToolError, ValidationError
from esgscope.tools import envelope
from esgscope.tools.registry import ToolContext, ToolRegistry
from esgscope.tools.requests import parse_request

logger = logging.getLogger(__name__)

SERVER_CAPABILITIES = (
    "investment_analysis",
    "esg_scoring",
    "company_data",
    "risk_assessment",
)


class ToolDispatcher:
    def __init__(
        self,
        repository_factory: Callable[[], CompanyRepository] = CompanyRepository,
        registry: Optional[ToolRegistry] = None,
        analyzer: Callable[[Company], AnalysisResult] = analyze,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.repository_factory = repository_factory
        self.registry = registry or ToolRegistry()
        self.analyzer = analyzer
        self.clock = clock

    def get_capabilities(self) -> dict:
        """Server identity and tool descriptors. Never touches the store."""
        return {
            "serverInfo": {
                "name": config.server_name,
                "version": config.server_version,
                "description": config.server_description,
                "capabilities": list(SERVER_CAPABILITIES),
            },
            "tools": [tool.describe() for tool in self.registry.all()],
        }

    def execute_tool(self, tool_name: str, parameters: Optional[Mapping[str, Any]] = None) -> dict:
        """
        Validate and run a tool.

        Args:
            tool_name: Registered tool name, matched case-insensitively
            parameters: Raw parameter values keyed by parameter name

        Returns:
            A success or error envelope; this method does not raise
        """
        logger.info("Executing tool: %s", tool_name)

        tool = self.registry.get(tool_name) if isinstance(tool_name, str) else None
        if tool is None:
            logger.warning("Unknown tool requested: %s", tool_name)
            return envelope.failure(UnknownToolError(tool_name, self.registry.names()))

        try:
            request = parse_request(tool.request_type, parameters)
        except ValidationError as e:
            logger.info("Rejected %s: %s", tool.name, e)
            return envelope.failure(e, tool=tool.name)

        try:
            ctx = ToolContext(
                repo=self.repository_factory(),
                analyzer=self.analyzer,
                clock=self.clock,
            )
            return tool.handler(ctx, request)
        except Exception as e:
            # ConflictError keeps its own errorType, anything else is internal_error
            logger.exception("Error executing tool: %s", tool.name)
            return envelope.failure(e, tool=tool.name)
