"""
Tools

Named operations exposed to AI clients: registry, typed requests and the
dispatcher that runs them.
"""

from esgscope.tools.dispatcher import ToolDispatcher
from esgscope.tools.registry import TOOLS, ToolDefinition, ToolRegistry

__all__ = ["TOOLS", "ToolDefinition", "ToolDispatcher", "ToolRegistry"]
