"""Uniform result envelopes returned by every tool invocation."""

from typing import Any

from esgscope.errors import EsgScopeError, UnknownToolError, ValidationError


def success(**payload: Any) -> dict:
    return {"success": True, **payload}


def failure(error: EsgScopeError | Exception, tool: str | None = None, **extra: Any) -> dict:
    """Envelope for an error; never raises."""
    envelope = {
        "success": False,
        "errorType": getattr(error, "error_type", "internal_error"),
        "error": str(error) or error.__class__.__name__,
    }
    if isinstance(error, UnknownToolError):
        envelope["availableTools"] = list(error.available)
    if isinstance(error, ValidationError) and error.parameter:
        envelope["parameter"] = error.parameter
    if tool is not None:
        envelope["tool"] = tool
    envelope.update(extra)
    return envelope
