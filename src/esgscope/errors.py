"""
Error taxonomy shared by the repositories, the tool dispatcher and the API.

Each error carries an ``error_type`` tag. The dispatcher copies the tag into
the ``errorType`` field of its result envelopes, the API maps it to an HTTP
status code.
"""


class EsgScopeError(Exception):
    """Base class for all application errors."""

    error_type = "internal_error"


class NotFoundError(EsgScopeError):
    """A lookup yielded no match."""

    error_type = "not_found"


class ValidationError(EsgScopeError):
    """A parameter or field is missing or malformed."""

    error_type = "validation_error"

    def __init__(self, message: str, parameter: str | None = None):
        super().__init__(message)
        self.parameter = parameter


class UnknownToolError(EsgScopeError):
    """A tool name is not present in the registry."""

    error_type = "unknown_tool"

    def __init__(self, tool_name: str, available: list[str]):
        super().__init__(f"Unknown tool: {tool_name}")
        self.tool_name = tool_name
        self.available = available


class ConflictError(EsgScopeError):
    """A uniqueness constraint was violated at commit time."""

    error_type = "conflict"


class StorageError(EsgScopeError):
    """The storage backend failed for a reason other than a conflict."""

    error_type = "internal_error"
