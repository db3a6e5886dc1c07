"""Tool call faults.

Every fault raised while handling a tool call is a ``ToolError`` subclass
carrying the JSON-RPC error code it corresponds to. The dispatcher catches
them at its boundary and turns them into error envelopes, so none of these
ever escape a ``CallTool`` request.
"""

from __future__ import annotations

from mcp import types


class ToolError(Exception):
    """Base class for faults surfaced to the MCP caller."""

    code: int = types.INTERNAL_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidParamsError(ToolError):
    """A required argument is missing or an argument has the wrong shape."""

    code = types.INVALID_PARAMS

    @classmethod
    def missing(cls, fields: list[str]) -> InvalidParamsError:
        noun = "parameter" if len(fields) == 1 else "parameters"
        return cls(f"Missing required {noun}: {', '.join(fields)}")


class MethodNotFoundError(ToolError):
    """The requested tool is not in the catalog."""

    code = types.METHOD_NOT_FOUND


class InvalidRequestError(ToolError):
    """The call was refused by the approval gate (denied or timed out)."""

    code = types.INVALID_REQUEST


class UpstreamError(ToolError):
    """The Supabase backend or the management API reported a failure."""

    code = types.INTERNAL_ERROR
