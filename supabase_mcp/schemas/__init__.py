"""Pydantic schemas for the Supabase MCP server."""

from supabase_mcp.schemas.common import HealthResponse
from supabase_mcp.schemas.notifications import ApprovalDecision, ApprovalRequest
from supabase_mcp.schemas.tools import (
    TextBlock,
    ToolCall,
    ToolCatalog,
    ToolDefinition,
    ToolParameter,
    ToolResponseEnvelope,
)

__all__ = [
    "ApprovalDecision",
    "ApprovalRequest",
    "HealthResponse",
    "TextBlock",
    "ToolCall",
    "ToolCatalog",
    "ToolDefinition",
    "ToolParameter",
    "ToolResponseEnvelope",
]
