"""Approval notification schemas."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


class ApprovalRequest(BaseModel):
    """Emitted when a tool call is waiting for an external approver."""

    correlation_id: str  # key to pass back when resolving
    tool_name: str
    arguments: dict[str, Any]
    description: str  # one-line summary for humans
    requested_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ApprovalDecision(BaseModel):
    """Body of an approval resolution request."""

    approved: bool
