"""Human-in-the-loop approval gate for tool calls.

When enabled, every tool call is parked as a ticket keyed by a correlation
id until someone resolves it, either through ``SupabaseMCPServer.resolve_approval``
or the ``/approvals`` HTTP endpoints. Observers are told about each new
ticket so it can be shown to a human (the server forwards it to the MCP
client as a log notification).
"""

from __future__ import annotations

import asyncio
import json
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

import structlog

from supabase_mcp.errors import InvalidRequestError
from supabase_mcp.schemas.notifications import ApprovalRequest

logger = structlog.get_logger()

# Keys whose values are redacted before they are logged.
_SECRET_KEY_PATTERN = re.compile(
    r"(token|key|secret|pass|credential|auth)",
    re.IGNORECASE,
)

ApprovalObserver = Callable[[ApprovalRequest], Awaitable[None]]


def _sanitize_value(value: Any) -> Any:
    if isinstance(value, dict):
        return _sanitize_args(value)
    if isinstance(value, list):
        return [_sanitize_value(v) for v in value]
    return value


def _sanitize_args(args: dict | None) -> dict | None:
    """Strip secret-looking values from a dict before logging."""
    if not args:
        return args
    sanitized = {}
    for k, v in args.items():
        if _SECRET_KEY_PATTERN.search(str(k)):
            sanitized[k] = "[REDACTED]"
        else:
            sanitized[k] = _sanitize_value(v)
    return sanitized


def describe_call(tool_name: str, arguments: dict[str, Any]) -> str:
    """Human-readable summary of a pending call."""
    rendered = json.dumps(_sanitize_args(arguments) or {}, default=str, sort_keys=True)
    return f"Tool '{tool_name}' wants to run with arguments {rendered}"


@dataclass
class ApprovalTicket:
    correlation_id: str
    tool_name: str
    arguments: dict[str, Any]
    description: str
    future: asyncio.Future
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_request(self) -> ApprovalRequest:
        return ApprovalRequest(
            correlation_id=self.correlation_id,
            tool_name=self.tool_name,
            arguments=self.arguments,
            description=self.description,
            requested_at=self.created_at,
        )


class ApprovalGate:
    """Parks tool calls until they are approved or denied."""

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout
        self._tickets: dict[str, ApprovalTicket] = {}
        self._observers: list[ApprovalObserver] = []

    def add_observer(self, observer: ApprovalObserver) -> None:
        self._observers.append(observer)

    @property
    def pending(self) -> list[ApprovalRequest]:
        return [t.to_request() for t in self._tickets.values()]

    def is_pending(self, correlation_id: str) -> bool:
        return correlation_id in self._tickets

    async def request(self, tool_name: str, arguments: dict[str, Any]) -> None:
        """Wait for a decision on a call; returns only if it was approved.

        Raises:
            InvalidRequestError: If the call is denied or the wait times out.
        """
        correlation_id = uuid.uuid4().hex
        ticket = ApprovalTicket(
            correlation_id=correlation_id,
            tool_name=tool_name,
            arguments=arguments,
            description=describe_call(tool_name, arguments),
            future=asyncio.get_running_loop().create_future(),
        )
        self._tickets[correlation_id] = ticket

        logger.info(
            "approval_requested",
            correlation_id=correlation_id,
            tool=tool_name,
            arguments=_sanitize_args(arguments),
        )
        try:
            notification = ticket.to_request()
            for observer in list(self._observers):
                try:
                    await observer(notification)
                except Exception as e:
                    logger.warning(
                        "approval_observer_failed",
                        correlation_id=correlation_id,
                        error=str(e),
                    )

            try:
                if self.timeout is None:
                    approved = await ticket.future
                else:
                    approved = await asyncio.wait_for(
                        asyncio.shield(ticket.future), self.timeout
                    )
            except asyncio.TimeoutError:
                logger.warning(
                    "approval_timed_out",
                    correlation_id=correlation_id,
                    tool=tool_name,
                    timeout=self.timeout,
                )
                raise InvalidRequestError(
                    f"Approval timed out after {self.timeout:g}s: {tool_name}"
                ) from None
        finally:
            self._tickets.pop(correlation_id, None)

        if not approved:
            logger.info("approval_denied", correlation_id=correlation_id, tool=tool_name)
            raise InvalidRequestError(f"Tool call denied by user: {tool_name}")
        logger.info("approval_granted", correlation_id=correlation_id, tool=tool_name)

    def resolve(self, correlation_id: str, approved: bool) -> bool:
        """Resolve a pending ticket.

        Returns False, and does nothing, if the ticket is unknown or was
        already resolved.
        """
        ticket = self._tickets.pop(correlation_id, None)
        if ticket is None or ticket.future.done():
            logger.warning("approval_resolve_unknown", correlation_id=correlation_id)
            return False
        ticket.future.set_result(approved)
        return True
