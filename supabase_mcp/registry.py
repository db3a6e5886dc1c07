"""Tool registry - maps tool names to handlers and runs calls through them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable

import structlog
from pydantic import ValidationError

from supabase_mcp.approval import ApprovalGate
from supabase_mcp.errors import (
    InvalidParamsError,
    MethodNotFoundError,
    ToolError,
    UpstreamError,
)
from supabase_mcp.models import REQUEST_MODELS, ToolRequest
from supabase_mcp.schemas.tools import ToolCatalog, ToolDefinition, ToolResponseEnvelope

logger = structlog.get_logger()


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _describe_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item.get("loc", ()))
        parts.append(f"{loc}: {item.get('msg')}" if loc else str(item.get("msg")))
    return "Invalid parameters: " + "; ".join(parts)


@dataclass
class ToolHandler:
    """A catalog entry bound to its request model and implementation."""

    definition: ToolDefinition
    request_model: type[ToolRequest]
    execute: Callable[[Any], Awaitable[Any]]

    @property
    def name(self) -> str:
        return self.definition.name

    def validate(self, arguments: dict[str, Any]) -> ToolRequest:
        """Check required fields, then decode the argument bag.

        Raises:
            InvalidParamsError: Naming the missing or malformed fields.
        """
        missing = [f for f in self.definition.required_fields if _is_blank(arguments.get(f))]
        if missing:
            raise InvalidParamsError.missing(missing)
        try:
            return self.request_model.model_validate(arguments)
        except ValidationError as e:
            raise InvalidParamsError(_describe_validation_error(e)) from e


class ToolRegistry:
    """Routes tool calls to their handlers."""

    def __init__(self, handlers: Iterable[ToolHandler]):
        self._handlers: dict[str, ToolHandler] = {}
        for handler in handlers:
            if handler.name in self._handlers:
                raise ValueError(f"Duplicate tool name: {handler.name}")
            self._handlers[handler.name] = handler

    @classmethod
    def from_catalog(cls, catalog: ToolCatalog, implementation: Any) -> ToolRegistry:
        """Bind every catalog tool to the same-named method of ``implementation``."""
        return cls(
            ToolHandler(
                definition=definition,
                request_model=REQUEST_MODELS[definition.name],
                execute=getattr(implementation, definition.name),
            )
            for definition in catalog.tools
        )

    @property
    def names(self) -> list[str]:
        return list(self._handlers)

    def get(self, name: str) -> ToolHandler | None:
        return self._handlers.get(name)

    async def dispatch(
        self,
        name: str,
        arguments: dict[str, Any] | None,
        gate: ApprovalGate | None = None,
    ) -> ToolResponseEnvelope:
        """Run one tool call; every fault comes back as an error envelope."""
        arguments = arguments or {}
        try:
            handler = self._handlers.get(name)
            if handler is None:
                raise MethodNotFoundError(f"Unknown tool: {name}")

            request = handler.validate(arguments)
            if gate is not None:
                await gate.request(name, arguments)

            result = await handler.execute(request)
        except ToolError as e:
            logger.warning("tool_execution_error", tool=name, code=e.code, error=e.message)
            return ToolResponseEnvelope.failure(e.message)
        except Exception as e:
            logger.error("tool_execution_error", tool=name, error=str(e), exc_info=True)
            wrapped = UpstreamError(str(e) or type(e).__name__)
            return ToolResponseEnvelope.failure(wrapped.message)

        logger.info("tool_executed", tool=name)
        return ToolResponseEnvelope.success(result)
