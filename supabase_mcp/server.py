"""MCP server core.

Wires the tool catalog, refresh notifier, approval gate and registry into an
``mcp`` low-level ``Server``. Transports (stdio, SSE) only need ``run``.
"""

from __future__ import annotations

from typing import Any, Callable

import structlog
from mcp import types
from mcp.server.lowlevel import Server

from supabase_mcp import __version__
from supabase_mcp.approval import ApprovalGate
from supabase_mcp.config import Settings
from supabase_mcp.manifest import CATALOG
from supabase_mcp.providers.management import ManagementClient
from supabase_mcp.providers.supabase import SupabaseProvider
from supabase_mcp.refresh import RefreshCallback, RefreshNotifier
from supabase_mcp.registry import ToolRegistry
from supabase_mcp.schemas.notifications import ApprovalRequest
from supabase_mcp.schemas.tools import ToolCatalog, ToolResponseEnvelope
from supabase_mcp.tools import SupabaseTools

logger = structlog.get_logger()


class ToolCallFailed(Exception):
    """Raised inside the MCP handler so the SDK reports an ``isError`` result."""


class SupabaseMCPServer:
    """One server instance: catalog, listeners, pending tickets and handlers."""

    def __init__(
        self,
        tools: SupabaseTools,
        *,
        catalog: ToolCatalog = CATALOG,
        require_approval: bool = False,
        approval_timeout: float | None = None,
    ):
        self.tools = tools
        self.catalog = catalog
        self.registry = ToolRegistry.from_catalog(catalog, tools)
        self.refresh = RefreshNotifier()
        self.gate: ApprovalGate | None = None
        if require_approval:
            self.gate = ApprovalGate(timeout=approval_timeout)
            self.gate.add_observer(self._forward_approval_request)

        self.server = Server(catalog.server_name, version=__version__)
        self._register_handlers()

    def _register_handlers(self) -> None:
        @self.server.list_tools()
        async def handle_list_tools() -> list[types.Tool]:
            return self.catalog_tools()

        # The SDK also invokes this handler with no request to fill its tool
        # cache during tools/call; listeners fire only for real listings.
        cache_fill = self.server.request_handlers[types.ListToolsRequest]

        async def handle_list_tools_request(req: types.ListToolsRequest | None):
            if req is not None:
                self.refresh.notify()
            return await cache_fill(req)

        self.server.request_handlers[types.ListToolsRequest] = handle_list_tools_request

        @self.server.call_tool()
        async def handle_call_tool(
            name: str, arguments: dict[str, Any] | None
        ) -> list[types.TextContent]:
            envelope = await self.call_tool(name, arguments)
            if envelope.is_error:
                raise ToolCallFailed(envelope.text)
            return envelope.to_mcp_content()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def list_tools(self) -> list[types.Tool]:
        """Return the catalog, firing every refresh listener first."""
        self.refresh.notify()
        return self.catalog_tools()

    def catalog_tools(self) -> list[types.Tool]:
        return [tool.to_mcp() for tool in self.catalog.tools]

    async def call_tool(
        self, name: str, arguments: dict[str, Any] | None = None
    ) -> ToolResponseEnvelope:
        return await self.registry.dispatch(name, arguments, gate=self.gate)

    def on_refresh(self, callback: RefreshCallback) -> Callable[[], None]:
        return self.refresh.on_refresh(callback)

    def resolve_approval(self, correlation_id: str, approved: bool) -> bool:
        """Resolve a pending approval ticket; False if unknown or already resolved."""
        if self.gate is None:
            return False
        return self.gate.resolve(correlation_id, approved)

    async def run(self, read_stream, write_stream) -> None:
        await self.server.run(
            read_stream,
            write_stream,
            self.server.create_initialization_options(),
        )

    async def close(self) -> None:
        await self.tools.backend.close()
        await self.tools.management.close()

    async def _forward_approval_request(self, request: ApprovalRequest) -> None:
        """Send a pending approval to the connected client as a log message."""
        try:
            ctx = self.server.request_context
        except LookupError:
            logger.debug("approval_not_forwarded", correlation_id=request.correlation_id)
            return
        await ctx.session.send_log_message(
            level="notice",
            data=request.model_dump(mode="json"),
            logger="approval",
        )


async def build_server(settings: Settings) -> SupabaseMCPServer:
    """Create the collaborators from settings and wrap them in a server."""
    backend = await SupabaseProvider.connect(settings.supabase_url, settings.supabase_key)
    management = ManagementClient(
        settings.supabase_access_token,
        base_url=settings.management_api_url,
        timeout=settings.http_timeout_seconds,
    )
    server = SupabaseMCPServer(
        SupabaseTools(backend, management),
        require_approval=settings.require_approval,
        approval_timeout=settings.approval_timeout_seconds,
    )
    logger.info(
        "supabase_mcp_server_ready",
        tools=len(server.catalog.tools),
        require_approval=settings.require_approval,
    )
    return server
