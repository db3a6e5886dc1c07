"""HTTP surface - SSE transport, health check and approval endpoints."""

from __future__ import annotations

import logging
import sys
from typing import Callable

import structlog
from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from mcp.server.sse import SseServerTransport

from supabase_mcp import __version__
from supabase_mcp.schemas.common import HealthResponse
from supabase_mcp.schemas.notifications import ApprovalDecision, ApprovalRequest
from supabase_mcp.server import SupabaseMCPServer

logger = structlog.get_logger()


def configure_logging(level: str = "info") -> None:
    """JSON logs on stderr; stdout carries the stdio protocol."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


class SseEndpoint:
    """ASGI endpoint for the MCP event stream.

    Mounted as a raw ASGI app because the SSE transport writes the response
    itself. Only one stream may be open at a time.
    """

    def __init__(
        self,
        server: SupabaseMCPServer,
        sse: SseServerTransport,
        on_connect: Callable[[], None] | None = None,
    ):
        self.server = server
        self.sse = sse
        self.on_connect = on_connect
        self.active = False

    async def __call__(self, scope, receive, send) -> None:
        if self.active:
            response = JSONResponse(
                {"detail": "A client is already connected"}, status_code=409
            )
            await response(scope, receive, send)
            return

        self.active = True
        logger.info("sse_client_connected", client=str(scope.get("client")))
        if self.on_connect is not None:
            self.on_connect()
        try:
            async with self.sse.connect_sse(scope, receive, send) as (read_stream, write_stream):
                await self.server.run(read_stream, write_stream)
        finally:
            self.active = False
            logger.info("sse_client_disconnected")


def create_app(
    server: SupabaseMCPServer,
    sse: SseServerTransport | None = None,
    on_connect: Callable[[], None] | None = None,
) -> FastAPI:
    """Build the HTTP app.

    With ``sse`` the app also serves the MCP event stream on ``GET /sse``
    and client messages on ``/messages/``. Only one stream may be open at a
    time; ``on_connect`` is called when a stream opens.
    """
    app = FastAPI(title="Supabase MCP Server", version=__version__)

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse()

    @app.get("/approvals", response_model=list[ApprovalRequest])
    async def list_approvals():
        """Return the tool calls waiting for a decision."""
        if server.gate is None:
            return []
        return server.gate.pending

    @app.post("/approvals/{correlation_id}")
    async def resolve_approval(correlation_id: str, decision: ApprovalDecision):
        """Approve or deny a pending tool call."""
        if not server.resolve_approval(correlation_id, decision.approved):
            raise HTTPException(
                status_code=404,
                detail=f"No pending approval: {correlation_id}",
            )
        logger.info(
            "approval_resolved",
            correlation_id=correlation_id,
            approved=decision.approved,
        )
        return {"correlation_id": correlation_id, "approved": decision.approved}

    if sse is None:
        return app

    app.state.sse_endpoint = SseEndpoint(server, sse, on_connect)
    app.add_route("/sse", app.state.sse_endpoint, methods=["GET"])
    app.mount("/messages/", app=sse.handle_post_message)
    return app
