"""Transports: stdio and SSE over HTTP."""

from __future__ import annotations

import asyncio

import structlog
import uvicorn
from mcp.server.sse import SseServerTransport
from mcp.server.stdio import stdio_server

from supabase_mcp.main import create_app
from supabase_mcp.server import SupabaseMCPServer

logger = structlog.get_logger()


class ConnectionTimeoutError(Exception):
    """No client opened the SSE stream in time."""


def _http_server(app, host: str, port: int) -> uvicorn.Server:
    config = uvicorn.Config(app, host=host, port=port, log_level="warning")
    return uvicorn.Server(config)


async def serve_stdio(server: SupabaseMCPServer, host: str, port: int) -> None:
    """Serve MCP on stdin/stdout.

    With approvals enabled the approvals API is served on ``host:port``
    alongside, since stdio leaves no other way to resolve tickets.
    """
    http = None
    http_task = None
    if server.gate is not None:
        http = _http_server(create_app(server), host, port)
        http_task = asyncio.create_task(http.serve())
        logger.info("approvals_api_started", host=host, port=port)

    logger.info("stdio_transport_started")
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream)
    finally:
        if http is not None:
            http.should_exit = True
            await http_task


async def serve_sse(
    server: SupabaseMCPServer,
    host: str,
    port: int,
    connect_timeout: float = 30.0,
) -> None:
    """Serve MCP over SSE until the HTTP server stops.

    Raises:
        ConnectionTimeoutError: If no client connects within ``connect_timeout``.
    """
    connected = asyncio.Event()
    app = create_app(server, sse=SseServerTransport("/messages/"), on_connect=connected.set)
    http = _http_server(app, host, port)
    http_task = asyncio.create_task(http.serve())
    logger.info("sse_transport_started", host=host, port=port)

    waiter = asyncio.create_task(connected.wait())
    done, _ = await asyncio.wait(
        {http_task, waiter},
        timeout=connect_timeout,
        return_when=asyncio.FIRST_COMPLETED,
    )
    if waiter not in done:
        waiter.cancel()
        if http_task in done:
            # server stopped before anyone connected; surface its error
            await http_task
            return
        logger.error("sse_connect_timeout", timeout=connect_timeout)
        http.should_exit = True
        await http_task
        raise ConnectionTimeoutError(
            f"No client connected within {connect_timeout:g} seconds"
        )

    await http_task
