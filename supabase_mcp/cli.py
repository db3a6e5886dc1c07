"""Command-line entry point for the Supabase MCP server."""

from __future__ import annotations

import asyncio
import sys

import click
import structlog
from pydantic import ValidationError

from supabase_mcp.config import Settings, get_settings, missing_secrets
from supabase_mcp.errors import ToolError
from supabase_mcp.main import configure_logging
from supabase_mcp.server import build_server
from supabase_mcp.transport import ConnectionTimeoutError, serve_sse, serve_stdio

logger = structlog.get_logger()


def run_async(coro):
    """Run an async function in a new event loop."""
    return asyncio.run(coro)


async def _serve(transport: str, settings: Settings) -> None:
    server = await build_server(settings)
    try:
        if transport == "sse":
            await serve_sse(
                server,
                settings.host,
                settings.port,
                connect_timeout=settings.connect_timeout_seconds,
            )
        else:
            await serve_stdio(server, settings.host, settings.port)
    finally:
        await server.close()


@click.command()
@click.argument("transport", type=click.Choice(["stdio", "sse"]), default="stdio")
@click.argument("port", type=int, required=False)
@click.option("--host", default=None, help="Interface for the HTTP listener.")
@click.option(
    "--require-approval/--no-require-approval",
    default=None,
    help="Hold every tool call until it is approved.",
)
def main(transport: str, port: int | None, host: str | None, require_approval: bool | None):
    """Serve Supabase tools over MCP (stdio or SSE)."""
    try:
        settings = get_settings()
    except ValidationError as e:
        missing = missing_secrets(e)
        if missing:
            click.echo(
                f"Error: Missing required environment variables: {', '.join(missing)}",
                err=True,
            )
        else:
            click.echo(f"Error: Invalid configuration: {e}", err=True)
        sys.exit(1)

    overrides = {}
    if port is not None:
        overrides["port"] = port
    if host is not None:
        overrides["host"] = host
    if require_approval is not None:
        overrides["require_approval"] = require_approval
    settings = settings.model_copy(update=overrides)

    configure_logging(settings.log_level)
    logger.info("supabase_mcp_starting", transport=transport, port=settings.port)

    try:
        run_async(_serve(transport, settings))
    except ConnectionTimeoutError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except ToolError as e:
        click.echo(f"Error: Failed to start server: {e.message}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
