"""Tests for the SSE connection-establishment timeout."""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest

from supabase_mcp.transport import ConnectionTimeoutError, serve_sse


class FakeHTTPServer:
    """Stands in for uvicorn.Server; runs until told to exit."""

    def __init__(self, on_start=None):
        self.should_exit = False
        self.on_start = on_start

    async def serve(self):
        if self.on_start is not None:
            self.on_start()
            await asyncio.sleep(0.05)
            return
        while not self.should_exit:
            await asyncio.sleep(0.005)


@pytest.mark.asyncio
async def test_no_client_times_out_and_stops_http_server(mcp_server):
    fake = FakeHTTPServer()
    with patch("supabase_mcp.transport._http_server", return_value=fake):
        with pytest.raises(ConnectionTimeoutError, match="No client connected within 0.05 seconds"):
            await serve_sse(mcp_server, "127.0.0.1", 0, connect_timeout=0.05)
    assert fake.should_exit is True


@pytest.mark.asyncio
async def test_connected_client_keeps_serving(mcp_server):
    captured = {}

    def fake_create_app(server, sse=None, on_connect=None):
        captured["on_connect"] = on_connect
        return object()

    fake = FakeHTTPServer(on_start=lambda: captured["on_connect"]())
    with patch("supabase_mcp.transport.create_app", side_effect=fake_create_app), \
            patch("supabase_mcp.transport._http_server", return_value=fake):
        await serve_sse(mcp_server, "127.0.0.1", 0, connect_timeout=1.0)

    assert fake.should_exit is False
