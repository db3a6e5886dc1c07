"""Tests for the management API client - HTTP is served by httpx.MockTransport."""

from __future__ import annotations

import json

import httpx
import pytest

from supabase_mcp.errors import UpstreamError
from supabase_mcp.providers.management import ManagementClient


def _client(handler) -> ManagementClient:
    return ManagementClient(
        "sbp_test_token",
        base_url="https://api.example.test/v1",
        transport=httpx.MockTransport(handler),
    )


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_projects_sends_bearer_token():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"id": "proj-1"}])

    client = _client(handler)
    result = await client.list_projects()
    await client.close()

    assert result == [{"id": "proj-1"}]
    assert seen[0].method == "GET"
    assert str(seen[0].url) == "https://api.example.test/v1/projects"
    assert seen[0].headers["Authorization"] == "Bearer sbp_test_token"


@pytest.mark.asyncio
async def test_create_project_payload_defaults_to_free_plan():
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(201, json={"id": "proj-new"})

    client = _client(handler)
    result = await client.create_project("demo", "org-1", "us-east-1", "s3cret")

    assert result == {"id": "proj-new"}
    assert bodies == [{
        "name": "demo",
        "organization_id": "org-1",
        "region": "us-east-1",
        "db_pass": "s3cret",
        "plan": "free",
    }]


@pytest.mark.asyncio
async def test_delete_project_returns_message():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "DELETE"
        assert request.url.path == "/v1/projects/proj-1"
        return httpx.Response(200, json={"id": "proj-1"})

    client = _client(handler)
    assert await client.delete_project("proj-1") == "Project deleted successfully"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "call,method,path",
    [
        (lambda c: c.get_project("proj-1"), "GET", "/v1/projects/proj-1"),
        (lambda c: c.get_project_api_keys("proj-1"), "GET", "/v1/projects/proj-1/api-keys"),
        (lambda c: c.list_organizations(), "GET", "/v1/organizations"),
        (lambda c: c.get_organization("org-1"), "GET", "/v1/organizations/org-1"),
        (lambda c: c.create_organization("Acme"), "POST", "/v1/organizations"),
    ],
)
async def test_endpoint_routing(call, method, path):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path))
        return httpx.Response(200, json={})

    await call(_client(handler))
    assert seen == [(method, path)]


@pytest.mark.asyncio
async def test_no_content_response():
    client = _client(lambda request: httpx.Response(204))
    assert await client.get_project("proj-1") == {}


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_error_status_maps_to_upstream_error():
    client = _client(lambda request: httpx.Response(404, text="project not found"))
    with pytest.raises(UpstreamError) as exc_info:
        await client.get_project("missing")
    assert exc_info.value.message == "Failed to get project: 404 Not Found project not found"


@pytest.mark.asyncio
async def test_error_body_is_truncated():
    client = _client(lambda request: httpx.Response(500, text="x" * 2000))
    with pytest.raises(UpstreamError) as exc_info:
        await client.list_projects()
    assert exc_info.value.message.startswith("Failed to list projects: 500 Internal Server Error ")
    assert len(exc_info.value.message) < 600


@pytest.mark.asyncio
async def test_network_failure_maps_to_upstream_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    with pytest.raises(UpstreamError, match="Failed to reach the management API"):
        await client.list_organizations()


@pytest.mark.asyncio
async def test_non_json_body():
    client = _client(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(UpstreamError, match="response was not JSON"):
        await client.list_projects()
