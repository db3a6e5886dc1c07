"""Shared test fixtures for the Supabase MCP server.

Provides recording fakes for both collaborators so tool, dispatcher and
server tests can run without a Supabase project or network access.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from supabase_mcp.approval import ApprovalGate
from supabase_mcp.providers.base import BackendProvider
from supabase_mcp.schemas.notifications import ApprovalRequest
from supabase_mcp.server import SupabaseMCPServer
from supabase_mcp.tools import SupabaseTools


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------


class FakeBackend(BackendProvider):
    """In-memory backend that records every call it receives.

    Table writes echo their input back, so a test can see exactly what the
    tool layer sent.
    """

    def __init__(self):
        self.calls: list[tuple[str, tuple]] = []
        self.rows: list[dict] = []
        self.files: dict[tuple[str, str], bytes] = {}
        self.function_result: Any = b'{"ok": true}'
        self.users: dict[str, dict] = {}

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, args))

    async def select(self, query):
        self._record("select", query)
        return list(self.rows)

    async def insert(self, query):
        self._record("insert", query)
        return [dict(query.row)]

    async def update(self, query):
        self._record("update", query)
        return [dict(query.values)]

    async def delete(self, query):
        self._record("delete", query)
        return []

    async def upload(self, bucket, path, content, cache_control=None, content_type=None, upsert=None):
        self._record("upload", bucket, path, content, cache_control, content_type, upsert)
        self.files[(bucket, path)] = content
        return {"path": path, "full_path": f"{bucket}/{path}"}

    async def download(self, bucket, path):
        self._record("download", bucket, path)
        return self.files[(bucket, path)]

    async def invoke(self, function, body=None, headers=None):
        self._record("invoke", function, body, headers)
        return self.function_result

    async def list_users(self, page=1, per_page=50):
        self._record("list_users", page, per_page)
        return {"page": page, "per_page": per_page, "users": list(self.users.values())}

    async def get_user(self, user_id):
        self._record("get_user", user_id)
        return {"user": self.users.get(user_id, {"id": user_id})}

    async def create_user(self, email, password, metadata=None):
        self._record("create_user", email, password, metadata)
        user = {"id": "u-new", "email": email, "user_metadata": metadata or {}}
        self.users[user["id"]] = user
        return {"user": user}

    async def update_user(self, user_id, email=None, password=None, metadata=None):
        self._record("update_user", user_id, email, password, metadata)
        return {"user": {"id": user_id, "email": email}}

    async def delete_user(self, user_id):
        self._record("delete_user", user_id)

    async def assign_role(self, user_id, role):
        self._record("assign_role", user_id, role)
        return {"user": {"id": user_id, "app_metadata": {"roles": [role]}}}

    async def remove_role(self, user_id, role):
        self._record("remove_role", user_id, role)
        return {"user": {"id": user_id, "app_metadata": {"roles": []}}}


class FakeManagement:
    """Records management API calls and returns canned payloads."""

    def __init__(self):
        self.calls: list[tuple[str, tuple]] = []

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, args))

    async def list_projects(self):
        self._record("list_projects")
        return [{"id": "proj-1", "name": "demo"}]

    async def get_project(self, project_id):
        self._record("get_project", project_id)
        return {"id": project_id}

    async def create_project(self, name, organization_id, region, db_pass, plan="free"):
        self._record("create_project", name, organization_id, region, db_pass, plan)
        return {"id": "proj-new", "name": name, "plan": plan}

    async def delete_project(self, project_id):
        self._record("delete_project", project_id)
        return "Project deleted successfully"

    async def list_organizations(self):
        self._record("list_organizations")
        return [{"id": "org-1"}]

    async def get_organization(self, organization_id):
        self._record("get_organization", organization_id)
        return {"id": organization_id}

    async def create_organization(self, name):
        self._record("create_organization", name)
        return {"id": "org-new", "name": name}

    async def get_project_api_keys(self, project_id):
        self._record("get_project_api_keys", project_id)
        return [{"name": "anon", "api_key": "xyz"}]

    async def close(self):
        self._record("close")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def fake_management():
    return FakeManagement()


@pytest.fixture
def tools(fake_backend, fake_management):
    return SupabaseTools(fake_backend, fake_management)


@pytest.fixture
def mcp_server(tools):
    """Server without the approval gate."""
    return SupabaseMCPServer(tools)


@pytest.fixture
def gated_server(tools):
    """Server that holds every call until it is resolved."""
    return SupabaseMCPServer(tools, require_approval=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def wait_for_ticket(gate: ApprovalGate) -> ApprovalRequest:
    """Yield to the loop until the gate has a pending ticket."""
    for _ in range(200):
        if gate.pending:
            return gate.pending[0]
        await asyncio.sleep(0)
    raise AssertionError("no approval ticket was created")
