"""Management API client - projects, organizations and API keys."""

from __future__ import annotations

import httpx
import structlog

from supabase_mcp.errors import UpstreamError

logger = structlog.get_logger()

_DEFAULT_BASE = "https://api.supabase.com/v1"


class ManagementClient:
    """Bearer-authenticated client for the Supabase management REST API."""

    def __init__(
        self,
        token: str,
        base_url: str = _DEFAULT_BASE,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _request(self, action: str, method: str, path: str, **kwargs) -> dict | list:
        """Make an API request and return parsed JSON.

        ``action`` names the operation in error messages, e.g. "list projects".
        """
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.error("management_api_unreachable", action=action, error=str(e))
            raise UpstreamError(f"Failed to reach the management API: {e}") from e

        if resp.is_error:
            logger.warning(
                "management_api_error",
                action=action,
                status=resp.status_code,
                path=path,
            )
            msg = f"Failed to {action}: {resp.status_code} {resp.reason_phrase}"
            if resp.text:
                msg += f" {resp.text[:500]}"
            raise UpstreamError(msg)
        if resp.status_code == 204 or not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamError(f"Failed to {action}: response was not JSON") from e

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def list_projects(self) -> list:
        return await self._request("list projects", "GET", "/projects")

    async def get_project(self, project_id: str) -> dict:
        return await self._request("get project", "GET", f"/projects/{project_id}")

    async def create_project(
        self,
        name: str,
        organization_id: str,
        region: str,
        db_pass: str,
        plan: str = "free",
    ) -> dict:
        payload = {
            "name": name,
            "organization_id": organization_id,
            "region": region,
            "db_pass": db_pass,
            "plan": plan,
        }
        return await self._request("create project", "POST", "/projects", json=payload)

    async def delete_project(self, project_id: str) -> str:
        await self._request("delete project", "DELETE", f"/projects/{project_id}")
        return "Project deleted successfully"

    async def get_project_api_keys(self, project_id: str) -> list:
        return await self._request(
            "get project API keys", "GET", f"/projects/{project_id}/api-keys"
        )

    # ------------------------------------------------------------------
    # Organizations
    # ------------------------------------------------------------------

    async def list_organizations(self) -> list:
        return await self._request("list organizations", "GET", "/organizations")

    async def get_organization(self, organization_id: str) -> dict:
        return await self._request(
            "get organization", "GET", f"/organizations/{organization_id}"
        )

    async def create_organization(self, name: str) -> dict:
        return await self._request(
            "create organization", "POST", "/organizations", json={"name": name}
        )

    async def close(self) -> None:
        await self._client.aclose()
