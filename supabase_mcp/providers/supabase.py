"""Supabase provider - implements BackendProvider using the supabase client."""

from __future__ import annotations

import dataclasses
import json
from contextlib import contextmanager
from typing import Any, Iterator

import httpx
import structlog
from postgrest.utils import sanitize_param
from pydantic import BaseModel
from supabase import AsyncClient, acreate_client

from supabase_mcp.errors import UpstreamError
from supabase_mcp.providers.base import BackendProvider
from supabase_mcp.queries import (
    Condition,
    DeleteQuery,
    InsertQuery,
    JoinSpec,
    SelectQuery,
    UpdateQuery,
    project,
)

logger = structlog.get_logger()

# Array operators take {a,b} literals, "in" takes (a,b)
_ARRAY_OPERATORS = {"cs", "cd", "ov"}


def _error_message(exc: Exception) -> str:
    """Best-effort human message from postgrest/gotrue/storage/functions errors."""
    message = getattr(exc, "message", None)
    if message:
        return str(message)
    if exc.args and isinstance(exc.args[0], dict):
        payload = exc.args[0]
        return str(payload.get("message") or payload.get("error") or payload)
    return str(exc) or type(exc).__name__


@contextmanager
def _upstream(action: str) -> Iterator[None]:
    """Re-raise anything the client library throws as an UpstreamError."""
    try:
        yield
    except UpstreamError:
        raise
    except Exception as e:
        logger.error("supabase_request_failed", action=action, error=str(e))
        raise UpstreamError(_error_message(e)) from e


def _jsonable(value: Any) -> Any:
    """Convert client library responses (pydantic models, dataclasses) to plain data."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, httpx.Response):
        return value.json()
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value


def format_value(operator: str, value: Any) -> str:
    """Render a filter operand in PostgREST syntax."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        # Members holding reserved characters are double-quoted
        inner = ",".join(sanitize_param(format_value("eq", v)) for v in value)
        return f"{{{inner}}}" if operator in _ARRAY_OPERATORS else f"({inner})"
    if isinstance(value, dict):
        return json.dumps(value)
    return str(value)


def embed_clause(join: JoinSpec, base_table: str) -> str:
    """Render a join as a PostgREST embedded resource.

    The foreign-key column on the queried table is used as the relationship
    hint; an ``id`` column (the referenced side) embeds by table name only.
    """
    if join.type in ("right", "full"):
        raise UpstreamError(
            f"Join type '{join.type}' is not supported by the Supabase data API"
        )
    target = join.table
    hint = join.column_for(base_table)
    if hint and hint != "id":
        target += f"!{hint}"
    if join.type == "inner":
        target += "!inner"
    return f"{target}(*)"


def select_clause(query: SelectQuery) -> str:
    parts = list(query.columns) or ["*"]
    parts.extend(embed_clause(j, query.table) for j in query.joins)
    return ",".join(parts)


def _apply(builder, conditions: tuple[Condition, ...]):
    for c in conditions:
        builder = builder.filter(c.column, c.operator, format_value(c.operator, c.value))
    return builder


def _roles(user_payload: dict) -> list[str]:
    user = user_payload.get("user") or user_payload
    return list((user.get("app_metadata") or {}).get("roles") or [])


class SupabaseProvider(BackendProvider):
    """Backend provider over an async Supabase client."""

    def __init__(self, client: AsyncClient):
        self._client = client

    @classmethod
    async def connect(cls, url: str, key: str) -> SupabaseProvider:
        """Create the async client for ``url`` authenticated with a service key."""
        with _upstream("connect"):
            client = await acreate_client(url, key)
        logger.info("supabase_client_ready", url=url)
        return cls(client)

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    async def select(self, query: SelectQuery) -> list[dict]:
        builder = self._client.table(query.table).select(select_clause(query))
        builder = _apply(builder, query.conditions)
        with _upstream("select"):
            resp = await builder.execute()
        return resp.data

    async def insert(self, query: InsertQuery) -> list[dict]:
        with _upstream("insert"):
            resp = await self._client.table(query.table).insert(query.row).execute()
        return project(resp.data, query.returning)

    async def update(self, query: UpdateQuery) -> list[dict]:
        builder = _apply(self._client.table(query.table).update(query.values), query.conditions)
        with _upstream("update"):
            resp = await builder.execute()
        return project(resp.data, query.returning)

    async def delete(self, query: DeleteQuery) -> list[dict]:
        builder = _apply(self._client.table(query.table).delete(), query.conditions)
        with _upstream("delete"):
            resp = await builder.execute()
        return project(resp.data, query.returning)

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    async def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        cache_control: str | None = None,
        content_type: str | None = None,
        upsert: bool | None = None,
    ) -> dict:
        file_options: dict[str, str] = {}
        if cache_control:
            file_options["cache-control"] = cache_control
        if content_type:
            file_options["content-type"] = content_type
        if upsert is not None:
            file_options["upsert"] = "true" if upsert else "false"

        with _upstream("upload"):
            resp = await self._client.storage.from_(bucket).upload(
                path, content, file_options or None
            )
        return _jsonable(resp)

    async def download(self, bucket: str, path: str) -> bytes:
        with _upstream("download"):
            return await self._client.storage.from_(bucket).download(path)

    # ------------------------------------------------------------------
    # Edge functions
    # ------------------------------------------------------------------

    async def invoke(
        self,
        function: str,
        body: dict | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        invoke_options: dict[str, Any] = {"body": body}
        if headers:
            invoke_options["headers"] = headers
        with _upstream("invoke"):
            return await self._client.functions.invoke(function, invoke_options=invoke_options)

    # ------------------------------------------------------------------
    # Auth admin
    # ------------------------------------------------------------------

    async def list_users(self, page: int = 1, per_page: int = 50) -> dict:
        with _upstream("list_users"):
            users = await self._client.auth.admin.list_users(page=page, per_page=per_page)
        return {"page": page, "per_page": per_page, "users": _jsonable(users)}

    async def get_user(self, user_id: str) -> dict:
        with _upstream("get_user"):
            resp = await self._client.auth.admin.get_user_by_id(user_id)
        return _jsonable(resp)

    async def create_user(
        self, email: str, password: str, metadata: dict | None = None
    ) -> dict:
        attributes: dict[str, Any] = {
            "email": email,
            "password": password,
            "email_confirm": True,
        }
        if metadata is not None:
            attributes["user_metadata"] = metadata
        with _upstream("create_user"):
            resp = await self._client.auth.admin.create_user(attributes)
        return _jsonable(resp)

    async def update_user(
        self,
        user_id: str,
        email: str | None = None,
        password: str | None = None,
        metadata: dict | None = None,
    ) -> dict:
        attributes: dict[str, Any] = {}
        if email is not None:
            attributes["email"] = email
        if password is not None:
            attributes["password"] = password
        if metadata is not None:
            attributes["user_metadata"] = metadata
        with _upstream("update_user"):
            resp = await self._client.auth.admin.update_user_by_id(user_id, attributes)
        return _jsonable(resp)

    async def delete_user(self, user_id: str) -> None:
        with _upstream("delete_user"):
            await self._client.auth.admin.delete_user(user_id)

    async def assign_role(self, user_id: str, role: str) -> dict:
        roles = _roles(await self.get_user(user_id))
        if role not in roles:
            roles.append(role)
        return await self._set_roles(user_id, roles)

    async def remove_role(self, user_id: str, role: str) -> dict:
        roles = [r for r in _roles(await self.get_user(user_id)) if r != role]
        return await self._set_roles(user_id, roles)

    async def _set_roles(self, user_id: str, roles: list[str]) -> dict:
        with _upstream("set_roles"):
            resp = await self._client.auth.admin.update_user_by_id(
                user_id, {"app_metadata": {"roles": roles}}
            )
        return _jsonable(resp)
