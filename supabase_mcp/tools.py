"""Supabase tool implementations.

Every method takes its decoded request model and makes exactly one call on
a collaborator: the ``BackendProvider`` for project data, storage, edge
functions and auth, or the ``ManagementClient`` for the management API.
"""

from __future__ import annotations

import base64
import json
from typing import Any

import structlog

from supabase_mcp.errors import UpstreamError
from supabase_mcp.models import (
    CreateOrganizationRequest,
    CreateProjectRequest,
    CreateRecordRequest,
    CreateUserRequest,
    DeleteRecordRequest,
    DownloadFileRequest,
    EmptyRequest,
    InvokeFunctionRequest,
    ListUsersRequest,
    OrganizationRequest,
    ProjectRequest,
    ReadRecordsRequest,
    UpdateRecordRequest,
    UpdateUserRequest,
    UploadFileRequest,
    UserRequest,
    UserRoleRequest,
)
from supabase_mcp.providers.base import BackendProvider
from supabase_mcp.providers.management import ManagementClient
from supabase_mcp.queries import DeleteQuery, InsertQuery, SelectQuery, UpdateQuery

logger = structlog.get_logger()


def decode_function_result(raw: Any, response_type: str | None = None) -> Any:
    """Decode an edge function response body according to ``response_type``.

    ``json`` parses, ``text`` decodes, ``arraybuffer`` base64-encodes. With no
    type the body is parsed as JSON when possible and returned as text otherwise.
    """
    if not isinstance(raw, (bytes, bytearray)):
        return raw
    if response_type == "arraybuffer":
        return base64.b64encode(raw).decode("ascii")

    text = raw.decode("utf-8", errors="replace")
    if response_type == "text":
        return text
    try:
        return json.loads(text)
    except ValueError as e:
        if response_type == "json":
            raise UpstreamError(f"Function response was not valid JSON: {e}") from e
        return text


def render_download(bucket: str, path: str, data: bytes) -> dict:
    """Describe downloaded bytes, as utf-8 text when decodable and base64 otherwise."""
    try:
        content = data.decode("utf-8")
        encoding = "utf-8"
    except UnicodeDecodeError:
        content = base64.b64encode(data).decode("ascii")
        encoding = "base64"
    return {
        "bucket": bucket,
        "path": path,
        "size": len(data),
        "encoding": encoding,
        "content": content,
    }


class SupabaseTools:
    """Tool implementations for a Supabase project and its management API."""

    def __init__(self, backend: BackendProvider, management: ManagementClient):
        self.backend = backend
        self.management = management

    # -- Data ---------------------------------------------------------------

    async def create_record(self, req: CreateRecordRequest) -> Any:
        query = InsertQuery(
            table=req.table, row=req.data, returning=tuple(req.returning or ())
        )
        return await self.backend.insert(query)

    async def read_records(self, req: ReadRecordsRequest) -> Any:
        query = SelectQuery(
            table=req.table,
            columns=tuple(req.select or ()),
            conditions=req.conditions,
            joins=req.join_specs,
        )
        return await self.backend.select(query)

    async def update_record(self, req: UpdateRecordRequest) -> Any:
        query = UpdateQuery(
            table=req.table,
            values=req.data,
            conditions=req.conditions,
            returning=tuple(req.returning or ()),
        )
        return await self.backend.update(query)

    async def delete_record(self, req: DeleteRecordRequest) -> Any:
        query = DeleteQuery(
            table=req.table,
            conditions=req.conditions,
            returning=tuple(req.returning or ()),
        )
        return await self.backend.delete(query)

    # -- Storage ------------------------------------------------------------

    async def upload_file(self, req: UploadFileRequest) -> Any:
        options = req.options
        return await self.backend.upload(
            req.bucket,
            req.path,
            req.file.decoded(),
            cache_control=options.cache_control if options else None,
            content_type=options.content_type if options else None,
            upsert=options.upsert if options else None,
        )

    async def download_file(self, req: DownloadFileRequest) -> dict:
        data = await self.backend.download(req.bucket, req.path)
        return render_download(req.bucket, req.path, data)

    # -- Edge functions -----------------------------------------------------

    async def invoke_function(self, req: InvokeFunctionRequest) -> Any:
        options = req.options
        raw = await self.backend.invoke(
            req.function,
            body=req.params,
            headers=options.headers if options else None,
        )
        return decode_function_result(raw, options.response_type if options else None)

    # -- Management ---------------------------------------------------------

    async def list_projects(self, req: EmptyRequest) -> Any:
        return await self.management.list_projects()

    async def get_project(self, req: ProjectRequest) -> Any:
        return await self.management.get_project(req.project_id)

    async def create_project(self, req: CreateProjectRequest) -> Any:
        return await self.management.create_project(
            name=req.name,
            organization_id=req.organization_id,
            region=req.region,
            db_pass=req.db_pass,
            plan=req.plan,
        )

    async def delete_project(self, req: ProjectRequest) -> str:
        return await self.management.delete_project(req.project_id)

    async def list_organizations(self, req: EmptyRequest) -> Any:
        return await self.management.list_organizations()

    async def get_organization(self, req: OrganizationRequest) -> Any:
        return await self.management.get_organization(req.organization_id)

    async def create_organization(self, req: CreateOrganizationRequest) -> Any:
        return await self.management.create_organization(req.name)

    async def get_project_api_keys(self, req: ProjectRequest) -> Any:
        return await self.management.get_project_api_keys(req.project_id)

    # -- Users --------------------------------------------------------------

    async def list_users(self, req: ListUsersRequest) -> Any:
        return await self.backend.list_users(page=req.page, per_page=req.per_page)

    async def get_user(self, req: UserRequest) -> Any:
        return await self.backend.get_user(req.user_id)

    async def create_user(self, req: CreateUserRequest) -> Any:
        return await self.backend.create_user(req.email, req.password, metadata=req.data)

    async def update_user(self, req: UpdateUserRequest) -> Any:
        return await self.backend.update_user(
            req.user_id, email=req.email, password=req.password, metadata=req.data
        )

    async def delete_user(self, req: UserRequest) -> str:
        await self.backend.delete_user(req.user_id)
        return "User deleted successfully"

    async def assign_user_role(self, req: UserRoleRequest) -> str:
        await self.backend.assign_role(req.user_id, req.role)
        logger.info("user_role_assigned", user_id=req.user_id, role=req.role)
        return "Role assigned successfully"

    async def remove_user_role(self, req: UserRoleRequest) -> str:
        await self.backend.remove_role(req.user_id, req.role)
        logger.info("user_role_removed", user_id=req.user_id, role=req.role)
        return "Role removed successfully"
