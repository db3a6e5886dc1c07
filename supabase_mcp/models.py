"""Pydantic models for tool request validation.

Each tool's raw argument bag is decoded into one of these at the dispatcher
boundary. Filters and joins are checked here too, so a malformed request
never reaches the approval gate or the backend.
"""

from __future__ import annotations

import base64
import binascii
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from supabase_mcp.queries import (
    Condition,
    JoinSpec,
    parse_filter,
    parse_joins,
)


class ToolRequest(BaseModel):
    """Base for tool requests; unknown arguments are ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class FilteredRequest(ToolRequest):
    filter: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _check_filter(self):
        parse_filter(self.filter)
        return self

    @property
    def conditions(self) -> tuple[Condition, ...]:
        return parse_filter(self.filter)


# ---------------------------------------------------------------------------
# Data
# ---------------------------------------------------------------------------


class CreateRecordRequest(ToolRequest):
    table: str
    data: dict[str, Any]
    returning: list[str] | None = None


class ReadRecordsRequest(FilteredRequest):
    table: str
    select: list[str] | None = None
    joins: list[dict[str, Any]] | None = None

    @model_validator(mode="after")
    def _check_joins(self):
        parse_joins(self.joins)
        return self

    @property
    def join_specs(self) -> tuple[JoinSpec, ...]:
        return parse_joins(self.joins)


class UpdateRecordRequest(FilteredRequest):
    table: str
    data: dict[str, Any]
    returning: list[str] | None = None


class DeleteRecordRequest(FilteredRequest):
    table: str
    returning: list[str] | None = None


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


class FilePayload(ToolRequest):
    content: str
    encoding: Literal["base64", "utf-8"] = "base64"

    @model_validator(mode="after")
    def _check_content(self):
        self.decoded()
        return self

    def decoded(self) -> bytes:
        """Return the raw bytes of the payload."""
        if self.encoding == "utf-8":
            return self.content.encode("utf-8")
        try:
            return base64.b64decode(self.content, validate=True)
        except binascii.Error as e:
            raise ValueError(f"content is not valid base64: {e}") from e


class UploadOptions(ToolRequest):
    cache_control: str | None = Field(default=None, alias="cacheControl")
    content_type: str | None = Field(default=None, alias="contentType")
    upsert: bool | None = None


class UploadFileRequest(ToolRequest):
    bucket: str
    path: str
    file: FilePayload
    options: UploadOptions | None = None


class DownloadFileRequest(ToolRequest):
    bucket: str
    path: str


# ---------------------------------------------------------------------------
# Edge functions
# ---------------------------------------------------------------------------


class InvokeOptions(ToolRequest):
    headers: dict[str, str] | None = None
    response_type: Literal["json", "text", "arraybuffer"] | None = Field(
        default=None, alias="responseType"
    )


class InvokeFunctionRequest(ToolRequest):
    function: str
    params: dict[str, Any] | None = None
    options: InvokeOptions | None = None


# ---------------------------------------------------------------------------
# Management
# ---------------------------------------------------------------------------


class EmptyRequest(ToolRequest):
    pass


class ProjectRequest(ToolRequest):
    project_id: str


class CreateProjectRequest(ToolRequest):
    name: str
    organization_id: str
    region: str
    db_pass: str
    plan: Literal["free", "pro", "team", "enterprise"] = "free"


class OrganizationRequest(ToolRequest):
    organization_id: str


class CreateOrganizationRequest(ToolRequest):
    name: str


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class ListUsersRequest(ToolRequest):
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=50, ge=1, le=1000)


class UserRequest(ToolRequest):
    user_id: str


class CreateUserRequest(ToolRequest):
    email: str
    password: str
    data: dict[str, Any] | None = None


class UpdateUserRequest(ToolRequest):
    user_id: str
    email: str | None = None
    password: str | None = None
    data: dict[str, Any] | None = None


class UserRoleRequest(ToolRequest):
    user_id: str
    role: str


REQUEST_MODELS: dict[str, type[ToolRequest]] = {
    "create_record": CreateRecordRequest,
    "read_records": ReadRecordsRequest,
    "update_record": UpdateRecordRequest,
    "delete_record": DeleteRecordRequest,
    "upload_file": UploadFileRequest,
    "download_file": DownloadFileRequest,
    "invoke_function": InvokeFunctionRequest,
    "list_projects": EmptyRequest,
    "get_project": ProjectRequest,
    "create_project": CreateProjectRequest,
    "delete_project": ProjectRequest,
    "list_organizations": EmptyRequest,
    "get_organization": OrganizationRequest,
    "create_organization": CreateOrganizationRequest,
    "get_project_api_keys": ProjectRequest,
    "list_users": ListUsersRequest,
    "get_user": UserRequest,
    "create_user": CreateUserRequest,
    "update_user": UpdateUserRequest,
    "delete_user": UserRequest,
    "assign_user_role": UserRoleRequest,
    "remove_user_role": UserRoleRequest,
}
