"""Supabase tool catalog - tool definitions."""

from supabase_mcp.schemas.tools import ToolCatalog, ToolDefinition, ToolParameter

_STRING_LIST = {"type": "string"}

_FILTER_DESCRIPTION = (
    "Filter conditions (optional). Maps a column to a value for equality, "
    "or to an object of operator/value pairs, e.g. {\"age\": {\"gt\": 18}}. "
    "All conditions are combined with AND."
)

_RETURNING = ToolParameter(
    name="returning",
    type="array",
    items=_STRING_LIST,
    description="Fields to return (optional)",
    required=False,
)


def _table() -> ToolParameter:
    return ToolParameter(name="table", type="string", description="Table name")


def _project_id() -> ToolParameter:
    return ToolParameter(name="project_id", type="string", description="Project ID")


def _user_id() -> ToolParameter:
    return ToolParameter(name="user_id", type="string", description="User ID")


CATALOG = ToolCatalog(
    server_name="supabase-server",
    description=(
        "Table CRUD, file storage, edge functions, project and organization "
        "management, and user administration for a Supabase project."
    ),
    tools=[
        # -- Data -------------------------------------------------------------
        ToolDefinition(
            name="create_record",
            description="Create a new record in a Supabase table",
            parameters=[
                _table(),
                ToolParameter(
                    name="data",
                    type="object",
                    description="Record data",
                ),
                _RETURNING,
            ],
        ),
        ToolDefinition(
            name="read_records",
            description="Read records from a Supabase table",
            parameters=[
                _table(),
                ToolParameter(
                    name="select",
                    type="array",
                    items=_STRING_LIST,
                    description="Fields to select (optional)",
                    required=False,
                ),
                ToolParameter(
                    name="filter",
                    type="object",
                    description=_FILTER_DESCRIPTION,
                    required=False,
                ),
                ToolParameter(
                    name="joins",
                    type="array",
                    items={
                        "type": "object",
                        "properties": {
                            "type": {
                                "type": "string",
                                "enum": ["inner", "left", "right", "full"],
                                "description": "Join type (default: left)",
                            },
                            "table": {"type": "string", "description": "Table to join"},
                            "on": {
                                "type": "string",
                                "description": "Join condition, e.g. 'posts.user_id=users.id'",
                            },
                        },
                        "required": ["table", "on"],
                    },
                    description="Tables to join, applied in order (optional)",
                    required=False,
                ),
            ],
        ),
        ToolDefinition(
            name="update_record",
            description="Update records in a Supabase table",
            parameters=[
                _table(),
                ToolParameter(
                    name="data",
                    type="object",
                    description="Update data",
                ),
                ToolParameter(
                    name="filter",
                    type="object",
                    description=_FILTER_DESCRIPTION,
                    required=False,
                ),
                _RETURNING,
            ],
        ),
        ToolDefinition(
            name="delete_record",
            description="Delete records from a Supabase table",
            parameters=[
                _table(),
                ToolParameter(
                    name="filter",
                    type="object",
                    description=_FILTER_DESCRIPTION,
                    required=False,
                ),
                _RETURNING,
            ],
        ),
        # -- Storage ----------------------------------------------------------
        ToolDefinition(
            name="upload_file",
            description="Upload a file to Supabase Storage",
            parameters=[
                ToolParameter(name="bucket", type="string", description="Storage bucket name"),
                ToolParameter(name="path", type="string", description="File path in bucket"),
                ToolParameter(
                    name="file",
                    type="object",
                    description="File to upload as an encoded payload",
                    properties=[
                        ToolParameter(
                            name="content",
                            type="string",
                            description="File content, encoded as given by 'encoding'",
                        ),
                        ToolParameter(
                            name="encoding",
                            type="string",
                            enum=["base64", "utf-8"],
                            description="Encoding of 'content' (default: base64)",
                            required=False,
                        ),
                    ],
                ),
                ToolParameter(
                    name="options",
                    type="object",
                    description="Upload options (optional)",
                    required=False,
                    properties=[
                        ToolParameter(
                            name="cacheControl",
                            type="string",
                            description="Cache-Control max-age in seconds",
                            required=False,
                        ),
                        ToolParameter(
                            name="contentType",
                            type="string",
                            description="MIME type of the file",
                            required=False,
                        ),
                        ToolParameter(
                            name="upsert",
                            type="boolean",
                            description="Overwrite an existing file",
                            required=False,
                        ),
                    ],
                ),
            ],
        ),
        ToolDefinition(
            name="download_file",
            description="Download a file from Supabase Storage",
            parameters=[
                ToolParameter(name="bucket", type="string", description="Storage bucket name"),
                ToolParameter(name="path", type="string", description="File path in bucket"),
            ],
        ),
        # -- Edge functions ---------------------------------------------------
        ToolDefinition(
            name="invoke_function",
            description="Invoke a Supabase Edge Function",
            parameters=[
                ToolParameter(name="function", type="string", description="Function name"),
                ToolParameter(
                    name="params",
                    type="object",
                    description="Function parameters (optional)",
                    required=False,
                ),
                ToolParameter(
                    name="options",
                    type="object",
                    description="Invocation options (optional)",
                    required=False,
                    properties=[
                        ToolParameter(
                            name="headers",
                            type="object",
                            description="Extra request headers",
                            required=False,
                        ),
                        ToolParameter(
                            name="responseType",
                            type="string",
                            enum=["json", "text", "arraybuffer"],
                            description="How to decode the response",
                            required=False,
                        ),
                    ],
                ),
            ],
        ),
        # -- Management -------------------------------------------------------
        ToolDefinition(
            name="list_projects",
            description="List all Supabase projects",
        ),
        ToolDefinition(
            name="get_project",
            description="Get details of a specific Supabase project",
            parameters=[_project_id()],
        ),
        ToolDefinition(
            name="create_project",
            description="Create a new Supabase project",
            parameters=[
                ToolParameter(name="name", type="string", description="Project name"),
                ToolParameter(name="organization_id", type="string", description="Organization ID"),
                ToolParameter(name="region", type="string", description="Project region"),
                ToolParameter(name="db_pass", type="string", description="Database password"),
                ToolParameter(
                    name="plan",
                    type="string",
                    enum=["free", "pro", "team", "enterprise"],
                    description="Project plan (optional, default: free)",
                    required=False,
                ),
            ],
        ),
        ToolDefinition(
            name="delete_project",
            description="Delete a Supabase project",
            parameters=[_project_id()],
        ),
        ToolDefinition(
            name="list_organizations",
            description="List all organizations",
        ),
        ToolDefinition(
            name="get_organization",
            description="Get details of a specific organization",
            parameters=[
                ToolParameter(name="organization_id", type="string", description="Organization ID"),
            ],
        ),
        ToolDefinition(
            name="create_organization",
            description="Create a new organization",
            parameters=[
                ToolParameter(name="name", type="string", description="Organization name"),
            ],
        ),
        ToolDefinition(
            name="get_project_api_keys",
            description="Get API keys for a specific Supabase project",
            parameters=[_project_id()],
        ),
        # -- Users ------------------------------------------------------------
        ToolDefinition(
            name="list_users",
            description="List all users in a project",
            parameters=[
                ToolParameter(
                    name="page",
                    type="integer",
                    description="Page number (optional, default: 1)",
                    required=False,
                ),
                ToolParameter(
                    name="per_page",
                    type="integer",
                    description="Items per page (optional, default: 50)",
                    required=False,
                ),
            ],
        ),
        ToolDefinition(
            name="get_user",
            description="Get details of a specific user",
            parameters=[_user_id()],
        ),
        ToolDefinition(
            name="create_user",
            description="Create a new user",
            parameters=[
                ToolParameter(name="email", type="string", description="User email"),
                ToolParameter(name="password", type="string", description="User password"),
                ToolParameter(
                    name="data",
                    type="object",
                    description="Additional user data (optional)",
                    required=False,
                ),
            ],
        ),
        ToolDefinition(
            name="update_user",
            description="Update a user",
            parameters=[
                _user_id(),
                ToolParameter(
                    name="email",
                    type="string",
                    description="New email (optional)",
                    required=False,
                ),
                ToolParameter(
                    name="password",
                    type="string",
                    description="New password (optional)",
                    required=False,
                ),
                ToolParameter(
                    name="data",
                    type="object",
                    description="Additional user data to update (optional)",
                    required=False,
                ),
            ],
        ),
        ToolDefinition(
            name="delete_user",
            description="Delete a user",
            parameters=[_user_id()],
        ),
        ToolDefinition(
            name="assign_user_role",
            description="Assign a role to a user",
            parameters=[
                _user_id(),
                ToolParameter(name="role", type="string", description="Role name"),
            ],
        ),
        ToolDefinition(
            name="remove_user_role",
            description="Remove a role from a user",
            parameters=[
                _user_id(),
                ToolParameter(name="role", type="string", description="Role name"),
            ],
        ),
    ],
)
