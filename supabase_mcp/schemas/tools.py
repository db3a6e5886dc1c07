"""Tool catalog and tool call schemas."""

from __future__ import annotations

import json
from typing import Any, Literal

from mcp import types
from pydantic import BaseModel, ConfigDict, Field


class ToolParameter(BaseModel):
    """Parameter definition for a tool."""

    name: str
    type: str  # string, integer, boolean, number, array, object
    description: str
    required: bool = True
    enum: list[str] | None = None
    items: dict[str, Any] | None = None  # element schema for arrays
    properties: list[ToolParameter] | None = None  # nested object fields

    def json_schema(self) -> dict[str, Any]:
        """Render this parameter as a JSON-schema property."""
        prop: dict[str, Any] = {
            "type": self.type,
            "description": self.description,
        }
        if self.enum:
            prop["enum"] = self.enum
        if self.items:
            prop["items"] = self.items
        if self.properties:
            prop["properties"] = {p.name: p.json_schema() for p in self.properties}
            nested_required = [p.name for p in self.properties if p.required]
            if nested_required:
                prop["required"] = nested_required
        return prop


class ToolDefinition(BaseModel):
    """Definition of a single tool exposed by the server."""

    name: str  # e.g. "create_record"
    description: str
    parameters: list[ToolParameter] = []

    @property
    def required_fields(self) -> list[str]:
        return [p.name for p in self.parameters if p.required]

    def input_schema(self) -> dict[str, Any]:
        """Convert the parameter list to an MCP ``inputSchema``."""
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {p.name: p.json_schema() for p in self.parameters},
        }
        if self.required_fields:
            schema["required"] = self.required_fields
        return schema

    def to_mcp(self) -> types.Tool:
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema(),
        )


class ToolCatalog(BaseModel):
    """The fixed, ordered set of tools a server build offers."""

    server_name: str
    description: str
    tools: list[ToolDefinition]

    def get(self, name: str) -> ToolDefinition | None:
        for tool in self.tools:
            if tool.name == name:
                return tool
        return None

    @property
    def names(self) -> list[str]:
        return [t.name for t in self.tools]


class ToolCall(BaseModel):
    """A tool call request."""

    name: str
    arguments: dict[str, Any] = {}


class TextBlock(BaseModel):
    """A single text content element of a response envelope."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class ToolResponseEnvelope(BaseModel):
    """Uniform wrapper returned for every tool call, success or failure."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    content: tuple[TextBlock, ...]
    is_error: bool | None = Field(default=None, alias="isError")

    @classmethod
    def success(cls, result: Any) -> ToolResponseEnvelope:
        """Wrap a collaborator result; strings pass through, the rest is pretty JSON."""
        if isinstance(result, str):
            text = result
        else:
            text = json.dumps(result, indent=2, default=str)
        return cls(content=(TextBlock(text=text),))

    @classmethod
    def failure(cls, message: str) -> ToolResponseEnvelope:
        return cls(content=(TextBlock(text=f"Error: {message}"),), is_error=True)

    @property
    def text(self) -> str:
        return "\n".join(block.text for block in self.content)

    def to_mcp_content(self) -> list[types.TextContent]:
        return [types.TextContent(type="text", text=block.text) for block in self.content]
