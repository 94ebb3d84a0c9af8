#!/usr/bin/env python3
"""
models.py - Catalog data models

Read-only structures derived from an OpenAPI document: models (one per
server), tools (one per operation), prompts (one per tool) and the Catalog
that bundles them with the invocation lookup maps.
"""

from dataclasses import dataclass, field
from typing import Any

from .constants import CONTENT_TYPE_JSON


# ============================================================================
# Core Data Models
# ============================================================================


@dataclass(frozen=True)
class Model:
    """An invocable target server declared under ``servers``."""

    id: str
    name: str
    description: str
    capabilities: tuple[str, ...]
    tools_endpoint: str
    server_url: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to the legacy REST format"""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "capabilities": list(self.capabilities),
            "tools_endpoint": self.tools_endpoint,
        }


@dataclass(frozen=True)
class Tool:
    """One invocable OpenAPI operation."""

    id: str
    name: str
    description: str
    parameters: dict[str, Any] | None = None
    returns: dict[str, Any] | None = None

    @property
    def required(self) -> list[str]:
        if not self.parameters:
            return []
        return list(self.parameters.get("required") or [])

    def missing_parameters(self, supplied: dict[str, Any] | None) -> list[str]:
        """Required parameter keys absent from ``supplied``."""
        supplied = supplied or {}
        return [name for name in self.required if name not in supplied]

    def to_dict(self) -> dict[str, Any]:
        """Convert to the legacy REST format"""
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
        }
        if self.parameters is not None:
            data["parameters"] = self.parameters
        if self.returns is not None:
            data["returns"] = self.returns
        return data

    def to_mcp_format(self) -> dict[str, Any]:
        """Convert to MCP ``tools/list`` format"""
        return {
            "name": self.id,
            "description": self.description or self.name,
            "inputSchema": self.parameters or {"type": "object", "properties": {}},
        }


@dataclass(frozen=True)
class PromptArgument:
    name: str
    description: str = ""
    required: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "required": self.required}


@dataclass(frozen=True)
class Prompt:
    """Prompt derived 1:1 from a tool."""

    name: str
    description: str
    arguments: tuple[PromptArgument, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "description": self.description}
        if self.arguments is not None:
            data["arguments"] = [argument.to_dict() for argument in self.arguments]
        return data


# ============================================================================
# Catalog
# ============================================================================


@dataclass
class Catalog:
    """Everything the gateway needs to serve one OpenAPI document."""

    title: str
    description: str
    version: str
    machine_name: str
    models: list[Model] = field(default_factory=list)
    tools: list[Tool] = field(default_factory=list)
    prompts: list[Prompt] = field(default_factory=list)
    invocations: dict[str, str] = field(default_factory=dict)
    content_types: dict[str, str] = field(default_factory=dict)
    security_schemes: dict[str, Any] = field(default_factory=dict)
    requires_auth: bool = False
    source_url: str | None = None

    def get_model(self, model_id: str | None) -> Model | None:
        for model in self.models:
            if model.id == model_id:
                return model
        return None

    @property
    def default_model(self) -> Model | None:
        return self.models[0] if self.models else None

    def get_tool(self, tool_id: str | None) -> Tool | None:
        for tool in self.tools:
            if tool.id == tool_id:
                return tool
        return None

    def has_tool(self, tool_id: Any) -> bool:
        return isinstance(tool_id, str) and tool_id in self.invocations

    def route_for(self, tool_id: str) -> tuple[str, str]:
        """Return ``(METHOD, path_template)`` for a tool id."""
        method, _, path = self.invocations[tool_id].partition(" ")
        return method, path

    def content_type_for(self, tool_id: str) -> str:
        return self.content_types.get(tool_id) or CONTENT_TYPE_JSON

    def tool_ids(self) -> list[str]:
        return list(self.invocations)

    def models_response(self) -> dict[str, Any]:
        return {"type": "list", "items": [model.to_dict() for model in self.models]}

    def tools_response(self) -> dict[str, Any]:
        return {"type": "list", "items": [tool.to_dict() for tool in self.tools]}
