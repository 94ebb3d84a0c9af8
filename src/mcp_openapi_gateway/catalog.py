#!/usr/bin/env python3
# src/mcp_openapi_gateway/catalog.py
"""
Catalog - derive models, tools and prompts from an OpenAPI document

Inclusion policy for operations (all exclusions are silent; the catalog is
simply smaller):

- only GET, POST, PUT, DELETE, PATCH, HEAD and OPTIONS are considered
- every ``in: path`` parameter must appear as ``{name}`` or ``:name``
- the first operation to claim an operationId wins
"""

import logging
from collections.abc import Callable
from typing import Any

from .constants import (
    CONTENT_TYPE_JSON,
    DEFAULT_API_VERSION,
    HTTP_METHODS,
    MODEL_CAPABILITIES,
    MODEL_ID_PREFIX,
    NON_ALNUM_RUN,
    NON_ALNUM_RUN_ANYCASE,
    PARAM_BODY,
    REF_KEY,
)
from .errors import SchemaResolutionError
from .models import Catalog, Model, Prompt, PromptArgument, Tool
from .schema import NULL_SCHEMA, resolve_response_reference, resolve_schema

logger = logging.getLogger(__name__)


def to_machine_name(name: str) -> str:
    """Lowercase ``name`` and collapse non-alphanumeric runs to ``_``."""
    return NON_ALNUM_RUN.sub("_", name.lower()).strip("_")


def derive_operation_id(method: str, path: str) -> str:
    """Fallback operationId for operations that do not declare one."""
    return f"{method}_{NON_ALNUM_RUN_ANYCASE.sub('_', path).strip('_')}"


def path_declares_parameter(path: str, name: str) -> bool:
    return f"{{{name}}}" in path or f":{name}" in path


# ============================================================================
# Models
# ============================================================================


def build_models(document: dict[str, Any]) -> list[Model]:
    info = document.get("info") or {}
    title = info.get("title", "")
    machine_name = to_machine_name(title)

    models = []
    for server in document.get("servers") or []:
        url = server.get("url", "")
        models.append(
            Model(
                id=f"{MODEL_ID_PREFIX}:{machine_name}:{url}",
                name=f"{title} ({url})",
                description=info.get("description", ""),
                capabilities=MODEL_CAPABILITIES,
                tools_endpoint=f"/tools/{machine_name}",
                server_url=url,
            )
        )
    return models


# ============================================================================
# Tools
# ============================================================================


def _declared_parameters(operation: dict[str, Any]) -> list[dict[str, Any]]:
    """Parameters with a usable name and location; unresolved parameter $refs are ignored."""
    return [
        p
        for p in operation.get("parameters") or []
        if isinstance(p, dict) and isinstance(p.get("name"), str) and isinstance(p.get("in"), str)
    ]


def _response_schemas(
    description: str, content: Any, resolve: Callable[[Any], dict[str, Any]]
) -> list[dict[str, Any]]:
    schemas = []
    if isinstance(content, dict):
        for media in content.values():
            if isinstance(media, dict) and media.get("schema"):
                schemas.append({"description": description, **resolve(media["schema"])})
    return schemas or [dict(NULL_SCHEMA)]


def _build_returns(document: dict[str, Any], responses: dict[str, Any]) -> dict[str, Any]:
    def resolve(schema: Any) -> dict[str, Any]:
        return resolve_schema(document, schema)

    one_of: list[dict[str, Any]] = []
    for response in responses.values():
        if not isinstance(response, dict):
            continue
        content_resolver: Callable[[Any], dict[str, Any]] = resolve
        if REF_KEY in response:
            response = resolve_response_reference(document, response[REF_KEY])
            # content schemas already resolved
            content_resolver = dict
        one_of.extend(_response_schemas(response.get("description", ""), response.get("content"), content_resolver))
    return {"oneOf": one_of}


def _build_tool(
    document: dict[str, Any], path: str, method: str, operation: dict[str, Any], operation_id: str
) -> tuple[Tool, str]:
    """Build one tool and return it with its request content type."""
    properties: dict[str, Any] = {}
    required: set[str] = set()

    content_type = CONTENT_TYPE_JSON
    request_body = operation.get("requestBody")
    if isinstance(request_body, dict) and "content" in request_body:
        content = request_body.get("content") or {}
        content_type = next(iter(content), None) or CONTENT_TYPE_JSON

        json_media = content.get(CONTENT_TYPE_JSON)
        if isinstance(json_media, dict) and json_media.get("schema"):
            properties[PARAM_BODY] = resolve_schema(document, json_media["schema"])
        if request_body.get("required"):
            required.add(PARAM_BODY)

    for param in _declared_parameters(operation):
        key = f"{param.get('in')}-{param.get('name')}"
        properties[key] = {
            "description": param.get("description") or "",
            **resolve_schema(document, param.get("schema")),
        }
        if param.get("required"):
            required.add(key)

    parameters = None
    if properties:
        parameters = {
            "type": "object",
            "properties": properties,
            "required": [name for name in properties if name in required],
        }

    returns = None
    if isinstance(operation.get("responses"), dict):
        returns = _build_returns(document, operation["responses"])

    tool = Tool(
        id=operation_id,
        name=operation.get("summary") or f"{method.upper()} {path}",
        description=operation.get("description") or "",
        parameters=parameters,
        returns=returns,
    )
    return tool, content_type


def build_tools(document: dict[str, Any]) -> tuple[list[Tool], dict[str, str], dict[str, str]]:
    """Build the tool list plus the invocation and content-type maps."""
    tools: list[Tool] = []
    invocations: dict[str, str] = {}
    content_types: dict[str, str] = {}
    seen: set[str] = set()

    for path, path_item in (document.get("paths") or {}).items():
        if not isinstance(path_item, dict):
            continue

        for method, operation in path_item.items():
            if method.lower() not in HTTP_METHODS or not isinstance(operation, dict):
                continue

            invalid = [
                p["name"]
                for p in _declared_parameters(operation)
                if p["in"] == "path" and not path_declares_parameter(path, p["name"])
            ]
            if invalid:
                logger.debug(f"Skipping {method.upper()} {path}: path parameters {invalid} not in template")
                continue

            operation_id = operation.get("operationId") or derive_operation_id(method, path)
            if operation_id in seen:
                logger.debug(f"Skipping {method.upper()} {path}: duplicate operationId {operation_id}")
                continue
            seen.add(operation_id)

            try:
                tool, content_type = _build_tool(document, path, method, operation, operation_id)
            except SchemaResolutionError as e:
                logger.warning(f"Skipping {method.upper()} {path}: {e}")
                continue

            tools.append(tool)
            invocations[operation_id] = f"{method.upper()} {path}"
            content_types[operation_id] = content_type

    return tools, invocations, content_types


# ============================================================================
# Prompts
# ============================================================================


def build_prompts(tools: list[Tool]) -> list[Prompt]:
    prompts = []
    for tool in tools:
        if not tool.name:
            continue

        arguments = None
        if tool.parameters and tool.parameters.get("properties"):
            required = tool.required
            arguments = tuple(
                PromptArgument(
                    name=key,
                    description="" if REF_KEY in schema else schema.get("description") or "",
                    required=key in required,
                )
                for key, schema in tool.parameters["properties"].items()
            )

        prompts.append(Prompt(name=tool.id, description=tool.description or tool.name, arguments=arguments))
    return prompts


# ============================================================================
# Catalog
# ============================================================================


def build_catalog(document: dict[str, Any], source_url: str | None = None) -> Catalog:
    """Build the full catalog for a validated OpenAPI document.

    ``source_url`` is where the document came from; relative server URLs
    are resolved against it at invocation time.
    """
    info = document.get("info") or {}
    tools, invocations, content_types = build_tools(document)
    components = document.get("components") or {}

    catalog = Catalog(
        title=info.get("title", ""),
        description=info.get("description", ""),
        version=info.get("version") or DEFAULT_API_VERSION,
        machine_name=to_machine_name(info.get("title", "")),
        models=build_models(document),
        tools=tools,
        prompts=build_prompts(tools),
        invocations=invocations,
        content_types=content_types,
        security_schemes=components.get("securitySchemes") or {},
        requires_auth=bool(document.get("security")),
        source_url=source_url,
    )

    logger.debug(
        f"Built catalog for {catalog.title!r}: {len(catalog.models)} models, "
        f"{len(catalog.tools)} tools, {len(catalog.prompts)} prompts"
    )
    return catalog


__all__ = [
    "build_catalog",
    "build_models",
    "build_tools",
    "build_prompts",
    "to_machine_name",
    "derive_operation_id",
]
