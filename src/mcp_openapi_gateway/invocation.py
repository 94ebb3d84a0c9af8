#!/usr/bin/env python3
# src/mcp_openapi_gateway/invocation.py
"""
Invocation - bind a catalog tool to the call executor

Shared by the JSON-RPC handler, the legacy REST endpoints and the WebSocket
stream so that every surface resolves hosts and routes the same way.
"""

from typing import Any
from urllib.parse import urljoin

from .errors import MissingRequiredParameters, ModelNotFound, ToolNotFound
from .executor import CallExecutor
from .models import Catalog, Model


def resolve_host(model: Model, source_url: str | None = None) -> str:
    """Upstream base URL for a model.

    Server URLs written as relative references (``/v1``, ``./api``) resolve
    against the document URL. Bare host names are left for ``build_api_url``.
    """
    url = model.server_url
    if source_url and url.startswith(("/", ".")):
        return urljoin(source_url, url)
    return url


def require_parameters(catalog: Catalog, tool_id: str, parameters: dict[str, Any] | None) -> None:
    """Raise MissingRequiredParameters when a required tool parameter is absent."""
    tool = catalog.get_tool(tool_id)
    missing = tool.missing_parameters(parameters) if tool else []
    if missing:
        raise MissingRequiredParameters(tool_id, missing)


async def invoke_tool(
    catalog: Catalog,
    executor: CallExecutor,
    tool_id: str,
    parameters: dict[str, Any] | None,
    model_id: str | None = None,
) -> Any:
    """Execute ``tool_id`` against the selected (or default) model's server.

    Raises:
        ModelNotFound: ``model_id`` is not in the catalog, or the catalog has no models.
        ToolNotFound: ``tool_id`` is not in the invocation map.
        UpstreamCallFailure: The upstream call failed.
    """
    model = catalog.get_model(model_id) if model_id else catalog.default_model
    if model is None:
        raise ModelNotFound(model_id)
    if not catalog.has_tool(tool_id):
        raise ToolNotFound(tool_id, catalog.tool_ids())

    method, path = catalog.route_for(tool_id)
    return await executor.execute(
        resolve_host(model, catalog.source_url),
        method,
        path,
        parameters or {},
        catalog.content_type_for(tool_id),
        catalog.security_schemes,
    )


__all__ = ["invoke_tool", "require_parameters", "resolve_host"]
