#!/usr/bin/env python3
"""
endpoints/legacy.py - REST endpoints kept for pre-MCP clients

Server description, model and tool listings, direct invocation and the
creation of streaming tasks.
"""

import logging
from typing import Any

from starlette.requests import Request
from starlette.responses import Response

from ..errors import GatewayError, MissingRequiredParameters
from ..invocation import invoke_tool, require_parameters
from ..models import Catalog, Model
from ..stream import create_task_token
from .constants import (
    ERROR_API_CALL_FAILED,
    ERROR_MISSING_PARAMETERS,
    ERROR_MODEL_NOT_FOUND,
    ERROR_TOOL_NOT_FOUND,
    ERROR_TOOL_NOT_SPECIFIED,
    PATH_INVOKE,
    PATH_MODELS,
    PATH_SSE,
    PATH_STREAM,
    PATH_STREAM_TEMPLATE,
    TYPE_DATA,
    TYPE_SERVER_DESCRIPTION,
    TYPE_STREAM_CREATED,
    HttpStatus,
)
from .utils import (
    catalog_for_request,
    count_usage,
    error_response_fast,
    invalid_json_response,
    json_response_fast,
    not_found_response,
    parse_json_object,
)

logger = logging.getLogger(__name__)


def server_description(catalog: Catalog) -> dict[str, Any]:
    return {
        "type": TYPE_SERVER_DESCRIPTION,
        "version": catalog.version,
        "name": catalog.title,
        "description": catalog.description,
        "capabilities": {"tools": True, "streaming": True, "auth": catalog.requires_auth},
        "tools": [tool.to_dict() for tool in catalog.tools],
        "endpoints": {
            "models": PATH_MODELS,
            "invoke": PATH_INVOKE,
            "stream": PATH_STREAM_TEMPLATE,
            "sse": PATH_SSE,
            "mcp": PATH_SSE,
        },
    }


def _select_model(catalog: Catalog, data: dict[str, Any]) -> Model | None:
    model_id = data.get("model")
    if not model_id:
        return catalog.default_model
    return catalog.get_model(model_id)


def _request_parameters(data: dict[str, Any]) -> dict[str, Any]:
    parameters = data.get("parameters")
    return parameters if isinstance(parameters, dict) else {}


# ============================================================================
# Listings
# ============================================================================


async def root_endpoint(request: Request) -> Response:
    catalog = await catalog_for_request(request)
    if isinstance(catalog, Response):
        return catalog
    return json_response_fast(server_description(catalog))


async def models_endpoint(request: Request) -> Response:
    catalog = await catalog_for_request(request)
    if isinstance(catalog, Response):
        return catalog
    return json_response_fast(catalog.models_response())


async def tools_endpoint(request: Request) -> Response:
    catalog = await catalog_for_request(request)
    if isinstance(catalog, Response):
        return catalog

    slug = request.path_params.get("slug")
    if slug is not None and slug != catalog.machine_name:
        return not_found_response()
    return json_response_fast(catalog.tools_response())


# ============================================================================
# Invocation
# ============================================================================


async def invoke_endpoint(request: Request) -> Response:
    """
    Invoke one tool synchronously.

    Validation order: JSON body, model, tool name, tool existence, required
    parameters. Upstream failures become 500 with the failure message.
    """
    catalog = await catalog_for_request(request)
    if isinstance(catalog, Response):
        return catalog

    data = parse_json_object(await request.body())
    if data is None:
        return invalid_json_response()
    count_usage(request, "invoke")

    model = _select_model(catalog, data)
    if model is None:
        return error_response_fast(HttpStatus.NOT_FOUND, ERROR_MODEL_NOT_FOUND)

    tool_id = data.get("tool")
    if not tool_id:
        return error_response_fast(HttpStatus.BAD_REQUEST, ERROR_TOOL_NOT_SPECIFIED)
    if not catalog.has_tool(tool_id):
        return error_response_fast(HttpStatus.NOT_FOUND, ERROR_TOOL_NOT_FOUND, availableTools=catalog.tool_ids())

    parameters = _request_parameters(data)
    try:
        require_parameters(catalog, tool_id, parameters)
    except MissingRequiredParameters as e:
        return error_response_fast(HttpStatus.BAD_REQUEST, ERROR_MISSING_PARAMETERS, missing=e.missing)

    try:
        output = await invoke_tool(catalog, request.app.state.executor, tool_id, parameters, model_id=model.id)
    except (GatewayError, ValueError) as e:
        logger.error(f"Invocation of {tool_id} failed: {e}")
        return error_response_fast(
            HttpStatus.INTERNAL_SERVER_ERROR, ERROR_API_CALL_FAILED, message=str(e), tool=tool_id, model=model.id
        )

    return json_response_fast({"type": TYPE_DATA, "model": model.id, "output": output})


async def stream_create_endpoint(request: Request) -> Response:
    """Validate an invocation and hand back a task token for the WebSocket stream."""
    catalog = await catalog_for_request(request)
    if isinstance(catalog, Response):
        return catalog

    data = parse_json_object(await request.body())
    if data is None:
        return invalid_json_response()

    model = _select_model(catalog, data)
    if model is None:
        return error_response_fast(HttpStatus.NOT_FOUND, ERROR_MODEL_NOT_FOUND)

    tool_id = data.get("tool")
    if not tool_id:
        return error_response_fast(HttpStatus.BAD_REQUEST, ERROR_TOOL_NOT_SPECIFIED)
    if not catalog.has_tool(tool_id):
        return error_response_fast(HttpStatus.NOT_FOUND, ERROR_TOOL_NOT_FOUND)

    task_id = create_task_token(model.id, tool_id, _request_parameters(data))
    return json_response_fast(
        {"type": TYPE_STREAM_CREATED, "taskId": task_id, "streamUrl": f"{PATH_STREAM}/{task_id}"}
    )
