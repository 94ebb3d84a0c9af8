#!/usr/bin/env python3
"""
endpoints/mcp.py - MCP JSON-RPC endpoint for one OpenAPI source

GET returns the static endpoint descriptor; POST carries a single JSON-RPC
request. Notifications are answered with 204.
"""

import logging
from typing import Any

from starlette.requests import Request
from starlette.responses import Response

from ..constants import KEY_ERROR
from ..protocol import GatewayProtocolHandler, endpoint_descriptor
from .constants import JSONRPC_HTTP_STATUS, HttpStatus
from .utils import catalog_for_request, count_usage, json_response_fast, no_content_response

logger = logging.getLogger(__name__)


def http_status_for(response: dict[str, Any]) -> int:
    """HTTP status carrying a JSON-RPC response."""
    error = response.get(KEY_ERROR)
    if not error:
        return HttpStatus.OK
    return JSONRPC_HTTP_STATUS.get(error.get("code"), HttpStatus.OK)


async def mcp_endpoint(request: Request) -> Response:
    catalog = await catalog_for_request(request)
    if isinstance(catalog, Response):
        return catalog

    if request.method == "GET":
        return json_response_fast(endpoint_descriptor(), cache_level="short")

    count_usage(request, "sse")
    handler = GatewayProtocolHandler(catalog, request.app.state.executor)
    response = await handler.handle_body(await request.body())
    if response is None:
        return no_content_response()

    return json_response_fast(response, status_code=http_status_for(response))
