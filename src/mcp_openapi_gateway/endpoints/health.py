#!/usr/bin/env python3
"""
endpoints/health.py - Gateway-level health and discovery

These routes sit outside any ``/{source}`` prefix.
"""

import time

from starlette.requests import Request
from starlette.responses import Response

from .. import __version__
from .constants import (
    MCP_PROTOCOL_VERSION,
    PATH_INVOKE,
    PATH_MODELS,
    PATH_SSE,
    PATH_STREAM,
    SERVER_NAME,
    STATUS_HEALTHY,
)
from .utils import json_response_fast

GATEWAY_DESCRIPTION = "Serves any OpenAPI 3.x document as an MCP server"


async def health_endpoint(request: Request) -> Response:
    """Health check with uptime and usage counters."""
    usage = request.app.state.usage
    return json_response_fast(
        {
            "status": STATUS_HEALTHY,
            "uptime": round(usage.uptime, 2),
            "timestamp": time.time(),
            "usage": usage.snapshot(),
        }
    )


async def root_endpoint(request: Request) -> Response:
    aliases = request.app.state.resolver.aliases
    return json_response_fast(
        {
            "name": SERVER_NAME,
            "version": __version__,
            "description": GATEWAY_DESCRIPTION,
            "protocol": {"name": "MCP", "version": MCP_PROTOCOL_VERSION},
            "aliases": aliases.names(),
            "routes": {
                "mcp": f"/{{source}}{PATH_SSE}",
                "models": f"/{{source}}{PATH_MODELS}",
                "invoke": f"/{{source}}{PATH_INVOKE}",
                "stream": f"/{{source}}{PATH_STREAM}",
            },
        },
        cache_level="short",
    )
