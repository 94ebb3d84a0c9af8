#!/usr/bin/env python3
"""
mcp_openapi_gateway - serve any OpenAPI 3.x document as an MCP server

    from mcp_openapi_gateway import GatewayConfig, create_app

    app = create_app(GatewayConfig.from_env())

Each request under ``/{source}`` fetches (cached) the source's OpenAPI
document, derives a catalog of tools, models and prompts from it, and
answers MCP JSON-RPC, legacy REST or WebSocket streaming requests against
that catalog.
"""

__version__ = "0.1.0"

from .app import create_app  # noqa: E402
from .catalog import build_catalog  # noqa: E402
from .config import GatewayConfig  # noqa: E402
from .executor import CallExecutor  # noqa: E402
from .models import Catalog, Model, Prompt, Tool  # noqa: E402
from .protocol import GatewayProtocolHandler  # noqa: E402
from .schema import resolve_schema  # noqa: E402
from .stream import StreamInvocation, StreamSession  # noqa: E402

__all__ = [
    "__version__",
    "create_app",
    "build_catalog",
    "resolve_schema",
    "Catalog",
    "Model",
    "Tool",
    "Prompt",
    "CallExecutor",
    "GatewayConfig",
    "GatewayProtocolHandler",
    "StreamInvocation",
    "StreamSession",
]
