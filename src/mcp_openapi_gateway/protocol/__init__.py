#!/usr/bin/env python3
# src/mcp_openapi_gateway/protocol/__init__.py
"""
Protocol package - JSON-RPC dispatch for OpenAPI-derived MCP catalogs.
"""

from .handler import GatewayProtocolHandler, endpoint_descriptor, format_tool_output

__all__ = ["GatewayProtocolHandler", "endpoint_descriptor", "format_tool_output"]
