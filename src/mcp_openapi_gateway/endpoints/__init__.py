#!/usr/bin/env python3
"""
HTTP and WebSocket endpoints.
"""

from .mcp import mcp_endpoint

__all__ = ["mcp_endpoint"]
