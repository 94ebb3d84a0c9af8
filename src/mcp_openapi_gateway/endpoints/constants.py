#!/usr/bin/env python3
"""
Endpoint constants - re-exports shared constants from the top-level module
and defines endpoint-specific values (HTTP status codes, pre-computed headers,
error messages, URL paths).
"""

from enum import IntEnum

# ---------------------------------------------------------------------------
# Re-export from top-level constants (single source of truth)
# ---------------------------------------------------------------------------
from mcp_openapi_gateway.constants import (  # noqa: F401
    CONTENT_TYPE_JSON,
    CORS_ALLOW_ALL,
    HEADER_CONTENT_TYPE,
    HEADER_CORS_ORIGIN,
    MCP_PROTOCOL_VERSION,
    SERVER_NAME,
    JsonRpcError,
)


# ---------------------------------------------------------------------------
# HTTP status codes (endpoint-specific)
# ---------------------------------------------------------------------------
class HttpStatus(IntEnum):
    OK = 200
    NO_CONTENT = 204
    BAD_REQUEST = 400
    NOT_FOUND = 404
    INTERNAL_SERVER_ERROR = 500
    BAD_GATEWAY = 502


# JSON-RPC error code -> HTTP status for protocol responses
JSONRPC_HTTP_STATUS: dict[int, int] = {
    JsonRpcError.PARSE_ERROR: HttpStatus.BAD_REQUEST,
    JsonRpcError.METHOD_NOT_FOUND: HttpStatus.NOT_FOUND,
}


# ---------------------------------------------------------------------------
# Header names and values
# ---------------------------------------------------------------------------
HEADER_CACHE_CONTROL = "Cache-Control"

CACHE_NO_CACHE = "no-cache"
CACHE_SHORT = "public, max-age=300"


# ---------------------------------------------------------------------------
# Pre-computed header combinations (shared across endpoints)
# ---------------------------------------------------------------------------
HEADERS_CORS_NOCACHE: dict[str, str] = {
    HEADER_CORS_ORIGIN: CORS_ALLOW_ALL,
    HEADER_CACHE_CONTROL: CACHE_NO_CACHE,
    HEADER_CONTENT_TYPE: CONTENT_TYPE_JSON,
}

HEADERS_CORS_SHORT_CACHE: dict[str, str] = {
    HEADER_CORS_ORIGIN: CORS_ALLOW_ALL,
    HEADER_CACHE_CONTROL: CACHE_SHORT,
    HEADER_CONTENT_TYPE: CONTENT_TYPE_JSON,
}

HEADERS_CORS_ONLY: dict[str, str] = {
    HEADER_CORS_ORIGIN: CORS_ALLOW_ALL,
}


# ---------------------------------------------------------------------------
# Error messages
# ---------------------------------------------------------------------------
ERROR_NOT_FOUND = "Not found"
ERROR_UNKNOWN_SERVER = "Unknown server"
ERROR_INVALID_JSON_BODY = "Invalid JSON body"
ERROR_INVALID_DOCUMENT = "Invalid OpenAPI document"
ERROR_INSECURE_URL = "Insecure server URL"
ERROR_FETCH_FAILED = "Failed to fetch OpenAPI document"
ERROR_MODEL_NOT_FOUND = "Model not found"
ERROR_TOOL_NOT_SPECIFIED = "Tool not specified"
ERROR_TOOL_NOT_FOUND = "Tool not found"
ERROR_MISSING_PARAMETERS = "Missing required parameters"
ERROR_API_CALL_FAILED = "API call failed"


# ---------------------------------------------------------------------------
# Response types and status strings
# ---------------------------------------------------------------------------
TYPE_SERVER_DESCRIPTION = "server_description"
TYPE_DATA = "data"
TYPE_STREAM_CREATED = "stream_created"
STATUS_HEALTHY = "healthy"


# ---------------------------------------------------------------------------
# URL paths (relative to the source prefix)
# ---------------------------------------------------------------------------
PATH_MODELS = "/models"
PATH_INVOKE = "/invoke"
PATH_STREAM = "/stream"
PATH_STREAM_TEMPLATE = "/stream/:id"
PATH_SSE = "/sse"
