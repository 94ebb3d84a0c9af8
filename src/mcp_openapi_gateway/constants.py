#!/usr/bin/env python3
"""
Top-level constants shared across the mcp_openapi_gateway package.
"""

import re
from enum import Enum, IntEnum

# ---------------------------------------------------------------------------
# JSON-RPC
# ---------------------------------------------------------------------------
JSONRPC_VERSION = "2.0"
JSONRPC_KEY = "jsonrpc"

# JSON-RPC message keys
KEY_METHOD = "method"
KEY_PARAMS = "params"
KEY_ID = "id"
KEY_RESULT = "result"
KEY_ERROR = "error"


class JsonRpcError(IntEnum):
    """Standard JSON-RPC 2.0 error codes."""

    PARSE_ERROR = -32700
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


# ---------------------------------------------------------------------------
# MCP protocol
# ---------------------------------------------------------------------------
MCP_PROTOCOL_VERSION = "2024-11-05"


class McpMethod(str, Enum):
    """JSON-RPC methods understood by the gateway."""

    INITIALIZE = "initialize"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    RESOURCES_LIST = "resources/list"
    RESOURCES_TEMPLATES_LIST = "resources/templates/list"
    PROMPTS_LIST = "prompts/list"
    INITIALIZED = "notifications/initialized"
    PING = "ping"

    @classmethod
    def decode(cls, value: object) -> "McpMethod | None":
        """Decode a raw ``method`` field, returning None for unknown methods."""
        try:
            return cls(value)
        except (ValueError, TypeError):
            return None


# MCP initialize result keys
KEY_PROTOCOL_VERSION = "protocolVersion"
KEY_SERVER_INFO = "serverInfo"
KEY_CAPABILITIES = "capabilities"

DEFAULT_API_VERSION = "1.0.0"


# ---------------------------------------------------------------------------
# OpenAPI
# ---------------------------------------------------------------------------
HTTP_METHODS = frozenset({"get", "post", "put", "delete", "patch", "head", "options"})
BODYLESS_METHODS = frozenset({"GET", "HEAD"})

REF_KEY = "$ref"
DEFS_KEY = "$defs"
COMPONENT_SCHEMAS_PREFIX = "#/components/schemas/"
COMPONENT_RESPONSES_PREFIX = "#/components/responses/"
ROOT_DEFS_PREFIX = "#/$defs/"
DEFS_SEGMENT = "/$defs/"

PARAM_BODY = "body"
MODEL_ID_PREFIX = "api"
MODEL_CAPABILITIES = ("json", "tools")

NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")
NON_ALNUM_RUN_ANYCASE = re.compile(r"[^a-z0-9]+", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Content types
# ---------------------------------------------------------------------------
CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_FORM = "application/x-www-form-urlencoded"


# ---------------------------------------------------------------------------
# Common HTTP headers
# ---------------------------------------------------------------------------
HEADER_CORS_ORIGIN = "Access-Control-Allow-Origin"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_AUTHORIZATION = "Authorization"
HEADER_COOKIE = "Cookie"
CORS_ALLOW_ALL = "*"


# ---------------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------------
ENV_MCP_LOG_LEVEL = "MCP_LOG_LEVEL"
ENV_PORT = "PORT"
ENV_GATEWAY_HOST = "MCP_GATEWAY_HOST"
ENV_GATEWAY_PORT = "MCP_GATEWAY_PORT"
ENV_GATEWAY_CACHE_TTL = "MCP_GATEWAY_CACHE_TTL"
ENV_GATEWAY_UPSTREAM_TIMEOUT = "MCP_GATEWAY_UPSTREAM_TIMEOUT"
ENV_GATEWAY_ALIASES = "MCP_GATEWAY_ALIASES"
ENV_GATEWAY_ALLOW_INSECURE = "MCP_GATEWAY_ALLOW_INSECURE"


# ---------------------------------------------------------------------------
# Logging level strings
# ---------------------------------------------------------------------------
LOG_DEBUG = "debug"
LOG_INFO = "info"
LOG_WARNING = "warning"
LOG_ERROR = "error"
LOG_CRITICAL = "critical"
LOG_LEVELS = (LOG_DEBUG, LOG_INFO, LOG_WARNING, LOG_ERROR, LOG_CRITICAL)


# ---------------------------------------------------------------------------
# Network defaults
# ---------------------------------------------------------------------------
DEFAULT_HOST = "0.0.0.0"
DEFAULT_LOCAL_HOST = "localhost"
DEFAULT_PORT = 8000
DEFAULT_CACHE_TTL = 3600.0
DEFAULT_CACHE_MAX_ENTRIES = 256
DEFAULT_UPSTREAM_TIMEOUT = 30.0
DEFAULT_DOCUMENT_PATH = "/openapi.json"


# ---------------------------------------------------------------------------
# Server identity
# ---------------------------------------------------------------------------
SERVER_NAME = "mcp-openapi-gateway"
