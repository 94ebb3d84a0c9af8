#!/usr/bin/env python3
# src/mcp_openapi_gateway/protocol/handler.py
"""
Gateway Protocol Handler - JSON-RPC 2.0 dispatch over a built catalog

Each request is an independent transition: the handler holds the catalog
and an executor, and carries no session state between calls.

Tool failures are not protocol failures. An upstream error inside
``tools/call`` is answered with a JSON-RPC *result* whose ``isError`` is
true; the JSON-RPC ``error`` member is reserved for malformed requests,
unknown methods and unknown tools.
"""

import asyncio
import logging
from typing import Any

import orjson

from ..constants import (
    JSONRPC_KEY,
    JSONRPC_VERSION,
    KEY_CAPABILITIES,
    KEY_ERROR,
    KEY_ID,
    KEY_METHOD,
    KEY_PARAMS,
    KEY_PROTOCOL_VERSION,
    KEY_RESULT,
    KEY_SERVER_INFO,
    MCP_PROTOCOL_VERSION,
    JsonRpcError,
    McpMethod,
)
from ..errors import ProtocolMethodNotFound, ProtocolParseError
from ..executor import CallExecutor
from ..invocation import invoke_tool
from ..models import Catalog

logger = logging.getLogger(__name__)

MSG_PARSE_ERROR = "Parse error"
MSG_METHOD_NOT_FOUND = "Method not found"
MSG_INVALID_PARAMS = "Invalid params"
MSG_TOOL_NOT_FOUND = "Tool not found"
TOOL_ERROR_PREFIX = "Error calling tool: "

ENDPOINT_DESCRIPTION = "Model Context Protocol endpoint. Send JSON-RPC 2.0 requests via POST."


def format_tool_output(output: Any) -> str:
    """Render tool output as MCP text content."""
    if isinstance(output, str):
        return output
    return orjson.dumps(output, option=orjson.OPT_INDENT_2).decode()


def endpoint_descriptor() -> dict[str, Any]:
    """Static document served on GET of the protocol endpoint."""
    return {
        "type": "mcp_endpoint",
        "transport": "http",
        "protocol": "MCP",
        "version": MCP_PROTOCOL_VERSION,
        "description": ENDPOINT_DESCRIPTION,
        "methods": [method.value for method in McpMethod],
    }


# ============================================================================
# Protocol Handler
# ============================================================================


class GatewayProtocolHandler:
    """MCP protocol handler for one OpenAPI-derived catalog."""

    def __init__(self, catalog: Catalog, executor: CallExecutor):
        self.catalog = catalog
        self.executor = executor

    async def handle_message(self, message: Any) -> dict[str, Any] | None:
        """Handle one decoded JSON-RPC request.

        Returns the response object, or None for notifications.
        """
        try:
            return await self._dispatch(message)
        except ProtocolParseError as e:
            return self.create_error_response(None, e.code, MSG_PARSE_ERROR)
        except ProtocolMethodNotFound as e:
            logger.debug(str(e))
            return self.create_error_response(message.get(KEY_ID), e.code, MSG_METHOD_NOT_FOUND)

    async def handle_body(self, body: bytes) -> dict[str, Any] | None:
        """Parse a raw POST body and dispatch it."""
        try:
            message = orjson.loads(body)
        except orjson.JSONDecodeError:
            message = None
        return await self.handle_message(message)

    async def _dispatch(self, message: Any) -> dict[str, Any] | None:
        if not isinstance(message, dict):
            raise ProtocolParseError()

        raw_method = message.get(KEY_METHOD)
        params = message.get(KEY_PARAMS) or {}
        msg_id = message.get(KEY_ID)

        method = McpMethod.decode(raw_method)
        logger.debug(f"Handling {raw_method} (ID: {msg_id})")

        if method is McpMethod.INITIALIZE:
            return self._handle_initialize(msg_id)
        elif method is McpMethod.INITIALIZED:
            logger.debug("Initialized notification received")
            return None
        elif method is McpMethod.PING:
            return self.create_success_response(msg_id, {})
        elif method is McpMethod.TOOLS_LIST:
            return self._handle_tools_list(msg_id)
        elif method is McpMethod.TOOLS_CALL:
            return await self._handle_tools_call(params, msg_id)
        elif method is McpMethod.RESOURCES_LIST:
            return self.create_success_response(msg_id, {"resources": []})
        elif method is McpMethod.RESOURCES_TEMPLATES_LIST:
            return self.create_success_response(msg_id, {"resourceTemplates": []})
        elif method is McpMethod.PROMPTS_LIST:
            return self.create_success_response(
                msg_id, {"prompts": [prompt.to_dict() for prompt in self.catalog.prompts]}
            )

        raise ProtocolMethodNotFound(raw_method)

    # ------------------------------------------------------------------
    # Method handlers
    # ------------------------------------------------------------------

    def _handle_initialize(self, msg_id: Any) -> dict[str, Any]:
        result = {
            KEY_PROTOCOL_VERSION: MCP_PROTOCOL_VERSION,
            KEY_CAPABILITIES: {"tools": {}, "resources": {}, "prompts": {}},
            KEY_SERVER_INFO: {"name": self.catalog.title, "version": self.catalog.version},
        }
        logger.debug(f"Initialized MCP endpoint for {self.catalog.title!r}")
        return self.create_success_response(msg_id, result)

    def _handle_tools_list(self, msg_id: Any) -> dict[str, Any]:
        tools = [tool.to_mcp_format() for tool in self.catalog.tools]
        logger.debug(f"Returning {len(tools)} tools")
        return self.create_success_response(msg_id, {"tools": tools})

    async def _handle_tools_call(self, params: Any, msg_id: Any) -> dict[str, Any]:
        if not isinstance(params, dict):
            params = {}
        tool_name = params.get("name")
        arguments = params.get("arguments") or {}

        if not tool_name or not self.catalog.has_tool(tool_name):
            return self.create_error_response(
                msg_id, JsonRpcError.INVALID_PARAMS, MSG_INVALID_PARAMS, data=MSG_TOOL_NOT_FOUND
            )

        try:
            output = await invoke_tool(self.catalog, self.executor, tool_name, arguments)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Tool execution error for {tool_name}: {e}")
            return self.create_success_response(
                msg_id,
                {"content": [{"type": "text", "text": f"{TOOL_ERROR_PREFIX}{e}"}], "isError": True},
            )

        logger.debug(f"Executed tool {tool_name}")
        return self.create_success_response(
            msg_id, {"content": [{"type": "text", "text": format_tool_output(output)}], "isError": False}
        )

    # ------------------------------------------------------------------
    # Response helpers
    # ------------------------------------------------------------------

    @staticmethod
    def create_success_response(msg_id: Any, result: Any) -> dict[str, Any]:
        return {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: msg_id, KEY_RESULT: result}

    @staticmethod
    def create_error_response(msg_id: Any, code: int, message: str, data: Any = None) -> dict[str, Any]:
        error: dict[str, Any] = {"code": int(code), "message": message}
        if data is not None:
            error["data"] = data
        return {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: msg_id, KEY_ERROR: error}


__all__ = ["GatewayProtocolHandler", "endpoint_descriptor", "format_tool_output"]
