"""
Structured error types for the OpenAPI MCP gateway.

Every gateway failure derives from GatewayError, which carries the JSON-RPC
code used when the failure has to be reported over the protocol endpoint.
"""

from difflib import get_close_matches
from typing import Any

from .constants import JsonRpcError


class GatewayError(Exception):
    """Base gateway error with an optional fix suggestion."""

    def __init__(
        self,
        message: str,
        code: int = JsonRpcError.INTERNAL_ERROR,
        suggestion: str | None = None,
    ):
        self.code = code
        self.suggestion = suggestion
        super().__init__(message)

    def to_message(self) -> str:
        """Format the error with suggestion."""
        parts = [str(self)]
        if self.suggestion:
            parts.append(f"Suggestion: {self.suggestion}")
        return " | ".join(parts)


# ---------------------------------------------------------------------------
# Document level
# ---------------------------------------------------------------------------


class DocumentFetchError(GatewayError):
    """The OpenAPI document could not be downloaded."""

    def __init__(self, url: str, reason: str):
        self.url = url
        super().__init__(f"Failed to fetch OpenAPI document: {reason}")


class InvalidOpenAPIDocument(GatewayError):
    """The fetched document fails the minimal structural checks."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message
            or "Invalid OpenAPI document: missing required fields "
            "(openapi, servers, info.title, info.description, or paths)"
        )


class UnknownSource(GatewayError):
    """A path prefix that is neither an alias nor a host name."""

    def __init__(self, source: str):
        self.source = source
        super().__init__(f"Unknown server: {source}")


class InsecureServerURL(GatewayError):
    """A document source that is not served over HTTPS."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(
            f"Refusing to fetch OpenAPI document over insecure URL: {url}",
            suggestion="Serve the document over https://",
        )


# ---------------------------------------------------------------------------
# Schema resolution
# ---------------------------------------------------------------------------


class SchemaResolutionError(GatewayError):
    """A $ref could not be resolved."""

    def __init__(self, ref: str, message: str | None = None):
        self.ref = ref
        super().__init__(message or f"Unsupported $ref format: {ref}")


class CyclicReferenceError(SchemaResolutionError):
    """A $ref chain points back at a reference already being resolved."""

    def __init__(self, ref: str, chain: list[str]):
        self.chain = chain
        path = " -> ".join([*chain, ref])
        super().__init__(ref, f"Cyclic $ref detected: {path}")


# ---------------------------------------------------------------------------
# Catalog lookups
# ---------------------------------------------------------------------------


class ToolNotFound(GatewayError):
    def __init__(self, tool_name: str | None, available_tools: list[str] | None = None):
        self.tool_name = tool_name
        self.available_tools = available_tools or []
        super().__init__(
            format_unknown_tool_error(tool_name or "", self.available_tools),
            code=JsonRpcError.INVALID_PARAMS,
        )


class ModelNotFound(GatewayError):
    def __init__(self, model_id: str | None):
        self.model_id = model_id
        super().__init__(f"Model not found: {model_id}")


class MissingRequiredParameters(GatewayError):
    """One or more required tool parameters were not supplied."""

    def __init__(self, tool_name: str, missing: list[str]):
        self.tool_name = tool_name
        self.missing = missing
        super().__init__(
            f"Tool '{tool_name}': missing required parameters: {', '.join(missing)}",
            code=JsonRpcError.INVALID_PARAMS,
        )


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


class UpstreamCallFailure(GatewayError):
    """The upstream API answered with a non-2xx status or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None, reason: str = "", body: str = ""):
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(message)

    @classmethod
    def from_status(cls, status_code: int, reason: str, body: str) -> "UpstreamCallFailure":
        message = f"API call failed: {status_code} {reason}"
        if body:
            message += f" - {body}"
        return cls(message, status_code=status_code, reason=reason, body=body)


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class ProtocolParseError(GatewayError):
    def __init__(self, message: str = "Parse error"):
        super().__init__(message, code=JsonRpcError.PARSE_ERROR)


class ProtocolMethodNotFound(GatewayError):
    def __init__(self, method: Any):
        self.method = method
        super().__init__(f"Method not found: {method}", code=JsonRpcError.METHOD_NOT_FOUND)


class StreamTokenDecodeError(GatewayError):
    def __init__(self, message: str = "Invalid task ID format"):
        super().__init__(message)


# ---------------------------------------------------------------------------
# Message helpers
# ---------------------------------------------------------------------------


def suggest_tool_name(tool_name: str, available_tools: list[str]) -> str | None:
    """Find the closest matching tool name using fuzzy matching.

    Args:
        tool_name: The unknown tool name.
        available_tools: List of catalog tool ids.

    Returns:
        The closest match, or None if no good match found.
    """
    matches = get_close_matches(tool_name, available_tools, n=1, cutoff=0.6)
    return matches[0] if matches else None


def format_unknown_tool_error(tool_name: str, available_tools: list[str]) -> str:
    """Create an error message for an unknown tool with suggestions."""
    suggestion = suggest_tool_name(tool_name, available_tools)
    if suggestion:
        return f"Unknown tool: '{tool_name}'. Did you mean '{suggestion}'?"
    if available_tools:
        names = ", ".join(sorted(available_tools)[:10])
        suffix = "..." if len(available_tools) > 10 else ""
        return f"Unknown tool: '{tool_name}'. Available tools: {names}{suffix}"
    return f"Unknown tool: '{tool_name}'. No tools are available."
