#!/usr/bin/env python3
# src/mcp_openapi_gateway/parameters.py
"""
Parameters - classification of MCP parameter bags

Tool arguments arrive as a flat mapping whose keys carry their OpenAPI
location as a prefix (``query-limit``, ``path-id``, ``header-X-Key``,
``cookie-session``) plus an optional ``body``. The bag is decoded once into
a RequestParts value; nothing downstream looks at key prefixes again.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .constants import HEADER_COOKIE, PARAM_BODY


class ParameterKind(str, Enum):
    BODY = "body"
    QUERY = "query"
    PATH = "path"
    HEADER = "header"
    COOKIE = "cookie"

    @classmethod
    def classify(cls, key: str) -> tuple["ParameterKind | None", str]:
        """Split a bag key into its kind and bare parameter name."""
        if key == PARAM_BODY:
            return cls.BODY, PARAM_BODY
        prefix, sep, name = key.partition("-")
        if not sep or not name:
            return None, key
        try:
            return cls(prefix), name
        except ValueError:
            return None, key


@dataclass
class RequestParts:
    """An outbound request's pieces, decoded from a parameter bag."""

    body: Any = None
    query: list[tuple[str, str]] = field(default_factory=list)
    path: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    cookies: list[tuple[str, str]] = field(default_factory=list)

    @property
    def cookie_header(self) -> str | None:
        if not self.cookies:
            return None
        return "; ".join(f"{name}={value}" for name, value in self.cookies)

    def all_headers(self) -> dict[str, str]:
        """Declared headers with cookies folded into a single Cookie header."""
        headers = dict(self.headers)
        cookie = self.cookie_header
        if cookie:
            headers[HEADER_COOKIE] = cookie
        return headers


def _to_text(value: Any) -> str:
    # Match JSON/JavaScript spelling of booleans in URLs and headers
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def split_parameters(parameters: dict[str, Any] | None) -> RequestParts:
    """Decode a parameter bag into RequestParts.

    Keys with a None value, an empty name or an unknown prefix are ignored.
    """
    parts = RequestParts()
    if not isinstance(parameters, dict):
        return parts

    for key, value in parameters.items():
        if not key or value is None:
            continue

        kind, name = ParameterKind.classify(key)
        if kind is ParameterKind.BODY:
            parts.body = value
        elif kind is ParameterKind.QUERY:
            values = value if isinstance(value, list | tuple) else [value]
            parts.query.extend((name, _to_text(v)) for v in values if v is not None)
        elif kind is ParameterKind.PATH:
            parts.path[name] = _to_text(value)
        elif kind is ParameterKind.HEADER:
            parts.headers[name] = _to_text(value)
        elif kind is ParameterKind.COOKIE:
            parts.cookies.append((name, _to_text(value)))

    return parts


__all__ = ["ParameterKind", "RequestParts", "split_parameters"]
