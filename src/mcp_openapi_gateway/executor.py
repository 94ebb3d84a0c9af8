#!/usr/bin/env python3
# src/mcp_openapi_gateway/executor.py
"""
Executor - turn a tool invocation into exactly one upstream HTTP call

The executor rebuilds the outbound request from the tool's method and path
template plus the MCP parameter bag, injects declared authentication, and
decodes the response. There is no retry. Cancelling the awaiting task
cancels the in-flight httpx request.
"""

import logging
from typing import Any
from urllib.parse import quote, urlencode, urlsplit

import httpx
import orjson

from .constants import (
    BODYLESS_METHODS,
    CONTENT_TYPE_FORM,
    CONTENT_TYPE_JSON,
    DEFAULT_UPSTREAM_TIMEOUT,
    HEADER_AUTHORIZATION,
    HEADER_CONTENT_TYPE,
)
from .errors import UpstreamCallFailure
from .parameters import RequestParts, split_parameters

logger = logging.getLogger(__name__)

# Left unescaped in path values
_PATH_SAFE = "-_.!~*'()"


def has_http_scheme(url: str) -> bool:
    """True when ``url`` starts with an ``http://`` or ``https://`` scheme."""
    return urlsplit(url).scheme in ("http", "https")


def build_api_url(host: str, path: str, path_params: dict[str, str], query: list[tuple[str, str]]) -> str:
    """Assemble the upstream URL.

    Placeholders (``{name}`` and ``:name``) are replaced with percent-encoded
    values; placeholders without a value are left as they are.
    """
    if not host or not isinstance(host, str):
        raise ValueError("Host must be a non-empty string")
    if not path or not isinstance(path, str):
        raise ValueError("Path must be a non-empty string")

    for name, value in path_params.items():
        if not name:
            continue
        encoded = quote(value, safe=_PATH_SAFE)
        path = path.replace(f"{{{name}}}", encoded).replace(f":{name}", encoded)

    base = host[:-1] if host.endswith("/") else host
    if not has_http_scheme(base):
        base = f"https://{base}"
    if not path.startswith("/"):
        path = f"/{path}"

    url = f"{base}{path}"
    query_string = urlencode(query)
    return f"{url}?{query_string}" if query_string else url


def apply_security(
    headers: dict[str, str], parameters: dict[str, Any], security_schemes: dict[str, Any] | None
) -> dict[str, str]:
    """Copy credentials for declared security schemes into ``headers``.

    Only header API keys and HTTP bearer schemes are applied; other scheme
    types are ignored.
    """
    if not isinstance(security_schemes, dict):
        return headers

    for scheme in security_schemes.values():
        if not isinstance(scheme, dict):
            continue

        scheme_type = scheme.get("type")
        if scheme_type == "apiKey" and scheme.get("in") == "header" and scheme.get("name"):
            value = parameters.get(f"header-{scheme['name']}")
            if value:
                headers[scheme["name"]] = str(value)
        elif scheme_type == "http" and str(scheme.get("scheme", "")).lower() == "bearer":
            value = parameters.get("authorization") or parameters.get(f"header-{HEADER_AUTHORIZATION}")
            if value:
                headers[HEADER_AUTHORIZATION] = str(value)

    return headers


def is_json_content_type(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == CONTENT_TYPE_JSON or media_type.endswith("+json")


def _encode_body(parts: RequestParts, content_type: str) -> dict[str, Any]:
    """httpx request keyword arguments for the request body."""
    body = parts.body
    if is_json_content_type(content_type):
        return {"content": orjson.dumps(body)}
    if isinstance(body, str | bytes):
        return {"content": body}
    if isinstance(body, dict) and content_type.startswith(CONTENT_TYPE_FORM):
        return {"data": body}
    return {"content": orjson.dumps(body)}


class CallExecutor:
    """Performs upstream API calls for tool invocations."""

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = DEFAULT_UPSTREAM_TIMEOUT):
        self.client = client
        self.timeout = timeout

    def build_request(
        self,
        host: str,
        method: str,
        path: str,
        parameters: dict[str, Any] | None,
        content_type: str = CONTENT_TYPE_JSON,
        security_schemes: dict[str, Any] | None = None,
    ) -> tuple[str, str, dict[str, str], dict[str, Any]]:
        """Return ``(method, url, headers, body_kwargs)`` for an invocation."""
        if not method or not isinstance(method, str):
            raise ValueError("Method must be a non-empty string")

        parameters = parameters or {}
        parts = split_parameters(parameters)
        url = build_api_url(host, path, parts.path, parts.query)

        headers = {HEADER_CONTENT_TYPE: content_type}
        for name, value in parts.all_headers().items():
            if name and value:
                headers[name] = value
        apply_security(headers, parameters, security_schemes)

        method = method.upper()
        body_kwargs: dict[str, Any] = {}
        if parts.body and method not in BODYLESS_METHODS:
            body_kwargs = _encode_body(parts, content_type)

        return method, url, headers, body_kwargs

    async def execute(
        self,
        host: str,
        method: str,
        path: str,
        parameters: dict[str, Any] | None,
        content_type: str = CONTENT_TYPE_JSON,
        security_schemes: dict[str, Any] | None = None,
    ) -> Any:
        """Invoke the upstream API.

        Returns:
            Parsed JSON for ``application/json`` responses, otherwise text.

        Raises:
            UpstreamCallFailure: Non-2xx status or transport failure.
            ValueError: Empty host, method or path.
        """
        method, url, headers, body_kwargs = self.build_request(
            host, method, path, parameters, content_type, security_schemes
        )
        logger.info(f"[API Call] {method} {url}")
        logger.debug(f"[API Call] Parameters: {sorted((parameters or {}).keys())}")

        try:
            if self.client is not None:
                response = await self.client.request(method, url, headers=headers, **body_kwargs)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(method, url, headers=headers, **body_kwargs)
        except httpx.HTTPError as e:
            logger.error(f"[API Call Error] {method} {url}: {e}")
            raise UpstreamCallFailure(f"API call failed: {type(e).__name__}: {e}") from e

        return self._decode_response(response)

    @staticmethod
    def _decode_response(response: httpx.Response) -> Any:
        if not response.is_success:
            failure = UpstreamCallFailure.from_status(response.status_code, response.reason_phrase, response.text)
            logger.error(f"[API Call Error] {failure}")
            raise failure

        if CONTENT_TYPE_JSON in response.headers.get("content-type", ""):
            if not response.content:
                return None
            try:
                return orjson.loads(response.content)
            except orjson.JSONDecodeError as e:
                raise UpstreamCallFailure(f"API call returned invalid JSON: {e}", response.status_code) from e
        return response.text


__all__ = ["CallExecutor", "build_api_url", "has_http_scheme", "apply_security", "is_json_content_type"]
