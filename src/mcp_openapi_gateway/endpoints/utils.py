#!/usr/bin/env python3
"""
Endpoint utilities - orjson responses and per-request catalog loading
"""

import logging
from typing import Any

import orjson
from starlette.datastructures import State
from starlette.requests import HTTPConnection, Request
from starlette.responses import Response

from ..catalog import build_catalog
from ..errors import DocumentFetchError, GatewayError, InsecureServerURL, InvalidOpenAPIDocument, UnknownSource
from ..models import Catalog
from .constants import (
    CONTENT_TYPE_JSON,
    ERROR_FETCH_FAILED,
    ERROR_INSECURE_URL,
    ERROR_INVALID_DOCUMENT,
    ERROR_INVALID_JSON_BODY,
    ERROR_NOT_FOUND,
    ERROR_UNKNOWN_SERVER,
    HEADERS_CORS_NOCACHE,
    HEADERS_CORS_ONLY,
    HEADERS_CORS_SHORT_CACHE,
    HttpStatus,
)

logger = logging.getLogger(__name__)

_NOT_FOUND_BODY = orjson.dumps({"error": ERROR_NOT_FOUND})


def json_response_fast(data: Any, status_code: int = HttpStatus.OK, cache_level: str = "none") -> Response:
    """
    JSON response using pre-computed headers.

    Args:
        data: Data to serialize to JSON
        status_code: HTTP status code
        cache_level: "none" or "short"
    """
    headers = HEADERS_CORS_SHORT_CACHE if cache_level == "short" else HEADERS_CORS_NOCACHE
    return Response(orjson.dumps(data), status_code=status_code, media_type=CONTENT_TYPE_JSON, headers=headers)


def error_response_fast(code: int, error: str, **extra: Any) -> Response:
    """``{"error": error, **extra}`` with the given status."""
    return json_response_fast({"error": error, **extra}, status_code=code)


def not_found_response() -> Response:
    return Response(
        _NOT_FOUND_BODY, status_code=HttpStatus.NOT_FOUND, media_type=CONTENT_TYPE_JSON, headers=HEADERS_CORS_NOCACHE
    )


def no_content_response() -> Response:
    return Response(status_code=HttpStatus.NO_CONTENT, headers=HEADERS_CORS_ONLY)


def parse_json_object(body: bytes) -> dict[str, Any] | None:
    """Decode a request body that must be a JSON object; None when it is not."""
    try:
        data = orjson.loads(body)
    except orjson.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def invalid_json_response() -> Response:
    return error_response_fast(HttpStatus.BAD_REQUEST, ERROR_INVALID_JSON_BODY)


# ============================================================================
# Catalog loading
# ============================================================================


async def load_catalog(state: State, source: str) -> Catalog:
    """Resolve ``source``, fetch its document and build the catalog.

    Raises:
        UnknownSource: ``source`` is neither an alias nor a host.
        InsecureServerURL, DocumentFetchError, InvalidOpenAPIDocument: From the fetcher.
    """
    url = state.resolver.resolve(source)
    if url is None:
        raise UnknownSource(source)

    document = await state.fetcher.fetch(url)
    catalog = build_catalog(document, source_url=url)
    logger.debug(f"Built catalog for {source}: {len(catalog.tools)} tools, {len(catalog.models)} models")
    return catalog


def source_error_response(error: GatewayError) -> Response:
    """Map a catalog-loading failure to its HTTP response."""
    if isinstance(error, UnknownSource):
        return error_response_fast(HttpStatus.NOT_FOUND, ERROR_UNKNOWN_SERVER, source=error.source)
    if isinstance(error, InvalidOpenAPIDocument):
        return error_response_fast(HttpStatus.BAD_REQUEST, ERROR_INVALID_DOCUMENT, message=str(error))
    if isinstance(error, InsecureServerURL):
        return error_response_fast(HttpStatus.BAD_REQUEST, ERROR_INSECURE_URL, message=str(error))
    if isinstance(error, DocumentFetchError):
        return error_response_fast(HttpStatus.BAD_GATEWAY, ERROR_FETCH_FAILED, message=str(error))
    raise error


async def catalog_for_request(request: Request) -> Catalog | Response:
    """
    Load the catalog for the request's ``{source}``.

    Returns:
        The catalog, or the error response to send instead
    """
    source = request.path_params["source"]
    try:
        return await load_catalog(request.app.state, source)
    except (UnknownSource, InvalidOpenAPIDocument, InsecureServerURL, DocumentFetchError) as e:
        logger.warning(f"Cannot serve source {source!r}: {e}")
        return source_error_response(e)


def count_usage(connection: HTTPConnection, surface: str) -> None:
    connection.app.state.usage.increment(f"{connection.path_params['source']}:{surface}")
