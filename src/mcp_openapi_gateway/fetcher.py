#!/usr/bin/env python3
# src/mcp_openapi_gateway/fetcher.py
"""
Document fetcher - download, validate and cache OpenAPI documents

Only validated documents are cached. Entries expire after the configured TTL.
"""

import logging
import threading
import time
from collections.abc import Callable
from typing import Any

import httpx
import orjson

from .constants import DEFAULT_CACHE_MAX_ENTRIES, DEFAULT_CACHE_TTL, DEFAULT_UPSTREAM_TIMEOUT
from .errors import DocumentFetchError, InsecureServerURL, InvalidOpenAPIDocument

logger = logging.getLogger(__name__)


def validate_openapi_document(document: Any) -> bool:
    """Minimal structural check: openapi, servers[].url, info.title, info.description, paths."""
    if not isinstance(document, dict):
        return False

    openapi = document.get("openapi")
    if not isinstance(openapi, str) or not openapi:
        return False

    servers = document.get("servers")
    if not isinstance(servers, list) or not servers:
        return False
    for server in servers:
        if not isinstance(server, dict) or not isinstance(server.get("url"), str):
            return False

    info = document.get("info")
    if not isinstance(info, dict):
        return False
    for key in ("title", "description"):
        value = info.get(key)
        if not isinstance(value, str) or not value:
            return False

    return isinstance(document.get("paths"), dict)


class DocumentCache:
    """TTL cache of parsed documents keyed by URL.

    Expired entries are swept on every ``put``; past ``max_entries`` the
    oldest entry is evicted.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = DEFAULT_CACHE_MAX_ENTRIES,
    ):
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, tuple[float, dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def get(self, url: str) -> dict[str, Any] | None:
        with self._lock:
            entry = self._entries.get(url)
            if entry is None:
                return None
            stored_at, document = entry
            if self._clock() - stored_at > self.ttl:
                del self._entries[url]
                return None
            return document

    def put(self, url: str, document: dict[str, Any]) -> None:
        if self.ttl <= 0:
            return
        with self._lock:
            now = self._clock()
            self._sweep(now)
            if self._entries and url not in self._entries and len(self._entries) >= self.max_entries:
                oldest = min(self._entries, key=lambda key: self._entries[key][0])
                del self._entries[oldest]
                logger.debug(f"Evicted cached document {oldest} (max_entries reached)")
            self._entries[url] = (now, document)

    def cleanup_stale(self) -> None:
        """Remove entries older than the TTL."""
        with self._lock:
            self._sweep(self._clock())

    def _sweep(self, now: float) -> None:
        stale = [url for url, (stored_at, _) in self._entries.items() if now - stored_at > self.ttl]
        for url in stale:
            del self._entries[url]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class DocumentFetcher:
    """Fetches OpenAPI documents over HTTPS through a DocumentCache."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        cache: DocumentCache | None = None,
        timeout: float = DEFAULT_UPSTREAM_TIMEOUT,
        allow_insecure: bool = False,
    ):
        self.client = client
        self.cache = cache if cache is not None else DocumentCache()
        self.timeout = timeout
        self.allow_insecure = allow_insecure

    async def fetch(self, url: str) -> dict[str, Any]:
        """Return the validated document at ``url``.

        Raises:
            InsecureServerURL: ``url`` is not https and insecure URLs are not allowed.
            DocumentFetchError: Transport failure or non-2xx status.
            InvalidOpenAPIDocument: The body is not JSON or fails structural validation.
        """
        if not url or not isinstance(url, str):
            raise DocumentFetchError(str(url), "Server URL must be a non-empty string")
        if not url.startswith("https://") and not self.allow_insecure:
            raise InsecureServerURL(url)

        cached = self.cache.get(url)
        if cached is not None:
            logger.debug(f"Document cache hit for {url}")
            return cached

        logger.info(f"Fetching OpenAPI document {url}")
        try:
            if self.client is not None:
                response = await self.client.get(url)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url)
        except httpx.HTTPError as e:
            logger.error(f"Document fetch failed for {url}: {e}")
            raise DocumentFetchError(url, f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            logger.error(f"Document fetch for {url} returned {response.status_code}")
            raise DocumentFetchError(url, f"{response.status_code} {response.reason_phrase}")

        try:
            document = orjson.loads(response.content)
        except orjson.JSONDecodeError as e:
            raise InvalidOpenAPIDocument("Invalid OpenAPI document: response body is not JSON") from e

        if not validate_openapi_document(document):
            raise InvalidOpenAPIDocument()

        self.cache.put(url, document)
        return document


__all__ = ["DocumentCache", "DocumentFetcher", "validate_openapi_document"]
