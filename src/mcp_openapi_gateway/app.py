#!/usr/bin/env python3
"""
app.py - Gateway application factory

Creates the Starlette application: gateway-level routes, one route table per
``/{source}`` prefix, CORS and the shared upstream HTTP client.
"""

import contextlib
import logging
from collections.abc import AsyncIterator

import httpx
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.routing import Route, WebSocketRoute

from .config import GatewayConfig
from .endpoints.health import health_endpoint, root_endpoint
from .endpoints.legacy import invoke_endpoint, models_endpoint, stream_create_endpoint, tools_endpoint
from .endpoints.legacy import root_endpoint as source_root_endpoint
from .endpoints.mcp import mcp_endpoint
from .endpoints.stream import stream_websocket
from .executor import CallExecutor
from .fetcher import DocumentCache, DocumentFetcher
from .middleware import RequestLoggingMiddleware
from .sources import SourceResolver
from .usage import UsageCounters

logger = logging.getLogger(__name__)


# ============================================================================
# Application Factory
# ============================================================================


def create_app(
    config: GatewayConfig | None = None,
    client: httpx.AsyncClient | None = None,
    debug: bool = False,
) -> Starlette:
    """
    Create and configure the gateway application.

    Args:
        config: Gateway configuration (defaults to ``GatewayConfig.from_env()``)
        client: HTTP client for document fetches and upstream calls. When
            omitted, one is opened for the application's lifespan.
        debug: Starlette debug mode

    Returns:
        Configured Starlette application
    """
    config = config or GatewayConfig.from_env()

    cache = DocumentCache(ttl=config.cache_ttl)
    fetcher = DocumentFetcher(
        client=client, cache=cache, timeout=config.upstream_timeout, allow_insecure=config.allow_insecure
    )
    executor = CallExecutor(client=client, timeout=config.upstream_timeout)

    @contextlib.asynccontextmanager
    async def lifespan(_app: Starlette) -> AsyncIterator[None]:
        if client is not None:
            yield
            return

        async with httpx.AsyncClient(timeout=config.upstream_timeout) as shared:
            fetcher.client = shared
            executor.client = shared
            logger.info(f"Gateway ready ({len(config.aliases)} aliases)")
            try:
                yield
            finally:
                fetcher.client = None
                executor.client = None
        logger.info("Gateway shut down")

    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
            max_age=3600,
        ),
        Middleware(RequestLoggingMiddleware),
    ]

    routes = [
        # Gateway level
        Route("/", root_endpoint, methods=["GET"]),
        Route("/health", health_endpoint, methods=["GET"]),
        # Per source: MCP protocol
        Route("/{source}/sse", mcp_endpoint, methods=["GET", "POST"]),
        # Per source: legacy REST
        Route("/{source}", source_root_endpoint, methods=["GET"]),
        Route("/{source}/models", models_endpoint, methods=["GET"]),
        Route("/{source}/tools", tools_endpoint, methods=["GET"]),
        Route("/{source}/tools/{slug}", tools_endpoint, methods=["GET"]),
        Route("/{source}/invoke", invoke_endpoint, methods=["POST"]),
        Route("/{source}/stream", stream_create_endpoint, methods=["POST"]),
        WebSocketRoute("/{source}/stream/{task_id}", stream_websocket),
    ]

    app = Starlette(debug=debug, routes=routes, middleware=middleware, lifespan=lifespan)

    app.state.config = config
    app.state.cache = cache
    app.state.fetcher = fetcher
    app.state.executor = executor
    app.state.resolver = SourceResolver(config.aliases)
    app.state.usage = UsageCounters()

    return app
