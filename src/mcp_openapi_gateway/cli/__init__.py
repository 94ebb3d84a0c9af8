#!/usr/bin/env python3
# src/mcp_openapi_gateway/cli/__init__.py
"""
CLI entry point for the OpenAPI MCP gateway.

``serve`` runs the HTTP gateway under uvicorn; ``inspect`` fetches one
document and prints the catalog it would expose.
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import Any

import orjson
import uvicorn

from ..catalog import build_catalog
from ..config import GatewayConfig
from ..constants import (
    ENV_GATEWAY_ALLOW_INSECURE,
    ENV_GATEWAY_HOST,
    ENV_GATEWAY_PORT,
    ENV_MCP_LOG_LEVEL,
    LOG_LEVELS,
    SERVER_NAME,
)
from ..errors import GatewayError
from ..fetcher import DocumentCache, DocumentFetcher

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False, level: str | None = None, stderr: bool = True) -> None:
    """Set up logging configuration."""
    if debug:
        log_level = logging.DEBUG
    elif level:
        log_level = getattr(logging, level.upper(), logging.WARNING)
    else:
        log_level = logging.INFO
    stream = sys.stderr if stderr else sys.stdout

    logging.basicConfig(
        level=log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", stream=stream
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=SERVER_NAME,
        description="Serve any OpenAPI 3.x document as an MCP server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve on the default port
  mcp-openapi-gateway serve

  # Serve with a named alias table
  MCP_GATEWAY_ALIASES='{"petstore": "https://petstore3.swagger.io/api/v3/openapi.json"}' \\
    mcp-openapi-gateway serve --port 9000

  # Show the tools a document would expose
  mcp-openapi-gateway inspect https://petstore3.swagger.io/api/v3/openapi.json

Environment Variables:
  MCP_GATEWAY_HOST              Host to bind (default: 0.0.0.0 in containers, else localhost)
  MCP_GATEWAY_PORT / PORT       Port to bind (default: 8000)
  MCP_LOG_LEVEL                 Logging level (debug|info|warning|error|critical)
  MCP_GATEWAY_CACHE_TTL         Document cache TTL in seconds (default: 3600)
  MCP_GATEWAY_UPSTREAM_TIMEOUT  Upstream timeout in seconds (default: 30)
  MCP_GATEWAY_ALIASES           JSON object, or path to a JSON file, of name -> document URL
  MCP_GATEWAY_ALLOW_INSECURE    Set to 1 to allow http:// document URLs
        """,
    )

    subparsers = parser.add_subparsers(dest="mode", help="Command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP gateway")
    serve_parser.add_argument("--host", default=None, help="Host to bind to (default: from environment)")
    serve_parser.add_argument("--port", type=int, default=None, help="Port to bind to (default: from environment)")
    serve_parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    serve_parser.add_argument("--reload", action="store_true", help="Enable hot reload")
    serve_parser.add_argument("--log-level", default=None, choices=LOG_LEVELS, help="Logging level")
    serve_parser.add_argument(
        "--allow-insecure", action="store_true", default=None, help="Allow http:// document URLs"
    )

    inspect_parser = subparsers.add_parser("inspect", help="Print the catalog built from a document URL")
    inspect_parser.add_argument("url", help="OpenAPI document URL")
    inspect_parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    inspect_parser.add_argument("--log-level", default=None, choices=LOG_LEVELS, help="Logging level")
    inspect_parser.add_argument(
        "--allow-insecure", action="store_true", default=None, help="Allow http:// document URLs"
    )

    return parser


async def inspect_document(url: str, config: GatewayConfig) -> dict[str, Any]:
    """Fetch ``url`` and summarize its catalog."""
    fetcher = DocumentFetcher(
        cache=DocumentCache(ttl=0), timeout=config.upstream_timeout, allow_insecure=config.allow_insecure
    )
    catalog = build_catalog(await fetcher.fetch(url), source_url=url)
    return {
        "name": catalog.title,
        "version": catalog.version,
        "models": [model.id for model in catalog.models],
        "tools": [
            {"id": tool.id, "route": catalog.invocations[tool.id], "required": tool.required}
            for tool in catalog.tools
        ],
        "prompts": len(catalog.prompts),
    }


def export_config(config: GatewayConfig) -> None:
    """Write command-line settings to the environment for the reload worker."""
    os.environ[ENV_GATEWAY_HOST] = config.host
    os.environ[ENV_GATEWAY_PORT] = str(config.port)
    os.environ[ENV_MCP_LOG_LEVEL] = config.log_level
    os.environ[ENV_GATEWAY_ALLOW_INSECURE] = "1" if config.allow_insecure else "0"


def run_server(config: GatewayConfig, debug: bool = False, reload: bool = False) -> None:
    logger.info(f"Starting {SERVER_NAME} on {config.host}:{config.port}")
    if reload:
        # The reload worker rebuilds its config from the environment
        export_config(config)
        uvicorn.run(
            "mcp_openapi_gateway.app:create_app",
            factory=True,
            host=config.host,
            port=config.port,
            log_level=config.log_level,
            reload=True,
        )
        return

    from ..app import create_app

    uvicorn.run(create_app(config, debug=debug), host=config.host, port=config.port, log_level=config.log_level)


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        env_config = GatewayConfig.from_env()
    except ValueError as e:
        parser.error(str(e))

    config = env_config.with_overrides(
        host=getattr(args, "host", None),
        port=getattr(args, "port", None),
        log_level="debug" if args.debug else args.log_level,
        allow_insecure=args.allow_insecure,
    )
    setup_logging(debug=args.debug, level=config.log_level)

    if args.mode == "inspect":
        try:
            summary = asyncio.run(inspect_document(args.url, config))
        except GatewayError as e:
            print(f"Error: {e.to_message()}", file=sys.stderr)
            sys.exit(1)
        print(orjson.dumps(summary, option=orjson.OPT_INDENT_2).decode())
        return

    run_server(config, debug=args.debug, reload=args.reload)


if __name__ == "__main__":
    main()
