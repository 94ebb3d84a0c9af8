#!/usr/bin/env python3
# src/mcp_openapi_gateway/config/settings.py
"""
Gateway configuration read from the environment.

Every value has a default; CLI flags are applied on top with ``replace``.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any

from ..constants import (
    DEFAULT_CACHE_TTL,
    DEFAULT_HOST,
    DEFAULT_LOCAL_HOST,
    DEFAULT_PORT,
    DEFAULT_UPSTREAM_TIMEOUT,
    ENV_GATEWAY_ALIASES,
    ENV_GATEWAY_ALLOW_INSECURE,
    ENV_GATEWAY_CACHE_TTL,
    ENV_GATEWAY_HOST,
    ENV_GATEWAY_PORT,
    ENV_GATEWAY_UPSTREAM_TIMEOUT,
    ENV_MCP_LOG_LEVEL,
    ENV_PORT,
    LOG_LEVELS,
    LOG_WARNING,
)
from ..sources import AliasTable
from .base import ConfigDetector
from .constants import PORT_MAX, PORT_MIN
from .container_detector import ContainerDetector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayConfig:
    host: str = DEFAULT_LOCAL_HOST
    port: int = DEFAULT_PORT
    log_level: str = LOG_WARNING
    cache_ttl: float = DEFAULT_CACHE_TTL
    upstream_timeout: float = DEFAULT_UPSTREAM_TIMEOUT
    allow_insecure: bool = False
    aliases: AliasTable = field(default_factory=AliasTable)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "GatewayConfig":
        """Build a config from environment variables.

        Raises:
            ValueError: A variable holds a value of the wrong type.
        """
        return GatewayDetector(environ).detect()

    def with_overrides(self, **overrides: Any) -> "GatewayConfig":
        """Copy with non-None overrides applied."""
        return replace(self, **{key: value for key, value in overrides.items() if value is not None})

    def summary(self) -> dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "log_level": self.log_level,
            "cache_ttl": self.cache_ttl,
            "upstream_timeout": self.upstream_timeout,
            "allow_insecure": self.allow_insecure,
            "aliases": self.aliases.names(),
        }


class GatewayDetector(ConfigDetector):
    """Reads GatewayConfig values from the environment."""

    def detect(self) -> GatewayConfig:
        config = GatewayConfig(
            host=self.detect_host(),
            port=self.detect_port(),
            log_level=self.detect_log_level(),
            cache_ttl=self._get_float(ENV_GATEWAY_CACHE_TTL, DEFAULT_CACHE_TTL),
            upstream_timeout=self._get_float(ENV_GATEWAY_UPSTREAM_TIMEOUT, DEFAULT_UPSTREAM_TIMEOUT),
            allow_insecure=self.get_env_bool(ENV_GATEWAY_ALLOW_INSECURE),
            aliases=AliasTable.from_value(self.get_env_var(ENV_GATEWAY_ALIASES) or None),
        )
        self.logger.debug(f"Gateway configuration: {config.summary()}")
        return config

    def detect_host(self) -> str:
        host = self.get_env_var(ENV_GATEWAY_HOST)
        if host:
            return host
        if ContainerDetector(self.environ).detect():
            return DEFAULT_HOST
        return DEFAULT_LOCAL_HOST

    def detect_port(self) -> int:
        raw = self.get_env_var(ENV_GATEWAY_PORT) or self.get_env_var(ENV_PORT)
        if not raw:
            return DEFAULT_PORT
        try:
            port = int(raw)
        except ValueError as e:
            raise ValueError(f"Invalid port {raw!r}") from e
        if not PORT_MIN <= port <= PORT_MAX:
            raise ValueError(f"Port {port} out of range {PORT_MIN}-{PORT_MAX}")
        return port

    def detect_log_level(self) -> str:
        level = self.get_env_var(ENV_MCP_LOG_LEVEL).strip().lower()
        if not level:
            return LOG_WARNING
        if level not in LOG_LEVELS:
            self.logger.warning(f"Unknown log level {level!r}, using {LOG_WARNING}")
            return LOG_WARNING
        return level

    def _get_float(self, name: str, default: float) -> float:
        raw = self.get_env_var(name)
        if not raw:
            return default
        try:
            return float(raw)
        except ValueError as e:
            raise ValueError(f"{name} must be a number, got {raw!r}") from e
