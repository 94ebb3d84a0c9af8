#!/usr/bin/env python3
# src/mcp_openapi_gateway/config/container_detector.py
"""
Container environment detection, used to pick the default bind host.
"""

from pathlib import Path

from .base import ConfigDetector
from .constants import CGROUP_PATH, CONTAINER_INDICATORS, DOCKERENV_PATH, ENV_CONTAINER, ENV_KUBERNETES_HOST


class ContainerDetector(ConfigDetector):
    """Detects if running in a container environment."""

    def __init__(self, environ: dict[str, str] | None = None, root: Path | None = None):
        super().__init__(environ)
        self.root = root or Path("/")

    def detect(self) -> bool:
        return (
            bool(self.get_env_var(ENV_KUBERNETES_HOST))
            or bool(self.get_env_var(ENV_CONTAINER))
            or self._check_docker_env()
            or self._check_cgroup_container()
        )

    def _resolve(self, absolute: str) -> Path:
        return self.root / absolute.lstrip("/")

    def _check_docker_env(self) -> bool:
        return self._resolve(DOCKERENV_PATH).exists()

    def _check_cgroup_container(self) -> bool:
        cgroup_file = self._resolve(CGROUP_PATH)
        if not cgroup_file.exists():
            return False
        content = self.safe_file_read(cgroup_file)
        return bool(content) and any(indicator in content for indicator in CONTAINER_INDICATORS)
