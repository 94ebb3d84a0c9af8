#!/usr/bin/env python3
# src/mcp_openapi_gateway/config/base.py
"""
Base class for environment detectors.
"""

import logging
import os
from pathlib import Path
from typing import Any

from .constants import TRUTHY_VALUES


class ConfigDetector:
    """Shared helpers for reading the process environment."""

    def __init__(self, environ: dict[str, str] | None = None):
        self.environ = environ if environ is not None else os.environ
        self.logger = logging.getLogger(f"{__name__}.{type(self).__name__}")

    def detect(self) -> Any:
        raise NotImplementedError

    def get_env_var(self, name: str, default: str = "") -> str:
        return self.environ.get(name, default)

    def get_env_bool(self, name: str, default: bool = False) -> bool:
        value = self.environ.get(name)
        if value is None:
            return default
        return value.strip().lower() in TRUTHY_VALUES

    def safe_file_read(self, path: Path) -> str | None:
        try:
            return path.read_text(encoding="utf-8", errors="ignore")
        except OSError as e:
            self.logger.debug(f"Could not read {path}: {e}")
            return None
