#!/usr/bin/env python3
# src/mcp_openapi_gateway/sources.py
"""
Sources - map the ``/{source}`` path prefix to an OpenAPI document URL

Resolution order:

1. An alias-table name maps to its configured URL.
2. A value containing a ``.`` is treated as a host serving
   ``https://<source>/openapi.json``.
3. Anything else is unknown.
"""

import logging
from collections.abc import Mapping
from pathlib import Path

import orjson

from .constants import DEFAULT_DOCUMENT_PATH

logger = logging.getLogger(__name__)


class AliasTable:
    """Named OpenAPI document URLs."""

    def __init__(self, aliases: Mapping[str, str] | None = None):
        self._aliases: dict[str, str] = dict(aliases or {})

    def resolve(self, name: str) -> str | None:
        return self._aliases.get(name)

    def names(self) -> list[str]:
        return sorted(self._aliases)

    def __contains__(self, name: object) -> bool:
        return name in self._aliases

    def __len__(self) -> int:
        return len(self._aliases)

    @classmethod
    def from_value(cls, value: str | None) -> "AliasTable":
        """Build a table from a JSON object string or a path to a JSON file.

        Raises:
            ValueError: The value is neither a JSON object nor a readable JSON file.
        """
        if not value or not value.strip():
            return cls()

        text = value.strip()
        if not text.startswith("{"):
            path = Path(text).expanduser()
            try:
                text = path.read_text(encoding="utf-8")
            except OSError as e:
                raise ValueError(f"Cannot read alias file {path}: {e}") from e

        try:
            data = orjson.loads(text)
        except orjson.JSONDecodeError as e:
            raise ValueError(f"Alias table is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ValueError("Alias table must be a JSON object of name -> URL")

        aliases = {}
        for name, url in data.items():
            if not isinstance(url, str) or not url:
                logger.warning(f"Ignoring alias {name!r}: URL must be a non-empty string")
                continue
            aliases[str(name)] = url
        return cls(aliases)


class SourceResolver:
    """Resolves a ``{source}`` path segment to a document URL."""

    def __init__(self, aliases: AliasTable | None = None):
        self.aliases = aliases or AliasTable()

    def resolve(self, source: str) -> str | None:
        url = self.aliases.resolve(source)
        if url is not None:
            logger.debug(f"Source {source!r} resolved via alias to {url}")
            return url
        if "." in source:
            return f"https://{source}{DEFAULT_DOCUMENT_PATH}"
        return None


__all__ = ["AliasTable", "SourceResolver"]
