#!/usr/bin/env python3
"""Tests for source resolution, alias tables and usage counters."""

import threading

import pytest

from mcp_openapi_gateway.sources import AliasTable, SourceResolver
from mcp_openapi_gateway.usage import UsageCounters


class TestAliasTable:
    def test_from_json(self):
        table = AliasTable.from_value('{"b": "https://b/openapi.json", "a": "https://a/openapi.json", "x": 1}')
        assert table.names() == ["a", "b"]
        assert "a" in table
        assert "x" not in table

    def test_empty(self):
        assert len(AliasTable.from_value(None)) == 0
        assert len(AliasTable.from_value("  ")) == 0

    @pytest.mark.parametrize("value", ["{not json", "/no/such/aliases.json", "[1, 2]"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            AliasTable.from_value(value)


class TestSourceResolver:
    def test_alias_wins(self):
        resolver = SourceResolver(AliasTable({"api.example.com": "https://other/openapi.json"}))
        assert resolver.resolve("api.example.com") == "https://other/openapi.json"

    def test_host(self):
        assert SourceResolver().resolve("api.example.com") == "https://api.example.com/openapi.json"

    def test_unknown(self):
        assert SourceResolver().resolve("petstore") is None


class TestUsageCounters:
    def test_counting(self):
        usage = UsageCounters()
        assert usage.increment("a:sse") == 1
        assert usage.increment("a:sse", 2) == 3
        usage.increment("b:invoke")
        assert usage.get("a:sse") == 3
        assert usage.get("missing") == 0
        assert usage.total == 4
        assert usage.snapshot() == {"a:sse": 3, "b:invoke": 1}
        usage.reset()
        assert usage.snapshot() == {}

    def test_thread_safety(self):
        usage = UsageCounters()

        def work():
            for _ in range(1000):
                usage.increment("k")

        threads = [threading.Thread(target=work) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert usage.get("k") == 8000

    def test_uptime(self):
        assert UsageCounters().uptime >= 0
