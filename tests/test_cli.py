#!/usr/bin/env python3
"""Tests for the command-line interface."""

import logging
from unittest.mock import patch

import pytest

from mcp_openapi_gateway.cli import build_parser, main, setup_logging
from mcp_openapi_gateway.config import GatewayConfig


class TestParser:
    def test_serve_options(self):
        args = build_parser().parse_args(["serve", "--port", "9000", "--debug", "--allow-insecure"])
        assert args.mode == "serve"
        assert args.port == 9000
        assert args.debug is True
        assert args.allow_insecure is True
        assert args.host is None

    def test_inspect(self):
        args = build_parser().parse_args(["inspect", "https://a.example.com/openapi.json"])
        assert args.mode == "inspect"
        assert args.url == "https://a.example.com/openapi.json"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestMain:
    def test_serve_applies_overrides(self, monkeypatch):
        monkeypatch.delenv("MCP_GATEWAY_PORT", raising=False)
        monkeypatch.delenv("PORT", raising=False)
        with patch("mcp_openapi_gateway.cli.run_server") as run_server, patch("mcp_openapi_gateway.cli.setup_logging"):
            main(["serve", "--host", "127.0.0.1", "--port", "9100", "--log-level", "info"])

        config = run_server.call_args.args[0]
        assert config.host == "127.0.0.1"
        assert config.port == 9100
        assert config.log_level == "info"
        assert run_server.call_args.kwargs == {"debug": False, "reload": False}

    def test_reload_passes_overrides_through_environment(self, monkeypatch):
        for name in ("MCP_GATEWAY_HOST", "MCP_GATEWAY_PORT", "MCP_LOG_LEVEL", "MCP_GATEWAY_ALLOW_INSECURE"):
            monkeypatch.setenv(name, "")
        monkeypatch.delenv("PORT", raising=False)
        argv = ["serve", "--reload", "--host", "127.0.0.1", "--port", "9200", "--log-level", "info", "--allow-insecure"]
        with patch("mcp_openapi_gateway.cli.uvicorn.run") as run, patch("mcp_openapi_gateway.cli.setup_logging"):
            main(argv)

        assert run.call_args.args == ("mcp_openapi_gateway.app:create_app",)
        assert run.call_args.kwargs["factory"] is True
        worker_config = GatewayConfig.from_env()
        assert worker_config.host == "127.0.0.1"
        assert worker_config.port == 9200
        assert worker_config.log_level == "info"
        assert worker_config.allow_insecure is True

    def test_bad_environment_exits(self, monkeypatch):
        monkeypatch.setenv("MCP_GATEWAY_PORT", "not-a-port")
        with pytest.raises(SystemExit):
            main(["serve"])

    def test_inspect_error_exits(self, capsys):
        with patch("mcp_openapi_gateway.cli.setup_logging"):
            with pytest.raises(SystemExit) as excinfo:
                main(["inspect", "http://insecure.example.com/openapi.json"])
        assert excinfo.value.code == 1
        assert "insecure URL" in capsys.readouterr().err


def test_setup_logging_debug():
    with patch("logging.basicConfig") as basic_config:
        setup_logging(debug=True)
    assert basic_config.call_args.kwargs["level"] == logging.DEBUG
