#!/usr/bin/env python3
"""Tests for model selection, host resolution and required parameter checks."""

import pytest

from mcp_openapi_gateway.catalog import build_catalog
from mcp_openapi_gateway.errors import MissingRequiredParameters, ModelNotFound
from mcp_openapi_gateway.executor import CallExecutor
from mcp_openapi_gateway.invocation import invoke_tool, require_parameters, resolve_host
from mcp_openapi_gateway.models import Model

from helpers import PETSTORE_URL, RecordingUpstream, json_response


def _model(server_url):
    return Model(
        id=f"api:x:{server_url}",
        name="x",
        description="",
        capabilities=("tools",),
        tools_endpoint="/tools/x",
        server_url=server_url,
    )


class TestResolveHost:
    def test_absolute_url_unchanged(self):
        assert resolve_host(_model("https://api.example.com"), PETSTORE_URL) == "https://api.example.com"

    @pytest.mark.parametrize(
        "server_url,expected",
        [
            ("/v1", "https://petstore.example.com/v1"),
            ("./api", "https://petstore.example.com/api"),
        ],
    )
    def test_relative_reference_joins_document_url(self, server_url, expected):
        assert resolve_host(_model(server_url), PETSTORE_URL) == expected

    def test_bare_host_is_not_joined(self):
        assert resolve_host(_model("httpbin.org"), PETSTORE_URL) == "httpbin.org"

    def test_without_document_url(self):
        assert resolve_host(_model("/v1")) == "/v1"


class TestRequireParameters:
    def test_missing_path_parameter(self, petstore):
        catalog = build_catalog(petstore)
        with pytest.raises(MissingRequiredParameters) as excinfo:
            require_parameters(catalog, "getPet", {})
        assert excinfo.value.missing == ["path-id"]
        assert excinfo.value.code == -32602

    def test_satisfied(self, petstore):
        require_parameters(build_catalog(petstore), "getPet", {"path-id": "7"})

    def test_unknown_tool_is_left_to_the_caller(self, petstore):
        require_parameters(build_catalog(petstore), "nope", None)


class TestInvokeTool:
    @pytest.mark.asyncio
    async def test_bare_host_server_gets_https(self, petstore):
        petstore["servers"] = [{"url": "httpbin.org"}]
        catalog = build_catalog(petstore, source_url=PETSTORE_URL)
        upstream = RecordingUpstream()
        upstream.api_handler = lambda request: json_response({"id": "7"})
        async with upstream.client() as client:
            await invoke_tool(catalog, CallExecutor(client), "getPet", {"path-id": "7"})

        assert str(upstream.calls[-1].url) == "https://httpbin.org/pets/7"

    @pytest.mark.asyncio
    async def test_unknown_model(self, petstore):
        catalog = build_catalog(petstore)
        with pytest.raises(ModelNotFound):
            await invoke_tool(catalog, CallExecutor(None), "getPet", {}, model_id="api:x:y")
