#!/usr/bin/env python3
"""Tests for outbound request construction and execution."""

import asyncio

import httpx
import orjson
import pytest

from mcp_openapi_gateway.errors import UpstreamCallFailure
from mcp_openapi_gateway.executor import (
    CallExecutor,
    apply_security,
    build_api_url,
    has_http_scheme,
    is_json_content_type,
)

from helpers import RecordingUpstream, json_response


class TestBuildApiUrl:
    def test_brace_and_colon_placeholders(self):
        assert build_api_url("https://api.example.com", "/pets/{id}", {"id": "7"}, []) == (
            "https://api.example.com/pets/7"
        )
        assert build_api_url("https://api.example.com", "/pets/:id/toys/:id", {"id": "7"}, []) == (
            "https://api.example.com/pets/7/toys/7"
        )

    def test_path_values_are_percent_encoded(self):
        url = build_api_url("https://api.example.com", "/files/{name}", {"name": "a b/c"}, [])
        assert url == "https://api.example.com/files/a%20b%2Fc"

    def test_host_normalization(self):
        assert build_api_url("api.example.com/", "pets", {}, []) == "https://api.example.com/pets"
        assert build_api_url("http://localhost:8080", "/pets", {}, []) == "http://localhost:8080/pets"

    @pytest.mark.parametrize("host", ["httpbin.org", "https-proxy.example.com", "httpd.local"])
    def test_host_beginning_with_http_letters_gets_scheme(self, host):
        assert build_api_url(host, "/get", {}, []) == f"https://{host}/get"

    def test_scheme_detection(self):
        assert has_http_scheme("https://h") and has_http_scheme("http://h")
        assert not has_http_scheme("httpbin.org")
        assert not has_http_scheme("ftp://h")

    def test_query_string(self):
        url = build_api_url("https://api.example.com", "/pets", {}, [("limit", "10"), ("tag", "a b")])
        assert url == "https://api.example.com/pets?limit=10&tag=a+b"

    def test_unfilled_placeholder_left_alone(self):
        assert build_api_url("https://h", "/pets/{id}", {}, []) == "https://h/pets/{id}"

    @pytest.mark.parametrize("host,path", [("", "/pets"), ("https://h", "")])
    def test_empty_host_or_path_rejected(self, host, path):
        with pytest.raises(ValueError):
            build_api_url(host, path, {}, [])


class TestSecurity:
    SCHEMES = {
        "apiKey": {"type": "apiKey", "in": "header", "name": "X-API-Key"},
        "bearer": {"type": "http", "scheme": "bearer"},
        "oauth": {"type": "oauth2", "flows": {}},
    }

    def test_api_key_header(self):
        headers = apply_security({}, {"header-X-API-Key": "secret"}, self.SCHEMES)
        assert headers == {"X-API-Key": "secret"}

    def test_bearer_from_authorization(self):
        headers = apply_security({}, {"authorization": "Bearer abc"}, self.SCHEMES)
        assert headers == {"Authorization": "Bearer abc"}

    def test_no_schemes(self):
        assert apply_security({"A": "1"}, {"authorization": "x"}, None) == {"A": "1"}


class TestBuildRequest:
    def test_json_body_for_post(self):
        executor = CallExecutor()
        method, url, headers, body = executor.build_request(
            "https://api.example.com", "post", "/pets", {"body": {"name": "Rex"}, "header-X-Trace": "t"}
        )
        assert method == "POST"
        assert url == "https://api.example.com/pets"
        assert headers["Content-Type"] == "application/json"
        assert headers["X-Trace"] == "t"
        assert orjson.loads(body["content"]) == {"name": "Rex"}

    def test_no_body_for_get(self):
        _, _, _, body = CallExecutor().build_request("https://h", "GET", "/x", {"body": {"a": 1}})
        assert body == {}

    def test_form_body(self):
        _, _, headers, body = CallExecutor().build_request(
            "https://h", "POST", "/login", {"body": {"user": "u"}}, "application/x-www-form-urlencoded"
        )
        assert body == {"data": {"user": "u"}}
        assert headers["Content-Type"] == "application/x-www-form-urlencoded"

    def test_json_content_type_detection(self):
        assert is_json_content_type("application/json; charset=utf-8")
        assert is_json_content_type("application/problem+json")
        assert not is_json_content_type("text/plain")


class TestExecute:
    @pytest.mark.asyncio
    async def test_single_outbound_call(self):
        upstream = RecordingUpstream()
        upstream.api_handler = lambda request: json_response({"id": "7", "name": "Rex"})
        async with upstream.client() as client:
            executor = CallExecutor(client)
            result = await executor.execute("https://api.example.com", "GET", "/pets/{id}", {"path-id": "7"})

        assert result == {"id": "7", "name": "Rex"}
        assert len(upstream.calls) == 1
        assert upstream.calls[0].method == "GET"
        assert str(upstream.calls[0].url) == "https://api.example.com/pets/7"

    @pytest.mark.asyncio
    async def test_text_response(self):
        upstream = RecordingUpstream()
        upstream.api_handler = lambda request: httpx.Response(200, text="pong")
        async with upstream.client() as client:
            assert await CallExecutor(client).execute("https://h", "GET", "/ping", {}) == "pong"

    @pytest.mark.asyncio
    async def test_empty_json_response(self):
        upstream = RecordingUpstream()
        upstream.api_handler = lambda request: httpx.Response(204, headers={"content-type": "application/json"})
        async with upstream.client() as client:
            assert await CallExecutor(client).execute("https://h", "DELETE", "/pets/1", {}) is None

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        upstream = RecordingUpstream()
        upstream.api_handler = lambda request: httpx.Response(500, text="boom")
        async with upstream.client() as client:
            with pytest.raises(UpstreamCallFailure) as excinfo:
                await CallExecutor(client).execute("https://h", "GET", "/x", {})

        assert excinfo.value.status_code == 500
        assert str(excinfo.value) == "API call failed: 500 Internal Server Error - boom"
        assert len(upstream.calls) == 1

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self):
        def fail(request):
            raise httpx.ConnectError("refused", request=request)

        upstream = RecordingUpstream()
        upstream.api_handler = fail
        async with upstream.client() as client:
            with pytest.raises(UpstreamCallFailure, match="ConnectError"):
                await CallExecutor(client).execute("https://h", "GET", "/x", {})

    @pytest.mark.asyncio
    async def test_cancellation_aborts_call(self):
        started = asyncio.Event()

        async def slow(request):
            started.set()
            await asyncio.sleep(30)
            return json_response({})

        upstream = RecordingUpstream()
        upstream.api_handler = slow
        async with upstream.client() as client:
            task = asyncio.create_task(CallExecutor(client).execute("https://h", "GET", "/slow", {}))
            await started.wait()
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
