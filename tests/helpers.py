#!/usr/bin/env python3
"""Test helpers: a small pet store document and a recording upstream."""

from collections.abc import Callable
from typing import Any

import httpx
import orjson

PETSTORE_URL = "https://petstore.example.com/openapi.json"

PETSTORE: dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Pet Store", "description": "A sample pet store", "version": "2.1.0"},
    "servers": [{"url": "https://api.example.com"}],
    "paths": {
        "/pets/{id}": {
            "get": {
                "operationId": "getPet",
                "summary": "Get a pet",
                "description": "Fetch a single pet by id",
                "parameters": [{"name": "id", "in": "path", "required": True, "schema": {"type": "string"}}],
                "responses": {
                    "200": {
                        "description": "A pet",
                        "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}},
                    },
                    "404": {"$ref": "#/components/responses/NotFound"},
                },
            }
        },
        "/pets": {
            "get": {
                "operationId": "listPets",
                "parameters": [
                    {"name": "limit", "in": "query", "description": "Max items", "schema": {"type": "integer"}}
                ],
                "responses": {
                    "200": {
                        "description": "Pets",
                        "content": {
                            "application/json": {
                                "schema": {"type": "array", "items": {"$ref": "#/components/schemas/Pet"}}
                            }
                        },
                    }
                },
            },
            "post": {
                "operationId": "createPet",
                "summary": "Create a pet",
                "requestBody": {
                    "required": True,
                    "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}},
                },
                "responses": {"201": {"description": "Created"}},
            },
        },
    },
    "components": {
        "schemas": {
            "Pet": {
                "type": "object",
                "properties": {"id": {"type": "string"}, "name": {"type": "string"}},
                "required": ["id", "name"],
            }
        },
        "responses": {
            "NotFound": {
                "description": "Not found",
                "content": {
                    "application/json": {
                        "schema": {"type": "object", "properties": {"message": {"type": "string"}}}
                    }
                },
            }
        },
    },
}


def json_response(data: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code, content=orjson.dumps(data), headers={"content-type": "application/json"}
    )


class RecordingUpstream:
    """httpx.MockTransport handler that serves documents and records API calls."""

    def __init__(self, documents: dict[str, Any] | None = None):
        self.documents = documents or {}
        self.calls: list[httpx.Request] = []
        self.api_handler: Callable[[httpx.Request], Any] = lambda request: json_response({"ok": True})

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if url in self.documents:
            return json_response(self.documents[url])
        self.calls.append(request)
        result = self.api_handler(request)
        if hasattr(result, "__await__"):
            result = await result
        return result

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))

