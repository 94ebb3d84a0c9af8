#!/usr/bin/env python3
"""Tests for $ref / $defs resolution."""

import copy
import logging

import pytest

from mcp_openapi_gateway.errors import CyclicReferenceError, SchemaResolutionError
from mcp_openapi_gateway.schema import resolve_response_reference, resolve_schema

PET = {
    "type": "object",
    "properties": {"id": {"type": "string"}, "tag": {"$ref": "#/$defs/Tag"}},
    "$defs": {"Tag": {"type": "string", "description": "Pet tag"}},
}

DOCUMENT = {
    "openapi": "3.1.0",
    "components": {
        "schemas": {
            "Pet": PET,
            "Owner": {
                "type": "object",
                "properties": {"name": {"type": "string"}},
                "$defs": {"Tag": {"type": "integer", "description": "Owner tag"}},
            },
            "Alias": {"$ref": "#/components/schemas/Pet"},
        },
        "responses": {
            "NotFound": {
                "description": "Missing",
                "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}},
            },
            "Broken": {
                "description": "Broken",
                "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Nope"}}},
            },
        },
    },
}


class TestComponentReferences:
    def test_component_ref_returns_exact_schema(self):
        resolved = resolve_schema(DOCUMENT, {"$ref": "#/components/schemas/Pet"})
        assert resolved == PET

    def test_component_ref_is_idempotent(self):
        first = resolve_schema(DOCUMENT, {"$ref": "#/components/schemas/Pet"})
        second = resolve_schema(DOCUMENT, {"$ref": "#/components/schemas/Pet"})
        assert first == second

    def test_result_is_a_copy(self):
        document = copy.deepcopy(DOCUMENT)
        resolved = resolve_schema(document, {"$ref": "#/components/schemas/Pet"})
        resolved["properties"]["id"]["type"] = "integer"
        assert document == DOCUMENT

    def test_ref_to_ref_is_followed(self):
        assert resolve_schema(DOCUMENT, {"$ref": "#/components/schemas/Alias"}) == PET

    def test_missing_component_raises(self):
        with pytest.raises(SchemaResolutionError, match="Schema not found"):
            resolve_schema(DOCUMENT, {"$ref": "#/components/schemas/Missing"})

    def test_unsupported_ref_raises(self):
        with pytest.raises(SchemaResolutionError, match="Unsupported \\$ref format"):
            resolve_schema(DOCUMENT, {"$ref": "https://example.com/schema.json"})

    def test_non_dict_schema_resolves_to_empty(self):
        assert resolve_schema(DOCUMENT, None) == {}


class TestDefsReferences:
    def test_local_defs_win(self):
        resolved = resolve_schema(DOCUMENT, PET)
        assert resolved["properties"]["tag"] == {"type": "string", "description": "Pet tag"}

    def test_root_defs(self):
        document = {"$defs": {"Color": {"type": "string"}}, "components": {"schemas": {}}}
        assert resolve_schema(document, {"$ref": "#/$defs/Color"}) == {"type": "string"}

    def test_explicit_component_defs(self):
        resolved = resolve_schema(DOCUMENT, {"$ref": "#/components/schemas/Owner/$defs/Tag"})
        assert resolved == {"type": "integer", "description": "Owner tag"}

    def test_ambiguous_defs_uses_first_match_and_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="mcp_openapi_gateway.schema"):
            resolved = resolve_schema(DOCUMENT, {"$ref": "#/$defs/Tag"})
        assert resolved == {"type": "string", "description": "Pet tag"}
        assert "Ambiguous $defs reference" in caplog.text
        assert "Pet, Owner" in caplog.text

    def test_empty_defs_target_resolves(self):
        document = {"$defs": {"Anything": {}}, "components": {"schemas": {"Box": {"$defs": {"Any": {}}}}}}
        assert resolve_schema(document, {"$ref": "#/$defs/Anything"}) == {}
        assert resolve_schema(document, {"$ref": "#/components/schemas/Box/$defs/Any"}) == {}
        assert resolve_schema(document, {"$ref": "#/$defs/Any"}) == {}

    def test_unresolvable_defs_raises(self):
        with pytest.raises(SchemaResolutionError):
            resolve_schema(DOCUMENT, {"$ref": "#/$defs/Nothing"})


class TestStructuralResolution:
    def test_object_property_refs_are_inlined(self):
        schema = {
            "type": "object",
            "properties": {"pet": {"$ref": "#/components/schemas/Pet"}, "n": {"type": "number"}},
        }
        resolved = resolve_schema(DOCUMENT, schema)
        assert resolved["properties"]["pet"] == PET
        assert resolved["properties"]["n"] == {"type": "number"}

    def test_array_items_are_inlined(self):
        resolved = resolve_schema(DOCUMENT, {"type": "array", "items": {"$ref": "#/components/schemas/Pet"}})
        assert resolved["items"] == PET

    def test_unresolvable_array_items_become_null(self):
        resolved = resolve_schema(DOCUMENT, {"type": "array", "items": {"$ref": "#/components/schemas/Nope"}})
        assert resolved["items"] == {"type": "null"}


class TestCycles:
    def test_ref_cycle_raises(self):
        document = {
            "components": {
                "schemas": {"A": {"$ref": "#/components/schemas/B"}, "B": {"$ref": "#/components/schemas/A"}}
            }
        }
        with pytest.raises(CyclicReferenceError) as excinfo:
            resolve_schema(document, {"$ref": "#/components/schemas/A"})
        assert excinfo.value.ref == "#/components/schemas/A"
        assert isinstance(excinfo.value, SchemaResolutionError)


class TestResponseReferences:
    def test_response_content_schemas_resolved(self):
        resolved = resolve_response_reference(DOCUMENT, "#/components/responses/NotFound")
        assert resolved["description"] == "Missing"
        assert resolved["content"]["application/json"]["schema"] == PET

    def test_unresolvable_content_left_as_declared(self):
        resolved = resolve_response_reference(DOCUMENT, "#/components/responses/Broken")
        assert resolved["content"]["application/json"]["schema"] == {"$ref": "#/components/schemas/Nope"}

    def test_missing_response_raises(self):
        with pytest.raises(SchemaResolutionError):
            resolve_response_reference(DOCUMENT, "#/components/responses/Gone")
