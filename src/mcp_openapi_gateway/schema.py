#!/usr/bin/env python3
# src/mcp_openapi_gateway/schema.py
"""
Schema - $ref / $defs resolution for OpenAPI documents

Resolves component references, root-level $defs, local $defs and
component-scoped $defs into inlined schema dicts. Resolution never mutates
the document: every schema handed back is a copy.

Supported reference forms:

    #/components/schemas/Pet                 exact component schema
    #/components/schemas/Pet/$defs/Tag       $defs of one component
    #/$defs/Tag                              local, root, then any component
    #/components/responses/NotFound          response objects (see
                                             resolve_response_reference)
"""

import copy
import logging
from typing import Any

from .constants import (
    COMPONENT_RESPONSES_PREFIX,
    COMPONENT_SCHEMAS_PREFIX,
    DEFS_KEY,
    DEFS_SEGMENT,
    REF_KEY,
    ROOT_DEFS_PREFIX,
)
from .errors import CyclicReferenceError, SchemaResolutionError

logger = logging.getLogger(__name__)

NULL_SCHEMA: dict[str, Any] = {"type": "null"}

# Lookup miss; an empty schema `{}` is a valid target
_MISSING: Any = object()


# ============================================================================
# $defs lookup helpers
# ============================================================================


def _component_schemas(document: dict[str, Any]) -> dict[str, Any]:
    components = document.get("components") or {}
    return components.get("schemas") or {}


def _walk_defs(defs: Any, parts: list[str]) -> Any:
    """Follow a slash-separated path inside a $defs mapping, or return ``_MISSING``."""
    current = defs
    for part in parts:
        if not part or not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _resolve_defs_reference(
    document: dict[str, Any], ref: str, local_schema: dict[str, Any] | None = None
) -> Any:
    """Resolve a $defs reference, returning ``_MISSING`` when nothing matches."""
    components = _component_schemas(document)

    if ref.startswith(COMPONENT_SCHEMAS_PREFIX):
        remainder = ref[len(COMPONENT_SCHEMAS_PREFIX) :]
        schema_name, sep, def_path = remainder.partition(DEFS_SEGMENT)
        if sep and schema_name and "/" not in schema_name:
            owner = components.get(schema_name)
            if isinstance(owner, dict) and DEFS_KEY in owner:
                return _walk_defs(owner[DEFS_KEY], def_path.split("/"))
        return _MISSING

    if not ref.startswith(ROOT_DEFS_PREFIX):
        return _MISSING

    parts = ref[len(ROOT_DEFS_PREFIX) :].split("/")

    # Local context first: the schema that carried the $ref
    if isinstance(local_schema, dict) and local_schema.get(DEFS_KEY):
        found = _walk_defs(local_schema[DEFS_KEY], parts)
        if found is not _MISSING:
            return found

    # OpenAPI 3.1 root-level $defs
    if document.get(DEFS_KEY):
        found = _walk_defs(document[DEFS_KEY], parts)
        if found is not _MISSING:
            return found

    matches: list[tuple[str, Any]] = []
    for schema_name, node in components.items():
        if not isinstance(node, dict) or not node.get(DEFS_KEY):
            continue
        found = _walk_defs(node[DEFS_KEY], parts)
        if found is not _MISSING:
            matches.append((schema_name, found))

    if not matches:
        return _MISSING

    if len(matches) > 1:
        names = ", ".join(name for name, _ in matches)
        first = matches[0][0]
        logger.warning(
            f'Ambiguous $defs reference "{ref}" found in multiple schemas: {names}. '
            f'Using first match from "{first}". Consider using explicit reference: '
            f"{COMPONENT_SCHEMAS_PREFIX}{first}{DEFS_SEGMENT}{'/'.join(parts)}"
        )

    return matches[0][1]


# ============================================================================
# Public API
# ============================================================================


def resolve_schema(
    document: dict[str, Any],
    schema: Any,
    context_schema: dict[str, Any] | None = None,
    _chain: tuple[str, ...] = (),
) -> dict[str, Any]:
    """Resolve a schema or reference against a document.

    Args:
        document: The parsed OpenAPI document.
        schema: A schema dict, possibly a bare ``{"$ref": ...}``.
        context_schema: The schema that lexically contains ``schema``; its
            ``$defs`` are searched first for bare ``#/$defs/...`` references.

    Returns:
        The resolved schema (a copy; the document is never modified).

    Raises:
        SchemaResolutionError: The reference is malformed or its target is absent.
        CyclicReferenceError: The reference chain loops back on itself.
    """
    if not isinstance(schema, dict):
        return {}

    if context_schema is None and DEFS_KEY in schema:
        context_schema = schema

    if REF_KEY in schema:
        ref = schema[REF_KEY]
        if not isinstance(ref, str) or not ref:
            raise SchemaResolutionError(str(ref))
        if ref in _chain:
            raise CyclicReferenceError(ref, list(_chain))
        chain = (*_chain, ref)

        if ref.startswith(COMPONENT_SCHEMAS_PREFIX) and DEFS_SEGMENT not in ref:
            name = ref[len(COMPONENT_SCHEMAS_PREFIX) :]
            found = _component_schemas(document).get(name)
            if found is None:
                raise SchemaResolutionError(ref, f"Schema not found: {ref}")
        else:
            found = _resolve_defs_reference(document, ref, context_schema)
            if found is _MISSING:
                raise SchemaResolutionError(ref)

        if isinstance(found, dict) and REF_KEY in found:
            return resolve_schema(document, found, context_schema, chain)
        return copy.deepcopy(found)

    schema_type = schema.get("type")

    if schema_type == "object" and isinstance(schema.get("properties"), dict):
        properties: dict[str, Any] = {}
        for name, prop in schema["properties"].items():
            if isinstance(prop, dict) and REF_KEY in prop:
                properties[name] = resolve_schema(document, prop, context_schema, _chain)
            else:
                properties[name] = copy.deepcopy(prop)
        resolved = copy.deepcopy({k: v for k, v in schema.items() if k != "properties"})
        resolved["properties"] = properties
        return resolved

    if schema_type == "array" and isinstance(schema.get("items"), dict) and REF_KEY in schema["items"]:
        try:
            items = resolve_schema(document, schema["items"], context_schema, _chain)
        except CyclicReferenceError:
            raise
        except SchemaResolutionError as e:
            logger.debug(f"Array items left unresolved: {e}")
            items = dict(NULL_SCHEMA)
        resolved = copy.deepcopy({k: v for k, v in schema.items() if k != "items"})
        resolved["items"] = items
        return resolved

    return copy.deepcopy(schema)


def resolve_response_reference(document: dict[str, Any], ref: str) -> dict[str, Any]:
    """Resolve ``#/components/responses/<Name>`` (or a $defs response).

    Each content type's schema is resolved in the returned copy; content
    entries whose schema cannot be resolved are kept as declared.
    """
    if not isinstance(ref, str) or not ref:
        raise SchemaResolutionError(str(ref), "Invalid parameters for response resolution")

    if ref.startswith(COMPONENT_RESPONSES_PREFIX):
        name = ref[len(COMPONENT_RESPONSES_PREFIX) :]
        responses = (document.get("components") or {}).get("responses") or {}
        response = responses.get(name)
        if not isinstance(response, dict):
            raise SchemaResolutionError(ref, f"Response not found: {ref}")

        resolved = copy.deepcopy(response)
        content = resolved.get("content")
        if isinstance(content, dict):
            for media_type, media in content.items():
                if not media_type or not isinstance(media, dict):
                    continue
                media_schema = media.get("schema")
                if not isinstance(media_schema, dict) or REF_KEY not in media_schema:
                    continue
                try:
                    media["schema"] = resolve_schema(document, media_schema)
                except CyclicReferenceError:
                    raise
                except SchemaResolutionError as e:
                    logger.debug(f"Response {name} ({media_type}) schema left unresolved: {e}")
        return resolved

    found = _resolve_defs_reference(document, ref)
    if found is not _MISSING:
        return copy.deepcopy(found)

    raise SchemaResolutionError(ref)


__all__ = ["resolve_schema", "resolve_response_reference", "NULL_SCHEMA"]
