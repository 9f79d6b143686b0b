"""Resolve OpenAPI schemas to TypeScript type expressions.

Handles:
- $ref resolution (same-document only), including refs to array schemas
- allOf generic wrapper pattern (Envelope<Payload>)
- anyOf/oneOf unions with explicit null members
- Arrays, inline objects, open maps (additionalProperties)
- Primitive types and string enums as literal unions
- nullable: true
- Optional-field null stripping with nesting-aware union splitting
- Parameter extraction (Swagger 2 inline types and OpenAPI 3 schemas)
- Response type selection (200 > 201 > default)
"""

from __future__ import annotations

import re
from typing import Any

from .loader import resolve_ref
from .models import Parameter, ResolutionTrace
from .naming import sanitize_type_name
from .schema_nodes import (
    AnyNode,
    ArrayNode,
    CombinatorNode,
    ObjectNode,
    PrimitiveNode,
    RefNode,
    SchemaNode,
    parse_schema,
)

ANY = "any"
NULL = "null"
ARRAY_SUFFIX = "[]"
OPEN_MAP = "Record<string, any>"

_PRIMITIVES: dict[str, str] = {
    "integer": "number",
    "number": "number",
    "string": "string",
    "boolean": "boolean",
    "file": "File",
    "null": NULL,
}

_OPENERS = {"(": ")", "<": ">", "{": "}", "[": "]"}
_CLOSERS = {v: k for k, v in _OPENERS.items()}

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

# Inline Swagger 2 parameter fields that describe the parameter's own type
_INLINE_TYPE_KEYS = ("type", "format", "items", "enum", "nullable")

_JSON_MEDIA_TYPE = "application/json"


def split_union(type_str: str) -> list[str]:
    """Split a type expression on top-level '|' separators.

    Separators nested inside (), <>, {} or [] are left alone, so
    'ResOp<{ a: string | null }> | null' splits into two members.
    Characters inside single-quoted literals are never structure.
    """
    depth = {opener: 0 for opener in _OPENERS}
    parts: list[str] = []
    current: list[str] = []
    in_literal = False
    escaped = False

    for ch in type_str:
        if in_literal:
            current.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == "'":
                in_literal = False
            continue
        if ch == "'":
            in_literal = True
        elif ch in _OPENERS:
            depth[ch] += 1
        elif ch in _CLOSERS:
            opener = _CLOSERS[ch]
            depth[opener] = max(0, depth[opener] - 1)

        if ch == "|" and not any(depth.values()):
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(ch)

    tail = "".join(current).strip()
    if tail:
        parts.append(tail)
    return parts


def join_union(members: list[str]) -> str:
    """Join union members, dropping duplicates while keeping first-seen order."""
    unique = list(dict.fromkeys(m for m in members if m))
    return " | ".join(unique) if unique else ANY


def strip_null_from_union(type_str: str) -> str:
    """Remove top-level null members from a union type expression."""
    if not type_str:
        return ANY
    return join_union([p for p in split_union(type_str) if p != NULL])


def property_key(name: str) -> str:
    """Quote a property name that is not a valid identifier."""
    if _IDENTIFIER.match(name):
        return name
    escaped = name.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def _literal(value: Any) -> str:
    text = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{text}'"


def _referenced_schema(node: RefNode, schemas: dict[str, Any] | None) -> dict[str, Any] | None:
    if schemas is None or not node.is_local:
        return None
    target = schemas.get(node.name)
    return target if isinstance(target, dict) else None


def _is_array_ref(node: SchemaNode | None, schemas: dict[str, Any] | None) -> bool:
    if not isinstance(node, RefNode):
        return False
    target = _referenced_schema(node, schemas)
    return target is not None and target.get("type") == "array"


def render_member(name: str, type_str: str, required: bool) -> str:
    """Render one object member; optional members lose their null union member."""
    if required:
        return f"{property_key(name)}: {type_str}"
    return f"{property_key(name)}?: {strip_null_from_union(type_str)}"


def render_members(members: list[tuple[str, str, bool]]) -> str:
    """Render (name, type, required) triples as an inline object type."""
    if not members:
        return "{}"
    return "{ " + "; ".join(render_member(*m) for m in members) + " }"


def _resolve_properties(
    properties: tuple[tuple[str, SchemaNode], ...],
    required: frozenset[str],
    schemas: dict[str, Any] | None,
    trace: ResolutionTrace | None,
) -> list[tuple[str, str, bool]]:
    return [
        (name, _resolve(sub, schemas, trace), name in required)
        for name, sub in properties
    ]


def _resolve_all_of(
    node: CombinatorNode,
    schemas: dict[str, Any] | None,
    trace: ResolutionTrace | None,
) -> str:
    refs = [m for m in node.members if isinstance(m, RefNode)]
    others = [m for m in node.members if not isinstance(m, RefNode)]

    if len(refs) == 1 and len(others) == 1:
        container = sanitize_type_name(refs[0].name) or ANY
        payload = others[0]
        properties = payload.properties if isinstance(payload, ObjectNode) else None
        if not properties:
            return container
        if len(properties) == 1:
            _, sub = properties[0]
            return f"{container}<{_resolve(sub, schemas, trace)}>"
        members = _resolve_properties(properties, payload.required, schemas, trace)
        return f"{container}<{render_members(members)}>"

    if trace is not None and len(node.members) > 1:
        trace.note(f"allOf with {len(node.members)} members resolved to its first typed member")
    for member in node.members:
        resolved = _resolve(member, schemas, trace)
        if resolved != ANY:
            return resolved
    return ANY


def _resolve_union(
    node: CombinatorNode,
    schemas: dict[str, Any] | None,
    trace: ResolutionTrace | None,
) -> str:
    types = []
    for member in node.members:
        if isinstance(member, PrimitiveNode) and member.kind == "null":
            types.append(NULL)
        else:
            types.append(_resolve(member, schemas, trace))
    if not types or ANY in types:
        return ANY
    return join_union(types)


def _resolve_base(
    node: SchemaNode,
    schemas: dict[str, Any] | None,
    trace: ResolutionTrace | None,
) -> str:
    if isinstance(node, CombinatorNode):
        if node.kind == "allOf":
            return _resolve_all_of(node, schemas, trace)
        return _resolve_union(node, schemas, trace)

    if isinstance(node, RefNode):
        name = sanitize_type_name(node.name) or ANY
        if schemas is not None and node.is_local and node.name not in schemas and trace is not None:
            trace.note(f"reference {node.pointer!r} has no matching schema")
        if _is_array_ref(node, schemas):
            return name + ARRAY_SUFFIX
        return name

    if isinstance(node, ArrayNode):
        item_type = _resolve(node.items, schemas, trace)
        if _is_array_ref(node.items, schemas):
            return item_type
        if len(split_union(item_type)) > 1:
            item_type = f"({item_type})"
        return item_type + ARRAY_SUFFIX

    if isinstance(node, ObjectNode):
        if node.properties is not None:
            members = _resolve_properties(node.properties, node.required, schemas, trace)
            return render_members(members)
        if node.additional is not None:
            return f"Record<string, {_resolve(node.additional, schemas, trace)}>"
        return OPEN_MAP

    if isinstance(node, PrimitiveNode):
        if node.kind == "string" and node.enum:
            return join_union([_literal(v) for v in node.enum])
        if node.kind in _PRIMITIVES:
            return _PRIMITIVES[node.kind]
        if trace is not None:
            trace.note(f"unknown schema type {node.kind!r} resolved to {ANY}")
        return ANY

    return ANY


def _resolve(
    node: SchemaNode | None,
    schemas: dict[str, Any] | None,
    trace: ResolutionTrace | None,
) -> str:
    if node is None or isinstance(node, AnyNode):
        return ANY

    base = _resolve_base(node, schemas, trace)

    if node.nullable:
        if base == ANY or NULL in split_union(base):
            return base
        return f"{base} | {NULL}"
    return base


def resolve_schema_type(
    schema: dict[str, Any] | SchemaNode | None,
    schemas: dict[str, Any] | None = None,
    trace: ResolutionTrace | None = None,
) -> str:
    """Resolve an OpenAPI schema to a TypeScript type string.

    ``schemas`` is the document's reusable schema table; without it refs
    to array schemas cannot be recognized and resolve to the bare name.
    Never raises: anything unrecognized resolves to 'any'.
    """
    if schema is None:
        return ANY
    node = schema if not isinstance(schema, dict) else parse_schema(schema)
    return _resolve(node, schemas, trace)


def _parameter_schema(param: dict[str, Any]) -> dict[str, Any]:
    """Schema describing a parameter: OpenAPI 3 'schema' or Swagger 2 inline fields."""
    schema = param.get("schema")
    if isinstance(schema, dict):
        return schema
    inline = {k: param[k] for k in _INLINE_TYPE_KEYS if k in param}
    inline.setdefault("type", "string")
    return inline


def _deref(document: dict[str, Any], obj: Any) -> Any:
    """Follow a same-document $ref on a parameter or request body."""
    seen: set[str] = set()
    while isinstance(obj, dict) and isinstance(obj.get("$ref"), str):
        ref = obj["$ref"]
        if not ref.startswith("#/") or ref in seen:
            return obj
        seen.add(ref)
        try:
            obj = resolve_ref(document, ref)
        except (KeyError, TypeError):
            return obj
    return obj


def _json_content_schema(content: dict[str, Any], allow_wildcard: bool = False) -> Any:
    """Pick the schema of a JSON media type from a content map."""
    if not isinstance(content, dict):
        return None
    candidates = [_JSON_MEDIA_TYPE]
    candidates += [ct for ct in content if ct != _JSON_MEDIA_TYPE and "json" in ct]
    if allow_wildcard:
        candidates.append("*/*")
    for ct in candidates:
        media = content.get(ct)
        if isinstance(media, dict) and media.get("schema"):
            return media["schema"]
    return None


def parse_parameters(
    document: dict[str, Any],
    operation: dict[str, Any],
    path_parameters: list[Any] | None = None,
    schemas: dict[str, Any] | None = None,
    trace: ResolutionTrace | None = None,
) -> tuple[list[Parameter], Parameter | None]:
    """Parse all parameters for an operation.

    Path-level parameters come first; an operation-level parameter with the
    same name replaces the path-level one. Returns (parameters, body) where
    body is the Swagger 2 'in: body' parameter or the synthesized OpenAPI 3
    JSON request body.
    """
    merged: dict[str, dict[str, Any]] = {}
    for raw in list(path_parameters or []) + list(operation.get("parameters") or []):
        param = _deref(document, raw)
        if not isinstance(param, dict) or "name" not in param:
            continue
        merged.pop(param["name"], None)
        merged[param["name"]] = param

    params: list[Parameter] = []
    body: Parameter | None = None

    for param in merged.values():
        location = param.get("in", "query")
        schema = _parameter_schema(param)
        parsed = Parameter(
            name=param["name"],
            location=location,
            required=bool(param.get("required", location == "path")),
            type=resolve_schema_type(schema, schemas, trace),
            description=param.get("description") or "",
            raw_schema=schema,
        )
        if location == "body":
            body = parsed
        else:
            params.append(parsed)

    request_body = _deref(document, operation.get("requestBody"))
    if isinstance(request_body, dict):
        schema = _json_content_schema(request_body.get("content", {}))
        if schema:
            body = Parameter(
                name="body",
                location="body",
                required=bool(request_body.get("required", False)),
                type=resolve_schema_type(schema, schemas, trace),
                description=request_body.get("description") or "",
                raw_schema=schema,
            )

    return params, body


def get_response_type(
    responses: dict[Any, Any] | None,
    schemas: dict[str, Any] | None = None,
    trace: ResolutionTrace | None = None,
) -> str:
    """Determine the response type of an operation (200 > 201 > default)."""
    if not responses:
        return ANY

    by_code = {str(code): resp for code, resp in responses.items()}
    success = None
    for code in ("200", "201", "default"):
        if code in by_code:
            success = by_code[code]
            break
    if not isinstance(success, dict):
        return ANY

    schema = _json_content_schema(success.get("content", {}), allow_wildcard=True)
    if schema:
        return resolve_schema_type(schema, schemas, trace)

    if success.get("schema"):
        return resolve_schema_type(success["schema"], schemas, trace)

    return ANY
