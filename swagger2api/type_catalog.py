"""Build named type declarations from the document's reusable schemas.

One declaration per schema entry:
- object with properties -> export interface
- array                  -> export type alias to the element type (no [])
- enum                   -> export enum
- anything else          -> export type alias to the resolved type

Swagger 2 'definitions' are read before OpenAPI 3 'components.schemas'.
When two entries normalize to the same name the later one replaces the
earlier declaration in place and the collision is noted in the trace.
"""

from __future__ import annotations

import re
from typing import Any

from .loader import get_schemas
from .models import ResolutionTrace, TypeDeclaration
from .naming import sanitize_type_name
from .schema_parser import render_member, resolve_schema_type

_ENUM_NAME_HINTS = ("x-enum-varnames", "x-enumNames")
_NUMERIC = re.compile(r"^\d+$")
_ILLEGAL_MEMBER_CHARS = re.compile(r"[^A-Za-z0-9_$]")


def _doc_comment(text: str, indent: str = "") -> str:
    lines = [line.strip() for line in str(text).replace("*/", "*\\/").strip().splitlines()]
    if len(lines) == 1:
        return f"{indent}/** {lines[0]} */\n"
    body = "".join(f"{indent} * {line}\n" for line in lines)
    return f"{indent}/**\n{body}{indent} */\n"


def enum_member_name(schema: dict[str, Any], index: int, value: Any) -> str:
    """Name of the enum member at ``index``: name hint, VALUE_<n> or upper-cased value."""
    for hint in _ENUM_NAME_HINTS:
        names = schema.get(hint)
        if isinstance(names, list) and index < len(names) and names[index]:
            return str(names[index])

    text = str(value)
    if _NUMERIC.match(text):
        return f"VALUE_{text}"
    name = _ILLEGAL_MEMBER_CHARS.sub("_", text.upper())
    if not name or name[0].isdigit():
        name = f"_{name}"
    return name


def _interface(
    name: str,
    schema: dict[str, Any],
    schemas: dict[str, Any] | None,
    trace: ResolutionTrace | None,
) -> str:
    required = set(schema.get("required") or ())
    members = []
    for key, prop in schema["properties"].items():
        prop = prop if isinstance(prop, dict) else {}
        comment = _doc_comment(prop["description"], "  ") if prop.get("description") else ""
        prop_type = resolve_schema_type(prop, schemas, trace)
        members.append(f"{comment}  {render_member(key, prop_type, key in required)};\n")
    return f"export interface {name} {{\n{''.join(members)}}}"


def _enum(name: str, schema: dict[str, Any]) -> str:
    members = []
    taken: set[str] = set()
    for index, value in enumerate(schema["enum"]):
        literal = str(value).replace("\\", "\\\\").replace("'", "\\'")
        base = member = enum_member_name(schema, index, value)
        counter = 1
        # distinct values can normalize to one name
        while member in taken:
            counter += 1
            member = f"{base}{counter}"
        taken.add(member)
        members.append(f"  {member} = '{literal}'")
    return f"export enum {name} {{\n" + ",\n".join(members) + "\n}"


def parse_type_definition(
    name: str,
    schema: dict[str, Any],
    schemas: dict[str, Any] | None = None,
    trace: ResolutionTrace | None = None,
) -> TypeDeclaration:
    """Build the declaration for a single reusable schema entry."""
    type_name = sanitize_type_name(name)
    schema = schema if isinstance(schema, dict) else {}

    if isinstance(schema.get("properties"), dict) and schema.get("type", "object") == "object":
        kind, definition = "interface", _interface(type_name, schema, schemas, trace)
    elif schema.get("type") == "array":
        item_type = resolve_schema_type(schema.get("items"), schemas, trace)
        kind, definition = "alias", f"export type {type_name} = {item_type};"
    elif isinstance(schema.get("enum"), list) and schema["enum"]:
        kind, definition = "enum", _enum(type_name, schema)
    else:
        resolved = resolve_schema_type(schema, schemas, trace)
        kind, definition = "alias", f"export type {type_name} = {resolved};"

    return TypeDeclaration(
        name=type_name,
        kind=kind,
        definition=definition,
        description=str(schema.get("description") or ""),
    )


def build_type_catalog(
    document: dict[str, Any],
    trace: ResolutionTrace | None = None,
) -> list[TypeDeclaration]:
    """Parse every reusable schema entry into a declaration."""
    schemas = get_schemas(document)
    sources = (
        ("definitions", document.get("definitions") or {}),
        ("components.schemas", (document.get("components") or {}).get("schemas") or {}),
    )

    declarations: dict[str, TypeDeclaration] = {}
    for source, table in sources:
        for name, schema in table.items():
            declaration = parse_type_definition(name, schema, schemas, trace)
            if declaration.name in declarations and trace is not None:
                trace.note(
                    f"type {declaration.name!r} from {source} ({name!r}) replaces an earlier declaration"
                )
            declarations[declaration.name] = declaration

    return list(declarations.values())
