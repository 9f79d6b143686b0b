"""Parse raw OpenAPI schema fragments into a closed set of node variants.

A raw schema may carry several structural keywords at once ($ref next to
properties, allOf next to type, ...). ``parse_schema`` picks exactly one
interpretation per node, in this order:

    reference > combinator > array > object > primitive > any

Nullability is kept on every variant as a separate flag.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

_COMBINATORS = ("allOf", "anyOf", "oneOf")


@dataclass(frozen=True)
class RefNode:
    name: str  # last pointer segment, unescaped
    pointer: str
    nullable: bool = False
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_local(self) -> bool:
        return self.pointer.startswith("#/")


@dataclass(frozen=True)
class CombinatorNode:
    kind: str  # allOf / anyOf / oneOf
    members: tuple[SchemaNode, ...]
    nullable: bool = False
    raw: dict = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class ArrayNode:
    items: SchemaNode | None
    nullable: bool = False
    raw: dict = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class ObjectNode:
    properties: tuple[tuple[str, SchemaNode], ...] | None
    required: frozenset[str] = frozenset()
    additional: SchemaNode | None = None
    nullable: bool = False
    raw: dict = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class PrimitiveNode:
    kind: str  # string / integer / number / boolean / file / null / <other>
    enum: tuple[Any, ...] | None = None
    nullable: bool = False
    raw: dict = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class AnyNode:
    nullable: bool = False
    raw: dict = field(default_factory=dict, compare=False, repr=False)


SchemaNode = Union[RefNode, CombinatorNode, ArrayNode, ObjectNode, PrimitiveNode, AnyNode]


def ref_name(pointer: str) -> str:
    """Return the last segment of a JSON pointer, with ~1 and ~0 unescaped."""
    segment = pointer.rsplit("/", 1)[-1]
    return segment.replace("~1", "/").replace("~0", "~")


def parse_schema(raw: Any) -> SchemaNode:
    """Turn a raw schema mapping into its single structural interpretation."""
    if not isinstance(raw, dict) or not raw:
        return AnyNode()

    nullable = raw.get("nullable") is True

    ref = raw.get("$ref")
    if isinstance(ref, str):
        return RefNode(name=ref_name(ref), pointer=ref, nullable=nullable, raw=raw)

    for kind in _COMBINATORS:
        members = raw.get(kind)
        if isinstance(members, list):
            return CombinatorNode(
                kind=kind,
                members=tuple(parse_schema(m) for m in members),
                nullable=nullable,
                raw=raw,
            )

    schema_type = raw.get("type")

    # OpenAPI 3.1 style: type: [string, "null"]
    if isinstance(schema_type, list):
        members = tuple(
            parse_schema({**raw, "type": t, "nullable": False}) for t in schema_type
        )
        if len(members) == 1:
            return members[0]
        return CombinatorNode(kind="anyOf", members=members, nullable=nullable, raw=raw)

    if schema_type == "array":
        items = raw.get("items")
        return ArrayNode(
            items=parse_schema(items) if items is not None else None,
            nullable=nullable,
            raw=raw,
        )

    properties = raw.get("properties")
    if schema_type == "object" or (schema_type is None and isinstance(properties, dict)):
        additional = raw.get("additionalProperties")
        return ObjectNode(
            properties=(
                tuple((name, parse_schema(sub)) for name, sub in properties.items())
                if isinstance(properties, dict)
                else None
            ),
            required=frozenset(raw.get("required") or ()),
            additional=parse_schema(additional) if isinstance(additional, dict) else None,
            nullable=nullable,
            raw=raw,
        )

    if isinstance(schema_type, str):
        enum = raw.get("enum")
        return PrimitiveNode(
            kind=schema_type,
            enum=tuple(enum) if isinstance(enum, list) and enum else None,
            nullable=nullable,
            raw=raw,
        )

    return AnyNode(nullable=nullable, raw=raw)
