"""Build Jinja2 template contexts from parsed operations and types.

One context per output unit: the type-declaration file, each operation
file (one per tag, or a single flat one) and the barrel index. Signatures,
URL expressions and comment blocks are assembled here so the templates
only do layout.
"""

from __future__ import annotations

import re
from typing import Any

from .config import GeneratorConfig
from .models import Operation, Parameter, TypeDeclaration
from .naming import to_camel_case
from .schema_parser import ANY, property_key, render_member

# Words that can appear in a type expression but never name a catalog type
_BUILTIN_TYPES = {
    "string", "number", "boolean", "object", "array", "any", "void",
    "null", "undefined", "unknown", "never", "Record", "File", "Array",
}

_STRING_LITERAL = re.compile(r"'(?:[^'\\]|\\.)*'")
_MEMBER_KEY = re.compile(r"[A-Za-z_$][\w$]*\??\s*:")
_IDENTIFIER_TOKEN = re.compile(r"[A-Za-z_$][\w$]*")
_ILLEGAL_FUNCTION_CHARS = re.compile(r"[^\w$]")

_PATH_PLACEHOLDER = re.compile(r"\{([^}]+)\}")

GENERATED_NOTE = "Generated by swagger2api. Do not edit by hand."


def type_names_in(type_str: str | None) -> set[str]:
    """Identifiers referenced by a type expression (literals and member keys ignored)."""
    if not type_str:
        return set()
    text = _STRING_LITERAL.sub(" ", type_str)
    text = _MEMBER_KEY.sub(" ", text)
    return {t for t in _IDENTIFIER_TOKEN.findall(text) if t not in _BUILTIN_TYPES}


def collect_used_types(operations: list[Operation], known_types: set[str]) -> list[str]:
    """Catalog type names referenced by the rendered signatures and responses."""
    used: set[str] = set()
    for operation in operations:
        if operation.response_type != ANY:
            used |= type_names_in(operation.response_type)
        for param in _url_params(operation) + _form_params(operation):
            used |= type_names_in(param.type)
        if operation.request_body is not None:
            used |= type_names_in(operation.request_body_type)
    return sorted(used & known_types)


def function_name(operation: Operation) -> str:
    """Exported identifier for an operation."""
    name = _ILLEGAL_FUNCTION_CHARS.sub("", to_camel_case(operation.name))
    if not name or name[0].isdigit():
        name = f"_{name}"
    return name


def _comment_text(text: str) -> str:
    return " ".join(str(text).replace("*/", "*\\/").split())


def _param_ref(name: str, optional: bool) -> str:
    key = property_key(name)
    if key == name:
        return f"params{'?.' if optional else '.'}{name}"
    return f"params{'?.' if optional else ''}[{key}]"


def _url_params(operation: Operation) -> list[Parameter]:
    return operation.params_in("path", "query")


def _form_params(operation: Operation) -> list[Parameter]:
    if operation.request_body is not None:
        return []
    return operation.params_in("formData")


def build_url(operation: Operation, prefix: str = "") -> str:
    """JS expression for the request URL with path placeholders substituted."""
    url = f"{prefix}{operation.path}"
    path_names = {p.name for p in operation.params_in("path")}
    if not path_names:
        return "'" + url.replace("'", "\\'") + "'"

    optional = all(not p.required for p in _url_params(operation))

    def substitute(match: re.Match) -> str:
        name = match.group(1)
        if name not in path_names:
            return match.group(0)
        return "${" + _param_ref(name, optional) + "}"

    return "`" + _PATH_PLACEHOLDER.sub(substitute, url.replace("`", "\\`")) + "`"


def build_signature(operation: Operation, typed: bool = True) -> str:
    """Parameter list: merged params object, body, then the free-form config."""
    url_params = _url_params(operation)
    form_params = _form_params(operation)
    parts = []

    if url_params:
        if typed:
            optional = "?" if all(not p.required for p in url_params) else ""
            members = "; ".join(render_member(p.name, p.type, p.required) for p in url_params)
            parts.append(f"params{optional}: {{ {members} }}")
        else:
            parts.append("params")

    if operation.request_body is not None:
        parts.append(f"data: {operation.request_body_type or ANY}" if typed else "data")
    elif form_params:
        if typed:
            members = "; ".join(render_member(p.name, p.type, p.required) for p in form_params)
            parts.append(f"data: {{ {members} }}")
        else:
            parts.append("data")

    parts.append("config?: any" if typed else "config")
    return ", ".join(parts)


def build_comment(operation: Operation) -> list[str]:
    """Lines of the doc comment block above an operation."""
    lines = []
    if operation.description:
        lines.append(_comment_text(operation.description))
        lines.append("")

    for param in _url_params(operation):
        description = _comment_text(param.description) if param.description else ""
        lines.append(f"@param params.{param.name} {description}".rstrip())

    if operation.request_body is not None:
        description = operation.request_body.description or "request body"
        lines.append(f"@param data {_comment_text(description)}")
    elif _form_params(operation):
        lines.append("@param data form data")

    lines.append("@param config optional request configuration")

    if operation.deprecated:
        lines.append("@deprecated")
    return lines


def build_call(operation: Operation, config: GeneratorConfig) -> tuple[str, list[str]]:
    """Dispatch callee and the entries of its request-config object."""
    entries = [f"url: {build_url(operation, config.prefix)}"]
    generic = config.request_style == "generic" or not config.typed
    if generic:
        entries.append(f"method: '{operation.method}'")
    if operation.params_in("query"):
        entries.append("params")
    if operation.request_body is not None or _form_params(operation):
        entries.append("data")
    entries.append("...config")

    callee = "request" if generic else f"request.{operation.method.lower()}"
    if config.typed:
        callee += f"<{operation.response_type or ANY}>"
    return callee, entries


def build_function(operation: Operation, config: GeneratorConfig) -> dict[str, Any]:
    callee, entries = build_call(operation, config)
    return {
        "name": function_name(operation),
        "method": operation.method,
        "path": operation.path,
        "comment": build_comment(operation) if config.options.add_comments else [],
        "signature": build_signature(operation, config.typed),
        "call": callee,
        "entries": entries,
    }


def _deduplicate_function_names(functions: list[dict[str, Any]]) -> None:
    """Ensure names are unique within a unit by appending a counter."""
    seen: dict[str, int] = {}
    for function in functions:
        name = function["name"]
        if name in seen:
            seen[name] += 1
            function["name"] = f"{name}{seen[name]}"
        else:
            seen[name] = 1


def build_operations_context(
    operations: list[Operation],
    config: GeneratorConfig,
    known_types: set[str],
    tag: str | None = None,
) -> dict[str, Any]:
    """Context for one operation unit (a tag directory or the flat api file)."""
    functions = [build_function(op, config) for op in operations]
    _deduplicate_function_names(functions)

    type_imports = collect_used_types(operations, known_types) if config.typed else []
    return {
        "tag": tag,
        "import_template": config.import_template,
        "type_imports": type_imports,
        "types_path": "../types" if tag is not None else "./types",
        "functions": functions,
        "typed": config.typed,
        "note": GENERATED_NOTE,
    }


def build_types_context(types: list[TypeDeclaration]) -> dict[str, Any]:
    """Context for the type-declaration unit."""
    return {
        "types": [
            {
                "name": t.name,
                "kind": t.kind,
                "definition": t.definition,
                "description": _comment_text(t.description) if t.description else "",
            }
            for t in types
        ],
        "note": GENERATED_NOTE,
    }


def build_index_context(modules: list[str]) -> dict[str, Any]:
    """Context for the barrel unit re-exporting every other unit."""
    return {"modules": modules, "note": GENERATED_NOTE}
