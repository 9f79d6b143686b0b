"""Naming rules for generated identifiers, type names and file names.

Operation names:
  - explicit operationId  -> used verbatim, verb suffix appended
  - no operationId        -> path segments camel-cased, verb suffix appended
  - configured prefixes   -> stripped repeatedly (case-insensitive)
  - addMethodSuffix=false -> verb suffix removed again at the end

Examples:
  GET  /admin/auth/login/{id}            -> adminAuthLoginIdGet
  POST createUser                        -> createUserPost
  POST createUser, no suffix             -> createUser
  POST createUser, no suffix, [create]   -> user
  System.Menu.ListResp (schema name)     -> SystemMenuListResp
"""

from __future__ import annotations

import re

_PASCAL_SEPARATORS = re.compile(r"[\s\-_]+(.)?")
_ILLEGAL_IDENTIFIER_CHARS = re.compile(r"[^a-zA-Z0-9_]")
_ILLEGAL_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")


def to_kebab_case(name: str) -> str:
    """Convert camelCase, PascalCase or snake_case to kebab-case."""
    s1 = re.sub(r"([a-z])([A-Z])", r"\1-\2", name)
    return re.sub(r"[\s_\-]+", "-", s1).lower()


def to_pascal_case(name: str) -> str:
    """Convert a whitespace, hyphen or underscore separated name to PascalCase."""
    s1 = _PASCAL_SEPARATORS.sub(lambda m: m.group(1).upper() if m.group(1) else "", name)
    return s1[:1].upper() + s1[1:]


def to_camel_case(name: str) -> str:
    """Convert a name to camelCase."""
    pascal = to_pascal_case(name)
    return pascal[:1].lower() + pascal[1:]


def sanitize_type_name(name: str) -> str:
    """Make a schema name usable as a type name (System.Menu.ListResp -> SystemMenuListResp)."""
    if not name:
        return name
    return to_pascal_case(_ILLEGAL_IDENTIFIER_CHARS.sub("_", name))


def sanitize_filename(name: str) -> str:
    """Replace characters that are illegal in file names with '-'."""
    s1 = _ILLEGAL_FILENAME_CHARS.sub("-", name)
    return re.sub(r"\s+", "-", s1)


def tag_to_dirname(tag: str, style: str = "tag") -> str:
    """Map a tag label to the directory holding its operation unit."""
    clean = sanitize_filename(tag)
    if style == "camelCase":
        return to_camel_case(clean)
    if style == "kebab-case":
        return to_kebab_case(clean)
    return clean.lower()


def method_suffix(method: str) -> str:
    """Capitalized HTTP verb used as operation name suffix (post -> Post)."""
    return method[:1].upper() + method[1:].lower()


def path_to_function_name(method: str, path: str) -> str:
    """Build an operation name from HTTP method + path.

    Returns a name like 'adminAuthLoginIdGet'.
    """
    clean_path = re.sub(r"\{([^}]+)\}", r"\1", path)
    segments = [s for s in clean_path.split("/") if s]

    parts = []
    for index, segment in enumerate(segments):
        clean = _NON_ALNUM.sub("", segment)
        if index == 0:
            parts.append(clean.lower())
        else:
            parts.append(clean.capitalize())

    return "".join(parts) + method_suffix(method)


def strip_method_name_prefixes(name: str, prefixes: list[str] | None) -> str:
    """Remove configured prefixes from an operation name until none match.

    Matching is case-insensitive against the camelCase form of each prefix.
    A prefix that would leave nothing behind is not applied.
    """
    if not prefixes:
        return name

    result = name
    changed = True
    while changed:
        changed = False
        for prefix in prefixes:
            if not prefix:
                continue
            camel_prefix = to_camel_case(prefix)
            if not result.lower().startswith(camel_prefix.lower()):
                continue
            remaining = result[len(camel_prefix):]
            if remaining:
                result = remaining[:1].lower() + remaining[1:]
                changed = True

    return result


def remove_method_suffix(name: str, method: str) -> str:
    """Drop the capitalized verb from the end of a name if it is there."""
    suffix = method_suffix(method)
    if name.endswith(suffix) and len(name) > len(suffix):
        return name[: -len(suffix)]
    return name


def build_operation_name(
    method: str,
    path: str,
    operation_id: str | None = None,
    ignore_prefixes: list[str] | None = None,
    add_suffix: bool = True,
) -> str:
    """Derive the final operation name from the verb, path and operationId."""
    if operation_id:
        name = operation_id + method_suffix(method)
    else:
        name = path_to_function_name(method, path)

    name = strip_method_name_prefixes(name, ignore_prefixes)

    if not add_suffix:
        name = remove_method_suffix(name, method)
    return name
