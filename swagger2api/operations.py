"""Extract operations from the document's path table.

Each (path, verb) pair becomes one immutable Operation. Operations are
independent of each other; grouping by tag happens afterwards and is a
fan-out: an operation with two tags lands in both groups.
"""

from __future__ import annotations

from typing import Any

from .config import GeneratorConfig
from .loader import get_paths, get_schemas, resolve_ref
from .models import Operation, ResolutionTrace
from .naming import build_operation_name
from .schema_parser import get_response_type, parse_parameters

HTTP_METHODS = ("get", "post", "put", "delete", "patch", "head", "options")

DEFAULT_TAG = "default"


def _resolved_responses(document: dict[str, Any], responses: Any) -> dict[str, Any]:
    """Responses map with same-document $ref entries replaced by their targets."""
    if not isinstance(responses, dict):
        return {}
    resolved = {}
    for code, response in responses.items():
        if isinstance(response, dict) and isinstance(response.get("$ref"), str):
            try:
                response = resolve_ref(document, response["$ref"])
            except (KeyError, TypeError):
                response = {}
        resolved[code] = response
    return resolved


def parse_operation(
    document: dict[str, Any],
    method: str,
    path: str,
    operation: dict[str, Any],
    path_parameters: list[Any] | None = None,
    config: GeneratorConfig | None = None,
    schemas: dict[str, Any] | None = None,
    trace: ResolutionTrace | None = None,
) -> Operation:
    """Build the Operation for one verb on one path."""
    params, body = parse_parameters(document, operation, path_parameters, schemas, trace)

    name = build_operation_name(
        method,
        path,
        operation.get("operationId"),
        ignore_prefixes=config.method_name_ignore_prefix if config else None,
        add_suffix=config.add_method_suffix if config else True,
    )

    responses = _resolved_responses(document, operation.get("responses"))

    return Operation(
        name=name,
        method=method.upper(),
        path=path,
        parameters=tuple(params),
        request_body=body,
        request_body_type=body.type if body else None,
        response_type=get_response_type(responses, schemas, trace),
        description=operation.get("summary") or operation.get("description") or "",
        tags=tuple(operation.get("tags") or ()),
        deprecated=bool(operation.get("deprecated", False)),
    )


def parse_operations(
    document: dict[str, Any],
    config: GeneratorConfig | None = None,
    trace: ResolutionTrace | None = None,
) -> list[Operation]:
    """Parse every documented operation, in path then verb order."""
    schemas = get_schemas(document)
    operations: list[Operation] = []

    for path, path_item in get_paths(document).items():
        if not isinstance(path_item, dict):
            continue
        path_parameters = path_item.get("parameters") or []

        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, dict):
                continue
            operations.append(
                parse_operation(
                    document, method, path, operation, path_parameters, config, schemas, trace,
                )
            )

    return operations


def group_operations_by_tags(operations: list[Operation]) -> dict[str, list[Operation]]:
    """Group operations by tag; untagged operations go to 'default'."""
    groups: dict[str, list[Operation]] = {}
    for operation in operations:
        for tag in operation.tags or (DEFAULT_TAG,):
            groups.setdefault(tag, []).append(operation)
    return groups


def get_tags(document: dict[str, Any]) -> list[str]:
    """All tag names: declared document tags first, then tags used by operations."""
    tags: dict[str, None] = {}
    for tag in document.get("tags") or []:
        if isinstance(tag, dict) and tag.get("name"):
            tags[tag["name"]] = None
    for path_item in get_paths(document).values():
        if not isinstance(path_item, dict):
            continue
        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if isinstance(operation, dict):
                for tag in operation.get("tags") or []:
                    tags[tag] = None
    return list(tags)


def get_base_url(document: dict[str, Any]) -> str:
    """Base URL from Swagger 2 host/schemes/basePath or the first OpenAPI 3 server."""
    host = document.get("host")
    if host:
        scheme = (document.get("schemes") or ["https"])[0]
        return f"{scheme}://{host}{document.get('basePath') or ''}"
    servers = document.get("servers") or []
    if servers and isinstance(servers[0], dict):
        return servers[0].get("url", "")
    return ""


def get_document_info(document: dict[str, Any]) -> dict[str, str]:
    """Title, description, version and base URL of the document."""
    info = document.get("info") or {}
    return {
        "title": str(info.get("title", "")),
        "description": str(info.get("description", "")),
        "version": str(info.get("version", "")),
        "base_url": get_base_url(document),
    }
