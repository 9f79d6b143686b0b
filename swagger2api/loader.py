"""Load and parse the source API document.

Reads a Swagger 2 / OpenAPI 3 document from a local path or an http(s)
URL and gives access to its paths, reusable schemas and $ref targets.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import httpx
import yaml

logger = logging.getLogger(__name__)


class DocumentLoadError(Exception):
    """The source document could not be read or parsed."""

    def __init__(self, locator: str, cause: Exception | str):
        self.locator = locator
        self.cause = cause
        super().__init__(f"Failed to load API document from {locator}: {cause}")


def is_remote(locator: str) -> bool:
    return locator.startswith(("http://", "https://"))


def parse_document_text(text: str) -> Any:
    """Parse JSON, falling back to YAML."""
    try:
        return json.loads(text)
    except ValueError:
        return yaml.safe_load(text)


def load_document(locator: str) -> dict[str, Any]:
    """Load the API document from a file path or URL."""
    try:
        if is_remote(locator):
            response = httpx.get(locator, follow_redirects=True)
            response.raise_for_status()
            text = response.text
        else:
            text = Path(locator).read_text(encoding="utf-8")
        document = parse_document_text(text)
    except (OSError, UnicodeDecodeError, httpx.HTTPError, yaml.YAMLError) as e:
        raise DocumentLoadError(locator, e) from e

    if not isinstance(document, dict):
        raise DocumentLoadError(locator, "document root is not a mapping")

    logger.debug("Loaded %s (%d paths)", locator, len(get_paths(document)))
    return document


def get_paths(document: dict[str, Any]) -> dict[str, Any]:
    """Extract paths from the document."""
    return document.get("paths") or {}


def get_schemas(document: dict[str, Any]) -> dict[str, Any]:
    """Extract the reusable schema table.

    Swagger 2 'definitions' are read first, OpenAPI 3 'components.schemas'
    second; on a shared name the latter wins.
    """
    schemas: dict[str, Any] = {}
    schemas.update(document.get("definitions") or {})
    schemas.update((document.get("components") or {}).get("schemas") or {})
    return schemas


def resolve_ref(document: dict[str, Any], ref: str) -> Any:
    """Resolve a same-document $ref pointer."""
    parts = ref.lstrip("#/").split("/")
    node: Any = document
    for part in parts:
        node = node[part.replace("~1", "/").replace("~0", "~")]
    return node
