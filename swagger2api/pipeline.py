"""Run one generation: load, parse, render, write, format."""

from __future__ import annotations

import logging
from typing import Any

from .codegen import build_units, render_artifacts, run_formatter, write_artifacts
from .config import GeneratorConfig
from .loader import load_document
from .models import GenerationReport, ResolutionTrace
from .operations import get_document_info, parse_operations
from .type_catalog import build_type_catalog

logger = logging.getLogger(__name__)


def generate(config: GeneratorConfig, document: dict[str, Any] | None = None) -> GenerationReport:
    """Generate the client described by config.

    The document is loaded from ``config.input`` unless given. Nothing is
    written until every file has been rendered.
    """
    if document is None:
        logger.info("Loading %s", config.input)
        document = load_document(config.input)

    info = get_document_info(document)
    trace = ResolutionTrace()

    types = build_type_catalog(document, trace)
    operations = parse_operations(document, config, trace)
    logger.info("Parsed %d operations and %d types", len(operations), len(types))

    groups: dict[str, int] = {}
    if config.group_by_tags:
        groups = {module: len(unit) for module, (_, unit) in build_units(operations, config).items()}

    artifacts = render_artifacts(operations, types, config)
    written = write_artifacts(artifacts, config.output, config.overwrite)

    for note in trace:
        logger.debug("resolution: %s", note)

    formatted = None
    if config.lint:
        formatted = run_formatter(config.lint, config.output)

    return GenerationReport(
        title=info["title"],
        version=info["version"],
        operation_count=len(operations),
        type_count=len(types),
        groups=groups,
        files=[str(path) for path in written],
        diagnostics=list(trace),
        formatted=formatted,
    )
