"""Render templates and write generated output.

Takes contexts from context_builder and produces the client tree:

    <output>/types.ts          type declarations (TypeScript only)
    <output>/<tag>/index.ts    one unit per tag (grouped mode)
    <output>/api.ts            single unit (flat mode)
    <output>/index.ts          barrel re-exporting the above

Files are rendered into a staging directory next to the output and moved
into place once every file has been written.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import tempfile
import uuid
from pathlib import Path

import jinja2

from .config import GeneratorConfig
from .context_builder import (
    build_index_context,
    build_operations_context,
    build_types_context,
)
from .models import Operation, TypeDeclaration
from .naming import tag_to_dirname
from .operations import group_operations_by_tags

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

TYPES_MODULE = "types"
FLAT_MODULE = "api"


def _environment() -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def build_units(
    operations: list[Operation], config: GeneratorConfig
) -> dict[str, tuple[str | None, list[Operation]]]:
    """Map module path -> (tag label, operations) for every operation unit."""
    if not config.group_by_tags:
        return {FLAT_MODULE: (None, list(operations))}

    units: dict[str, tuple[str | None, list[Operation]]] = {}
    for tag, tagged in group_operations_by_tags(operations).items():
        dirname = tag_to_dirname(tag, config.tag_grouping.file_naming)
        if dirname in units:
            # two tags normalize to one directory: merge, keeping each operation once
            _, merged = units[dirname]
            merged.extend(op for op in tagged if op not in merged)
        else:
            units[dirname] = (tag, list(tagged))
    return units


def render_artifacts(
    operations: list[Operation],
    types: list[TypeDeclaration],
    config: GeneratorConfig,
) -> dict[str, str]:
    """Render every output file, keyed by path relative to the output dir."""
    env = _environment()
    ext = config.extension
    artifacts: dict[str, str] = {}
    exports: list[str] = []

    write_types = config.typed and config.options.generate_models
    if write_types:
        artifacts[f"{TYPES_MODULE}.ts"] = env.get_template("types.ts.j2").render(
            **build_types_context(types)
        )
        exports.append(TYPES_MODULE)

    if config.options.generate_apis:
        known_types = {t.name for t in types} if write_types else set()
        template = env.get_template("operations.j2")
        for module, (tag, unit_operations) in build_units(operations, config).items():
            context = build_operations_context(
                unit_operations, config, known_types, tag if config.group_by_tags else None
            )
            filename = f"{module}/index.{ext}" if config.group_by_tags else f"{module}.{ext}"
            artifacts[filename] = template.render(**context)
            exports.append(module)

    if config.options.generate_index:
        artifacts[f"index.{ext}"] = env.get_template("index.j2").render(
            **build_index_context(exports)
        )

    return artifacts


def _replace_directory(staging: Path, output_dir: Path) -> None:
    """Swap the staging directory into place of output_dir."""
    if not output_dir.exists():
        os.replace(staging, output_dir)
        return

    backup = output_dir.with_name(f".{output_dir.name}-old-{uuid.uuid4().hex[:8]}")
    os.replace(output_dir, backup)
    try:
        os.replace(staging, output_dir)
    except OSError:
        os.replace(backup, output_dir)
        raise
    shutil.rmtree(backup, ignore_errors=True)


def write_artifacts(
    artifacts: dict[str, str],
    output_dir: Path | str,
    overwrite: bool = True,
) -> list[Path]:
    """Write rendered files under output_dir.

    With overwrite the previous output directory is replaced as a whole;
    otherwise files are copied over it and unrelated files are kept.
    """
    output_dir = Path(output_dir).resolve()
    output_dir.parent.mkdir(parents=True, exist_ok=True)

    staging = Path(tempfile.mkdtemp(prefix=f".{output_dir.name}-", dir=output_dir.parent))
    try:
        staging.chmod(0o755)
        for relative, content in artifacts.items():
            target = staging / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")

        if overwrite or not output_dir.exists():
            _replace_directory(staging, output_dir)
        else:
            shutil.copytree(staging, output_dir, dirs_exist_ok=True)
    finally:
        if staging.exists():
            shutil.rmtree(staging, ignore_errors=True)

    written = [output_dir / relative for relative in artifacts]
    logger.info("Wrote %d files to %s", len(written), output_dir)
    return written


def run_formatter(command: str, output_dir: Path | str) -> bool:
    """Run the external formatter over output_dir; failures are only logged."""
    args = shlex.split(command) + [str(output_dir)]
    logger.info("Running formatter: %s", " ".join(args))
    try:
        result = subprocess.run(args, capture_output=True, text=True, check=True)
    except (OSError, subprocess.CalledProcessError) as e:
        logger.warning("Formatter failed, output left unformatted: %s", e)
        return False
    if result.stdout:
        logger.debug(result.stdout.strip())
    return True
