"""CLI entry point for swagger2api."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from .config import (
    DEFAULT_CONFIG_FILE,
    ConfigError,
    build_config,
    default_config_data,
    load_config,
    load_config_data,
)
from .loader import DocumentLoadError, load_document
from .models import GenerationReport
from .pipeline import generate as run_generation


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    raise SystemExit(1)


def _echo_report(report: GenerationReport) -> None:
    click.echo(f"Generated {report.operation_count} operations and {report.type_count} types")
    for group, count in report.groups.items():
        click.echo(f"  {group}: {count}")
    if report.diagnostics:
        click.echo(f"{len(report.diagnostics)} resolution notes (use -v to see them)")
    if report.formatted is False:
        click.echo("Warning: formatter failed, output left unformatted", err=True)
    click.echo(f"Wrote {len(report.files)} files")


def _generate(config_path: Path, overrides: dict) -> None:
    try:
        data = load_config_data(config_path) if config_path.exists() else {}
        data.update(overrides)
        config = build_config(data)
        click.echo(f"Generating from {config.input} into {config.output}...")
        report = run_generation(config)
    except (ConfigError, DocumentLoadError) as e:
        _fail(str(e))
    _echo_report(report)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Show debug output.")
def main(verbose: bool):
    """swagger2api: generate TypeScript/JavaScript API clients from Swagger/OpenAPI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.option("-c", "--config", "config_path", default=DEFAULT_CONFIG_FILE, type=click.Path(path_type=Path), help="Config file.")
@click.option("-i", "--input", "input_", default=None, help="Document path or URL (overrides config).")
@click.option("-o", "--output", default=None, help="Output directory (overrides config).")
@click.option("--no-types", is_flag=True, help="Skip the type declarations file.")
@click.option("--no-group", is_flag=True, help="Write a single api file instead of one per tag.")
def generate(config_path: Path, input_: str | None, output: str | None, no_types: bool, no_group: bool):
    """Generate client code."""
    overrides: dict = {}
    if input_:
        overrides["input"] = input_
    if output:
        overrides["output"] = output
    if no_group:
        overrides["groupByTags"] = False
    if no_types:
        # merged below so the file's other options survive
        overrides["options"] = {"generateModels": False}

    if "options" in overrides and config_path.exists():
        try:
            existing = load_config_data(config_path).get("options") or {}
        except ConfigError as e:
            _fail(str(e))
        overrides["options"] = {**existing, **overrides["options"]}

    _generate(config_path, overrides)


main.add_command(generate, name="gen")


@main.command()
@click.option("-c", "--config", "config_path", default=DEFAULT_CONFIG_FILE, type=click.Path(path_type=Path), help="Config file.")
def run(config_path: Path):
    """Generate client code using only the config file."""
    if not config_path.exists():
        _fail(f"config file not found: {config_path}")
    _generate(config_path, {})


@main.command()
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
def init(force: bool):
    """Write a starter config file."""
    path = Path(DEFAULT_CONFIG_FILE)
    if path.exists() and not force:
        _fail(f"{path} already exists (use --force to overwrite)")
    path.write_text(json.dumps(default_config_data(), indent=2) + "\n", encoding="utf-8")
    click.echo(f"Created {path}")


@main.command()
@click.option("-c", "--config", "config_path", default=DEFAULT_CONFIG_FILE, type=click.Path(path_type=Path), help="Config file.")
def validate(config_path: Path):
    """Check the config file and that the document can be loaded."""
    try:
        config = load_config(config_path)
    except ConfigError as e:
        for message in e.messages:
            click.echo(f"  {message}", err=True)
        _fail("invalid config")
    click.echo(f"Config {config_path} is valid")

    try:
        load_document(config.input)
    except DocumentLoadError as e:
        click.echo(f"Warning: {e}", err=True)
    else:
        click.echo(f"Document {config.input} loaded")
