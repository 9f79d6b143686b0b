"""Generator configuration.

The config file keeps the camelCase keys of the JSON format
(``groupByTags``, ``methodNameIgnorePrefix``, ...); Python code uses the
snake_case attribute names. JSON and YAML files are both accepted.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

DEFAULT_CONFIG_FILE = ".swagger.config.json"
DEFAULT_IMPORT_TEMPLATE = "import { request } from '@/utils/request';"


class ConfigError(Exception):
    """Configuration is missing, unreadable or invalid."""

    def __init__(self, messages: list[str] | str):
        if isinstance(messages, str):
            messages = [messages]
        self.messages = list(dict.fromkeys(messages))
        super().__init__("; ".join(self.messages))


class _ConfigModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class GenerationOptions(_ConfigModel):
    generate_models: bool = True
    generate_apis: bool = True
    generate_index: bool = True
    add_comments: bool = True


class TagGroupingConfig(_ConfigModel):
    file_naming: Literal["tag", "kebab-case", "camelCase"] = "tag"


class GeneratorConfig(_ConfigModel):
    """Everything the engine needs besides the document itself."""

    input: str = Field(min_length=1)
    output: str = Field(min_length=1)
    generator: Literal["typescript", "javascript"] = "typescript"
    group_by_tags: bool = True
    overwrite: bool = True
    prefix: str = ""
    request_style: Literal["method", "generic"] = "generic"
    import_template: str = DEFAULT_IMPORT_TEMPLATE
    lint: str | None = None
    method_name_ignore_prefix: list[str] = []
    add_method_suffix: bool = True
    tag_grouping: TagGroupingConfig = TagGroupingConfig()
    options: GenerationOptions = GenerationOptions()

    @property
    def typed(self) -> bool:
        return self.generator == "typescript"

    @property
    def extension(self) -> str:
        return "ts" if self.typed else "js"


def _field_label(loc: tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc) or "config"


def validation_messages(error: ValidationError) -> list[str]:
    """Flatten a pydantic ValidationError into distinct readable messages."""
    messages = []
    for err in error.errors():
        label = _field_label(err["loc"])
        if err["type"] == "missing":
            messages.append(f"{label}: is required")
        else:
            messages.append(f"{label}: {err['msg']}")
    return list(dict.fromkeys(messages))


def build_config(data: dict[str, Any]) -> GeneratorConfig:
    """Validate a config mapping, raising ConfigError with every problem found."""
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")
    try:
        return GeneratorConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(validation_messages(e)) from e


def load_config_data(path: Path) -> dict[str, Any]:
    """Read a JSON or YAML config file into a mapping."""
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text) or {}
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"cannot parse config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")
    return data


def load_config(path: Path | str = DEFAULT_CONFIG_FILE) -> GeneratorConfig:
    """Load and validate the config file."""
    return build_config(load_config_data(Path(path)))


def default_config_data() -> dict[str, Any]:
    """Starter config written by ``swagger2api init``."""
    return {
        "input": "http://localhost:3000/admin/docs/json",
        "output": "./src/api",
        "importTemplate": DEFAULT_IMPORT_TEMPLATE,
        "generator": "typescript",
        "requestStyle": "generic",
        "groupByTags": True,
        "overwrite": True,
        "prefix": "",
        "lint": "prettier --write",
        "methodNameIgnorePrefix": [],
        "addMethodSuffix": True,
        "options": {"addComments": True},
    }
