"""Generate TypeScript/JavaScript API clients from Swagger 2 / OpenAPI 3 documents."""

from .config import ConfigError, GeneratorConfig, build_config, load_config
from .loader import DocumentLoadError, load_document
from .models import GenerationReport, Operation, Parameter, TypeDeclaration
from .pipeline import generate
from .schema_parser import resolve_schema_type

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "DocumentLoadError",
    "GenerationReport",
    "GeneratorConfig",
    "Operation",
    "Parameter",
    "TypeDeclaration",
    "build_config",
    "generate",
    "load_config",
    "load_document",
    "resolve_schema_type",
]
