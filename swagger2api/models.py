"""Intermediate model shared by the parser and the emitter.

Operations and type declarations are built once per document and never
mutated afterwards; the emitter only reads them.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Parameter(BaseModel):
    """A single operation parameter (path, query, header, formData or body)."""

    model_config = ConfigDict(frozen=True)

    name: str
    location: str  # path / query / header / formData / body
    required: bool = False
    type: str = "any"
    description: str = ""
    raw_schema: dict | None = None


class Operation(BaseModel):
    """One documented request."""

    model_config = ConfigDict(frozen=True)

    name: str
    method: str  # GET / POST / ...
    path: str  # /users/{id}
    parameters: tuple[Parameter, ...] = ()
    request_body: Parameter | None = None
    request_body_type: str | None = None
    response_type: str = "any"
    description: str = ""
    tags: tuple[str, ...] = ()
    deprecated: bool = False

    def params_in(self, *locations: str) -> list[Parameter]:
        return [p for p in self.parameters if p.location in locations]


class TypeDeclaration(BaseModel):
    """A named declaration built from one reusable schema entry."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: str  # interface / alias / enum
    definition: str
    description: str = ""


class ResolutionTrace:
    """Collects diagnostics emitted while resolving a document.

    Passed explicitly through the resolver, catalog builder and operation
    extractor so callers decide what to do with the notes.
    """

    def __init__(self) -> None:
        self.notes: list[str] = []

    def note(self, message: str) -> None:
        self.notes.append(message)

    def __len__(self) -> int:
        return len(self.notes)

    def __iter__(self):
        return iter(self.notes)


class GenerationReport(BaseModel):
    """Summary of one generation run."""

    title: str = ""
    version: str = ""
    operation_count: int = 0
    type_count: int = 0
    groups: dict[str, int] = {}
    files: list[str] = []
    diagnostics: list[str] = []
    formatted: bool | None = None
