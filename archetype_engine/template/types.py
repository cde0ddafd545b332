"""
Generator and Template contracts.

A Generator is a named, deterministic unit `(ManifestIR, GeneratorContext) ->
GeneratedFile | list[GeneratedFile]`. A Template bundles an ordered list of
generators with stack metadata and default output configuration. Templates
are the only extension point for new target stacks.
"""

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Callable, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator


class GeneratedFile(BaseModel):
    """A generated file; `path` is relative to the output directory."""

    model_config = ConfigDict(frozen=True)

    path: str
    content: str

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        posix = PurePosixPath(v.replace("\\", "/"))
        if not v or posix.is_absolute() or ".." in posix.parts:
            raise ValueError(f"Generated file path must be relative and stay inside the output dir: {v!r}")
        return str(posix)


@dataclass(frozen=True)
class Generator:
    """
    A pluggable generation unit.

    Attributes:
        name: Unique identifier within a template
        category: Artifact category used by mode filtering; None = always runs
        description: Human-readable description
        generate: (ir, ctx) -> GeneratedFile or list of GeneratedFile
    """

    name: str
    category: Optional[str]
    description: str
    generate: Callable

    def run(self, ir, ctx) -> list:
        result = self.generate(ir, ctx)
        if result is None:
            return []
        if isinstance(result, GeneratedFile):
            return [result]
        return list(result)


@dataclass(frozen=True)
class TemplateMetadata:
    id: str
    name: str
    description: str
    framework: str = "generic"
    stack: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class TemplateConfig:
    """
    Default output configuration of a template.

    Attributes:
        output_dir: Base directory generated paths are resolved against
        import_aliases: Alias -> module path table used by generated imports
        package: Python package name generated code lives in
    """

    output_dir: str = "generated"
    import_aliases: Dict[str, str] = field(default_factory=dict)
    package: str = "app"


@dataclass(frozen=True)
class Template:
    metadata: TemplateMetadata
    default_config: TemplateConfig
    generators: Tuple[Generator, ...]
    # (ir, ctx, files) -> extra files assembled from the full file set
    post_generate: Optional[Callable] = None

    @property
    def id(self) -> str:
        return self.metadata.id
