"""Generator contract, template registry and runner."""

from .context import GeneratorContext, create_context
from .registry import (
    get_default_template_id,
    get_template,
    has_template,
    list_templates,
    register_template,
    unregister_template,
)
from .runner import RunResult, generate, run_template, select_generators
from .types import GeneratedFile, Generator, Template, TemplateConfig, TemplateMetadata
from .writer import FileSystemWriter, FileWriter, MemoryWriter

__all__ = [
    "FileSystemWriter",
    "FileWriter",
    "GeneratedFile",
    "Generator",
    "GeneratorContext",
    "MemoryWriter",
    "RunResult",
    "Template",
    "TemplateConfig",
    "TemplateMetadata",
    "create_context",
    "generate",
    "get_default_template_id",
    "get_template",
    "has_template",
    "list_templates",
    "register_template",
    "run_template",
    "select_generators",
    "unregister_template",
]
