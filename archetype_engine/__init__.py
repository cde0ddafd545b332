"""
archetype-engine: compile declarative entity manifests into an immutable IR
and drive pluggable templates that generate coordinated backend code.

    >>> from archetype_engine import validate_manifest, compile_manifest, get_template, run_template
    >>> result = validate_manifest(manifest)
    >>> if result.valid:
    ...     ir = compile_manifest(manifest)
    ...     run_template(get_template("fastapi-sqlalchemy"), ir, dry_run=True)
"""

from archetype_engine.errors import (
    ArchetypeError,
    GeneratorError,
    ManifestCompileError,
    ManifestLoadError,
    PersistenceError,
    TemplateNotFoundError,
)
from archetype_engine.ir import ManifestIR, compile_manifest
from archetype_engine.manifest import load_manifest
from archetype_engine.naming import DEFAULT_NAMING, Naming, NamingConfig
from archetype_engine.template import (
    GeneratedFile,
    Generator,
    RunResult,
    Template,
    TemplateConfig,
    TemplateMetadata,
    generate,
    get_template,
    has_template,
    list_templates,
    register_template,
    run_template,
)
from archetype_engine.validation import ValidationCode, ValidationResult, validate_manifest

__version__ = "0.4.0"

__all__ = [
    "ArchetypeError",
    "DEFAULT_NAMING",
    "GeneratedFile",
    "Generator",
    "GeneratorError",
    "ManifestCompileError",
    "ManifestIR",
    "ManifestLoadError",
    "Naming",
    "NamingConfig",
    "PersistenceError",
    "RunResult",
    "Template",
    "TemplateConfig",
    "TemplateMetadata",
    "TemplateNotFoundError",
    "ValidationCode",
    "ValidationResult",
    "compile_manifest",
    "generate",
    "get_template",
    "has_template",
    "list_templates",
    "load_manifest",
    "register_template",
    "run_template",
    "validate_manifest",
]
