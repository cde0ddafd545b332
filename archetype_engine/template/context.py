"""Shared, read-only context handed to every generator of a run."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from archetype_engine.ir.models import DatabaseInfo, ManifestIR
from archetype_engine.naming import Naming, naming_for
from archetype_engine.template.types import TemplateConfig, TemplateMetadata


@dataclass(frozen=True)
class GeneratorContext:
    """
    Attributes:
        naming: The shared Naming instance for the IR's naming config
        database: Resolved database info, None when the run has no database
        config: Template output configuration
        metadata: Template metadata
        import_aliases: Read-only alias table backing resolve_path
    """

    naming: Naming
    database: Optional[DatabaseInfo]
    config: TemplateConfig
    metadata: TemplateMetadata
    import_aliases: Mapping[str, str]

    def resolve_path(self, alias: str) -> str:
        """Resolve an import alias ('@models') to a module path; unknown aliases pass through."""
        return self.import_aliases.get(alias, alias)

    @property
    def package(self) -> str:
        return self.config.package

    @property
    def has_database(self) -> bool:
        return self.database is not None


def create_context(ir: ManifestIR, config: TemplateConfig, metadata: TemplateMetadata) -> GeneratorContext:
    return GeneratorContext(
        naming=naming_for(ir.naming),
        database=ir.database,
        config=config,
        metadata=metadata,
        import_aliases=MappingProxyType(dict(config.import_aliases)),
    )
