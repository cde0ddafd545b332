"""
Validation module for archetype manifests.

Validation logic is organized by concern:
- entity_validators: entity names, fields, modifiers, relations, protection
- relation_validators: cross-entity relation checks (mutual declarations)
- config_validators: mode, database, auth, defaults
- source_validators: external API sources
- manifest_validator: the single-pass entry point
"""

from archetype_engine.validation.codes import ValidationCode
from archetype_engine.validation.manifest_validator import validate_manifest
from archetype_engine.validation.relation_validators import (
    MutualRelation,
    RelationDecl,
    find_mutual_relations,
)
from archetype_engine.validation.result import ValidationIssue, ValidationResult

__all__ = [
    "ValidationCode",
    "ValidationIssue",
    "ValidationResult",
    "validate_manifest",
    "find_mutual_relations",
    "MutualRelation",
    "RelationDecl",
]
