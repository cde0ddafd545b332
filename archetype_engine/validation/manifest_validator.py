"""
Single-pass manifest validation.

`validate_manifest` runs every check and collects every problem so an
automated caller can fix all of them in one round trip. It never raises and
never mutates its input.
"""

from archetype_engine.validation.codes import ValidationCode
from archetype_engine.validation.config_validators import (
    is_auth_enabled,
    validate_auth,
    validate_database,
    validate_defaults,
    validate_global_source,
    validate_mode,
)
from archetype_engine.validation.entity_validators import validate_duplicate_entities, validate_entity
from archetype_engine.validation.relation_validators import validate_mutual_relations
from archetype_engine.validation.result import ValidationResult, issue


def validate_manifest(manifest) -> ValidationResult:
    """
    Validate a raw manifest descriptor.

    Example:
        >>> result = validate_manifest({
        ...     "entities": [{"name": "User", "fields": {"email": {"type": "text"}}}],
        ...     "database": {"type": "sqlite", "file": "./app.db"},
        ... })
        >>> result.valid
        True
    """
    if not isinstance(manifest, dict):
        return ValidationResult(errors=(issue(
            ValidationCode.INVALID_MANIFEST,
            "",
            f"Manifest must be an object, got {type(manifest).__name__}",
            "Pass an object with an 'entities' array",
        ),))

    errors = []
    warnings = []

    mode_errors, mode_warnings, mode_kind = validate_mode(manifest)
    errors.extend(mode_errors)
    warnings.extend(mode_warnings)

    errors.extend(validate_database(manifest, mode_kind))
    errors.extend(validate_auth(manifest))
    errors.extend(validate_defaults(manifest))

    entities = manifest.get("entities")
    if not isinstance(entities, list):
        errors.append(issue(
            ValidationCode.INVALID_MANIFEST,
            "entities",
            "Manifest requires an 'entities' array",
            "Add entities: [{ name: 'User', fields: { email: { type: 'text' } } }]",
        ))
        entities = []

    errors.extend(validate_duplicate_entities(entities))

    entity_names = {
        e["name"] for e in entities if isinstance(e, dict) and isinstance(e.get("name"), str)
    }
    auth_enabled = is_auth_enabled(manifest)
    for index, entity in enumerate(entities):
        errors.extend(validate_entity(entity, index, entity_names, auth_enabled))

    warnings.extend(validate_mutual_relations(entities))
    errors.extend(validate_global_source(manifest))

    return ValidationResult(errors=tuple(errors), warnings=tuple(warnings))
