"""
Entity-level validation.

Covers entity names, fields and their modifiers, relation declarations,
behaviors, hooks and the access-protection policy. Every function returns a
list of issues; nothing here raises or stops at the first problem.
"""

import re

from archetype_engine.kinds import (
    BEHAVIOR_NAMES,
    BOOLEAN_FLAGS,
    NUMBER_FLAGS,
    TEXT_FLAGS,
    FieldKind,
    RelationKind,
    enum_values,
    normalize_hooks,
    normalize_protected,
)
from archetype_engine.naming import is_camel_case, is_pascal_case, to_camel_case, to_pascal_case
from archetype_engine.validation.codes import ValidationCode
from archetype_engine.validation.result import issue
from archetype_engine.validation.source_validators import validate_source

FIELD_TYPES = enum_values(FieldKind)
RELATION_TYPES = enum_values(RelationKind)


def entity_path(entity, index: int) -> str:
    """Paths are rooted at the entity name when it is usable, else at its list index."""
    name = entity.get("name") if isinstance(entity, dict) else None
    if isinstance(name, str) and name:
        return name
    return f"entities[{index}]"


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# ------------------------------------------------------------------------------
# Fields

def _validate_default(field_name, field, kind, path):
    if "default" not in field or field["default"] is None:
        return []
    value = field["default"]
    expected = {
        "text": isinstance(value, str),
        "number": _is_number(value),
        "boolean": isinstance(value, bool),
        "date": isinstance(value, str),
    }[kind]
    if expected:
        return []
    return [issue(
        ValidationCode.INVALID_FIELD_MODIFIER,
        f"{path}.default",
        f"Default value {value!r} does not match field type '{kind}'",
        f"Use a {kind} default for '{field_name}' or remove it",
    )]


def _validate_modifiers(field_name: str, field: dict, kind: str, path: str) -> list:
    errors = []

    for flag in BOOLEAN_FLAGS + TEXT_FLAGS + NUMBER_FLAGS:
        if flag in field and not isinstance(field[flag], bool):
            errors.append(issue(
                ValidationCode.INVALID_FIELD_MODIFIER,
                f"{path}.{flag}",
                f"Modifier '{flag}' must be true or false",
            ))

    for flag in TEXT_FLAGS + ("regex", "oneOf"):
        if field.get(flag) not in (None, False) and kind != FieldKind.TEXT.value:
            errors.append(issue(
                ValidationCode.INVALID_FIELD_MODIFIER,
                f"{path}.{flag}",
                f"Modifier '{flag}' only applies to text fields",
                f"Remove '{flag}' from '{field_name}' or change its type to text",
            ))
    for flag in NUMBER_FLAGS:
        if field.get(flag) not in (None, False) and kind != FieldKind.NUMBER.value:
            errors.append(issue(
                ValidationCode.INVALID_FIELD_MODIFIER,
                f"{path}.{flag}",
                f"Modifier '{flag}' only applies to number fields",
                f"Remove '{flag}' from '{field_name}' or change its type to number",
            ))

    for bound in ("min", "max"):
        if bound not in field:
            continue
        value = field[bound]
        if not _is_number(value):
            errors.append(issue(
                ValidationCode.INVALID_FIELD_MODIFIER,
                f"{path}.{bound}",
                f"Modifier '{bound}' must be a number",
            ))
        elif kind not in (FieldKind.TEXT.value, FieldKind.NUMBER.value):
            errors.append(issue(
                ValidationCode.INVALID_FIELD_MODIFIER,
                f"{path}.{bound}",
                f"Modifier '{bound}' only applies to text and number fields",
            ))
        elif kind == FieldKind.TEXT.value and value < 0:
            errors.append(issue(
                ValidationCode.INVALID_FIELD_MODIFIER,
                f"{path}.{bound}",
                f"Length bound '{bound}' cannot be negative",
            ))
    if _is_number(field.get("min")) and _is_number(field.get("max")) and field["min"] > field["max"]:
        errors.append(issue(
            ValidationCode.INVALID_FIELD_MODIFIER,
            f"{path}.min",
            f"min ({field['min']}) is greater than max ({field['max']})",
            "Swap the bounds or widen max",
        ))

    if "regex" in field and field["regex"] is not None:
        pattern = field["regex"]
        try:
            if not isinstance(pattern, str):
                raise TypeError(pattern)
            re.compile(pattern)
        except (re.error, TypeError):
            errors.append(issue(
                ValidationCode.INVALID_FIELD_MODIFIER,
                f"{path}.regex",
                f"Invalid regular expression {pattern!r}",
            ))

    if "oneOf" in field and field["oneOf"] is not None:
        choices = field["oneOf"]
        if (not isinstance(choices, list) or not choices
                or not all(isinstance(c, str) for c in choices)):
            errors.append(issue(
                ValidationCode.INVALID_FIELD_MODIFIER,
                f"{path}.oneOf",
                "oneOf must be a non-empty list of strings",
                "Use e.g. oneOf: ['draft', 'published']",
            ))

    if "label" in field and not isinstance(field["label"], str):
        errors.append(issue(
            ValidationCode.INVALID_FIELD_MODIFIER,
            f"{path}.label",
            "Label must be a string",
        ))

    errors.extend(_validate_default(field_name, field, kind, path))
    return errors


def validate_field(field_name, field, path_prefix: str) -> list:
    """Validate one field; `path_prefix` is e.g. "User.fields"."""
    errors = []
    path = f"{path_prefix}.{field_name}"

    if not is_camel_case(field_name):
        errors.append(issue(
            ValidationCode.INVALID_FIELD_NAME,
            path,
            f"Field name '{field_name}' must be camelCase",
            f"Rename to '{to_camel_case(str(field_name)) or 'value'}'",
        ))

    if not isinstance(field, dict):
        errors.append(issue(
            ValidationCode.INVALID_FIELD_TYPE,
            path,
            f"Field '{field_name}' must be an object with a 'type'",
            f"Use {{ type: 'text' }}; valid types: {', '.join(FIELD_TYPES)}",
        ))
        return errors

    kind = field.get("type")
    if kind not in FIELD_TYPES:
        errors.append(issue(
            ValidationCode.INVALID_FIELD_TYPE,
            f"{path}.type",
            f"Invalid field type '{kind}'",
            f"Use one of: {', '.join(FIELD_TYPES)}",
        ))
        return errors

    errors.extend(_validate_modifiers(field_name, field, kind, path))
    return errors


# ------------------------------------------------------------------------------
# Relations

def _target_suggestion(target, entity_names) -> str:
    if isinstance(target, str):
        for name in sorted(entity_names):
            if name.lower() == target.lower():
                return f"Did you mean '{name}'? Entity names are case-sensitive"
        return f"Add entity '{target}' to the entities array, or fix the entity name"
    return "Set entity to the name of a declared entity"


def validate_relation(relation_name, relation, path_prefix: str, entity_names: set, field_names: set) -> list:
    errors = []
    path = f"{path_prefix}.{relation_name}"

    if not is_camel_case(relation_name):
        errors.append(issue(
            ValidationCode.INVALID_FIELD_NAME,
            path,
            f"Relation name '{relation_name}' must be camelCase",
            f"Rename to '{to_camel_case(str(relation_name)) or 'related'}'",
        ))
    elif relation_name in field_names:
        errors.append(issue(
            ValidationCode.INVALID_FIELD_NAME,
            path,
            f"Relation '{relation_name}' has the same name as a field",
            f"Rename the relation, e.g. '{relation_name}Ref'",
        ))

    if not isinstance(relation, dict):
        errors.append(issue(
            ValidationCode.INVALID_RELATION_TYPE,
            path,
            f"Relation '{relation_name}' must be an object with 'type' and 'entity'",
            f"Use {{ type: 'hasOne', entity: 'User' }}; valid types: {', '.join(RELATION_TYPES)}",
        ))
        return errors

    kind = relation.get("type")
    if kind not in RELATION_TYPES:
        errors.append(issue(
            ValidationCode.INVALID_RELATION_TYPE,
            f"{path}.type",
            f"Invalid relation type '{kind}'",
            f"Use one of: {', '.join(RELATION_TYPES)}",
        ))

    target = relation.get("entity")
    if not isinstance(target, str) or target not in entity_names:
        errors.append(issue(
            ValidationCode.RELATION_TARGET_NOT_FOUND,
            f"{path}.entity",
            f"Entity '{target}' not found in manifest",
            _target_suggestion(target, entity_names),
        ))

    key_field = relation.get("field")
    if key_field is not None and not is_camel_case(key_field):
        errors.append(issue(
            ValidationCode.INVALID_FIELD_NAME,
            f"{path}.field",
            f"Key field name '{key_field}' must be camelCase",
            f"Rename to '{to_camel_case(str(key_field)) or relation_name + 'Id'}'",
        ))

    if "optional" in relation and not isinstance(relation["optional"], bool):
        errors.append(issue(
            ValidationCode.INVALID_FIELD_MODIFIER,
            f"{path}.optional",
            "Relation 'optional' must be true or false",
        ))

    through = relation.get("through")
    if through is not None:
        if kind != RelationKind.BELONGS_TO_MANY.value:
            errors.append(issue(
                ValidationCode.INVALID_RELATION_TYPE,
                f"{path}.through",
                "'through' is only supported on belongsToMany relations",
                "Remove 'through' or change the relation type to belongsToMany",
            ))
        elif not isinstance(through, dict):
            errors.append(issue(
                ValidationCode.INVALID_RELATION_TYPE,
                f"{path}.through",
                "'through' must be an object with optional 'table' and 'fields'",
            ))
        else:
            table = through.get("table")
            if table is not None and (not isinstance(table, str) or not table):
                errors.append(issue(
                    ValidationCode.INVALID_RELATION_TYPE,
                    f"{path}.through.table",
                    "Pivot table name must be a non-empty string",
                ))
            pivot_fields = through.get("fields") or {}
            if not isinstance(pivot_fields, dict):
                errors.append(issue(
                    ValidationCode.INVALID_FIELD_TYPE,
                    f"{path}.through.fields",
                    "Pivot fields must be an object keyed by field name",
                ))
            else:
                for pivot_name, pivot_field in pivot_fields.items():
                    errors.extend(validate_field(pivot_name, pivot_field, f"{path}.through.fields"))

    return errors


# ------------------------------------------------------------------------------
# Entity

def _validate_flags_block(block, path: str, allowed, label: str) -> list:
    if block is None:
        return []
    if not isinstance(block, dict) or any(
        k not in allowed or not isinstance(v, bool) for k, v in block.items()
    ):
        return [issue(
            ValidationCode.INVALID_MANIFEST,
            path,
            f"{label} must map {', '.join(allowed)} to true or false",
        )]
    return []


def validate_protected(entity_name: str, value, path: str, auth_enabled: bool) -> list:
    if value is None:
        return []
    policy = normalize_protected(value)
    if policy is None:
        return [issue(
            ValidationCode.INVALID_PROTECTED_VALUE,
            path,
            f"Invalid protected value {value!r}",
            "Use one of: true, false, 'write', 'all', or an object with list/get/create/update/remove",
        )]
    if any(policy.values()) and not auth_enabled:
        return [issue(
            ValidationCode.AUTH_REQUIRED_FOR_PROTECTED,
            path,
            f"Entity '{entity_name}' has protected operations but auth is not enabled",
            "Add auth: { enabled: true } to manifest, or remove protected from entity",
        )]
    return []


def validate_entity(entity, index: int, entity_names: set, auth_enabled: bool) -> list:
    path = entity_path(entity, index)
    if not isinstance(entity, dict):
        return [issue(
            ValidationCode.INVALID_MANIFEST,
            path,
            "Entity must be an object with 'name' and 'fields'",
        )]

    errors = []
    name = entity.get("name")
    if not is_pascal_case(name):
        suggestion = (
            f"Rename to '{to_pascal_case(name)}'"
            if isinstance(name, str) and to_pascal_case(name)
            else "Give the entity a PascalCase name, e.g. 'User'"
        )
        errors.append(issue(
            ValidationCode.INVALID_ENTITY_NAME,
            path,
            f"Entity name '{name}' must be PascalCase",
            suggestion,
        ))

    fields = entity.get("fields")
    if not isinstance(fields, dict) or not fields:
        errors.append(issue(
            ValidationCode.MISSING_ENTITY_FIELDS,
            f"{path}.fields",
            f"Entity '{name}' must have at least one field",
            "Add fields to the entity, e.g. { title: { type: 'text' } }",
        ))
        fields = fields if isinstance(fields, dict) else {}

    for field_name, field in fields.items():
        errors.extend(validate_field(field_name, field, f"{path}.fields"))

    primary_keys = [
        n for n, f in fields.items() if isinstance(f, dict) and f.get("primaryKey") is True
    ]
    if len(primary_keys) > 1:
        errors.append(issue(
            ValidationCode.INVALID_FIELD_MODIFIER,
            f"{path}.fields.{primary_keys[1]}.primaryKey",
            f"Entity '{name}' declares more than one primary key ({', '.join(primary_keys)})",
            "Keep primaryKey on a single field",
        ))

    relations = entity.get("relations")
    if relations is not None:
        if not isinstance(relations, dict):
            errors.append(issue(
                ValidationCode.INVALID_RELATION_TYPE,
                f"{path}.relations",
                "Relations must be an object keyed by relation name",
            ))
        else:
            for relation_name, relation in relations.items():
                errors.extend(validate_relation(
                    relation_name, relation, f"{path}.relations", entity_names, set(fields)
                ))

    errors.extend(_validate_flags_block(entity.get("behaviors"), f"{path}.behaviors", BEHAVIOR_NAMES, "Behaviors"))

    if normalize_hooks(entity.get("hooks")) is None:
        errors.append(issue(
            ValidationCode.INVALID_MANIFEST,
            f"{path}.hooks",
            f"Invalid hooks value {entity.get('hooks')!r}",
            "Use true, false, or an object such as { beforeCreate: true }",
        ))

    errors.extend(validate_protected(name, entity.get("protected"), f"{path}.protected", auth_enabled))

    if "source" in entity and entity["source"] is not None:
        errors.extend(validate_source(entity["source"], f"{path}.source"))

    return errors


def validate_duplicate_entities(entities: list) -> list:
    """Exact-match duplicates only; 'User' and 'user' are not considered equal."""
    errors = []
    seen = set()
    for entity in entities:
        name = entity.get("name") if isinstance(entity, dict) else None
        if not isinstance(name, str):
            continue
        if name in seen:
            errors.append(issue(
                ValidationCode.DUPLICATE_ENTITY,
                name,
                f"Duplicate entity name '{name}'",
                "Rename one of the entities",
            ))
        seen.add(name)
    return errors
