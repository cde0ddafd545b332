"""
Closed vocabularies of the manifest format and the normalisers shared by the
validator and the compiler.

The normalisers return None for values they do not understand; the validator
turns that into an error and the compiler only ever sees values that passed.
"""

from enum import Enum
from typing import Any, Optional


class FieldKind(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"


class RelationKind(str, Enum):
    HAS_ONE = "hasOne"
    HAS_MANY = "hasMany"
    BELONGS_TO_MANY = "belongsToMany"

    @property
    def is_many(self) -> bool:
        return self is not RelationKind.HAS_ONE


class ModeKind(str, Enum):
    FULL = "full"
    HEADLESS = "headless"
    API_ONLY = "api-only"


class DatabaseKind(str, Enum):
    SQLITE = "sqlite"
    POSTGRES = "postgres"
    MYSQL = "mysql"


AUTH_PROVIDERS = ("credentials", "google", "github", "discord")
SESSION_STRATEGIES = ("jwt", "database")
SOURCE_AUTH_TYPES = ("bearer", "api-key")
SOURCE_OPERATIONS = ("list", "get", "create", "update", "delete")

CRUD_OPERATIONS = ("list", "get", "create", "update", "remove")
HOOK_NAMES = (
    "beforeCreate",
    "afterCreate",
    "beforeUpdate",
    "afterUpdate",
    "beforeRemove",
    "afterRemove",
)
BEHAVIOR_NAMES = ("timestamps", "softDelete", "audit")

# Artifact categories known to the mode filter. Generators may declare others;
# those are treated as unmapped and stay included.
CATEGORY_SCHEMA = "schema"
KNOWN_CATEGORIES = (
    "schema",
    "auth",
    "validation",
    "services",
    "hooks",
    "api",
    "client",
    "seed",
)
API_ONLY_CATEGORIES = frozenset({"schema", "validation", "api", "services"})

# Field modifiers, grouped by the field kinds they apply to
BOOLEAN_FLAGS = ("required", "optional", "unique", "primaryKey")
TEXT_FLAGS = ("email", "url", "trim", "lowercase", "uppercase")
NUMBER_FLAGS = ("integer", "positive")


def enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


def normalize_protected(value: Any, default: bool = False) -> Optional[dict]:
    """
    Expand a protection shorthand into a per-operation map.

    None means "not declared" and resolves to `default` for every operation.
    """
    if value is None:
        return {op: default for op in CRUD_OPERATIONS}
    if value is True or value == "all":
        return {op: True for op in CRUD_OPERATIONS}
    if value is False:
        return {op: False for op in CRUD_OPERATIONS}
    if value == "write":
        return {"list": False, "get": False, "create": True, "update": True, "remove": True}
    if isinstance(value, dict):
        if any(k not in CRUD_OPERATIONS for k in value):
            return None
        if any(not isinstance(v, bool) for v in value.values()):
            return None
        policy = {op: False for op in CRUD_OPERATIONS}
        policy.update(value)
        return policy
    return None


def normalize_hooks(value: Any) -> Optional[dict]:
    if value is None or value is False:
        return {name: False for name in HOOK_NAMES}
    if value is True:
        return {name: True for name in HOOK_NAMES}
    if isinstance(value, dict):
        if any(k not in HOOK_NAMES or not isinstance(v, bool) for k, v in value.items()):
            return None
        hooks = {name: False for name in HOOK_NAMES}
        hooks.update(value)
        return hooks
    return None


def normalize_mode(value: Any) -> Optional[tuple]:
    """Return (kind, include) for a mode string or {type, include} object, None if malformed."""
    if value is None:
        return ModeKind.FULL, None
    if isinstance(value, str):
        try:
            return ModeKind(value), None
        except ValueError:
            return None
    if isinstance(value, dict):
        raw_kind = value.get("type", value.get("kind", ModeKind.FULL.value))
        try:
            kind = ModeKind(raw_kind)
        except ValueError:
            return None
        include = value.get("include")
        if include is None:
            return kind, None
        if not isinstance(include, (list, tuple)) or not all(isinstance(c, str) for c in include):
            return None
        return kind, tuple(include)
    return None
