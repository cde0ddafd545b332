"""
Intermediate Representation (IR) types.

The IR is the single, fully resolved form of a validated manifest. Every
generator reads names and structure from here instead of re-deriving them.

All types are immutable (frozen=True, tuples instead of lists) so the IR can
be shared with every generator without defensive copies.
"""

from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from archetype_engine.ir.mode import ResolvedMode
from archetype_engine.kinds import CRUD_OPERATIONS, DatabaseKind, FieldKind, RelationKind
from archetype_engine.naming import NamingConfig
from archetype_engine.validation.result import ValidationIssue


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# =============================================================================
# Fields
# =============================================================================


class FieldOrigin(str, Enum):
    """Where a resolved field came from."""

    DECLARED = "declared"
    PRIMARY_KEY = "primary_key"
    FOREIGN_KEY = "foreign_key"
    BEHAVIOR = "behavior"


class FieldRule(_Frozen):
    """
    A validation rule attached to a field.

    Examples:
        - text().min(2): FieldRule(kind="minLength", value=2)
        - number().positive(): FieldRule(kind="positive")
        - oneOf: FieldRule(kind="oneOf", value=("draft", "published"))
    """

    kind: str
    value: Any = None


class FieldReference(_Frozen):
    """Target of a foreign key: entity/field names plus their storage names."""

    entity: str
    field: str
    table: str
    column: str


class ResolvedField(_Frozen):
    name: str
    kind: FieldKind
    column: str
    required: bool = True
    unique: bool = False
    primary_key: bool = False
    default: Any = None
    label: Optional[str] = None
    rules: Tuple[FieldRule, ...] = ()
    origin: FieldOrigin = FieldOrigin.DECLARED
    references: Optional[FieldReference] = None

    @property
    def nullable(self) -> bool:
        return not self.required

    @property
    def is_foreign_key(self) -> bool:
        return self.references is not None

    @property
    def writable(self) -> bool:
        """Accepted in create/update payloads."""
        return not self.primary_key and self.origin in (FieldOrigin.DECLARED, FieldOrigin.FOREIGN_KEY)

    @property
    def display_label(self) -> str:
        if self.label:
            return self.label
        words = []
        for ch in self.name:
            if ch.isupper() and words:
                words.append(" ")
            words.append(ch)
        return "".join(words).capitalize()

    def rule(self, kind: str) -> Optional[FieldRule]:
        for rule in self.rules:
            if rule.kind == kind:
                return rule
        return None

    def has_rule(self, kind: str) -> bool:
        return self.rule(kind) is not None


# =============================================================================
# Relations
# =============================================================================


class ResolvedRelation(_Frozen):
    """
    A relation with its key resolved.

    Entities are referenced by name, never by object, so the IR has no cycles.

    Attributes:
        key_field: Key column carrying the association. For hasOne it lives on
            the declaring entity, for hasMany on the target, for belongsToMany
            on the join entity (the key pointing back at the declaring entity).
        key_owner: Name of the entity (or join entity) whose table holds key_field
        target_key: belongsToMany only, the join key pointing at the target
        inverse: True when the relation reuses a key owned by the other side's
            declaration instead of injecting its own
    """

    name: str
    kind: RelationKind
    target: str
    accessor: str
    key_field: str
    key_owner: str
    optional: bool = False
    inverse: bool = False
    join_entity: Optional[str] = None
    target_key: Optional[str] = None

    @property
    def is_many(self) -> bool:
        return self.kind.is_many


# =============================================================================
# Entity policies
# =============================================================================


class Behaviors(_Frozen):
    timestamps: bool = True
    soft_delete: bool = False
    audit: bool = False


class ProtectedPolicy(_Frozen):
    list: bool = False
    get: bool = False
    create: bool = False
    update: bool = False
    remove: bool = False

    @property
    def any(self) -> bool:
        return any(getattr(self, op) for op in CRUD_OPERATIONS)

    def requires_auth(self, operation: str) -> bool:
        return bool(getattr(self, operation))


class HooksPolicy(_Frozen):
    before_create: bool = False
    after_create: bool = False
    before_update: bool = False
    after_update: bool = False
    before_remove: bool = False
    after_remove: bool = False

    @property
    def enabled(self) -> Tuple[str, ...]:
        return tuple(name for name, on in self.model_dump().items() if on)

    @property
    def any(self) -> bool:
        return bool(self.enabled)


class SourceAuth(_Frozen):
    type: str
    header: str


class SourceEndpoints(_Frozen):
    list: Optional[str] = None
    get: Optional[str] = None
    create: Optional[str] = None
    update: Optional[str] = None
    delete: Optional[str] = None


class ExternalSource(_Frozen):
    """An external REST API backing an entity instead of the database."""

    base_url: str
    path_prefix: str = ""
    resource_name: Optional[str] = None
    endpoints: SourceEndpoints = SourceEndpoints()
    auth: Optional[SourceAuth] = None

    @property
    def base_url_env(self) -> Optional[str]:
        """Environment variable name for 'env:VAR' base URLs."""
        if self.base_url.startswith("env:"):
            return self.base_url[len("env:"):]
        return None


# =============================================================================
# Entities
# =============================================================================


class ResolvedEntity(_Frozen):
    name: str
    table: str
    module: str
    route: str
    fields: Tuple[ResolvedField, ...]
    relations: Tuple[ResolvedRelation, ...] = ()
    behaviors: Behaviors = Behaviors()
    protected: ProtectedPolicy = ProtectedPolicy()
    hooks: HooksPolicy = HooksPolicy()
    source: Optional[ExternalSource] = None

    def field(self, name: str) -> Optional[ResolvedField]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def relation(self, name: str) -> Optional[ResolvedRelation]:
        for r in self.relations:
            if r.name == name:
                return r
        return None

    @property
    def primary_key(self) -> ResolvedField:
        return next(f for f in self.fields if f.primary_key)

    @property
    def foreign_keys(self) -> Tuple[ResolvedField, ...]:
        return tuple(f for f in self.fields if f.is_foreign_key)

    @property
    def writable_fields(self) -> Tuple[ResolvedField, ...]:
        return tuple(f for f in self.fields if f.writable)

    @property
    def is_external(self) -> bool:
        return self.source is not None

    @property
    def soft_delete(self) -> bool:
        return self.behaviors.soft_delete


class JoinEntity(_Frozen):
    """
    Synthesized pseudo-entity for a many-to-many association.

    `left` and `right` are in canonical (alphabetical) order regardless of
    which side declared the relation.
    """

    name: str
    table: str
    module: str
    left: str
    right: str
    left_key: ResolvedField
    right_key: ResolvedField
    pivot_fields: Tuple[ResolvedField, ...] = ()
    self_referential: bool = False

    @property
    def fields(self) -> Tuple[ResolvedField, ...]:
        return (self.left_key, self.right_key) + self.pivot_fields


# =============================================================================
# Manifest
# =============================================================================


class DatabaseInfo(_Frozen):
    kind: DatabaseKind
    file: Optional[str] = None
    url: Optional[str] = None

    @property
    def is_sqlite(self) -> bool:
        return self.kind == DatabaseKind.SQLITE

    @property
    def is_postgres(self) -> bool:
        return self.kind == DatabaseKind.POSTGRES

    @property
    def is_mysql(self) -> bool:
        return self.kind == DatabaseKind.MYSQL

    @property
    def url_env(self) -> Optional[str]:
        if self.url and self.url.startswith("env:"):
            return self.url[len("env:"):]
        return None


class AuthInfo(_Frozen):
    enabled: bool = False
    providers: Tuple[str, ...] = ()
    session_strategy: str = "jwt"


class ManifestIR(_Frozen):
    template: Optional[str] = None
    mode: ResolvedMode = ResolvedMode()
    database: Optional[DatabaseInfo] = None
    auth: AuthInfo = AuthInfo()
    entities: Tuple[ResolvedEntity, ...] = ()
    join_entities: Tuple[JoinEntity, ...] = ()
    naming: NamingConfig = NamingConfig()
    warnings: Tuple[ValidationIssue, ...] = ()

    def entity(self, name: str) -> ResolvedEntity:
        for e in self.entities:
            if e.name == name:
                return e
        raise KeyError(name)

    def join_entity(self, name: str) -> JoinEntity:
        for j in self.join_entities:
            if j.name == name:
                return j
        raise KeyError(name)

    @property
    def database_entities(self) -> Tuple[ResolvedEntity, ...]:
        return tuple(e for e in self.entities if not e.is_external)

    @property
    def external_entities(self) -> Tuple[ResolvedEntity, ...]:
        return tuple(e for e in self.entities if e.is_external)
