"""
Manifest compiler: validated descriptor -> immutable ManifestIR.

The compiler derives every name once (through a single Naming instance),
injects implicit fields (primary keys, foreign keys, behavior fields),
resolves relations and the generation mode. It refuses to run on a manifest
that does not pass validation.
"""

from archetype_engine.errors import ManifestCompileError
from archetype_engine.gen_logging import get_logger
from archetype_engine.ir.mode import resolve_mode
from archetype_engine.ir.models import (
    AuthInfo,
    Behaviors,
    DatabaseInfo,
    ExternalSource,
    FieldOrigin,
    FieldRule,
    HooksPolicy,
    ManifestIR,
    ProtectedPolicy,
    ResolvedEntity,
    ResolvedField,
    SourceAuth,
    SourceEndpoints,
)
from archetype_engine.ir.relations import EntityDraft, RelationResolver
from archetype_engine.kinds import (
    FieldKind,
    ModeKind,
    normalize_hooks,
    normalize_protected,
)
from archetype_engine.naming import DEFAULT_NAMING, Naming, NamingConfig, naming_for
from archetype_engine.validation import validate_manifest

logger = get_logger(__name__)

_TEXT_RULE_FLAGS = ("email", "url", "trim", "lowercase", "uppercase")
_NUMBER_RULE_FLAGS = ("integer", "positive")


# ------------------------------------------------------------------------------
# Fields

def _field_rules(descriptor: dict, kind: FieldKind) -> tuple:
    rules = []
    if kind is FieldKind.TEXT:
        if descriptor.get("min") is not None:
            rules.append(FieldRule(kind="minLength", value=descriptor["min"]))
        if descriptor.get("max") is not None:
            rules.append(FieldRule(kind="maxLength", value=descriptor["max"]))
        for flag in _TEXT_RULE_FLAGS:
            if descriptor.get(flag):
                rules.append(FieldRule(kind=flag))
        if descriptor.get("regex"):
            rules.append(FieldRule(kind="regex", value=descriptor["regex"]))
        if descriptor.get("oneOf"):
            rules.append(FieldRule(kind="oneOf", value=tuple(descriptor["oneOf"])))
    elif kind is FieldKind.NUMBER:
        if descriptor.get("min") is not None:
            rules.append(FieldRule(kind="min", value=descriptor["min"]))
        if descriptor.get("max") is not None:
            rules.append(FieldRule(kind="max", value=descriptor["max"]))
        for flag in _NUMBER_RULE_FLAGS:
            if descriptor.get(flag):
                rules.append(FieldRule(kind=flag))
    return tuple(rules)


def resolve_field(name: str, descriptor: dict, naming: Naming) -> ResolvedField:
    """Required unless explicitly optional; `optional` wins over `required`."""
    kind = FieldKind(descriptor["type"])
    primary_key = descriptor.get("primaryKey") is True
    if primary_key:
        required = True
    elif descriptor.get("optional") is True:
        required = False
    else:
        required = descriptor.get("required") is not False
    return ResolvedField(
        name=name,
        kind=kind,
        column=naming.column_name(name),
        required=required,
        unique=descriptor.get("unique") is True or primary_key,
        primary_key=primary_key,
        default=descriptor.get("default"),
        label=descriptor.get("label"),
        rules=_field_rules(descriptor, kind),
    )


def _implicit_primary_key(naming: Naming) -> ResolvedField:
    return ResolvedField(
        name="id",
        kind=FieldKind.TEXT,
        column=naming.column_name("id"),
        required=True,
        unique=True,
        primary_key=True,
        origin=FieldOrigin.PRIMARY_KEY,
    )


def _behavior_fields(behaviors: Behaviors, existing: set, naming: Naming) -> list:
    wanted = []
    if behaviors.timestamps:
        wanted += [("createdAt", True), ("updatedAt", True)]
    if behaviors.soft_delete:
        wanted.append(("deletedAt", False))
    return [
        ResolvedField(
            name=name,
            kind=FieldKind.DATE,
            column=naming.column_name(name),
            required=required,
            origin=FieldOrigin.BEHAVIOR,
        )
        for name, required in wanted
        if name not in existing
    ]


# ------------------------------------------------------------------------------
# Entity-level configuration

def _resolve_source(source: dict) -> ExternalSource:
    auth = None
    if source.get("auth"):
        auth_type = source["auth"]["type"]
        default_header = "X-API-Key" if auth_type == "api-key" else "Authorization"
        auth = SourceAuth(type=auth_type, header=source["auth"].get("header") or default_header)
    override = source.get("override") or {}
    return ExternalSource(
        base_url=source["baseUrl"],
        path_prefix=source.get("pathPrefix") or "",
        resource_name=source.get("resourceName"),
        endpoints=SourceEndpoints(**override),
        auth=auth,
    )


def _resolve_behaviors(defaults: dict, entity_behaviors: dict) -> Behaviors:
    merged = {"timestamps": True, "softDelete": False, "audit": False}
    merged.update(defaults or {})
    merged.update(entity_behaviors or {})
    return Behaviors(
        timestamps=merged["timestamps"],
        soft_delete=merged["softDelete"],
        audit=merged["audit"],
    )


def _resolve_hooks(value, naming: Naming) -> HooksPolicy:
    hooks = normalize_hooks(value)
    return HooksPolicy(**{naming.to_snake_case(name): on for name, on in hooks.items()})


def _draft_entity(descriptor: dict, naming: Naming) -> EntityDraft:
    fields = descriptor["fields"]
    pk_name = next((n for n, f in fields.items() if f.get("primaryKey") is True), None)
    if pk_name is None and "id" in fields:
        pk_name = "id"

    if pk_name is None:
        primary_key = _implicit_primary_key(naming)
    else:
        primary_key = resolve_field(pk_name, fields[pk_name], naming).model_copy(
            update={"primary_key": True, "required": True, "unique": True}
        )

    return EntityDraft(
        name=descriptor["name"],
        table=naming.table_name(descriptor["name"]),
        descriptor=descriptor,
        primary_key=primary_key,
        declared=[
            resolve_field(name, field, naming)
            for name, field in fields.items()
            if name != primary_key.name
        ],
    )


def _freeze_entity(draft: EntityDraft, manifest: dict, auth: AuthInfo, naming: Naming) -> ResolvedEntity:
    descriptor = draft.descriptor
    behaviors = _resolve_behaviors(manifest.get("defaults"), descriptor.get("behaviors"))

    fields = [draft.primary_key] + draft.declared + draft.injected
    fields += _behavior_fields(behaviors, {f.name for f in fields}, naming)

    source = descriptor.get("source") or manifest.get("source")

    # absent protection means "protected" whenever there is auth to enforce it
    policy = normalize_protected(descriptor.get("protected"), default=auth.enabled)

    return ResolvedEntity(
        name=draft.name,
        table=draft.table,
        module=naming.module_name(draft.name),
        route=naming.route_path(draft.name),
        fields=tuple(fields),
        relations=tuple(draft.relations),
        behaviors=behaviors,
        protected=ProtectedPolicy(**policy),
        hooks=_resolve_hooks(descriptor.get("hooks"), naming),
        source=_resolve_source(source) if source else None,
    )


# ------------------------------------------------------------------------------
# Manifest-level configuration

def _resolve_auth(auth) -> AuthInfo:
    if not auth:
        return AuthInfo()
    return AuthInfo(
        enabled=auth.get("enabled") is True,
        providers=tuple(auth.get("providers") or ()),
        session_strategy=auth.get("sessionStrategy") or "jwt",
    )


def _resolve_database(database, mode) -> DatabaseInfo:
    if not database or mode.kind == ModeKind.HEADLESS:
        return None
    return DatabaseInfo(kind=database["type"], file=database.get("file"), url=database.get("url"))


# ------------------------------------------------------------------------------
# Public API

def compile_manifest(manifest: dict, naming_config: NamingConfig = None) -> ManifestIR:
    """
    Compile a raw manifest descriptor into a ManifestIR.

    Args:
        manifest: Raw descriptor (dict) as accepted by validate_manifest
        naming_config: Pluralization tables; defaults to DEFAULT_NAMING

    Returns:
        Immutable ManifestIR

    Raises:
        ManifestCompileError: the manifest does not pass validation
    """
    result = validate_manifest(manifest)
    if not result.valid:
        raise ManifestCompileError(result)

    naming_config = naming_config or DEFAULT_NAMING
    naming = naming_for(naming_config)
    mode = resolve_mode(manifest.get("mode"))
    auth = _resolve_auth(manifest.get("auth"))

    drafts = [_draft_entity(e, naming) for e in manifest["entities"]]
    resolver = RelationResolver(naming, drafts, lambda n, f: resolve_field(n, f, naming))
    resolution = resolver.resolve()

    entities = tuple(_freeze_entity(d, manifest, auth, naming) for d in drafts)
    warnings = tuple(result.warnings) + tuple(resolution.warnings)
    for warning in warnings:
        logger.warning(f"{warning.path}: {warning.message}")

    ir = ManifestIR(
        template=manifest.get("template"),
        mode=mode,
        database=_resolve_database(manifest.get("database"), mode),
        auth=auth,
        entities=entities,
        join_entities=tuple(resolution.join_entities),
        naming=naming_config,
        warnings=warnings,
    )
    logger.debug(
        f"  Compiled {len(ir.entities)} entities, {len(ir.join_entities)} join entities "
        f"(mode: {ir.mode.kind.value})"
    )
    return ir


__all__ = ["compile_manifest", "resolve_field"]
