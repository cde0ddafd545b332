"""
Helpers shared by the fastapi-sqlalchemy generators.

Generators build plain dict contexts from the IR (the same way for every
artifact) and hand them to Jinja; nothing here re-derives a name that the IR
already carries.
"""

from archetype_engine.kinds import CATEGORY_SCHEMA, FieldKind
from archetype_engine.templates.fastapi_sqlalchemy.rendering import py_type

HEADER = "Generated by archetype. Do not edit by hand; regenerate from the manifest instead."

# operation -> (HTTP method, item path?, success status)
OPERATIONS = {
    "list": ("GET", False, 200),
    "get": ("GET", True, 200),
    "create": ("POST", False, 201),
    "update": ("PUT", True, 200),
    "remove": ("DELETE", True, 204),
}


def has_storage_schema(ir) -> bool:
    """True when the run emits SQLAlchemy models that services can persist through."""
    return ir.mode.allows(CATEGORY_SCHEMA)


def storage_kind(ir, entity) -> str:
    """'external', 'database' or 'memory': how the service layer stores an entity."""
    if entity.is_external:
        return "external"
    if has_storage_schema(ir):
        return "database"
    return "memory"


def module_path(ctx, alias: str, module: str = None) -> str:
    base = ctx.resolve_path(alias)
    return f"{base}.{module}" if module else base


def schema_names(entity) -> dict:
    return {
        "create": f"{entity.name}Create",
        "update": f"{entity.name}Update",
        "read": f"{entity.name}Read",
    }


def service_class(entity) -> str:
    return f"{entity.name}Service"


def client_class(entity) -> str:
    return f"{entity.name}Client"


def id_type(entity) -> str:
    return py_type(entity.primary_key)


def env_prefix(entity) -> str:
    return entity.module.upper()


def needs_datetime(fields) -> bool:
    return any(f.kind is FieldKind.DATE for f in fields)


def database_entity_names(ir) -> set:
    return {e.name for e in ir.database_entities}
