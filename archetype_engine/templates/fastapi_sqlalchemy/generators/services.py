"""
Service layer generation (category: services).

Each entity gets `services/<entity>.py` with a `<Entity>Service` exposing
list/get/create/update/remove. The backing store depends on the entity:

- database: SQLAlchemy session against the generated models
- external: httpx calls to the entity's external source
- memory:   in-process dict store, used when the run emits no storage schema

Soft delete turns remove into an update of the deletion marker. Enabled hooks
are called around each write.
"""

import re

from archetype_engine.gen_logging import get_logger
from archetype_engine.kinds import FieldKind
from archetype_engine.template.types import GeneratedFile
from archetype_engine.templates.fastapi_sqlalchemy.builders import (
    HEADER,
    env_prefix,
    id_type,
    module_path,
    schema_names,
    service_class,
    storage_kind,
)
from archetype_engine.templates.fastapi_sqlalchemy.rendering import render

logger = get_logger(__name__)

_PATH_PARAM = re.compile(r":[A-Za-z_][A-Za-z0-9_]*|\{[A-Za-z_][A-Za-z0-9_]*\}")

_DEFAULT_ENDPOINTS = {
    "list": ("GET", False),
    "get": ("GET", True),
    "create": ("POST", False),
    "update": ("PUT", True),
    "delete": ("DELETE", True),
}


def parse_endpoint(spec: str) -> tuple:
    """'GET /items/:sku' -> ('GET', '/items/{id}')."""
    method, _, path = spec.strip().partition(" ")
    return method.upper(), _PATH_PARAM.sub("{id}", path.strip())


def external_endpoints(entity, naming) -> dict:
    source = entity.source
    resource = source.resource_name or naming.pluralize(entity.name.lower())
    collection = f"{source.path_prefix}/{resource}"
    endpoints = {}
    for operation, (method, item) in _DEFAULT_ENDPOINTS.items():
        override = getattr(source.endpoints, operation)
        if override:
            endpoints[operation] = parse_endpoint(override)
        else:
            endpoints[operation] = (method, f"{collection}/{{id}}" if item else collection)
    return endpoints


def external_config(entity, naming) -> dict:
    source = entity.source
    auth = None
    if source.auth is not None:
        suffix = "API_TOKEN" if source.auth.type == "bearer" else "API_KEY"
        auth = {
            "type": source.auth.type,
            "header": source.auth.header,
            "env": f"{env_prefix(entity)}_{suffix}",
        }
    return {
        "base_url_env": source.base_url_env or f"{env_prefix(entity)}_BASE_URL",
        "base_url_default": None if source.base_url_env else source.base_url,
        "endpoints": [
            {"operation": op, "method": method, "path": path}
            for op, (method, path) in external_endpoints(entity, naming).items()
        ],
        "auth": auth,
    }


def _hooks(entity) -> dict:
    return entity.hooks.model_dump()


def generate_services(ir, ctx) -> list:
    files = []
    for entity in ir.entities:
        kind = storage_kind(ir, entity)
        context = {
            "header": HEADER,
            "entity": entity.name,
            "service": service_class(entity),
            "schemas": schema_names(entity),
            "schemas_module": module_path(ctx, "@schemas", entity.module),
            "hooks_module": module_path(ctx, "@hooks", entity.module) if entity.hooks.any else None,
            "hooks": _hooks(entity),
            "id_type": id_type(entity),
            "pk": entity.primary_key.name,
            "text_pk": entity.primary_key.kind is FieldKind.TEXT,
            "soft_delete": entity.soft_delete,
            "timestamps": entity.behaviors.timestamps,
            "audit": entity.behaviors.audit,
        }
        if kind == "database":
            context["models_module"] = ctx.resolve_path("@models")
            content = render("service_database.py.jinja", **context)
        elif kind == "external":
            context.update(external_config(entity, ctx.naming))
            content = render("service_external.py.jinja", **context)
        else:
            content = render("service_memory.py.jinja", **context)

        files.append(GeneratedFile(path=f"services/{entity.module}.py", content=content))
        logger.debug(f"    services/{entity.module}.py ({kind})")
    return files
