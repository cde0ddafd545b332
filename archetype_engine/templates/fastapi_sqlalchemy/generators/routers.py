"""
FastAPI router generation (category: api).

Emits `api/routers/<entity>.py` for every entity and `main.py` wiring them
into one application. Protected operations depend on `require_user` from the
generated auth module.
"""

from archetype_engine.gen_logging import get_logger
from archetype_engine.kinds import CRUD_OPERATIONS
from archetype_engine.template.types import GeneratedFile
from archetype_engine.templates.fastapi_sqlalchemy.builders import (
    HEADER,
    OPERATIONS,
    has_storage_schema,
    id_type,
    module_path,
    schema_names,
    service_class,
    storage_kind,
)
from archetype_engine.templates.fastapi_sqlalchemy.rendering import render

logger = get_logger(__name__)


def _operation_configs(entity) -> list:
    configs = []
    for operation in CRUD_OPERATIONS:
        method, item, status = OPERATIONS[operation]
        configs.append({
            "name": operation,
            "method": method.lower(),
            "path": "/{record_id}" if item else "",
            "status": status,
            "protected": entity.protected.requires_auth(operation),
        })
    return configs


def _router(ir, ctx, entity) -> GeneratedFile:
    operations = _operation_configs(entity)
    content = render(
        "router.py.jinja",
        header=HEADER,
        entity=entity.name,
        route=entity.route,
        plural=entity.table,
        singular=entity.module,
        service=service_class(entity),
        service_module=module_path(ctx, "@services", entity.module),
        schemas=schema_names(entity),
        schemas_module=module_path(ctx, "@schemas", entity.module),
        auth_module=ctx.resolve_path("@auth"),
        session_module=ctx.resolve_path("@database"),
        database=storage_kind(ir, entity) == "database",
        id_type=id_type(entity),
        operations=operations,
        any_protected=any(op["protected"] for op in operations),
    )
    return GeneratedFile(path=f"api/routers/{entity.module}.py", content=content)


def generate_routers(ir, ctx) -> list:
    files = []
    for entity in ir.entities:
        files.append(_router(ir, ctx, entity))
        logger.debug(f"    api/routers/{entity.module}.py -> /{entity.route}")

    main = render(
        "main.py.jinja",
        header=HEADER,
        routers_module=ctx.resolve_path("@routers"),
        session_module=ctx.resolve_path("@database"),
        modules=[entity.module for entity in ir.entities],
        init_db=has_storage_schema(ir) and bool(ir.database_entities),
    )
    files.append(GeneratedFile(path="main.py", content=main))
    return files
