"""
HTTP client generation (category: client).

`client/base.py` holds the shared httpx transport; each entity gets
`client/<entity>.py` with a typed data-access client for its REST routes.
"""

from archetype_engine.gen_logging import get_logger
from archetype_engine.template.types import GeneratedFile
from archetype_engine.templates.fastapi_sqlalchemy.builders import (
    HEADER,
    client_class,
    id_type,
    module_path,
    schema_names,
)
from archetype_engine.templates.fastapi_sqlalchemy.rendering import render

logger = get_logger(__name__)


def generate_client(ir, ctx) -> list:
    base_module = module_path(ctx, "@client", "base")
    files = [GeneratedFile(
        path="client/base.py",
        content=render("client_base.py.jinja", header=HEADER, auth_enabled=ir.auth.enabled),
    )]
    for entity in ir.entities:
        content = render(
            "client.py.jinja",
            header=HEADER,
            entity=entity.name,
            client=client_class(entity),
            route=entity.route,
            schemas=schema_names(entity),
            schemas_module=module_path(ctx, "@schemas", entity.module),
            base_module=base_module,
            id_type=id_type(entity),
        )
        files.append(GeneratedFile(path=f"client/{entity.module}.py", content=content))
        logger.debug(f"    client/{entity.module}.py -> /{entity.route}")
    return files
