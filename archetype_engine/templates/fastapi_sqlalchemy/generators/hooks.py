"""
CRUD hook stub generation (category: services).

`hooks/base.py` documents the hook signatures; entities with hooks enabled
get `hooks/<entity>.py` with pass-through implementations the service layer
calls around each write.
"""

from archetype_engine.gen_logging import get_logger
from archetype_engine.template.types import GeneratedFile
from archetype_engine.templates.fastapi_sqlalchemy.builders import HEADER
from archetype_engine.templates.fastapi_sqlalchemy.rendering import render

logger = get_logger(__name__)


def generate_hooks(ir, ctx) -> list:
    files = [GeneratedFile(path="hooks/base.py", content=render("hooks_base.py.jinja", header=HEADER))]
    for entity in ir.entities:
        if not entity.hooks.any:
            continue
        content = render(
            "hooks_entity.py.jinja",
            header=HEADER,
            entity=entity.name,
            enabled=list(entity.hooks.enabled),
        )
        files.append(GeneratedFile(path=f"hooks/{entity.module}.py", content=content))
        logger.debug(f"    hooks/{entity.module}.py ({', '.join(entity.hooks.enabled)})")
    return files
