"""
Auth dependency generation (category: api).

Always emits `api/auth.py` so routers can depend on `require_user`
unconditionally: a JWT or session-token verifier when auth is enabled, an
anonymous pass-through otherwise.
"""

from archetype_engine.gen_logging import get_logger
from archetype_engine.template.types import GeneratedFile
from archetype_engine.templates.fastapi_sqlalchemy.builders import HEADER
from archetype_engine.templates.fastapi_sqlalchemy.rendering import render

logger = get_logger(__name__)

_TEMPLATES = {
    "jwt": "auth_jwt.py.jinja",
    "database": "auth_session.py.jinja",
}


def _protected_operations(ir) -> list:
    return [
        f"{entity.name}.{op}"
        for entity in ir.entities
        for op in ("list", "get", "create", "update", "remove")
        if entity.protected.requires_auth(op)
    ]


def generate_auth(ir, ctx) -> GeneratedFile:
    """Generate api/auth.py for the configured session strategy."""
    auth = ir.auth
    if not auth.enabled:
        logger.debug("    auth disabled, emitting anonymous dependency")
        template_name = "auth_anonymous.py.jinja"
    else:
        template_name = _TEMPLATES[auth.session_strategy]
        logger.debug(f"    auth strategy: {auth.session_strategy}")

    content = render(
        template_name,
        header=HEADER,
        providers=list(auth.providers),
        protected=_protected_operations(ir),
    )
    return GeneratedFile(path="api/auth.py", content=content)
