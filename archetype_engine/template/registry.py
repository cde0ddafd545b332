"""
Template registry.

Templates are discovered by id without importing their generators: the
registry holds metadata plus a loader, and a template module is only imported
the first time `get_template` asks for it.
"""

import importlib
from dataclasses import dataclass
from typing import Callable, Dict

from archetype_engine.config import get_settings
from archetype_engine.errors import TemplateNotFoundError
from archetype_engine.gen_logging import get_logger
from archetype_engine.template.types import Template, TemplateMetadata

logger = get_logger(__name__)


@dataclass(frozen=True)
class _Entry:
    metadata: TemplateMetadata
    loader: Callable[[], Template]


def _module_loader(module_path: str, attribute: str = "TEMPLATE") -> Callable[[], Template]:
    def load() -> Template:
        module = importlib.import_module(module_path)
        return getattr(module, attribute)
    return load


_BUILTIN_TEMPLATES = (
    (
        TemplateMetadata(
            id="fastapi-sqlalchemy",
            name="FastAPI + SQLAlchemy",
            description="SQLAlchemy models, Pydantic schemas, services, FastAPI routers and an httpx client",
            framework="fastapi",
            stack={"orm": "sqlalchemy", "validation": "pydantic", "api": "fastapi", "client": "httpx"},
        ),
        "archetype_engine.templates.fastapi_sqlalchemy",
    ),
)

_registry: Dict[str, _Entry] = {
    metadata.id: _Entry(metadata, _module_loader(module_path))
    for metadata, module_path in _BUILTIN_TEMPLATES
}
_loaded: Dict[str, Template] = {}


def list_templates() -> list:
    """Metadata of every registered template, sorted by id."""
    return [_registry[tid].metadata for tid in sorted(_registry)]


def has_template(template_id: str) -> bool:
    return template_id in _registry


def register_template(metadata: TemplateMetadata, loader) -> None:
    """
    Register a template under `metadata.id`.

    `loader` is either a Template instance or a zero-argument callable that
    returns one; re-registering an id replaces the previous entry.
    """
    if isinstance(loader, Template):
        template = loader
        loader = lambda: template  # noqa: E731
    _registry[metadata.id] = _Entry(metadata, loader)
    _loaded.pop(metadata.id, None)
    logger.debug(f"  Registered template '{metadata.id}'")


def unregister_template(template_id: str) -> None:
    _registry.pop(template_id, None)
    _loaded.pop(template_id, None)


def get_template(template_id: str) -> Template:
    if template_id not in _registry:
        raise TemplateNotFoundError(template_id, available=sorted(_registry))
    if template_id not in _loaded:
        logger.debug(f"  Loading template '{template_id}'")
        _loaded[template_id] = _registry[template_id].loader()
    return _loaded[template_id]


def get_default_template_id() -> str:
    return get_settings().DEFAULT_TEMPLATE
