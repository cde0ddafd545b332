"""
Pydantic schema generation (category: validation).

One module per entity under `schemas/` with Create, Update and Read models.
Field rules become Field() constraints; trim/lowercase/uppercase become
before-validators.
"""

from archetype_engine.gen_logging import get_logger
from archetype_engine.kinds import FieldKind
from archetype_engine.template.types import GeneratedFile
from archetype_engine.templates.fastapi_sqlalchemy.builders import HEADER, needs_datetime, schema_names
from archetype_engine.templates.fastapi_sqlalchemy.rendering import py_type, render

logger = get_logger(__name__)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
URL_PATTERN = r"^https?://\S+$"

_CONSTRAINTS = {
    "minLength": "min_length",
    "maxLength": "max_length",
    "min": "ge",
    "max": "le",
}
_TRANSFORMS = ("trim", "lowercase", "uppercase")


def _annotation(field) -> str:
    one_of = field.rule("oneOf")
    if one_of is not None:
        return f"Literal[{', '.join(repr(v) for v in one_of.value)}]"
    return py_type(field)


def _constraints(field) -> list:
    constraints = []
    for rule in field.rules:
        if rule.kind in _CONSTRAINTS:
            constraints.append(f"{_CONSTRAINTS[rule.kind]}={rule.value!r}")
        elif rule.kind == "positive":
            constraints.append("gt=0")

    if field.kind is FieldKind.TEXT:
        pattern = None
        if field.has_rule("regex"):
            pattern = field.rule("regex").value
        elif field.has_rule("email"):
            pattern = EMAIL_PATTERN
        elif field.has_rule("url"):
            pattern = URL_PATTERN
        if pattern is not None:
            constraints.append(f"pattern={pattern!r}")

    if field.label:
        constraints.append(f"title={field.label!r}")
    return constraints


def _field_config(field, optional: bool) -> dict:
    annotation = _annotation(field)
    if optional:
        annotation = f"Optional[{annotation}]"
    return {
        "name": field.name,
        "annotation": annotation,
        "constraints": _constraints(field),
        "default": repr(field.default) if field.default is not None else None,
        "optional": optional,
    }


def _create_fields(entity) -> list:
    configs = []
    for field in entity.writable_fields:
        optional = not field.required or field.default is not None
        configs.append(_field_config(field, optional))
    return configs


def _update_fields(entity) -> list:
    configs = []
    for field in entity.writable_fields:
        config = _field_config(field, optional=True)
        config["default"] = None
        configs.append(config)
    return configs


def _read_fields(entity) -> list:
    configs = []
    for field in entity.fields:
        config = _field_config(field, optional=field.nullable)
        # stored values were validated on the way in
        config["constraints"] = []
        config["default"] = None
        configs.append(config)
    return configs


def _transforms(entity) -> list:
    transforms = []
    for field in entity.writable_fields:
        for kind in _TRANSFORMS:
            if field.has_rule(kind):
                transforms.append({"field": field.name, "kind": kind})
    return transforms


def generate_schemas(ir, ctx) -> list:
    files = []
    for entity in ir.entities:
        names = schema_names(entity)
        content = render(
            "schema.py.jinja",
            header=HEADER,
            entity=entity.name,
            names=names,
            create_fields=_create_fields(entity),
            update_fields=_update_fields(entity),
            read_fields=_read_fields(entity),
            transforms=_transforms(entity),
            uses_datetime=needs_datetime(entity.fields),
            uses_literal=any(f.has_rule("oneOf") for f in entity.fields),
        )
        files.append(GeneratedFile(path=f"schemas/{entity.module}.py", content=content))
        logger.debug(f"    schemas/{entity.module}.py ({', '.join(names.values())})")
    return files
