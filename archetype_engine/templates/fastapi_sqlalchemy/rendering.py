"""Jinja environment and type-mapping filters for the fastapi-sqlalchemy template."""

from jinja2 import Environment, PackageLoader, StrictUndefined

from archetype_engine.kinds import FieldKind


def _is_integer(field) -> bool:
    return field.kind is FieldKind.NUMBER and field.has_rule("integer")


def _sql_type(field, dialect: str = "sqlite") -> str:
    """Map a resolved field -> SQLAlchemy column type expression."""
    if field.kind is FieldKind.TEXT:
        if field.primary_key or field.is_foreign_key:
            return "String(36)"
        max_length = field.rule("maxLength")
        if max_length is not None:
            return f"String({max_length.value})"
        # MySQL VARCHAR needs a length
        return "String(255)" if dialect == "mysql" else "String"
    if field.kind is FieldKind.NUMBER:
        return "Integer" if _is_integer(field) else "Float"
    if field.kind is FieldKind.BOOLEAN:
        return "Boolean"
    return "DateTime(timezone=True)"


def _py_type(field) -> str:
    """Map a resolved field -> Python / Pydantic type hint."""
    if field.kind is FieldKind.TEXT:
        return "str"
    if field.kind is FieldKind.NUMBER:
        return "int" if _is_integer(field) else "float"
    if field.kind is FieldKind.BOOLEAN:
        return "bool"
    return "datetime"


def _json_type(field) -> dict:
    """Map a resolved field -> OpenAPI schema fragment."""
    if field.kind is FieldKind.TEXT:
        return {"type": "string"}
    if field.kind is FieldKind.NUMBER:
        return {"type": "integer" if _is_integer(field) else "number"}
    if field.kind is FieldKind.BOOLEAN:
        return {"type": "boolean"}
    return {"type": "string", "format": "date-time"}


def _py_literal(value) -> str:
    return repr(value)


env = Environment(
    loader=PackageLoader("archetype_engine.templates.fastapi_sqlalchemy", "jinja"),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
)

env.filters["sql_type"] = _sql_type
env.filters["py_type"] = _py_type
env.filters["py_literal"] = _py_literal


def render(template_name: str, **context) -> str:
    return env.get_template(template_name).render(**context)


sql_type = _sql_type
py_type = _py_type
json_type = _json_type
