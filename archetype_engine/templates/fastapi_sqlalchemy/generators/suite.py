"""
pytest suite generation (category: api).

Emits `tests/conftest.py` and one `tests/test_<entity>.py` per stored
entity. The suite drives the generated routers through FastAPI's
TestClient against a throwaway SQLite database (or a fresh in-memory
service in headless runs), so it exercises the same routers, services and
schemas the application ships.

Entities backed by an external source get no test module; their services
need a live upstream API.
"""

import math

from archetype_engine.gen_logging import get_logger
from archetype_engine.kinds import FieldKind
from archetype_engine.naming import to_snake_case
from archetype_engine.template.types import GeneratedFile
from archetype_engine.templates.fastapi_sqlalchemy.builders import (
    HEADER,
    OPERATIONS,
    module_path,
    service_class,
    storage_kind,
)
from archetype_engine.templates.fastapi_sqlalchemy.generators.services import external_config
from archetype_engine.templates.fastapi_sqlalchemy.rendering import render

logger = get_logger(__name__)

DATE_VALUE = "2024-01-01T00:00:00Z"


def _text_value(field, seed: str) -> str:
    one_of = field.rule("oneOf")
    if one_of is not None:
        values = list(one_of.value)
        return values[1] if seed != "test" and len(values) > 1 else values[0]
    if field.has_rule("email"):
        value = f"{seed}-{to_snake_case(field.name)}@example.com"
    elif field.has_rule("url"):
        value = f"https://example.com/{seed}"
    else:
        value = f"{seed}-{field.name}"
        min_length = field.rule("minLength")
        max_length = field.rule("maxLength")
        if min_length is not None and len(value) < min_length.value:
            value = value.ljust(min_length.value, "x")
        if max_length is not None and len(value) > max_length.value:
            value = value[:max_length.value]

    if field.has_rule("lowercase"):
        value = value.lower()
    elif field.has_rule("uppercase"):
        value = value.upper()
    return value


def _number_value(field, seed: str):
    value = 42 if seed == "test" else 7
    low = field.rule("min")
    high = field.rule("max")
    if low is not None and value < low.value:
        value = low.value
    if high is not None and value > high.value:
        value = high.value
    if field.has_rule("positive") and value <= 0:
        value = 1
    if field.has_rule("integer"):
        value = int(math.ceil(value))
    return value


def _value(field, seed: str = "test"):
    if field.kind is FieldKind.TEXT:
        return _text_value(field, seed)
    if field.kind is FieldKind.NUMBER:
        return _number_value(field, seed)
    if field.kind is FieldKind.BOOLEAN:
        return seed == "test"
    return DATE_VALUE


def _invalid_cases(field) -> list:
    """One (test suffix, value, reason) per rule the API must reject."""
    name = to_snake_case(field.name)
    if field.kind is FieldKind.TEXT:
        if field.has_rule("oneOf"):
            return [(f"invalid_{name}", "not-a-choice", f"{field.name} outside its allowed values")]
        if field.has_rule("email"):
            return [(f"invalid_{name}", "not-an-email", f"{field.name} is not an email address")]
        if field.has_rule("url"):
            return [(f"invalid_{name}", "not-a-url", f"{field.name} is not an http(s) URL")]
        cases = []
        min_length = field.rule("minLength")
        if min_length is not None and min_length.value > 0:
            cases.append((f"short_{name}", "", f"{field.name} shorter than {min_length.value}"))
        max_length = field.rule("maxLength")
        if max_length is not None:
            cases.append((
                f"long_{name}",
                "x" * (max_length.value + 1),
                f"{field.name} longer than {max_length.value}",
            ))
        return cases

    if field.kind is FieldKind.NUMBER:
        cases = []
        low = field.rule("min")
        high = field.rule("max")
        if low is not None:
            cases.append((f"low_{name}", low.value - 1, f"{field.name} below {low.value}"))
        if high is not None:
            cases.append((f"high_{name}", high.value + 1, f"{field.name} above {high.value}"))
        if field.has_rule("integer"):
            cases.append((f"fractional_{name}", 1.5, f"{field.name} is not an integer"))
        if field.has_rule("positive") and low is None:
            cases.append((f"negative_{name}", -1, f"{field.name} is not positive"))
        return cases
    return []


def _required(entity) -> list:
    return [f for f in entity.writable_fields if f.required and f.default is None]


def _update_payload(entity) -> dict:
    candidates = [
        f for f in entity.writable_fields
        if not f.is_foreign_key and f.kind is not FieldKind.DATE and not f.has_rule("regex")
    ]
    candidates.sort(key=lambda f: not (f.required and f.default is None))
    if not candidates:
        return {}
    field = candidates[0]
    return {field.name: _value(field, "updated")}


def _missing_id(entity):
    return "missing" if entity.primary_key.kind is FieldKind.TEXT else 999999


def _entity_suite(entity) -> dict:
    required = _required(entity)
    payload = [(f.name, _value(f)) for f in required]
    protected = [op for op in OPERATIONS if entity.protected.requires_auth(op)]
    skip_reason = None
    patterned = [f.name for f in required if f.has_rule("regex")]
    if patterned:
        skip_reason = f"needs a hand-written value matching the pattern of {', '.join(patterned)}"

    return {
        "header": HEADER,
        "entity": entity.name,
        "route": entity.route,
        "plural": entity.table,
        "singular": entity.module,
        "pk": entity.primary_key.name,
        "payload": payload,
        "update_payload": _update_payload(entity),
        "compared": [f.name for f in required if f.kind is not FieldKind.DATE],
        "timestamps": [name for name in ("createdAt", "updatedAt") if entity.field(name) is not None],
        "required": [f.name for f in required],
        "invalid": [
            {"field": f.name, "test": test, "value": value, "reason": reason}
            for f in required
            for test, value, reason in _invalid_cases(f)
        ],
        "missing_id": _missing_id(entity),
        "protected": protected,
        "fixture": "auth_client" if protected else "client",
        "skip_reason": skip_reason,
    }


def _conftest(ir, ctx, entities) -> GeneratedFile:
    stored = [e for e in entities if storage_kind(ir, e) == "database"]
    memory = [e for e in entities if storage_kind(ir, e) == "memory"]

    env = {}
    database = ctx.database
    if stored and database is not None and database.url_env:
        env[database.url_env] = "sqlite://"
    for entity in ir.external_entities:
        config = external_config(entity, ctx.naming)
        if config["base_url_default"] is None:
            env[config["base_url_env"]] = "http://localhost"

    content = render(
        "tests_conftest.py.jinja",
        header=HEADER,
        env=env,
        main_module=f"{ctx.package}.main",
        database=bool(stored),
        models_module=ctx.resolve_path("@models"),
        session_module=ctx.resolve_path("@database"),
        auth_module=ctx.resolve_path("@auth"),
        routers_module=ctx.resolve_path("@routers"),
        memory=[
            {
                "module": e.module,
                "service": service_class(e),
                "service_module": module_path(ctx, "@services", e.module),
            }
            for e in memory
        ],
        any_protected=any(e.protected.any for e in entities),
    )
    return GeneratedFile(path="tests/conftest.py", content=content)


def generate_test_suite(ir, ctx) -> list:
    entities = [e for e in ir.entities if not e.is_external]
    if not entities:
        logger.debug("    no stored entities, skipping test suite")
        return []

    files = [_conftest(ir, ctx, entities)]
    for entity in entities:
        context = _entity_suite(entity)
        files.append(GeneratedFile(
            path=f"tests/test_{entity.module}.py",
            content=render("tests_entity.py.jinja", **context),
        ))
        logger.debug(f"    tests/test_{entity.module}.py ({len(context['invalid'])} rejection cases)")
    return files
