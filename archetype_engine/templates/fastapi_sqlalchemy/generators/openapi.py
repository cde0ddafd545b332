"""
OpenAPI specification generator (category: api).

Generates a static openapi.yaml documenting every entity's CRUD operations,
Create/Update/Read schemas and, when auth is enabled, the bearer security
scheme on protected operations.
"""

from typing import Any, Dict

import yaml

from archetype_engine.kinds import CRUD_OPERATIONS
from archetype_engine.template.types import GeneratedFile
from archetype_engine.templates.fastapi_sqlalchemy.builders import OPERATIONS, schema_names
from archetype_engine.templates.fastapi_sqlalchemy.generators.schemas import EMAIL_PATTERN, URL_PATTERN
from archetype_engine.templates.fastapi_sqlalchemy.rendering import json_type

_RULE_KEYWORDS = {
    "minLength": "minLength",
    "maxLength": "maxLength",
    "min": "minimum",
    "max": "maximum",
}


def _property(field) -> Dict[str, Any]:
    prop = json_type(field)
    for rule in field.rules:
        if rule.kind in _RULE_KEYWORDS:
            prop[_RULE_KEYWORDS[rule.kind]] = rule.value
        elif rule.kind == "positive":
            prop["exclusiveMinimum"] = 0
        elif rule.kind == "oneOf":
            prop["enum"] = list(rule.value)
        elif rule.kind == "regex":
            prop["pattern"] = rule.value
        elif rule.kind == "email":
            prop.setdefault("pattern", EMAIL_PATTERN)
        elif rule.kind == "url":
            prop.setdefault("pattern", URL_PATTERN)
    if field.default is not None:
        prop["default"] = field.default
    if field.nullable:
        prop["nullable"] = True
    if field.label:
        prop["title"] = field.label
    return prop


def _object_schema(fields, required_names, description: str) -> Dict[str, Any]:
    schema = {
        "type": "object",
        "description": description,
        "properties": {f.name: _property(f) for f in fields},
        "required": list(required_names),
    }
    if not schema["required"]:
        del schema["required"]
    return schema


def _entity_schemas(entity) -> Dict[str, Any]:
    names = schema_names(entity)
    writable = entity.writable_fields
    return {
        names["read"]: _object_schema(
            entity.fields,
            [f.name for f in entity.fields if f.required],
            f"{entity.name} as returned by the API",
        ),
        names["create"]: _object_schema(
            writable,
            [f.name for f in writable if f.required and f.default is None],
            f"Create schema for {entity.name}",
        ),
        names["update"]: _object_schema(writable, [], f"Update schema for {entity.name} (partial)"),
    }


def _ref(name: str) -> Dict[str, str]:
    return {"$ref": f"#/components/schemas/{name}"}


def _operation_spec(entity, operation: str, auth_enabled: bool) -> Dict[str, Any]:
    names = schema_names(entity)
    _, item, status = OPERATIONS[operation]

    spec = {
        "summary": f"{operation.capitalize()} {entity.name}",
        "operationId": f"{operation}_{entity.module}",
        "tags": [entity.name],
        "responses": {},
    }

    if item:
        spec["parameters"] = [{
            "name": "record_id",
            "in": "path",
            "required": True,
            "schema": json_type(entity.primary_key),
            "description": f"The {entity.primary_key.name} of the {entity.name}",
        }]
    elif operation == "list":
        spec["parameters"] = [
            {"name": "skip", "in": "query", "required": False, "schema": {"type": "integer", "default": 0}},
            {"name": "limit", "in": "query", "required": False, "schema": {"type": "integer", "default": 100}},
        ]

    if operation in ("create", "update"):
        spec["requestBody"] = {
            "required": True,
            "content": {"application/json": {"schema": _ref(names[operation])}},
        }

    if operation == "remove":
        spec["responses"][str(status)] = {"description": f"{entity.name} removed"}
    elif operation == "list":
        spec["responses"][str(status)] = {
            "description": f"List of {entity.name} records",
            "content": {"application/json": {"schema": {"type": "array", "items": _ref(names["read"])}}},
        }
    else:
        spec["responses"][str(status)] = {
            "description": f"{entity.name} record",
            "content": {"application/json": {"schema": _ref(names["read"])}},
        }

    if item:
        spec["responses"]["404"] = {"description": f"{entity.name} not found"}
    if operation in ("create", "update"):
        spec["responses"]["422"] = {"description": "Validation error"}

    if auth_enabled and entity.protected.requires_auth(operation):
        spec["security"] = [{"bearerAuth": []}]
        spec["responses"]["401"] = {"description": "Authentication required"}
    return spec


def build_openapi_spec(ir) -> Dict[str, Any]:
    spec = {
        "openapi": "3.0.3",
        "info": {
            "title": "Archetype API",
            "version": "1.0.0",
            "description": "Generated from an archetype manifest",
        },
        "servers": [{"url": "http://localhost:8000", "description": "Development server"}],
        "paths": {},
        "components": {"schemas": {}},
    }

    for entity in ir.entities:
        spec["components"]["schemas"].update(_entity_schemas(entity))
        for operation in CRUD_OPERATIONS:
            method, item, _ = OPERATIONS[operation]
            path = f"/{entity.route}/{{record_id}}" if item else f"/{entity.route}"
            spec["paths"].setdefault(path, {})[method.lower()] = _operation_spec(entity, operation, ir.auth.enabled)

    if ir.auth.enabled:
        spec["components"]["securitySchemes"] = {
            "bearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"},
        }
    return spec


def generate_openapi(ir, ctx) -> GeneratedFile:
    content = yaml.dump(build_openapi_spec(ir), sort_keys=False, default_flow_style=False, allow_unicode=True)
    return GeneratedFile(path="openapi.yaml", content=content)
