"""External-source validation (entity-level and manifest-level `source` blocks)."""

import re

from archetype_engine.kinds import SOURCE_AUTH_TYPES, SOURCE_OPERATIONS
from archetype_engine.validation.codes import ValidationCode
from archetype_engine.validation.result import issue

_OVERRIDE_PATTERN = re.compile(r"^(GET|POST|PUT|PATCH|DELETE) /\S*$")


def validate_source(source, path: str, owner: str = "External source") -> list:
    """Check an external source block; `path` points at the block itself."""
    if not isinstance(source, dict):
        return [issue(
            ValidationCode.EXTERNAL_SOURCE_INVALID,
            path,
            f"{owner} must be an object with a baseUrl",
            "Use { baseUrl: 'env:API_URL' } or remove the source",
        )]

    errors = []
    base_url = source.get("baseUrl")
    if not isinstance(base_url, str) or not base_url.strip():
        errors.append(issue(
            ValidationCode.EXTERNAL_SOURCE_INVALID,
            f"{path}.baseUrl",
            f"{owner} requires baseUrl",
            "Add baseUrl to source, e.g. 'env:API_URL' or 'https://api.example.com'",
        ))

    for key in ("pathPrefix", "resourceName"):
        if key in source and not isinstance(source[key], str):
            errors.append(issue(
                ValidationCode.EXTERNAL_SOURCE_INVALID,
                f"{path}.{key}",
                f"Source {key} must be a string",
            ))

    auth = source.get("auth")
    if auth is not None:
        auth_type = auth.get("type") if isinstance(auth, dict) else None
        if auth_type not in SOURCE_AUTH_TYPES:
            errors.append(issue(
                ValidationCode.EXTERNAL_SOURCE_INVALID,
                f"{path}.auth.type",
                f"Invalid source auth type '{auth_type}'",
                f"Use one of: {', '.join(SOURCE_AUTH_TYPES)}",
            ))

    override = source.get("override")
    if override is not None:
        if not isinstance(override, dict):
            errors.append(issue(
                ValidationCode.EXTERNAL_SOURCE_INVALID,
                f"{path}.override",
                "Source override must be an object keyed by operation",
                f"Use keys from: {', '.join(SOURCE_OPERATIONS)}",
            ))
        else:
            for op, endpoint in override.items():
                if op not in SOURCE_OPERATIONS:
                    errors.append(issue(
                        ValidationCode.EXTERNAL_SOURCE_INVALID,
                        f"{path}.override.{op}",
                        f"Unknown source operation '{op}'",
                        f"Use one of: {', '.join(SOURCE_OPERATIONS)}",
                    ))
                elif not isinstance(endpoint, str) or not _OVERRIDE_PATTERN.match(endpoint):
                    errors.append(issue(
                        ValidationCode.EXTERNAL_SOURCE_INVALID,
                        f"{path}.override.{op}",
                        f"Invalid endpoint override '{endpoint}'",
                        "Use the form 'METHOD /path', e.g. 'GET /items/:id'",
                    ))

    return errors
