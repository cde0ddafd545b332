"""Manifest-level validation: mode, database, auth, defaults and the global source."""

from archetype_engine.kinds import (
    AUTH_PROVIDERS,
    BEHAVIOR_NAMES,
    KNOWN_CATEGORIES,
    SESSION_STRATEGIES,
    DatabaseKind,
    ModeKind,
    enum_values,
    normalize_mode,
)
from archetype_engine.validation.codes import ValidationCode
from archetype_engine.validation.result import issue
from archetype_engine.validation.source_validators import validate_source

MODES = enum_values(ModeKind)
DATABASE_TYPES = enum_values(DatabaseKind)


def validate_mode(manifest: dict):
    """Return (errors, warnings, resolved kind or None)."""
    value = manifest.get("mode")
    resolved = normalize_mode(value)
    if resolved is None:
        shown = value.get("type", value.get("kind")) if isinstance(value, dict) else value
        return [issue(
            ValidationCode.INVALID_MODE,
            "mode",
            f"Invalid mode {shown!r}",
            f"Use one of: {', '.join(MODES)}; include must be a list of category names",
        )], [], None

    kind, include = resolved
    warnings = []
    for category in include or ():
        if category not in KNOWN_CATEGORIES:
            warnings.append(issue(
                ValidationCode.UNKNOWN_MODE_CATEGORY,
                "mode.include",
                f"Unknown category '{category}' in mode include list",
                f"Known categories: {', '.join(KNOWN_CATEGORIES)}",
            ))
    return [], warnings, kind


def validate_database(manifest: dict, mode_kind) -> list:
    errors = []
    db = manifest.get("database")

    if mode_kind == ModeKind.FULL and db is None:
        errors.append(issue(
            ValidationCode.DATABASE_REQUIRED,
            "database",
            "Mode 'full' requires database configuration",
            "Add database config or use mode: 'headless'",
        ))
        return errors

    if db is None:
        return errors

    if not isinstance(db, dict):
        errors.append(issue(
            ValidationCode.INVALID_DATABASE_TYPE,
            "database",
            "Database configuration must be an object",
            f"Use {{ type: 'sqlite', file: './app.db' }}; valid types: {', '.join(DATABASE_TYPES)}",
        ))
        return errors

    db_type = db.get("type")
    if db_type not in DATABASE_TYPES:
        errors.append(issue(
            ValidationCode.INVALID_DATABASE_TYPE,
            "database.type",
            f"Invalid database type '{db_type}'",
            f"Use one of: {', '.join(DATABASE_TYPES)}",
        ))

    if db_type == DatabaseKind.SQLITE.value and not db.get("file"):
        errors.append(issue(
            ValidationCode.SQLITE_REQUIRES_FILE,
            "database.file",
            "SQLite database requires file path",
            "Add file: './sqlite.db' to database config",
        ))

    if db_type in (DatabaseKind.POSTGRES.value, DatabaseKind.MYSQL.value) and not db.get("url"):
        errors.append(issue(
            ValidationCode.POSTGRES_REQUIRES_URL,
            "database.url",
            f"{db_type} database requires connection URL",
            "Add url: 'env:DATABASE_URL' or a connection string",
        ))

    return errors


def validate_auth(manifest: dict) -> list:
    auth = manifest.get("auth")
    if auth is None:
        return []
    if not isinstance(auth, dict):
        return [issue(
            ValidationCode.INVALID_MANIFEST,
            "auth",
            "Auth configuration must be an object",
            "Use auth: { enabled: true }",
        )]

    errors = []
    if "enabled" in auth and not isinstance(auth["enabled"], bool):
        errors.append(issue(
            ValidationCode.INVALID_MANIFEST,
            "auth.enabled",
            "auth.enabled must be true or false",
        ))

    providers = auth.get("providers")
    if providers is not None:
        if not isinstance(providers, list):
            providers = [providers]
        for provider in providers:
            if provider not in AUTH_PROVIDERS:
                errors.append(issue(
                    ValidationCode.INVALID_PROVIDER,
                    "auth.providers",
                    f"Invalid auth provider '{provider}'",
                    f"Use one of: {', '.join(AUTH_PROVIDERS)}",
                ))

    strategy = auth.get("sessionStrategy")
    if strategy is not None and strategy not in SESSION_STRATEGIES:
        errors.append(issue(
            ValidationCode.INVALID_MANIFEST,
            "auth.sessionStrategy",
            f"Invalid session strategy '{strategy}'",
            f"Use one of: {', '.join(SESSION_STRATEGIES)}",
        ))

    return errors


def validate_defaults(manifest: dict) -> list:
    defaults = manifest.get("defaults")
    if defaults is None:
        return []
    if not isinstance(defaults, dict) or any(
        k not in BEHAVIOR_NAMES or not isinstance(v, bool) for k, v in defaults.items()
    ):
        return [issue(
            ValidationCode.INVALID_MANIFEST,
            "defaults",
            f"defaults must map {', '.join(BEHAVIOR_NAMES)} to true or false",
        )]
    return []


def validate_global_source(manifest: dict) -> list:
    if manifest.get("source") is None:
        return []
    return validate_source(manifest["source"], "source", owner="Global external source")


def is_auth_enabled(manifest: dict) -> bool:
    auth = manifest.get("auth")
    return isinstance(auth, dict) and auth.get("enabled") is True
