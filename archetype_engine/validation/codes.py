"""
Stable validation codes.

The set only ever grows: automated callers branch on these values, so existing
codes are never renamed or removed.
"""

from enum import Enum


class ValidationCode(str, Enum):
    # Entity errors
    INVALID_ENTITY_NAME = "INVALID_ENTITY_NAME"
    DUPLICATE_ENTITY = "DUPLICATE_ENTITY"
    MISSING_ENTITY_FIELDS = "MISSING_ENTITY_FIELDS"

    # Field errors
    INVALID_FIELD_TYPE = "INVALID_FIELD_TYPE"
    INVALID_FIELD_NAME = "INVALID_FIELD_NAME"

    # Relation errors
    RELATION_TARGET_NOT_FOUND = "RELATION_TARGET_NOT_FOUND"
    INVALID_RELATION_TYPE = "INVALID_RELATION_TYPE"

    # Database errors
    DATABASE_REQUIRED = "DATABASE_REQUIRED"
    INVALID_DATABASE_TYPE = "INVALID_DATABASE_TYPE"
    SQLITE_REQUIRES_FILE = "SQLITE_REQUIRES_FILE"
    POSTGRES_REQUIRES_URL = "POSTGRES_REQUIRES_URL"

    # Auth errors
    AUTH_REQUIRED_FOR_PROTECTED = "AUTH_REQUIRED_FOR_PROTECTED"
    INVALID_PROVIDER = "INVALID_PROVIDER"

    # Mode errors
    INVALID_MODE = "INVALID_MODE"

    # Protected errors
    INVALID_PROTECTED_VALUE = "INVALID_PROTECTED_VALUE"

    # Source errors
    EXTERNAL_SOURCE_INVALID = "EXTERNAL_SOURCE_INVALID"

    # Shape and modifier errors
    INVALID_MANIFEST = "INVALID_MANIFEST"
    INVALID_FIELD_MODIFIER = "INVALID_FIELD_MODIFIER"

    # Warnings
    BIDIRECTIONAL_RELATION = "BIDIRECTIONAL_RELATION"
    UNKNOWN_MODE_CATEGORY = "UNKNOWN_MODE_CATEGORY"
