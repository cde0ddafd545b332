"""
Intermediate representation: immutable models, relation resolution, mode
resolution and the compiler that produces a ManifestIR from a descriptor.
"""

from archetype_engine.ir.compiler import compile_manifest
from archetype_engine.ir.mode import ResolvedMode, is_category_allowed, resolve_mode
from archetype_engine.ir.models import (
    AuthInfo,
    Behaviors,
    DatabaseInfo,
    ExternalSource,
    FieldOrigin,
    FieldReference,
    FieldRule,
    HooksPolicy,
    JoinEntity,
    ManifestIR,
    ProtectedPolicy,
    ResolvedEntity,
    ResolvedField,
    ResolvedRelation,
)

__all__ = [
    "compile_manifest",
    "resolve_mode",
    "is_category_allowed",
    "ResolvedMode",
    "AuthInfo",
    "Behaviors",
    "DatabaseInfo",
    "ExternalSource",
    "FieldOrigin",
    "FieldReference",
    "FieldRule",
    "HooksPolicy",
    "JoinEntity",
    "ManifestIR",
    "ProtectedPolicy",
    "ResolvedEntity",
    "ResolvedField",
    "ResolvedRelation",
]
