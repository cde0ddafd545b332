"""
Generation mode resolution and the category filter used by the runner.

    full      -> every category runs, database required
    headless  -> the storage-schema category never runs; an include list
                 restricts the remaining categories
    api-only  -> fixed category set {schema, validation, api, services}

A generator without a category, or with a category the mode has no mapping
for, is included. This fail-open rule keeps newly added generator categories
visible under restrictive modes; see DESIGN.md.
"""

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from archetype_engine.kinds import API_ONLY_CATEGORIES, CATEGORY_SCHEMA, KNOWN_CATEGORIES, ModeKind, normalize_mode


class ResolvedMode(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: ModeKind = ModeKind.FULL
    include: Optional[Tuple[str, ...]] = None

    @property
    def requires_database(self) -> bool:
        return self.kind == ModeKind.FULL

    def allows(self, category: Optional[str]) -> bool:
        return is_category_allowed(self, category)


def resolve_mode(value) -> ResolvedMode:
    """Resolve a validated mode value ("headless" or {type, include}) into a ResolvedMode."""
    resolved = normalize_mode(value)
    if resolved is None:
        raise ValueError(f"Unresolvable mode {value!r}; validate the manifest first")
    kind, include = resolved
    return ResolvedMode(kind=kind, include=include)


def is_category_allowed(mode: ResolvedMode, category: Optional[str]) -> bool:
    if mode.kind == ModeKind.FULL:
        return True

    if mode.kind == ModeKind.HEADLESS:
        if category == CATEGORY_SCHEMA:
            return False
        if category is None or category not in KNOWN_CATEGORIES:
            return True
        if mode.include is None:
            return True
        return category in mode.include

    if mode.kind == ModeKind.API_ONLY:
        if category is None or category not in KNOWN_CATEGORIES:
            return True
        return category in API_ONLY_CATEGORIES

    return True
