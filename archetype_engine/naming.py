"""
Naming derivation shared by the compiler and every generator.

All identifiers that appear in more than one artifact (table names, column
names, relation accessors, foreign keys, join tables) come from a single
`Naming` instance so the storage schema, the API layer and the client never
disagree. The irregular-plural table is an explicit `NamingConfig` value, not
module state, so callers and tests can substitute their own.
"""

import re
from functools import lru_cache
from typing import Mapping, Tuple

from pydantic import BaseModel, ConfigDict


DEFAULT_IRREGULARS: Tuple[Tuple[str, str], ...] = (
    ("person", "people"),
    ("child", "children"),
    ("man", "men"),
    ("woman", "women"),
    ("mouse", "mice"),
    ("goose", "geese"),
    ("foot", "feet"),
    ("tooth", "teeth"),
    ("ox", "oxen"),
    ("leaf", "leaves"),
    ("life", "lives"),
    ("knife", "knives"),
    ("wife", "wives"),
    ("half", "halves"),
    ("criterion", "criteria"),
    ("datum", "data"),
    ("index", "indices"),
    ("matrix", "matrices"),
    ("vertex", "vertices"),
    ("analysis", "analyses"),
    ("quiz", "quizzes"),
    # singulars that end in "s"
    ("alias", "aliases"),
    ("atlas", "atlases"),
    ("bias", "biases"),
    ("canvas", "canvases"),
    ("gas", "gases"),
    ("lens", "lenses"),
)

DEFAULT_UNCOUNTABLES: Tuple[str, ...] = (
    "equipment",
    "information",
    "metadata",
    "feedback",
    "money",
    "news",
    "series",
    "species",
    "sheep",
    "fish",
    "deer",
)


class NamingConfig(BaseModel):
    """Pluralization tables used by a Naming instance."""

    model_config = ConfigDict(frozen=True)

    irregulars: Tuple[Tuple[str, str], ...] = DEFAULT_IRREGULARS
    uncountables: Tuple[str, ...] = DEFAULT_UNCOUNTABLES

    def with_irregulars(self, extra: Mapping[str, str]) -> "NamingConfig":
        """Return a copy with `extra` singular->plural pairs added (overriding existing ones)."""
        merged = dict(self.irregulars)
        merged.update({k.lower(): v.lower() for k, v in extra.items()})
        return self.model_copy(update={"irregulars": tuple(merged.items())})


DEFAULT_NAMING = NamingConfig()


# ------------------------------------------------------------------------------
# Case helpers

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATORS = re.compile(r"[\s_\-]+")
_LAST_WORD = re.compile(r"^(.*?)([A-Z]?[^A-Z]*)$")


def _split_words(value: str) -> list[str]:
    return [w for w in _SEPARATORS.split(value.strip()) if w]


def to_snake_case(value: str) -> str:
    """'OrderItem' -> 'order_item', 'HTTPRequest' -> 'http_request'."""
    s = _ACRONYM_BOUNDARY.sub(r"\1_\2", value.strip())
    s = _WORD_BOUNDARY.sub(r"\1_\2", s)
    s = _SEPARATORS.sub("_", s)
    return s.lower().strip("_")


def to_camel_case(value: str) -> str:
    """'first_name' -> 'firstName', 'Email' -> 'email', 'UserProfile' -> 'userProfile'."""
    words = _split_words(value)
    if not words:
        return ""
    if len(words) == 1:
        word = words[0]
        return word[:1].lower() + word[1:]
    head, *rest = words
    return head.lower() + "".join(w[:1].upper() + w[1:].lower() for w in rest)


def to_pascal_case(value: str) -> str:
    """'user' -> 'User', 'user_profile' -> 'UserProfile', 'blogPost' -> 'BlogPost'."""
    return "".join(w[:1].upper() + w[1:] for w in _split_words(value))


def is_pascal_case(value) -> bool:
    return isinstance(value, str) and re.fullmatch(r"[A-Z][a-zA-Z0-9]*", value) is not None


def is_camel_case(value) -> bool:
    return isinstance(value, str) and re.fullmatch(r"[a-z][a-zA-Z0-9]*", value) is not None


def _match_case(original: str, derived: str) -> str:
    if original.isupper() and len(original) > 1:
        return derived.upper()
    if original[:1].isupper():
        return derived[:1].upper() + derived[1:]
    return derived


# ------------------------------------------------------------------------------
# Pluralization

class Pluralizer:
    """Regular English plural rules plus the irregular and uncountable tables of a NamingConfig."""

    def __init__(self, config: NamingConfig = DEFAULT_NAMING):
        self._irregular = {s.lower(): p.lower() for s, p in config.irregulars}
        self._irregular_plurals = frozenset(self._irregular.values())
        self._uncountable = frozenset(w.lower() for w in config.uncountables)

    def is_plural(self, word: str) -> bool:
        lower = word.lower()
        if lower in self._uncountable or lower in self._irregular_plurals:
            return True
        if lower in self._irregular:
            return False
        return lower.endswith("s") and not lower.endswith(("ss", "us", "is"))

    def pluralize(self, word: str) -> str:
        if not word:
            return word
        lower = word.lower()
        if lower in self._uncountable or self.is_plural(word):
            return word
        if lower in self._irregular:
            return _match_case(word, self._irregular[lower])
        if lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
            return word[:-1] + ("IES" if word.isupper() else "ies")
        if lower.endswith(("s", "x", "z", "ch", "sh")):
            return word + ("ES" if word.isupper() else "es")
        return word + ("S" if word.isupper() and len(word) > 1 else "s")


# ------------------------------------------------------------------------------
# Naming deriver

class Naming:
    """
    Single source of truth for derived identifiers.

    Example:
        >>> naming = Naming()
        >>> naming.table_name("Category")
        'categories'
        >>> naming.accessor_name("bestFriend", many=True)
        'bestFriends'
    """

    def __init__(self, config: NamingConfig = DEFAULT_NAMING):
        self.config = config
        self.pluralizer = Pluralizer(config)

    to_snake_case = staticmethod(to_snake_case)
    to_camel_case = staticmethod(to_camel_case)
    to_pascal_case = staticmethod(to_pascal_case)

    def pluralize(self, word: str) -> str:
        return self.pluralizer.pluralize(word)

    def pluralize_identifier(self, identifier: str) -> str:
        """Pluralize only the last word of a camelCase, PascalCase or snake_case identifier."""
        if "_" in identifier:
            head, _, tail = identifier.rpartition("_")
            return f"{head}_{self.pluralize(tail)}"
        head, tail = _LAST_WORD.match(identifier).groups()
        if not tail:
            return self.pluralize(identifier)
        return head + self.pluralize(tail)

    def table_name(self, entity_name: str) -> str:
        """'User' -> 'users', 'OrderItem' -> 'order_items'."""
        return self.pluralize_identifier(to_snake_case(entity_name))

    def column_name(self, field_name: str) -> str:
        """'firstName' -> 'first_name'."""
        return to_snake_case(field_name)

    def accessor_name(self, relation_name: str, many: bool) -> str:
        accessor = to_camel_case(relation_name)
        return self.pluralize_identifier(accessor) if many else accessor

    def foreign_key_name(self, name: str) -> str:
        """'author' -> 'authorId', 'OrderItem' -> 'orderItemId'."""
        return f"{to_camel_case(name)}Id"

    def module_name(self, entity_name: str) -> str:
        """File/module stem used by generators for per-entity artifacts."""
        return to_snake_case(entity_name)

    def route_path(self, entity_name: str) -> str:
        """URL collection segment: 'OrderItem' -> 'order-items'."""
        return self.table_name(entity_name).replace("_", "-")

    def join_entity_name(self, left: str, right: str) -> str:
        first, second = sorted((left, right))
        return f"{first}{second}"

    def join_table_name(self, left: str, right: str) -> str:
        first, second = sorted((left, right))
        return f"{to_snake_case(first)}_{to_snake_case(second)}"


@lru_cache(maxsize=None)
def naming_for(config: NamingConfig = DEFAULT_NAMING) -> Naming:
    """Return the shared Naming instance for a config; the compiler and every generator context use it."""
    return Naming(config)
