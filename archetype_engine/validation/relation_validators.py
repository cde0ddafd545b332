"""
Cross-entity relation checks.

`find_mutual_relations` is shared with the relation resolver so the warning the
validator reports and the decision the compiler takes are the same.
"""

from typing import NamedTuple

from archetype_engine.kinds import RelationKind
from archetype_engine.validation.codes import ValidationCode
from archetype_engine.validation.result import issue


class RelationDecl(NamedTuple):
    entity: str
    name: str
    kind: str
    target: str


class MutualRelation(NamedTuple):
    first: RelationDecl
    second: RelationDecl


def iter_relation_decls(entities: list):
    """Yield well-formed relation declarations in declaration order."""
    for entity in entities:
        if not isinstance(entity, dict) or not isinstance(entity.get("name"), str):
            continue
        relations = entity.get("relations")
        if not isinstance(relations, dict):
            continue
        for relation_name, relation in relations.items():
            if not isinstance(relation, dict):
                continue
            kind, target = relation.get("type"), relation.get("entity")
            if isinstance(kind, str) and isinstance(target, str):
                yield RelationDecl(entity["name"], relation_name, kind, target)


def find_mutual_relations(entities: list) -> list:
    """
    Pair up declarations where two different entities point at each other with
    the same single-sided kind (hasOne/hasOne or hasMany/hasMany). Both would
    put a key on the other side; the first declared one wins.

    A hasMany answered by a hasOne is the normal one-to-many shape and is not
    reported.
    """
    single_sided = (RelationKind.HAS_ONE.value, RelationKind.HAS_MANY.value)
    decls = [d for d in iter_relation_decls(entities) if d.kind in single_sided and d.entity != d.target]

    pairs = []
    paired = set()
    for i, first in enumerate(decls):
        if first in paired:
            continue
        for second in decls[i + 1:]:
            if second in paired:
                continue
            if (second.entity == first.target and second.target == first.entity
                    and second.kind == first.kind):
                pairs.append(MutualRelation(first, second))
                paired.update((first, second))
                break
    return pairs


def validate_mutual_relations(entities: list) -> list:
    warnings = []
    for first, second in find_mutual_relations(entities):
        if first.kind == RelationKind.HAS_MANY.value:
            suggestion = f"Use belongsToMany on one side if '{first.entity}' and '{second.entity}' are many-to-many"
        else:
            suggestion = f"Keep the relation on one side only, e.g. remove '{second.entity}.relations.{second.name}'"
        warnings.append(issue(
            ValidationCode.BIDIRECTIONAL_RELATION,
            f"{second.entity}.relations.{second.name}",
            f"'{first.entity}.{first.name}' and '{second.entity}.{second.name}' are both {first.kind} "
            f"relations to each other; '{first.entity}.{first.name}' was declared first and owns the key",
            suggestion,
        ))
    return warnings
