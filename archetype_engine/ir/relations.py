"""
Relation resolution.

Turns relation declarations into concrete keys:

- hasOne(target): key field on the declaring entity referencing target's
  primary key; required unless the relation is optional.
- hasMany(target): no field on the declaring entity. The key lives on the
  target; if the target declares a hasOne back, that key is reused, otherwise
  one is synthesized on the target.
- belongsToMany(target): exactly one JoinEntity per pair of entities, named
  and keyed in alphabetical order so declaration order never changes its shape.

Mutual declarations of the same single-sided kind are resolved first-declared
wins: the second declaration reuses the first one's key instead of injecting
its own (the validator reports them as BIDIRECTIONAL_RELATION warnings).
"""

from dataclasses import dataclass, field
from typing import Optional

from archetype_engine.gen_logging import get_logger
from archetype_engine.ir.models import (
    FieldOrigin,
    FieldReference,
    JoinEntity,
    ResolvedField,
    ResolvedRelation,
)
from archetype_engine.kinds import RelationKind
from archetype_engine.naming import Naming, to_pascal_case
from archetype_engine.validation import ValidationCode, find_mutual_relations
from archetype_engine.validation.result import issue

logger = get_logger(__name__)


@dataclass
class EntityDraft:
    """Mutable working copy of an entity while relations are being resolved."""

    name: str
    table: str
    descriptor: dict
    primary_key: ResolvedField
    declared: list = field(default_factory=list)
    injected: list = field(default_factory=list)
    relations: list = field(default_factory=list)

    def find_field(self, name: str) -> Optional[ResolvedField]:
        if self.primary_key.name == name:
            return self.primary_key
        for f in self.declared + self.injected:
            if f.name == name:
                return f
        return None

    def relation_descriptors(self):
        return list((self.descriptor.get("relations") or {}).items())


@dataclass
class _JoinDraft:
    name: str
    table: str
    left: str
    right: str
    left_key: ResolvedField
    right_key: ResolvedField
    self_referential: bool
    pivot_fields: tuple = ()
    pivot_owner: Optional[str] = None


@dataclass
class RelationResolution:
    join_entities: list
    warnings: list


class RelationResolver:
    """
    Resolve relations of all drafts in declaration order.

    `field_resolver(name, descriptor)` builds ResolvedFields for pivot fields, so
    pivot columns get exactly the same treatment as entity fields.
    """

    def __init__(self, naming: Naming, drafts: list, field_resolver):
        self.naming = naming
        self.drafts = drafts
        self.by_name = {d.name: d for d in drafts}
        self.field_resolver = field_resolver
        self._resolved = {}
        self._joins = {}
        self._warnings = []

    # ------------------------------------------------------------------
    # Public

    def resolve(self) -> RelationResolution:
        raw_entities = [d.descriptor for d in self.drafts]
        inverse_of = {
            (pair.second.entity, pair.second.name): (pair.first.entity, pair.first.name)
            for pair in find_mutual_relations(raw_entities)
        }

        for draft in self.drafts:
            for relation_name, descriptor in draft.relation_descriptors():
                key = (draft.name, relation_name)
                if key in inverse_of:
                    relation = self._resolve_inverse(draft, relation_name, descriptor, inverse_of[key])
                else:
                    relation = self._resolve(draft, relation_name, descriptor)
                self._resolved[key] = relation
                draft.relations.append(relation)

        joins = [self._freeze_join(j) for j in self._joins.values()]
        return RelationResolution(join_entities=joins, warnings=self._warnings)

    # ------------------------------------------------------------------
    # Helpers

    def _reference_to(self, target: EntityDraft) -> FieldReference:
        pk = target.primary_key
        return FieldReference(entity=target.name, field=pk.name, table=target.table, column=pk.column)

    def _ensure_key(self, owner: EntityDraft, key_name: str, target: EntityDraft, required: bool) -> None:
        """Attach a reference to an existing field of that name, or inject a new key field."""
        reference = self._reference_to(target)
        for bucket in (owner.declared, owner.injected):
            for index, existing in enumerate(bucket):
                if existing.name != key_name:
                    continue
                if existing.references is None:
                    bucket[index] = existing.model_copy(update={"references": reference})
                return
        owner.injected.append(ResolvedField(
            name=key_name,
            kind=target.primary_key.kind,
            column=self.naming.column_name(key_name),
            required=required,
            origin=FieldOrigin.FOREIGN_KEY,
            references=reference,
        ))
        logger.debug(f"    injected key {owner.name}.{key_name} -> {target.name}")

    def _has_one_key(self, relation_name: str, descriptor: dict) -> str:
        return descriptor.get("field") or self.naming.foreign_key_name(relation_name)

    def _back_reference(self, declaring: EntityDraft, target: EntityDraft) -> Optional[str]:
        """Key name of the first hasOne on `target` pointing back at `declaring`."""
        for relation_name, descriptor in target.relation_descriptors():
            if (descriptor.get("type") == RelationKind.HAS_ONE.value
                    and descriptor.get("entity") == declaring.name):
                return self._has_one_key(relation_name, descriptor)
        return None

    # ------------------------------------------------------------------
    # Resolution per kind

    def _resolve(self, draft: EntityDraft, relation_name: str, descriptor: dict) -> ResolvedRelation:
        kind = RelationKind(descriptor["type"])
        target = self.by_name[descriptor["entity"]]
        accessor = self.naming.accessor_name(relation_name, many=kind.is_many)

        if kind is RelationKind.HAS_ONE:
            optional = descriptor.get("optional") is True
            key_name = self._has_one_key(relation_name, descriptor)
            self._ensure_key(draft, key_name, target, required=not optional)
            return ResolvedRelation(
                name=relation_name,
                kind=kind,
                target=target.name,
                accessor=accessor,
                key_field=key_name,
                key_owner=draft.name,
                optional=optional,
            )

        if kind is RelationKind.HAS_MANY:
            back_key = self._back_reference(draft, target) if target is not draft else None
            explicit = descriptor.get("field")
            if back_key is not None and explicit in (None, back_key):
                # the target's own hasOne injects this key when it is resolved
                key_name = back_key
            else:
                key_name = explicit or self.naming.foreign_key_name(draft.name)
                self._ensure_key(target, key_name, draft, required=target is not draft)
            return ResolvedRelation(
                name=relation_name,
                kind=kind,
                target=target.name,
                accessor=accessor,
                key_field=key_name,
                key_owner=target.name,
            )

        return self._resolve_many_to_many(draft, relation_name, descriptor, target, accessor)

    def _resolve_inverse(self, draft, relation_name, descriptor, first_key) -> ResolvedRelation:
        first = self._resolved[first_key]
        logger.debug(
            f"    {draft.name}.{relation_name} mirrors {first_key[0]}.{first_key[1]}; "
            f"reusing key {first.key_owner}.{first.key_field}"
        )
        kind = RelationKind(descriptor["type"])
        return ResolvedRelation(
            name=relation_name,
            kind=kind,
            target=descriptor["entity"],
            accessor=self.naming.accessor_name(relation_name, many=kind.is_many),
            key_field=first.key_field,
            key_owner=first.key_owner,
            optional=first.optional,
            inverse=True,
        )

    def _resolve_many_to_many(self, draft, relation_name, descriptor, target, accessor) -> ResolvedRelation:
        through = descriptor.get("through") or {}
        self_referential = draft.name == target.name

        if self_referential:
            join_name = f"{draft.name}{to_pascal_case(relation_name)}"
            table = f"{self.naming.to_snake_case(draft.name)}_{self.naming.to_snake_case(relation_name)}"
            left_name, right_name = "sourceId", "targetId"
            left, right = draft, target
        else:
            join_name = self.naming.join_entity_name(draft.name, target.name)
            table = self.naming.join_table_name(draft.name, target.name)
            left, right = sorted((draft, target), key=lambda d: d.name)
            left_name = self.naming.foreign_key_name(left.name)
            right_name = self.naming.foreign_key_name(right.name)

        join = self._joins.get(join_name)
        if join is None:
            join = _JoinDraft(
                name=join_name,
                table=through.get("table") or table,
                left=left.name,
                right=right.name,
                left_key=self._join_key(left_name, left),
                right_key=self._join_key(right_name, right),
                self_referential=self_referential,
            )
            self._joins[join_name] = join
        elif through.get("table") and through["table"] != join.table:
            self._warnings.append(issue(
                ValidationCode.BIDIRECTIONAL_RELATION,
                f"{draft.name}.relations.{relation_name}.through.table",
                f"Join table for '{join_name}' is already named '{join.table}'; ignoring '{through['table']}'",
                "Declare the pivot table on one side only",
            ))

        pivot = through.get("fields") or {}
        if pivot:
            if join.pivot_owner is None:
                join.pivot_fields = tuple(self.field_resolver(n, f) for n, f in pivot.items())
                join.pivot_owner = f"{draft.name}.{relation_name}"
            else:
                self._warnings.append(issue(
                    ValidationCode.BIDIRECTIONAL_RELATION,
                    f"{draft.name}.relations.{relation_name}.through.fields",
                    f"Pivot fields for '{join_name}' were already declared by {join.pivot_owner}; ignoring these",
                    "Declare pivot fields on one side only",
                ))

        if self_referential:
            source_key, target_key = join.left_key.name, join.right_key.name
        else:
            source_key = join.left_key.name if join.left == draft.name else join.right_key.name
            target_key = join.right_key.name if join.left == draft.name else join.left_key.name

        return ResolvedRelation(
            name=relation_name,
            kind=RelationKind.BELONGS_TO_MANY,
            target=target.name,
            accessor=accessor,
            key_field=source_key,
            key_owner=join_name,
            join_entity=join_name,
            target_key=target_key,
        )

    def _join_key(self, key_name: str, target: EntityDraft) -> ResolvedField:
        return ResolvedField(
            name=key_name,
            kind=target.primary_key.kind,
            column=self.naming.column_name(key_name),
            required=True,
            origin=FieldOrigin.FOREIGN_KEY,
            references=self._reference_to(target),
        )

    def _freeze_join(self, join: _JoinDraft) -> JoinEntity:
        return JoinEntity(
            name=join.name,
            table=join.table,
            module=self.naming.module_name(join.name),
            left=join.left,
            right=join.right,
            left_key=join.left_key,
            right_key=join.right_key,
            pivot_fields=join.pivot_fields,
            self_referential=join.self_referential,
        )
