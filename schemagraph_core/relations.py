"""SchemaGraph Relations - Relationship classification and validation.

The resolver looks at where a foreign key lives, whether it is unique, and
which navigation fields each side declares, and classifies the link as one of:

| Kind                      | Pattern                                                |
|---------------------------|--------------------------------------------------------|
| Self                      | source and target are the same entity, nullable FK     |
| OneToOne                  | unique FK on exactly one side                          |
| OneToMany                 | non-unique FK on one side (that side is the many side) |
| ManyToMany                | mutual collections, no FK; junction is materialized    |
| ManyToManyWithAttributes  | explicit join entity with FKs to both sides + extras   |

Anything else is ambiguous and rejected rather than guessed.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Tuple

from schemagraph_core.errors import (
    AmbiguousRelationshipError,
    InvalidSelfReferenceError,
    RegistryNotSealedError,
    UnknownFieldError,
)
from schemagraph_core.schema import Entity, EntityRegistry, Field
from schemagraph_core.types import FieldType, RelationKind

logger = logging.getLogger(__name__)

_DIRECT_KINDS = (RelationKind.ONE_TO_ONE, RelationKind.ONE_TO_MANY)


@dataclass(frozen=True)
class Relationship:
    """A classified relationship between two entities."""

    id: int
    source: str
    target: str
    kind: RelationKind
    foreign_keys: Tuple[str, ...] = ()
    join_entity: Optional[str] = None
    fk_entity: Optional[str] = None  # Entity holding the FK field(s)
    many_side: Optional[str] = None  # OneToMany / Self: the FK-holding side

    @property
    def pair(self) -> frozenset:
        return frozenset((self.source, self.target))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "kind": self.kind.value,
            "foreign_keys": list(self.foreign_keys),
            "join_entity": self.join_entity,
            "fk_entity": self.fk_entity,
            "many_side": self.many_side,
        }


class RelationshipResolver:
    """Classifies and records relationships over a sealed entity registry.

    The resolver owns the relationship table. Entities only keep indices into
    it, registered on both participants.
    """

    def __init__(self, registry: EntityRegistry, junction_prefix: str = "_"):
        """Initialize resolver.

        Args:
            registry: Sealed registry to resolve against
            junction_prefix: Name prefix for materialized junction entities
        """
        self.registry = registry
        self.junction_prefix = junction_prefix
        self.relationships: List[Relationship] = []
        self.junctions: Dict[str, Entity] = {}

    def declare_relationship(
        self,
        source: str,
        target: str,
        foreign_key: Optional[str] = None,
        unique_fk: Optional[bool] = None,
        join_entity: Optional[str] = None,
    ) -> RelationKind:
        """Classify and record a relationship.

        Args:
            source: Source entity name
            target: Target entity name
            foreign_key: FK field name, living on either side
            unique_fk: Expected uniqueness of the FK; derived from the field when None
            join_entity: Explicit join entity for many-to-many links

        Returns:
            The relationship kind

        Nothing is recorded if classification fails.
        """
        if not self.registry.sealed:
            raise RegistryNotSealedError("seal the registry before declaring relationships", entity=source)

        src = self.registry.get_entity(source)
        tgt = self.registry.get_entity(target)

        junction: Optional[Entity] = None
        if source == target:
            candidate = self._classify_self(src, foreign_key, join_entity)
        elif foreign_key and join_entity:
            raise AmbiguousRelationshipError(
                "declare either a foreign key or a join entity, not both",
                entity=source,
                context=target,
            )
        elif foreign_key:
            candidate = self._classify_foreign_key(src, tgt, foreign_key, unique_fk)
        elif join_entity:
            candidate = self._classify_join(src, tgt, join_entity)
        else:
            candidate, junction = self._classify_implicit(src, tgt)

        prior = self._check_conflicts(candidate)
        if prior is not None:
            return prior.kind

        relationship = replace(candidate, id=len(self.relationships))
        self.relationships.append(relationship)
        src.relationship_ids.append(relationship.id)
        if tgt is not src:
            tgt.relationship_ids.append(relationship.id)
        if junction is not None:
            self.junctions[junction.name] = junction

        logger.info(f"Resolved {source} -> {target} as {relationship.kind.value}")
        return relationship.kind

    # -------------------------------------------------------------------------
    # Classification
    # -------------------------------------------------------------------------

    def _classify_self(self, entity: Entity, foreign_key: Optional[str], join_entity: Optional[str]) -> Relationship:
        if join_entity:
            raise InvalidSelfReferenceError(
                "self references are declared with a foreign key, not a join entity",
                entity=entity.name,
                context=join_entity,
            )
        if not foreign_key:
            raise InvalidSelfReferenceError("self reference requires a nullable foreign key", entity=entity.name)

        fk = entity.require_field(foreign_key)
        if not fk.type.is_scalar or fk.references not in (None, entity.name):
            raise AmbiguousRelationshipError(
                f"field does not reference {entity.name}",
                entity=entity.name,
                context=foreign_key,
            )
        if not fk.nullable:
            raise InvalidSelfReferenceError(
                "self-referencing foreign key must be nullable so root records can exist",
                entity=entity.name,
                context=foreign_key,
            )

        return Relationship(
            id=-1,
            source=entity.name,
            target=entity.name,
            kind=RelationKind.SELF,
            foreign_keys=(foreign_key,),
            fk_entity=entity.name,
            many_side=None if entity.is_unique(foreign_key) else entity.name,
        )

    def _classify_foreign_key(
        self, src: Entity, tgt: Entity, foreign_key: str, unique_fk: Optional[bool]
    ) -> Relationship:
        found = [e for e in (src, tgt) if e.get_field(foreign_key) is not None]
        if not found:
            raise UnknownFieldError(
                f"foreign key not found on {src.name} or {tgt.name}",
                entity=src.name,
                context=foreign_key,
            )

        holders = [e for e in found if _holds_foreign_key(e.require_field(foreign_key), _other_side(e, src, tgt))]
        if len(holders) != 1:
            reason = "foreign key is declared on both sides" if len(holders) == 2 else (
                "field is not a foreign key to the other side"
            )
            raise AmbiguousRelationshipError(reason, entity=src.name, context=foreign_key)

        holder = holders[0]
        other = _other_side(holder, src, tgt)
        is_unique = holder.is_unique(foreign_key)

        if unique_fk is not None and bool(unique_fk) != is_unique:
            raise AmbiguousRelationshipError(
                f"declared uniqueness ({bool(unique_fk)}) contradicts the field constraint ({is_unique})",
                entity=holder.name,
                context=foreign_key,
            )

        back_refs = other.navigation_fields(holder.name)
        if is_unique:
            if any(f.many for f in back_refs):
                raise AmbiguousRelationshipError(
                    f"unique foreign key conflicts with collection field on {other.name}",
                    entity=holder.name,
                    context=foreign_key,
                )
            kind, many_side = RelationKind.ONE_TO_ONE, None
        else:
            if any(not f.many for f in back_refs):
                raise AmbiguousRelationshipError(
                    f"non-unique foreign key conflicts with singular field on {other.name}",
                    entity=holder.name,
                    context=foreign_key,
                )
            kind, many_side = RelationKind.ONE_TO_MANY, holder.name

        return Relationship(
            id=-1,
            source=src.name,
            target=tgt.name,
            kind=kind,
            foreign_keys=(foreign_key,),
            fk_entity=holder.name,
            many_side=many_side,
        )

    def _classify_join(self, src: Entity, tgt: Entity, join_name: str) -> Relationship:
        join = self.registry.get_entity(join_name)
        if join_name in (src.name, tgt.name):
            raise AmbiguousRelationshipError("join entity must differ from both sides", entity=join_name)

        to_source = join.foreign_keys(src.name)
        to_target = join.foreign_keys(tgt.name)
        if len(to_source) != 1 or len(to_target) != 1:
            raise AmbiguousRelationshipError(
                f"join entity needs exactly one foreign key to each of {src.name} and {tgt.name}",
                entity=join_name,
            )

        fk_names = (to_source[0].name, to_target[0].name)
        extras = [f for f in join.fields if not f.is_navigation and f.name not in fk_names]
        kind = RelationKind.MANY_TO_MANY_WITH_ATTRIBUTES if extras else RelationKind.MANY_TO_MANY

        return Relationship(
            id=-1,
            source=src.name,
            target=tgt.name,
            kind=kind,
            foreign_keys=fk_names,
            join_entity=join_name,
            fk_entity=join_name,
        )

    def _classify_implicit(self, src: Entity, tgt: Entity) -> Tuple[Relationship, Entity]:
        src_many = [f for f in src.navigation_fields(tgt.name) if f.many]
        tgt_many = [f for f in tgt.navigation_fields(src.name) if f.many]

        if not (src_many and tgt_many):
            raise AmbiguousRelationshipError(
                "no foreign key, join entity or mutual collection fields",
                entity=src.name,
                context=tgt.name,
            )
        if src.foreign_keys(tgt.name) or tgt.foreign_keys(src.name):
            raise AmbiguousRelationshipError(
                "collections on both sides but a direct foreign key also exists; name the foreign key",
                entity=src.name,
                context=tgt.name,
            )

        junction = self._materialize_junction(src.name, tgt.name)
        relationship = Relationship(
            id=-1,
            source=src.name,
            target=tgt.name,
            kind=RelationKind.MANY_TO_MANY,
            foreign_keys=("A", "B"),
            join_entity=junction.name,
            fk_entity=junction.name,
        )
        return relationship, junction

    def _materialize_junction(self, first: str, second: str) -> Entity:
        a, b = sorted((first, second))
        name = f"{self.junction_prefix}{a}To{b}"
        if name in self.registry:
            raise AmbiguousRelationshipError(
                "generated junction name collides with a registered entity",
                entity=name,
            )
        existing = self.junctions.get(name)
        if existing is not None:
            return existing
        return Entity(
            name,
            fields=[
                Field("A", FieldType.NUMBER, references=a),
                Field("B", FieldType.NUMBER, references=b),
            ],
            generated=True,
            sealed=True,
        )

    def _check_conflicts(self, candidate: Relationship) -> Optional[Relationship]:
        """Return an identical prior declaration, or raise on a conflicting one."""
        for prior in self.between(candidate.source, candidate.target):
            same_declaration = (
                prior.foreign_keys == candidate.foreign_keys
                and prior.join_entity == candidate.join_entity
                and prior.fk_entity == candidate.fk_entity
            )
            if same_declaration:
                if prior.kind is candidate.kind:
                    logger.debug(f"Relationship {candidate.source} -> {candidate.target} already declared")
                    return prior
                raise AmbiguousRelationshipError(
                    f"redeclared as {candidate.kind.value}, previously {prior.kind.value}",
                    entity=candidate.source,
                    context=candidate.target,
                )
            if prior.kind in _DIRECT_KINDS and candidate.kind in _DIRECT_KINDS and prior.kind is not candidate.kind:
                raise AmbiguousRelationshipError(
                    f"both a {prior.kind.value} and a {candidate.kind.value} link declared for this pair",
                    entity=candidate.source,
                    context=candidate.target,
                )
        return None

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def get(self, relationship_id: int) -> Relationship:
        return self.relationships[relationship_id]

    def between(self, first: str, second: str) -> List[Relationship]:
        """Relationships linking two entities, in either direction."""
        pair = frozenset((first, second))
        return [r for r in self.relationships if r.pair == pair]

    def for_entity(self, name: str) -> List[Relationship]:
        entity = self.registry.get_entity(name)
        return [self.relationships[i] for i in entity.relationship_ids]

    def foreign_keys(self) -> Dict[str, List[str]]:
        """FK field names per entity, as established by resolved relationships."""
        result: Dict[str, List[str]] = {}
        for rel in self.relationships:
            if rel.fk_entity is None:
                continue
            names = result.setdefault(rel.fk_entity, [])
            for fk in rel.foreign_keys:
                if fk not in names:
                    names.append(fk)
        return result


def _holds_foreign_key(candidate: Field, other: Entity) -> bool:
    return candidate.type.is_scalar and candidate.references in (None, other.name)


def _other_side(entity: Entity, first: Entity, second: Entity) -> Entity:
    return second if entity is first else first


__all__ = [
    "Relationship",
    "RelationshipResolver",
]
