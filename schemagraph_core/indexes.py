"""SchemaGraph Indexes - Index declaration validation.

Checks single-column, compound, unique and full-text index declarations
against the owning entity's fields, in this order:

1. the field list is non-empty and every field exists and stores a value
2. the kind matches the arity (compound iff more than one field)
3. the same field set and kind is not already indexed
4. a unique index does not restate a field's own uniqueness
5. full-text indexes only cover text fields

A rejected declaration leaves the entity's index set untouched.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from schemagraph_core.errors import (
    DocumentError,
    DuplicateIndexError,
    InvalidIndexKindError,
    InvalidIndexTargetError,
    RedundantIndexError,
    RegistryNotSealedError,
)
from schemagraph_core.relations import RelationshipResolver
from schemagraph_core.schema import Entity, EntityRegistry
from schemagraph_core.types import IndexKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Index:
    """A validated index declaration."""

    entity: str
    fields: Tuple[str, ...]
    kind: IndexKind
    name: str

    @property
    def field_set(self) -> frozenset:
        return frozenset(self.fields)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entity": self.entity,
            "fields": list(self.fields),
            "kind": self.kind.value,
            "name": self.name,
        }


def index_name(entity: str, fields: Sequence[str], kind: IndexKind) -> str:
    """Generate the conventional index name, e.g. ``uq_User_email``."""
    return f"{kind.name_prefix}_{entity}_{'_'.join(fields)}"


class IndexValidator:
    """Validates index declarations for the entities of a sealed registry."""

    def __init__(self, registry: EntityRegistry, resolver: Optional[RelationshipResolver] = None):
        """Initialize validator.

        Args:
            registry: Sealed entity registry
            resolver: Resolver whose junction entities and foreign keys are also considered
        """
        self.registry = registry
        self.resolver = resolver
        self.indexes: List[Index] = []

    def _entity(self, name: str) -> Entity:
        if self.resolver is not None and name in self.resolver.junctions:
            return self.resolver.junctions[name]
        return self.registry.get_entity(name)

    def declare_index(
        self,
        entity_name: str,
        field_names: Iterable[str],
        kind: Union[IndexKind, str] = IndexKind.SINGLE,
        name: Optional[str] = None,
    ) -> Index:
        """Validate and record an index.

        Args:
            entity_name: Owning entity
            field_names: Indexed fields, in order
            kind: Index kind
            name: Index name; generated from entity, fields and kind when omitted

        Returns:
            The recorded index
        """
        if not self.registry.sealed:
            raise RegistryNotSealedError("seal the registry before declaring indexes", entity=entity_name)

        entity = self._entity(entity_name)
        fields = tuple(field_names)
        try:
            kind = IndexKind.coerce(kind)
        except ValueError:
            raise DocumentError(f"unknown index kind {kind!r}", entity=entity_name) from None
        context = ",".join(fields)

        if not fields:
            raise InvalidIndexKindError("index needs at least one field", entity=entity_name)

        targets = [entity.require_field(f) for f in fields]
        for target in targets:
            if target.is_navigation:
                raise InvalidIndexTargetError(
                    "navigation fields store nothing and cannot be indexed",
                    entity=entity_name,
                    context=target.name,
                )

        if len(fields) > 1 and kind is not IndexKind.COMPOUND:
            raise InvalidIndexKindError(
                f"multi-field index must be compound, not {kind.value}",
                entity=entity_name,
                context=context,
            )
        if len(fields) == 1 and kind is IndexKind.COMPOUND:
            raise InvalidIndexKindError(
                "compound index needs more than one field",
                entity=entity_name,
                context=context,
            )
        if len(set(fields)) != len(fields):
            raise InvalidIndexKindError("index repeats a field", entity=entity_name, context=context)

        for existing in entity.indexes:
            if existing.kind is kind and existing.field_set == frozenset(fields):
                raise DuplicateIndexError(
                    f"{kind.value} index already declared as {existing.name}",
                    entity=entity_name,
                    context=context,
                )

        if kind is IndexKind.UNIQUE and targets[0].unique:
            raise RedundantIndexError(
                "field is already unique; the unique index restates it",
                entity=entity_name,
                context=context,
            )

        if kind is IndexKind.FULLTEXT:
            for target in targets:
                if not target.type.is_text:
                    raise InvalidIndexTargetError(
                        f"full-text index needs a text field, got {target.type.value}",
                        entity=entity_name,
                        context=target.name,
                    )

        index = Index(entity_name, fields, kind, name or index_name(entity_name, fields, kind))
        entity.indexes.append(index)
        self.indexes.append(index)
        logger.debug(f"Declared {kind.value} index {index.name}")
        return index

    def for_entity(self, entity_name: str) -> List[Index]:
        return list(self._entity(entity_name).indexes)

    def unindexed_foreign_keys(self) -> List[Tuple[str, str]]:
        """(entity, field) pairs for FKs that no index leads with.

        Only FKs established by the resolver are considered; generated
        junctions are skipped.
        """
        if self.resolver is None:
            return []

        missing = []
        for entity_name, fk_names in self.resolver.foreign_keys().items():
            if entity_name not in self.registry:
                continue
            entity = self.registry.get_entity(entity_name)
            leading = {ix.fields[0] for ix in entity.indexes}
            for fk in fk_names:
                if fk not in leading and not entity.get_field(fk).unique:
                    missing.append((entity_name, fk))
        return missing


__all__ = [
    "Index",
    "IndexValidator",
    "index_name",
]
