"""SchemaGraph Schema - Field and entity registries.

Provides the first stage of the validation pipeline:
- Field definitions (name, type, nullability, uniqueness, references)
- Entity definitions owning an ordered field registry
- The entity registry, which is populated and then sealed as a batch

Architecture:
    ┌─────────────────────────────────────────────────────────────────────┐
    │                        Schema System                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐                 │
    │  │   Field     │  │   Entity    │  │   Entity    │                 │
    │  │ Definition  │──│ Definition  │──│  Registry   │                 │
    │  └─────────────┘  └─────────────┘  └─────────────┘                 │
    │                          │                │                         │
    │                   ┌─────────────┐  ┌─────────────┐                 │
    │                   │Relationship │  │    Index    │                 │
    │                   │  Resolver   │──│  Validator  │                 │
    │                   └─────────────┘  └─────────────┘                 │
    └─────────────────────────────────────────────────────────────────────┘

Usage:
    from schemagraph_core.schema import EntityRegistry, Field
    from schemagraph_core.types import FieldType

    registry = EntityRegistry()
    registry.register_entity("User", [
        Field("id", FieldType.NUMBER, unique=True),
        Field("email", FieldType.STRING, unique=True),
    ])
    registry.seal_all()

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union

from schemagraph_core.errors import (
    DocumentError,
    DuplicateEntityError,
    DuplicateFieldError,
    RegistrySealedError,
    UnknownEntityError,
    UnknownFieldError,
)
from schemagraph_core.types import FieldType, IndexKind

if TYPE_CHECKING:
    from schemagraph_core.indexes import Index

logger = logging.getLogger(__name__)

EntityId = int


# =============================================================================
# Field Definition
# =============================================================================


@dataclass(frozen=True)
class Field:
    """Field definition.

    A scalar field with ``references`` set is a foreign key. A field of type
    ``reference`` is a navigation field: it names another entity but stores
    nothing, and ``many`` marks it as a collection.
    """

    name: str
    type: FieldType = FieldType.STRING
    nullable: bool = False
    unique: bool = False
    references: Optional[str] = None
    many: bool = False

    def __post_init__(self):
        try:
            object.__setattr__(self, "type", FieldType.coerce(self.type))
        except ValueError:
            raise DocumentError(f"unknown field type {self.type!r}", context=self.name) from None

        if not self.name:
            raise DocumentError("field name is required")
        if self.many and self.type is not FieldType.REFERENCE:
            raise DocumentError("only reference fields may be collections", context=self.name)
        if self.type is FieldType.REFERENCE and not self.references:
            raise DocumentError("reference field must name its target entity", context=self.name)

    @property
    def is_foreign_key(self) -> bool:
        return self.references is not None and self.type.is_scalar

    @property
    def is_navigation(self) -> bool:
        return self.type is FieldType.REFERENCE

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Field:
        """Build a field from its document form."""
        if not isinstance(data, Mapping):
            raise DocumentError(f"field entry must be a mapping, got {type(data).__name__}")
        if "name" not in data:
            raise DocumentError("field entry is missing 'name'")
        return cls(
            name=data["name"],
            type=data.get("type", FieldType.STRING),
            nullable=bool(data.get("nullable", False)),
            unique=bool(data.get("unique", False)),
            references=data.get("references"),
            many=bool(data.get("many", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "type": self.type.value,
            "nullable": self.nullable,
            "unique": self.unique,
        }
        if self.references is not None:
            data["references"] = self.references
        if self.many:
            data["many"] = True
        return data


FieldLike = Union[Field, Mapping[str, Any]]


def _as_field(value: FieldLike) -> Field:
    if isinstance(value, Field):
        return value
    return Field.from_dict(value)


# =============================================================================
# Entity Definition
# =============================================================================


@dataclass
class Entity:
    """Entity definition.

    Owns an ordered field registry. Relationship links are indices into the
    resolver's table; the resolver, not the entity, owns relationships.
    """

    name: str
    fields: List[Field] = field(default_factory=list)
    relationship_ids: List[int] = field(default_factory=list)
    indexes: List["Index"] = field(default_factory=list)
    generated: bool = False
    sealed: bool = False

    def add_field(self, new_field: FieldLike) -> Entity:
        """Add a field to the entity."""
        if self.sealed:
            raise RegistrySealedError("cannot add fields after sealing", entity=self.name)
        new_field = _as_field(new_field)
        if self.get_field(new_field.name) is not None:
            raise DuplicateFieldError("field already defined", entity=self.name, context=new_field.name)
        self.fields.append(new_field)
        return self

    def get_field(self, name: str) -> Optional[Field]:
        """Get field by name."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def require_field(self, name: str) -> Field:
        """Get field by name, raising ``UnknownFieldError`` if absent."""
        f = self.get_field(name)
        if f is None:
            raise UnknownFieldError("no such field", entity=self.name, context=name)
        return f

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def foreign_keys(self, target: Optional[str] = None) -> List[Field]:
        """Foreign-key fields, optionally only those pointing at ``target``."""
        return [f for f in self.fields if f.is_foreign_key and (target is None or f.references == target)]

    def navigation_fields(self, target: str) -> List[Field]:
        """Navigation fields naming ``target``."""
        return [f for f in self.fields if f.is_navigation and f.references == target]

    def is_unique(self, name: str) -> bool:
        """Whether a field is unique by its own flag or by a unique index."""
        f = self.require_field(name)
        if f.unique:
            return True
        return any(ix.kind is IndexKind.UNIQUE and ix.fields == (name,) for ix in self.indexes)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "fields": [f.to_dict() for f in self.fields],
        }
        if self.generated:
            data["generated"] = True
        return data


# =============================================================================
# Entity Registry
# =============================================================================


class EntityRegistry:
    """Holds every entity of one schema document.

    Entities are registered, then sealed as a batch. Relationship resolution
    and index validation only run against a sealed registry so that forward
    references between entities always resolve.
    """

    def __init__(self):
        self._entities: Dict[str, Entity] = {}
        self._ids: Dict[str, EntityId] = {}
        self._sealed = False

    @property
    def sealed(self) -> bool:
        return self._sealed

    def register_entity(self, name: str, fields: Iterable[FieldLike] = ()) -> EntityId:
        """Register an entity.

        Args:
            name: Globally unique entity name
            fields: Field definitions, in declaration order

        Returns:
            Sequential entity id

        The registry is unchanged if registration fails.
        """
        if self._sealed:
            raise RegistrySealedError("cannot register entities after sealing", entity=name)
        if not name:
            raise DocumentError("entity name is required")
        if name in self._entities:
            raise DuplicateEntityError("entity already registered", entity=name)

        entity = Entity(name)
        for f in fields:
            entity.add_field(f)

        entity_id = len(self._entities)
        self._entities[name] = entity
        self._ids[name] = entity_id
        logger.debug(f"Registered entity {name} ({len(entity.fields)} fields) as #{entity_id}")
        return entity_id

    def add_field(self, entity_name: str, new_field: FieldLike) -> Entity:
        """Add a field to a registered entity before sealing."""
        if self._sealed:
            raise RegistrySealedError("cannot add fields after sealing", entity=entity_name)
        return self.get_entity(entity_name).add_field(new_field)

    def get_entity(self, name: str) -> Entity:
        """Get entity by name, raising ``UnknownEntityError`` if absent."""
        try:
            return self._entities[name]
        except KeyError:
            raise UnknownEntityError("entity is not registered", entity=name) from None

    def entity_id(self, name: str) -> EntityId:
        self.get_entity(name)
        return self._ids[name]

    def seal_all(self) -> None:
        """Freeze the registry. Sealing twice is a no-op."""
        if self._sealed:
            return
        for entity in self._entities.values():
            entity.sealed = True
        self._sealed = True
        logger.info(f"Sealed entity registry with {len(self._entities)} entities")

    def names(self) -> List[str]:
        return list(self._entities.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._entities

    def __iter__(self) -> Iterator[Entity]:
        return iter(self._entities.values())

    def __len__(self) -> int:
        return len(self._entities)


__all__ = [
    "EntityId",
    "Field",
    "Entity",
    "EntityRegistry",
]
