"""SchemaGraph Graph - Normalized, validated schema graph.

The graph is what downstream consumers (DDL or query generators) receive:
every entity including materialized junctions, every classified
relationship, and every accepted index.

Its dictionary form doubles as a ``SchemaDocument``: loading it back and
validating again reproduces the same classifications.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

import yaml

from schemagraph_core.indexes import Index, IndexValidator
from schemagraph_core.relations import Relationship, RelationshipResolver
from schemagraph_core.schema import Entity, EntityRegistry
from schemagraph_core.types import RelationKind


@dataclass
class SchemaGraph:
    """Entities, relationships and indexes of one validated document."""

    entities: List[Entity] = field(default_factory=list)
    relationships: List[Relationship] = field(default_factory=list)
    indexes: List[Index] = field(default_factory=list)
    name: Optional[str] = None

    @classmethod
    def build(
        cls,
        registry: EntityRegistry,
        resolver: RelationshipResolver,
        validator: IndexValidator,
        name: Optional[str] = None,
    ) -> SchemaGraph:
        """Collect the state of the pipeline components into a graph."""
        return cls(
            entities=list(registry) + list(resolver.junctions.values()),
            relationships=list(resolver.relationships),
            indexes=list(validator.indexes),
            name=name,
        )

    def get_entity(self, name: str) -> Optional[Entity]:
        """Get entity by name."""
        for entity in self.entities:
            if entity.name == name:
                return entity
        return None

    def between(self, first: str, second: str) -> List[Relationship]:
        pair = frozenset((first, second))
        return [r for r in self.relationships if r.pair == pair]

    def kinds(self) -> Dict[str, str]:
        """Relationship kind per ``source->target[fks]`` label."""
        return {f"{r.source}->{r.target}[{','.join(r.foreign_keys)}]": r.kind.value for r in self.relationships}

    def dependencies(self) -> Dict[str, Set[str]]:
        """Entities each entity points at through the FKs of resolved relationships."""
        deps: Dict[str, Set[str]] = {e.name: set() for e in self.entities}
        for rel in self.relationships:
            if rel.fk_entity is None:
                continue
            deps.setdefault(rel.fk_entity, set()).update({rel.source, rel.target} - {rel.fk_entity})
        return deps

    def sorted_entities(self) -> List[Entity]:
        """Order entities in layers: every FK holder after the entities it points at.

        Entities caught in a cycle are appended in declaration order.
        """
        deps = self.dependencies()
        ordered: List[Entity] = []
        pending = list(self.entities)

        while pending:
            waiting = {e.name for e in pending}
            layer = [e for e in pending if not deps[e.name] & waiting]
            if not layer:
                ordered.extend(pending)
                break
            ordered.extend(layer)
            placed = {e.name for e in layer}
            pending = [e for e in pending if e.name not in placed]

        return ordered

    def _relationship_dict(self, relationship: Relationship) -> Dict[str, Any]:
        junction = self.get_entity(relationship.join_entity) if relationship.join_entity else None
        data: Dict[str, Any] = {"source": relationship.source, "target": relationship.target}

        if junction is not None and junction.generated:
            data["junction"] = junction.name
        elif relationship.join_entity is not None:
            data["join_entity"] = relationship.join_entity
        elif relationship.foreign_keys:
            data["foreign_key"] = relationship.foreign_keys[0]

        data["kind"] = relationship.kind.value
        if relationship.fk_entity is not None:
            data["fk_entity"] = relationship.fk_entity
        if relationship.many_side is not None:
            data["many_side"] = relationship.many_side
        return data

    def to_dict(self) -> Dict[str, Any]:
        """Convert graph to a dictionary that reloads as a ``SchemaDocument``."""
        data: Dict[str, Any] = {
            "entities": [e.to_dict() for e in self.entities],
            "relationships": [self._relationship_dict(r) for r in self.relationships],
            "indexes": [i.to_dict() for i in self.indexes],
        }
        if self.name is not None:
            data["name"] = self.name
        return data

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    def fingerprint(self) -> str:
        """Generate a unique fingerprint for this graph."""
        json_str = json.dumps(self.to_dict(), sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()[:16]

    def diff(self, other: SchemaGraph) -> List[str]:
        """Compare with another graph and return differences.

        Args:
            other: Graph to compare with

        Returns:
            List of difference descriptions
        """
        differences = []

        self_entities = {e.name: e for e in self.entities}
        other_entities = {e.name: e for e in other.entities}

        for name in self_entities:
            if name not in other_entities:
                differences.append(f"Entity added: {name}")

        for name in other_entities:
            if name not in self_entities:
                differences.append(f"Entity removed: {name}")

        for name, entity in self_entities.items():
            if name not in other_entities:
                continue

            self_fields = set(entity.field_names)
            other_fields = set(other_entities[name].field_names)

            for field_name in sorted(self_fields - other_fields):
                differences.append(f"Field added: {name}.{field_name}")
            for field_name in sorted(other_fields - self_fields):
                differences.append(f"Field removed: {name}.{field_name}")

        self_kinds = self.kinds()
        other_kinds = other.kinds()
        for label, kind in self_kinds.items():
            previous = other_kinds.get(label)
            if previous is None:
                differences.append(f"Relationship added: {label} ({kind})")
            elif previous != kind:
                differences.append(f"Relationship changed: {label} ({previous} -> {kind})")
        for label in other_kinds:
            if label not in self_kinds:
                differences.append(f"Relationship removed: {label}")

        self_indexes = {i.name for i in self.indexes}
        other_indexes = {i.name for i in other.indexes}
        for index_name in sorted(self_indexes - other_indexes):
            differences.append(f"Index added: {index_name}")
        for index_name in sorted(other_indexes - self_indexes):
            differences.append(f"Index removed: {index_name}")

        return differences

    def count(self, kind: RelationKind) -> int:
        return sum(1 for r in self.relationships if r.kind is kind)


__all__ = ["SchemaGraph"]
