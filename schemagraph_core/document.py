"""SchemaGraph Document - The already-parsed input to the validator.

A schema document is plain structured data: entities with their fields, then
relationship and index declarations that refer to entities by name. Nothing
here interprets a schema language; files are YAML or JSON mappings of the
same shape as ``SchemaDocument.to_dict()``.

Usage:
    document = SchemaDocument.from_yaml(Path("schema.yaml"))
    report = SchemaValidator().validate(document)

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

import yaml

from schemagraph_core.errors import DocumentError
from schemagraph_core.schema import Field
from schemagraph_core.types import IndexKind

logger = logging.getLogger(__name__)


@dataclass
class EntitySpec:
    """Entity as declared in a document."""

    name: str
    fields: List[Field] = field(default_factory=list)
    generated: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], errors: Optional[List[DocumentError]] = None) -> EntitySpec:
        """Build an entity from its document form.

        Malformed fields are dropped and their errors appended to ``errors``;
        without an ``errors`` list the first one is raised.
        """
        if "name" not in data:
            raise DocumentError("entity entry is missing 'name'")

        fields: List[Field] = []
        problems: List[DocumentError] = []
        for entry in data.get("fields") or []:
            try:
                fields.append(Field.from_dict(entry))
            except DocumentError as e:
                problems.append(DocumentError(e.message, entity=data["name"], context=e.context))

        if problems:
            if errors is None:
                raise problems[0]
            errors.extend(problems)
        return cls(name=data["name"], fields=fields, generated=bool(data.get("generated", False)))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "fields": [f.to_dict() for f in self.fields]}
        if self.generated:
            data["generated"] = True
        return data


@dataclass
class RelationshipSpec:
    """Relationship declaration between two entities."""

    source: str
    target: str
    foreign_key: Optional[str] = None
    unique_fk: Optional[bool] = None
    join_entity: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RelationshipSpec:
        missing = [key for key in ("source", "target") if key not in data]
        if missing:
            raise DocumentError(f"relationship entry is missing {', '.join(missing)}")
        unique_fk = data.get("unique_fk")
        return cls(
            source=data["source"],
            target=data["target"],
            foreign_key=data.get("foreign_key"),
            unique_fk=None if unique_fk is None else bool(unique_fk),
            join_entity=data.get("join_entity"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"source": self.source, "target": self.target}
        if self.foreign_key is not None:
            data["foreign_key"] = self.foreign_key
        if self.unique_fk is not None:
            data["unique_fk"] = self.unique_fk
        if self.join_entity is not None:
            data["join_entity"] = self.join_entity
        return data


@dataclass
class IndexSpec:
    """Index declaration on one entity."""

    entity: str
    fields: List[str]
    kind: Union[IndexKind, str] = IndexKind.SINGLE
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> IndexSpec:
        if "entity" not in data:
            raise DocumentError("index entry is missing 'entity'")
        fields = data.get("fields") or []
        if isinstance(fields, str):
            fields = [fields]
        return cls(
            entity=data["entity"],
            fields=list(fields),
            kind=data.get("kind", IndexKind.SINGLE.value),
            name=data.get("name"),
        )

    def to_dict(self) -> Dict[str, Any]:
        kind = self.kind.value if isinstance(self.kind, IndexKind) else self.kind
        data: Dict[str, Any] = {"entity": self.entity, "fields": list(self.fields), "kind": kind}
        if self.name is not None:
            data["name"] = self.name
        return data


@dataclass
class SchemaDocument:
    """A complete schema: entities, then relationships and indexes."""

    entities: List[EntitySpec] = field(default_factory=list)
    relationships: List[RelationshipSpec] = field(default_factory=list)
    indexes: List[IndexSpec] = field(default_factory=list)
    name: Optional[str] = None
    errors: List[DocumentError] = field(default_factory=list)  # Malformed entries skipped while loading

    def add_entity(self, name: str, *fields: Field) -> SchemaDocument:
        """Add an entity declaration."""
        self.entities.append(EntitySpec(name, list(fields)))
        return self

    def add_relationship(self, source: str, target: str, **options: Any) -> SchemaDocument:
        """Add a relationship declaration."""
        self.relationships.append(RelationshipSpec(source, target, **options))
        return self

    def add_index(self, entity: str, *fields: str, kind: Union[IndexKind, str] = IndexKind.SINGLE) -> SchemaDocument:
        """Add an index declaration."""
        self.indexes.append(IndexSpec(entity, list(fields), kind))
        return self

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SchemaDocument:
        """Build a document from its mapping form.

        Entities marked ``generated`` (junctions emitted by a previous run)
        are skipped; the resolver materializes them again.

        Malformed entries do not stop loading. They are left out and their
        errors kept in ``errors`` for the validator to report.
        """
        if not isinstance(data, Mapping):
            raise DocumentError(f"schema document must be a mapping, got {type(data).__name__}")

        errors: List[DocumentError] = []
        entities = _load_entries(data.get("entities"), lambda e: EntitySpec.from_dict(e, errors), errors)
        relationships = _load_entries(data.get("relationships"), RelationshipSpec.from_dict, errors)
        indexes = _load_entries(data.get("indexes"), IndexSpec.from_dict, errors)

        if errors:
            logger.debug(f"Skipped {len(errors)} malformed document entries")
        return cls(
            entities=[e for e in entities if not e.generated],
            relationships=relationships,
            indexes=indexes,
            name=data.get("name"),
            errors=errors,
        )

    @classmethod
    def from_yaml(cls, path: Path) -> SchemaDocument:
        """Load a document from a YAML file."""
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        logger.debug(f"Loaded schema document from {path}")
        return cls.from_dict(data or {})

    @classmethod
    def from_json(cls, path: Path) -> SchemaDocument:
        """Load a document from a JSON file."""
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        logger.debug(f"Loaded schema document from {path}")
        return cls.from_dict(data)

    @classmethod
    def load(cls, path: Path) -> SchemaDocument:
        """Load a document, choosing the format by file suffix."""
        if path.suffix.lower() == ".json":
            return cls.from_json(path)
        return cls.from_yaml(path)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "entities": [e.to_dict() for e in self.entities],
            "relationships": [r.to_dict() for r in self.relationships],
            "indexes": [i.to_dict() for i in self.indexes],
        }
        if self.name is not None:
            data["name"] = self.name
        return data


def _load_entries(
    entries: Any, build: Callable[[Mapping[str, Any]], Any], errors: List[DocumentError]
) -> List[Any]:
    loaded = []
    for entry in entries or []:
        if not isinstance(entry, Mapping):
            errors.append(DocumentError(f"expected a mapping entry, got {type(entry).__name__}"))
            continue
        try:
            loaded.append(build(entry))
        except DocumentError as e:
            errors.append(e)
    return loaded


__all__ = [
    "EntitySpec",
    "RelationshipSpec",
    "IndexSpec",
    "SchemaDocument",
]
