"""SchemaGraph - Relationship and index validation for entity schemas.

SchemaGraph takes an already-parsed schema document and provides:
- Entity and field registries with batch sealing
- Relationship classification (one-to-one, one-to-many, many-to-many,
  self-referencing, many-to-many with attributes)
- Index validation (single, compound, unique, full-text)
- A normalized schema graph for DDL and query generators
- Aggregated error reports listing every problem in a document

Architecture:
    ┌─────────────────────────────────────────────────────────────────┐
    │                       SchemaGraph Core                         │
    ├─────────────────────────────────────────────────────────────────┤
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐             │
    │  │   Entity    │  │Relationship │  │    Index    │             │
    │  │  Registry   │──│  Resolver   │──│  Validator  │             │
    │  └─────────────┘  └─────────────┘  └─────────────┘             │
    │         │                                 │                     │
    │  ┌─────────────┐                   ┌─────────────┐             │
    │  │   Schema    │───────────────────│   Schema    │             │
    │  │  Document   │    Validator      │    Graph    │             │
    │  └─────────────┘                   └─────────────┘             │
    └─────────────────────────────────────────────────────────────────┘

Usage:
    from schemagraph_core import SchemaDocument, SchemaValidator, Field, FieldType

    doc = SchemaDocument()
    doc.add_entity("User", Field("id", FieldType.NUMBER, unique=True))
    doc.add_entity("Profile", Field("userId", FieldType.NUMBER, unique=True, references="User"))
    doc.add_relationship("User", "Profile", foreign_key="userId")

    report = SchemaValidator().validate(doc)
    report.raise_for_errors()
    print(report.graph.kinds())

CLI:
    $ schemagraph validate schema.yaml
    $ schemagraph export schema.yaml --format json

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

__version__ = "1.0.0"
__author__ = "BlackRoad OS, Inc."
__email__ = "engineering@blackroad.io"

# Core exports
from schemagraph_core.types import FieldType, IndexKind, RelationKind
from schemagraph_core.schema import Entity, EntityRegistry, Field
from schemagraph_core.relations import Relationship, RelationshipResolver
from schemagraph_core.indexes import Index, IndexValidator
from schemagraph_core.document import EntitySpec, IndexSpec, RelationshipSpec, SchemaDocument
from schemagraph_core.graph import SchemaGraph
from schemagraph_core.validator import SchemaValidator, ValidatorConfig, validate

# Error exports
from schemagraph_core.errors import (
    AmbiguousRelationshipError,
    DocumentError,
    DuplicateEntityError,
    DuplicateFieldError,
    DuplicateIndexError,
    InvalidIndexKindError,
    InvalidIndexTargetError,
    InvalidSelfReferenceError,
    RedundantIndexError,
    RegistryNotSealedError,
    RegistrySealedError,
    SchemaError,
    SchemaValidationError,
    UnknownEntityError,
    UnknownFieldError,
    ValidationReport,
)

__all__ = [
    # Version
    "__version__",

    # Types
    "FieldType",
    "IndexKind",
    "RelationKind",

    # Registries
    "Field",
    "Entity",
    "EntityRegistry",

    # Resolution
    "Relationship",
    "RelationshipResolver",
    "Index",
    "IndexValidator",

    # Documents and graphs
    "EntitySpec",
    "RelationshipSpec",
    "IndexSpec",
    "SchemaDocument",
    "SchemaGraph",

    # Validation
    "SchemaValidator",
    "ValidatorConfig",
    "validate",
    "ValidationReport",

    # Errors
    "SchemaError",
    "DuplicateEntityError",
    "UnknownEntityError",
    "DuplicateFieldError",
    "RegistrySealedError",
    "RegistryNotSealedError",
    "InvalidSelfReferenceError",
    "AmbiguousRelationshipError",
    "UnknownFieldError",
    "InvalidIndexKindError",
    "RedundantIndexError",
    "InvalidIndexTargetError",
    "DuplicateIndexError",
    "DocumentError",
    "SchemaValidationError",
]
