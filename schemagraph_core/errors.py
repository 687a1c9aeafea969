"""SchemaGraph Errors - Validation error taxonomy and aggregate reports.

Every rule violation raised by the registries, the relationship resolver and
the index validator is a ``SchemaError`` subclass. Each carries enough context
to build an actionable diagnostic:

- ``entity``: the entity the problem was found on
- ``context``: the field, relationship or index being declared
- ``rule``: a stable identifier for the violated rule

The batch validator collects these into a ``ValidationReport`` instead of
stopping at the first one.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from schemagraph_core.graph import SchemaGraph


class SchemaError(Exception):
    """Base class for schema validation errors."""

    rule = "schema_error"

    def __init__(self, message: str, entity: Optional[str] = None, context: Optional[str] = None):
        self.message = message
        self.entity = entity
        self.context = context
        super().__init__(self._format())

    def _format(self) -> str:
        location = ".".join(part for part in (self.entity, self.context) if part)
        if location:
            return f"[{self.rule}] {location}: {self.message}"
        return f"[{self.rule}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": type(self).__name__,
            "rule": self.rule,
            "entity": self.entity,
            "context": self.context,
            "message": self.message,
        }


# =============================================================================
# Registry Errors
# =============================================================================


class DuplicateEntityError(SchemaError):
    rule = "duplicate_entity"


class UnknownEntityError(SchemaError):
    rule = "unknown_entity"


class DuplicateFieldError(SchemaError):
    rule = "duplicate_field"


class RegistrySealedError(SchemaError):
    rule = "registry_sealed"


class RegistryNotSealedError(SchemaError):
    rule = "registry_not_sealed"


# =============================================================================
# Relationship Errors
# =============================================================================


class InvalidSelfReferenceError(SchemaError):
    rule = "invalid_self_reference"


class AmbiguousRelationshipError(SchemaError):
    rule = "ambiguous_relationship"


# =============================================================================
# Index Errors
# =============================================================================


class UnknownFieldError(SchemaError):
    rule = "unknown_field"


class InvalidIndexKindError(SchemaError):
    rule = "invalid_index_kind"


class RedundantIndexError(SchemaError):
    rule = "redundant_index"


class InvalidIndexTargetError(SchemaError):
    rule = "invalid_index_target"


class DuplicateIndexError(SchemaError):
    rule = "duplicate_index"


# =============================================================================
# Document and Aggregate Errors
# =============================================================================


class DocumentError(SchemaError):
    """Malformed input document (missing keys, unknown enum values)."""

    rule = "invalid_document"


class SchemaValidationError(SchemaError):
    """Raised with every collected error when a report is not clean."""

    rule = "schema_invalid"

    def __init__(self, errors: List[SchemaError]):
        self.errors = list(errors)
        summary = f"{len(self.errors)} validation error(s)"
        if self.errors:
            summary += "; first: " + str(self.errors[0])
        super().__init__(summary)


@dataclass
class ValidationReport:
    """Result of validating one schema document."""

    graph: Optional["SchemaGraph"] = None
    errors: List[SchemaError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add(self, error: SchemaError) -> None:
        self.errors.append(error)

    def errors_of(self, error_type: type) -> List[SchemaError]:
        """Get collected errors of a given type."""
        return [e for e in self.errors if isinstance(e, error_type)]

    def raise_for_errors(self) -> None:
        """Raise ``SchemaValidationError`` if any error was collected."""
        if self.errors:
            raise SchemaValidationError(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": list(self.warnings),
            "graph": self.graph.to_dict() if self.graph is not None else None,
        }


__all__ = [
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
    "ValidationReport",
]
