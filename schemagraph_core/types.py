"""SchemaGraph Types - Field, relationship and index kinds.

Provides the closed vocabularies the rest of the package validates against:
- Field types (string, number, boolean, datetime, reference)
- Relationship kinds (one-to-one through many-to-many-with-attributes)
- Index kinds (single, compound, unique, full-text)

Each enum accepts its canonical value as well as the common spellings found
in hand-written schema documents, so ``"OneToMany"``, ``"one-to-many"`` and
``"one_to_many"`` all resolve to the same member.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


def _normalize(value: str) -> str:
    return value.strip().lower().replace("-", "").replace("_", "").replace(" ", "")


class _LenientEnum(Enum):
    """Enum that also resolves loosely spelled string values."""

    @classmethod
    def _missing_(cls, value: Any):
        if isinstance(value, str):
            key = _normalize(value)
            for member in cls:
                if _normalize(member.value) == key or _normalize(member.name) == key:
                    return member
        return None

    @classmethod
    def coerce(cls, value: Any):
        """Return the member for ``value``, accepting members and strings."""
        if isinstance(value, cls):
            return value
        return cls(value)

    def __str__(self) -> str:
        return self.value


class FieldType(_LenientEnum):
    """Types a field may carry."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    REFERENCE = "reference"

    @property
    def is_text(self) -> bool:
        return self is FieldType.STRING

    @property
    def is_scalar(self) -> bool:
        return self is not FieldType.REFERENCE


class RelationKind(_LenientEnum):
    """Classification produced by the relationship resolver."""

    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_MANY = "many_to_many"
    SELF = "self"
    MANY_TO_MANY_WITH_ATTRIBUTES = "many_to_many_with_attributes"


class IndexKind(_LenientEnum):
    """Kinds of index declarations."""

    SINGLE = "single"
    COMPOUND = "compound"
    UNIQUE = "unique"
    FULLTEXT = "fulltext"

    @property
    def name_prefix(self) -> str:
        return {
            IndexKind.SINGLE: "idx",
            IndexKind.COMPOUND: "idx",
            IndexKind.UNIQUE: "uq",
            IndexKind.FULLTEXT: "ft",
        }[self]


__all__ = [
    "FieldType",
    "RelationKind",
    "IndexKind",
]
