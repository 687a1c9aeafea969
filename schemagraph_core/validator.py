"""SchemaGraph Validator - Batch validation pipeline.

Runs one schema document through every stage in strict order:

    register entities -> seal -> unique indexes -> resolve relationships -> other indexes

Unique indexes on registered entities go first because a unique index makes
its field unique, and relationship classification depends on that. Problems
found while loading the document itself are reported ahead of everything
else.

Each stage keeps going after a failed declaration so the report lists every
problem in the document. With ``fail_fast`` the first error is raised
instead.

Every call builds its own registry, resolver and index validator, so separate
documents never share mutable state.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Tuple

import yaml

from schemagraph_core.document import IndexSpec, SchemaDocument
from schemagraph_core.errors import DocumentError, SchemaError, ValidationReport
from schemagraph_core.graph import SchemaGraph
from schemagraph_core.indexes import IndexValidator
from schemagraph_core.relations import RelationshipResolver
from schemagraph_core.schema import EntityRegistry
from schemagraph_core.types import IndexKind

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES
    return bool(value)


@dataclass
class ValidatorConfig:
    """Configuration for schema validation."""

    fail_fast: bool = False
    warn_unindexed_foreign_keys: bool = True
    junction_prefix: str = "_"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ValidatorConfig":
        if not isinstance(data, Mapping):
            raise DocumentError(f"validator settings must be a mapping, got {type(data).__name__}")

        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        unknown = sorted(set(data) - set(known))
        if unknown:
            logger.warning(f"Ignoring unknown validator settings: {', '.join(unknown)}")

        for flag in ("fail_fast", "warn_unindexed_foreign_keys"):
            if flag in known:
                known[flag] = _as_bool(known[flag])
        if "junction_prefix" in known:
            known["junction_prefix"] = str(known["junction_prefix"])
        return cls(**known)

    @classmethod
    def from_yaml(cls, path: Path) -> "ValidatorConfig":
        """Load configuration from YAML file."""
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_env(cls) -> "ValidatorConfig":
        """Load configuration from environment variables."""
        return cls(
            fail_fast=os.getenv("SCHEMAGRAPH_FAIL_FAST", "false").lower() in _TRUE_VALUES,
            warn_unindexed_foreign_keys=os.getenv("SCHEMAGRAPH_WARN_UNINDEXED_FKS", "true").lower() in _TRUE_VALUES,
            junction_prefix=os.getenv("SCHEMAGRAPH_JUNCTION_PREFIX", "_"),
        )


class SchemaValidator:
    """Validates schema documents and produces normalized graphs."""

    def __init__(self, config: Optional[ValidatorConfig] = None):
        self.config = config or ValidatorConfig()

    def _collect(self, report: ValidationReport, error: SchemaError) -> None:
        if self.config.fail_fast:
            raise error
        logger.debug(f"Collected {error.rule}: {error}")
        report.add(error)

    def _attempt(self, report: ValidationReport, action: Callable[[], Any]) -> Any:
        try:
            return action()
        except SchemaError as e:
            self._collect(report, e)
            return None

    def validate(self, document: SchemaDocument) -> ValidationReport:
        """Validate a document.

        Args:
            document: Already-parsed schema document

        Returns:
            Report with the normalized graph, errors and warnings
        """
        report = ValidationReport()
        registry = EntityRegistry()

        for error in document.errors:
            self._collect(report, error)

        for declared in document.entities:
            self._attempt(report, lambda declared=declared: registry.register_entity(declared.name, declared.fields))
        registry.seal_all()

        resolver = RelationshipResolver(registry, junction_prefix=self.config.junction_prefix)
        indexes = IndexValidator(registry, resolver)

        unique_first, remaining = _split_unique_indexes(document.indexes, registry)
        for ix in unique_first:
            self._attempt(report, lambda ix=ix: indexes.declare_index(ix.entity, ix.fields, ix.kind, name=ix.name))

        for rel in document.relationships:
            self._attempt(
                report,
                lambda rel=rel: resolver.declare_relationship(
                    rel.source,
                    rel.target,
                    foreign_key=rel.foreign_key,
                    unique_fk=rel.unique_fk,
                    join_entity=rel.join_entity,
                ),
            )

        for ix in remaining:
            self._attempt(report, lambda ix=ix: indexes.declare_index(ix.entity, ix.fields, ix.kind, name=ix.name))

        if self.config.warn_unindexed_foreign_keys:
            for entity_name, fk in indexes.unindexed_foreign_keys():
                message = f"{entity_name}.{fk}: foreign key has no index leading with it"
                logger.warning(message)
                report.warnings.append(message)

        report.graph = SchemaGraph.build(registry, resolver, indexes, name=document.name)

        logger.info(
            f"Validated schema{' ' + document.name if document.name else ''}: "
            f"{len(report.graph.entities)} entities, {len(report.graph.relationships)} relationships, "
            f"{len(report.graph.indexes)} indexes, {len(report.errors)} errors"
        )
        return report


def _split_unique_indexes(
    declared: List[IndexSpec], registry: EntityRegistry
) -> Tuple[List[IndexSpec], List[IndexSpec]]:
    """Separate unique indexes on registered entities from everything else."""
    unique_first: List[IndexSpec] = []
    remaining: List[IndexSpec] = []
    for ix in declared:
        try:
            kind = IndexKind.coerce(ix.kind)
        except ValueError:
            kind = None
        if kind is IndexKind.UNIQUE and ix.entity in registry:
            unique_first.append(ix)
        else:
            remaining.append(ix)
    return unique_first, remaining


def validate(document: SchemaDocument, fail_fast: bool = False) -> ValidationReport:
    """Validate a document with default settings."""
    return SchemaValidator(ValidatorConfig(fail_fast=fail_fast)).validate(document)


__all__ = [
    "ValidatorConfig",
    "SchemaValidator",
    "validate",
]
