"""SchemaGraph CLI - Command-line interface for schema validation.

Runs the validator over schema documents stored as YAML or JSON:
- Validation with a full error report
- Export of the normalized graph
- Graph fingerprints for change detection

Usage:
    schemagraph validate schema.yaml
    schemagraph validate schema.yaml --fail-fast --config validator.yaml
    schemagraph export schema.yaml --format json
    schemagraph fingerprint schema.yaml

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

import yaml

from schemagraph_core import __version__
from schemagraph_core.document import SchemaDocument
from schemagraph_core.errors import SchemaError, ValidationReport
from schemagraph_core.validator import SchemaValidator, ValidatorConfig


# =============================================================================
# Output Formatting
# =============================================================================


class OutputFormatter:
    """Formats output for CLI display."""

    COLORS = {
        "reset": "\033[0m",
        "bold": "\033[1m",
        "dim": "\033[2m",
        "red": "\033[31m",
        "green": "\033[32m",
        "yellow": "\033[33m",
    }

    def __init__(self, color: bool = True, json_output: bool = False):
        """Initialize formatter.

        Args:
            color: Enable colored output
            json_output: Output as JSON
        """
        self.color = color and sys.stdout.isatty()
        self.json_output = json_output

    def _c(self, text: str, color: str) -> str:
        """Colorize text if color enabled."""
        if self.color:
            return f"{self.COLORS.get(color, '')}{text}{self.COLORS['reset']}"
        return text

    def success(self, message: str) -> None:
        """Print success message."""
        if self.json_output:
            print(json.dumps({"status": "success", "message": message}))
        else:
            print(self._c("✓", "green"), message)

    def error(self, message: str) -> None:
        """Print error message."""
        if self.json_output:
            print(json.dumps({"status": "error", "message": message}))
        else:
            print(self._c("✗", "red"), message, file=sys.stderr)

    def warning(self, message: str) -> None:
        """Print warning message."""
        if self.json_output:
            print(json.dumps({"status": "warning", "message": message}))
        else:
            print(self._c("⚠", "yellow"), message)

    def header(self, text: str) -> None:
        """Print header."""
        if not self.json_output:
            print()
            print(self._c(f"═══ {text} ═══", "bold"))
            print()

    def table(self, headers: List[str], rows: List[List[Any]]) -> None:
        """Print one row per relationship or index, columns padded to fit."""
        if not rows:
            print(self._c("(none declared)", "dim"))
            return

        cells = [[str(cell) for cell in row] for row in rows]
        widths = [max(len(text) for text in column) for column in zip(headers, *cells)]

        def line(values: List[str]) -> str:
            return " │ ".join(v.ljust(w) for v, w in zip(values, widths)).rstrip()

        print(self._c(line(headers), "bold"))
        print("─┼─".join("─" * w for w in widths))
        for row in cells:
            print(line(row))

    def report(self, report: ValidationReport) -> None:
        """Print a validation report."""
        if self.json_output:
            print(json.dumps(report.to_dict()))
            return

        graph = report.graph
        if graph is not None:
            self.header("Relationships")
            self.table(
                ["Source", "Target", "Kind", "Foreign keys", "Join"],
                [
                    [r.source, r.target, r.kind.value, ", ".join(r.foreign_keys), r.join_entity or ""]
                    for r in graph.relationships
                ],
            )
            self.header("Indexes")
            self.table(
                ["Name", "Entity", "Fields", "Kind"],
                [[i.name, i.entity, ", ".join(i.fields), i.kind.value] for i in graph.indexes],
            )

        for message in report.warnings:
            self.warning(message)
        for error in report.errors:
            self.error(str(error))

        if report.ok:
            self.success("Schema is valid")
        else:
            self.error(f"{len(report.errors)} validation error(s)")


# =============================================================================
# Command Handlers
# =============================================================================


def _load_config(args: argparse.Namespace) -> ValidatorConfig:
    config = ValidatorConfig.from_yaml(Path(args.config)) if args.config else ValidatorConfig.from_env()
    if getattr(args, "fail_fast", False):
        config.fail_fast = True
    return config


def _run(args: argparse.Namespace) -> ValidationReport:
    document = SchemaDocument.load(Path(args.path))
    return SchemaValidator(_load_config(args)).validate(document)


def cmd_validate(args: argparse.Namespace, formatter: OutputFormatter) -> int:
    """Validate a schema document."""
    report = _run(args)
    formatter.report(report)
    return 0 if report.ok else 1


def cmd_export(args: argparse.Namespace, formatter: OutputFormatter) -> int:
    """Print the normalized graph."""
    report = _run(args)
    if not report.ok:
        formatter.report(report)
        return 1

    if args.format == "json":
        print(report.graph.to_json())
    else:
        print(report.graph.to_yaml(), end="")
    return 0


def cmd_fingerprint(args: argparse.Namespace, formatter: OutputFormatter) -> int:
    """Print the graph fingerprint."""
    report = _run(args)
    if not report.ok:
        formatter.report(report)
        return 1

    fingerprint = report.graph.fingerprint()
    if formatter.json_output:
        print(json.dumps({"path": args.path, "fingerprint": fingerprint}))
    else:
        print(fingerprint)
    return 0


# =============================================================================
# Main CLI
# =============================================================================


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="schemagraph",
        description="SchemaGraph - Relationship and index validation for schema documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  schemagraph validate schema.yaml
  schemagraph validate schema.json --fail-fast
  schemagraph export schema.yaml --format json
  schemagraph fingerprint schema.yaml
        """,
    )

    parser.add_argument("--version", action="version", version=f"SchemaGraph {__version__}")
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("--verbose", "-v", action="count", default=0, help="Increase log verbosity")
    parser.add_argument("--config", "-c", help="Validator configuration YAML")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Validate
    validate_parser = subparsers.add_parser("validate", help="Validate a schema document")
    validate_parser.add_argument("path", help="Schema document (YAML or JSON)")
    validate_parser.add_argument("--fail-fast", action="store_true", help="Stop at the first error")

    # Export
    export_parser = subparsers.add_parser("export", help="Print the normalized schema graph")
    export_parser.add_argument("path", help="Schema document (YAML or JSON)")
    export_parser.add_argument("--format", "-f", default="yaml", choices=["yaml", "json"])

    # Fingerprint
    fingerprint_parser = subparsers.add_parser("fingerprint", help="Print the schema graph fingerprint")
    fingerprint_parser.add_argument("path", help="Schema document (YAML or JSON)")

    return parser


def _configure_logging(verbosity: int) -> None:
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    formatter = OutputFormatter(color=not args.no_color, json_output=args.json)

    commands = {
        "validate": cmd_validate,
        "export": cmd_export,
        "fingerprint": cmd_fingerprint,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler(args, formatter)
    except SchemaError as e:
        formatter.error(str(e))
        return 1
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
        formatter.error(f"Cannot load {args.path}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
