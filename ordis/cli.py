# ordis/cli.py
"""
ORDIS CLI -- Click commands with a coral/greige terminal UI.

Provides the ``ordis`` console entry-point declared in pyproject.toml as
``ordis.cli:cli``.  Commands call straight into the library:

- schema validate: load_schema -- check a schema file and list its fields
- check:           process_output -- coerce, validate and gate a data file
- config show:     OrdisConfig display
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping, Optional

import click
from rich.console import Console
from rich.markup import escape as _esc

from . import __version__
from . import cli_theme as theme
from .config import get_config
from .core import ExtractionResult, format_schema_error, format_validation_errors, process_output
from .schemas import (
    ArrayField,
    FieldDefinition,
    IntegerField,
    NumberField,
    ObjectField,
    Schema,
    SchemaError,
    StringField,
    load_schema,
)
from .utils.logging import get_logger, log_check_complete, log_check_start, log_schema_info, setup_logging

console = Console()

# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------


def _print_version(
    ctx: click.Context,
    _param: click.Parameter,
    value: bool,
) -> None:
    if not value or ctx.resilient_parsing:
        return
    theme.print_version(__version__, console)
    ctx.exit()


# ---------------------------------------------------------------------------
# Main CLI group
# ---------------------------------------------------------------------------


@click.group(invoke_without_command=True)
@click.option(
    "--version",
    is_flag=True,
    callback=_print_version,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Session log level (default: ORDIS_LOG_LEVEL or INFO).",
)
@click.option("--verbose", "-v", is_flag=True, help="Log at DEBUG and mirror the log to stderr.")
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str], verbose: bool) -> None:
    """ORDIS -- schema validation and coercion for structured model output."""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        return

    cfg = get_config()
    level = "DEBUG" if verbose else (log_level or cfg.log_level)
    # An explicit ORDIS_LOG_DIR wins over the home-derived directory
    log_dir = None if os.getenv("ORDIS_LOG_DIR") else cfg.log_dir
    setup_logging(level=level, log_dir=log_dir, console_output=verbose)


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def _dump(value: Any) -> str:
    return _esc(json.dumps(value, ensure_ascii=False, default=str))


def _constraints(field: FieldDefinition) -> str:
    parts: list[str] = []
    if isinstance(field, StringField):
        if field.enum is not None:
            parts.append("enum: " + ", ".join(field.enum))
        if field.pattern is not None:
            parts.append(f"pattern: {field.pattern.pattern}")
        if field.format:
            parts.append(f"format: {field.format}")
    elif isinstance(field, (NumberField, IntegerField)):
        if field.min is not None:
            parts.append(f"min: {field.min}")
        if field.max is not None:
            parts.append(f"max: {field.max}")
    return _esc("; ".join(parts))


def _field_rows(fields: Mapping[str, FieldDefinition], prefix: str = "") -> list[tuple[str, FieldDefinition]]:
    rows: list[tuple[str, FieldDefinition]] = []
    for name, field in fields.items():
        label = f"{prefix}{name}"
        rows.append((label, field))
        if isinstance(field, ArrayField):
            rows.extend(_field_rows(field.items.properties, f"{label}[]."))
        elif isinstance(field, ObjectField):
            rows.extend(_field_rows(field.properties, f"{label}."))
    return rows


def _print_schema(schema: Schema) -> None:
    theme.section("Fields", console, "01")
    t = theme.make_table()
    t.add_column("Field", style=f"bold {theme.CORAL}", no_wrap=True)
    t.add_column("Type")
    t.add_column("Required")
    t.add_column("Constraints", style=theme.MUTED)
    t.add_column("Description", style=theme.MUTED)
    for label, field in _field_rows(schema.fields):
        t.add_row(
            _esc(label),
            field.type,
            "no" if field.optional else "yes",
            _constraints(field),
            _esc(field.description or ""),
        )
    console.print(t)

    if schema.metadata is not None or schema.confidence is not None:
        theme.section("Schema", console, "02")
        kv = theme.make_kv_table()
        if schema.metadata is not None:
            for key in ("name", "version", "description"):
                value = getattr(schema.metadata, key)
                if value:
                    kv.add_row(key, _esc(str(value)))
        if schema.confidence is not None:
            kv.add_row("threshold", f"{schema.confidence.threshold:g}%")
            kv.add_row("failOnLowConfidence", str(schema.confidence.fail_on_low_confidence))
        console.print(kv)


def _print_result(result: ExtractionResult, schema: Schema) -> None:
    status = theme.badge("PASS", "pass") if result.success else theme.badge("FAIL", "error")
    theme.section("Result", console, "01")
    kv = theme.make_kv_table()
    kv.add_row("status", status)
    if result.schema_name:
        kv.add_row("schema", _esc(result.schema_name))
    if result.confidence is not None:
        kv.add_row("confidence", f"{result.confidence:g}%")
    kv.add_row("meets threshold", str(result.meets_threshold))
    kv.add_row("errors", str(len(result.errors)))
    kv.add_row("warnings", str(len(result.warnings)))
    console.print(kv)

    if result.warnings:
        theme.section("Coercions", console, "02")
        t = theme.make_table()
        t.add_column("Field", style=f"bold {theme.CORAL}", no_wrap=True)
        t.add_column("Original")
        t.add_column("Coerced")
        t.add_column("Message", style=theme.MUTED)
        for w in result.warnings:
            t.add_row(_esc(w.field), _dump(w.original_value), _dump(w.coerced_value), _esc(w.message))
        console.print(t)

    if result.errors:
        theme.section("Errors", console, "03")
        console.print(format_validation_errors(result.errors, schema), markup=False, highlight=False)


def _load_schema_or_fail(path: Path) -> Schema:
    try:
        return load_schema(path)
    except SchemaError as exc:
        raise click.ClickException(f"Schema validation failed: {format_schema_error(exc)}")


# ---------------------------------------------------------------------------
# schema
# ---------------------------------------------------------------------------


@cli.group()
def schema() -> None:
    """Inspect and validate schema documents."""


@schema.command("validate")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def schema_validate(file_path: Path) -> None:
    """Validate a JSON or YAML schema file and show its fields.

    \b
    Examples:
      ordis schema validate invoice.schema.json
      ordis schema validate invoice.yaml
    """
    logger = get_logger(__name__)
    parsed = _load_schema_or_fail(file_path)
    log_schema_info(logger, parsed.name, json.dumps(parsed.to_dict()))

    console.print(theme.ok("Schema is valid"))
    console.print(theme.info(f"{len(parsed.fields)} top-level field(s)"))
    _print_schema(parsed)


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


@cli.command("check")
@click.option(
    "--schema", "schema_path", required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Schema file (.json, .yaml or .yml).",
)
@click.option(
    "--data", "data_path", required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON file holding the model output to check.",
)
@click.option("--confidence", type=click.FloatRange(0, 100), default=None, help="Overall confidence score, 0-100.")
@click.option("--no-coerce", is_flag=True, help="Validate the data exactly as given.")
@click.option("--lenient-formats", is_flag=True, help="Treat date/date-time strings as plain strings.")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
@click.option(
    "--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None,
    help="Also write the JSON result to this file.",
)
@click.pass_context
def check(
    ctx: click.Context,
    schema_path: Path,
    data_path: Path,
    confidence: Optional[float],
    no_coerce: bool,
    lenient_formats: bool,
    as_json: bool,
    output: Optional[Path],
) -> None:
    """Coerce and validate a model output file against a schema.

    Exits with status 0 when the output passes, 1 otherwise.

    \b
    Examples:
      ordis check --schema invoice.json --data output.json
      ordis check --schema invoice.yaml --data output.json --confidence 82 --json
    """
    cfg = get_config()
    logger = get_logger(__name__)

    parsed = _load_schema_or_fail(schema_path)
    try:
        data = json.loads(data_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"Data file is not valid JSON: {exc}")

    coerce_values = cfg.coerce_before_validate and not no_coerce
    strict_formats = cfg.strict_formats and not lenient_formats
    log_check_start(logger, str(data_path), parsed.name, coerce_values, strict_formats)

    result = process_output(
        data,
        parsed,
        confidence=confidence,
        coerce_values=coerce_values,
        strict_formats=strict_formats,
    )
    log_check_complete(logger, str(data_path), result.success, len(result.errors), len(result.warnings))

    payload = json.dumps(result.to_dict(), indent=2, ensure_ascii=False, default=str)
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(payload + "\n", encoding="utf-8")

    if as_json or cfg.output_format == "json":
        click.echo(payload)
    else:
        _print_result(result, parsed)
        if output is not None:
            console.print(theme.info(f"Result written to {_esc(str(output))}"))

    if not result.success:
        ctx.exit(1)


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


@cli.group()
def config() -> None:
    """View ORDIS configuration."""


@config.command("show")
def config_show() -> None:
    """Show the effective configuration.

    \b
    Examples:
      ordis config show
    """
    cfg = get_config()

    theme.section("Checking", console, "01")
    t = theme.make_kv_table()
    t.add_row("strict_formats", str(cfg.strict_formats))
    t.add_row("coerce_before_validate", str(cfg.coerce_before_validate))
    t.add_row("output_format", cfg.output_format)
    console.print(t)

    theme.section("Paths & Logging", console, "02")
    t = theme.make_kv_table()
    t.add_row("home_dir", _esc(str(cfg.home_dir)))
    t.add_row("log_dir", _esc(str(cfg.log_dir)))
    t.add_row("log_level", cfg.log_level)
    console.print(t)
