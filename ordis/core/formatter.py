"""Human-readable rendering of validation and schema errors.

Each validation error becomes a short block: a title, the problem, a tip
chosen from the error code and the field's declaration, and a details list
naming the field and schema.  Used by the CLI and by callers that surface
failures to schema authors.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from ordis.schemas.errors import SchemaError
from ordis.schemas.types import ArrayField, FieldDefinition, ObjectField, Schema, StringField

from .models import ErrorCode, ValidationError
from .paths import parse_path

__all__ = [
    "resolve_field",
    "format_validation_error",
    "format_validation_errors",
    "format_schema_error",
]


def resolve_field(schema: Optional[Schema], path: Optional[str]) -> Optional[FieldDefinition]:
    """Find the declaration behind a rendered field path such as ``items[0].price``."""
    if schema is None or not path:
        return None

    properties: Optional[dict[str, FieldDefinition]] = schema.fields
    field: Optional[FieldDefinition] = None
    for segment in parse_path(path):
        if isinstance(segment, int):
            if not isinstance(field, ArrayField):
                return None
            field = field.items
            properties = field.properties
            continue
        if properties is None or segment not in properties:
            return None
        field = properties[segment]
        properties = field.properties if isinstance(field, ObjectField) else None
    return field


def _dump(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return repr(value)


def _describe(field: Optional[FieldDefinition]) -> str:
    return f" ({field.description})" if field is not None and field.description else ""


def _missing_block(error: ValidationError, field: Optional[FieldDefinition]) -> tuple[str, str]:
    message = f"Required field '{error.field}' is missing{_describe(field)}"
    tip = (
        "The model didn't extract this field. Try:\n"
        "  • Make the field description more explicit\n"
        "  • Ensure the input text contains this information\n"
        "  • Mark the field as optional if it's not always present"
    )
    return message, tip


def _mismatch_block(error: ValidationError, field: Optional[FieldDefinition]) -> tuple[str, str]:
    if isinstance(error.expected, str):
        expected = error.expected
    else:
        expected = field.type if field is not None else "unknown"
    actual = error.actual or "unknown"
    message = (
        f"Field '{error.field}'{_describe(field)}\n"
        f"  Expected: {expected}\n"
        f"  Got: {_dump(error.value)} ({actual})"
    )
    if expected in ("number", "integer") and actual == "string":
        tip = (
            "The model returned a string instead of a number.\n"
            '  • Check if the value contains formatting (e.g., "$1,250.00")\n'
            '  • Update the field description to request "raw number without formatting"\n'
            '  • Example: "amount as a number (e.g., 1250, not $1,250.00)"'
        )
    elif expected == "string" and actual == "number":
        tip = (
            "The model returned a number instead of a string.\n"
            '  • Use type: "number" if numeric data is expected\n'
            "  • Or clarify in the description that text is required"
        )
    elif expected == "integer" and actual == "number":
        tip = (
            "Got a decimal number but expected an integer.\n"
            '  • Ask for "whole number" or "integer" in the field description'
        )
    else:
        tip = ""
    return message, tip


def _invalid_block(error: ValidationError, field: Optional[FieldDefinition]) -> tuple[str, str]:
    if isinstance(field, StringField) and field.enum is not None and isinstance(error.expected, list):
        message = (
            f"Field '{error.field}' has invalid value\n"
            f"  Allowed: {', '.join(field.enum)}\n"
            f"  Got: {_dump(error.value)}"
        )
        tip = (
            "The model returned a value not in the allowed list.\n"
            "  • Add the value to the enum list if it's valid\n"
            "  • Provide examples in the field description\n"
            "  • Use pattern matching if exact values aren't required"
        )
    elif isinstance(field, StringField) and field.pattern is not None and error.expected == field.pattern.pattern:
        message = (
            f"Field '{error.field}' doesn't match required pattern\n"
            f"  Pattern: {field.pattern.pattern}\n"
            f"  Got: {_dump(error.value)}"
        )
        tip = (
            "The value doesn't match the regex pattern.\n"
            "  • Provide an example in the field description\n"
            "  • Simplify the pattern if it's too strict"
        )
    elif isinstance(field, StringField) and field.is_date:
        message = error.message
        tip = (
            "The value is not a real calendar date.\n"
            "  • Ask for dates in YYYY-MM-DD form in the field description\n"
            "  • Check the source text for a day or month out of range"
        )
    elif isinstance(error.expected, dict):
        message = error.message
        tip = (
            "Value is out of the allowed range.\n"
            "  • Check if the constraint is correct\n"
            "  • Mention the range in the field description"
        )
    else:
        message, tip = error.message, ""
    return message, tip


def _render(title: str, message: str, tip: str, details: list[str]) -> str:
    lines = [f"✗ {title}", "   " + message.replace("\n", "\n   ")]
    if tip:
        lines += ["", "Tip:", "   " + tip.replace("\n", "\n   ")]
    if details:
        lines += ["", "Details:"]
        lines += [f"   • {d}" for d in details]
    return "\n".join(lines)


def format_validation_error(error: ValidationError, schema: Optional[Schema] = None) -> str:
    """Render one validation error with a remediation tip."""
    field = resolve_field(schema, error.field)

    if error.code == ErrorCode.FIELD_MISSING:
        message, tip = _missing_block(error, field)
    elif error.code == ErrorCode.TYPE_MISMATCH:
        message, tip = _mismatch_block(error, field)
    elif error.code == ErrorCode.FIELD_INVALID:
        message, tip = _invalid_block(error, field)
    else:
        message, tip = error.message, ""

    details: list[str] = []
    if schema is not None and schema.name:
        details = [f"Field: {error.field or '<root>'}", f"Schema: {schema.name}"]

    return _render("Field Validation Error", message, tip, details)


def format_validation_errors(errors: list[ValidationError], schema: Optional[Schema] = None) -> str:
    """Render a whole error list, or ``"Validation passed"`` when empty."""
    if not errors:
        return "Validation passed"

    plural = "s" if len(errors) > 1 else ""
    blocks = [f"Found {len(errors)} validation error{plural}:\n"]
    for error in errors:
        blocks.append(format_validation_error(error, schema))
        blocks.append("")
    return "\n".join(blocks)


def format_schema_error(exc: SchemaError) -> str:
    """One-line rendering of a schema-definition error."""
    where = f" at '{exc.field}'" if exc.field else ""
    return f"[{exc.code.value}]{where} {exc.message}"
