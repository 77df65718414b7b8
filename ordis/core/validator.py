"""Validation engine: read-only conformance check of instance data.

Walks the schema in declaration order and collects every problem it finds;
it never stops at the first failure and never raises for data-level
problems.  The schema is assumed to have passed
:func:`ordis.schemas.validate_schema` already.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from datetime import date
from typing import Any, Union

from ordis.schemas.types import (
    ArrayField,
    BooleanField,
    FieldDefinition,
    IntegerField,
    NumberField,
    ObjectField,
    Schema,
    StringField,
)
from ordis.utils.values import is_number, type_name

from .models import ErrorCode, ValidationError, ValidationResult
from .paths import FieldPath, format_path

logger = logging.getLogger(__name__)

__all__ = ["validate", "validate_value", "is_iso_date", "is_iso_datetime"]

_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_ISO_TIME_RE = re.compile(
    r"^[T ](?:[01]\d|2[0-3]):[0-5]\d(?::[0-5]\d(?:\.\d+)?)?(?:Z|[+-](?:[01]\d|2[0-3]):?[0-5]\d)?$"
)


def _calendar_date_length(value: str) -> int:
    """Length of a leading real calendar date, or 0 when there is none."""
    match = _ISO_DATE_RE.match(value)
    if match is None:
        return 0
    try:
        date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return 0
    return match.end()


def is_iso_date(value: str) -> bool:
    """True when *value* is exactly a real ``YYYY-MM-DD`` calendar date."""
    return _calendar_date_length(value) == len(value) == 10


def is_iso_datetime(value: str) -> bool:
    """True for an ISO date optionally followed by an ISO time suffix."""
    end = _calendar_date_length(value)
    if end == 0:
        return False
    return end == len(value) or bool(_ISO_TIME_RE.match(value[end:]))


def _error(path: FieldPath, message: str, code: ErrorCode, **extra: Any) -> ValidationError:
    return ValidationError(field=format_path(path), message=message, code=code, **extra)


def _mismatch(path: FieldPath, value: Any, expected: str) -> ValidationError:
    actual = type_name(value)
    label = format_path(path)
    return _error(
        path,
        f"Field '{label}' must be {'an' if expected[0] in 'aeiou' else 'a'} {expected}, got {actual}",
        ErrorCode.TYPE_MISMATCH,
        value=value,
        expected=expected,
        actual=actual,
    )


def _check_string(value: Any, field: StringField, path: FieldPath, strict_formats: bool) -> list[ValidationError]:
    if not isinstance(value, str):
        return [_mismatch(path, value, "string")]

    label = format_path(path)
    errors: list[ValidationError] = []
    if field.enum is not None and value not in field.enum:
        errors.append(
            _error(
                path,
                f"Field '{label}' must be one of: {', '.join(field.enum)}. Got: {value}",
                ErrorCode.FIELD_INVALID,
                value=value,
                expected=list(field.enum),
            )
        )
    if field.pattern is not None and field.pattern.search(value) is None:
        errors.append(
            _error(
                path,
                f"Field '{label}' does not match pattern: {field.pattern.pattern}",
                ErrorCode.FIELD_INVALID,
                value=value,
                expected=field.pattern.pattern,
            )
        )
    if strict_formats and field.is_date:
        valid = is_iso_date(value) if field.format == "date" else is_iso_datetime(value)
        if not valid:
            shape = "YYYY-MM-DD" if field.format == "date" else "YYYY-MM-DD[THH:MM[:SS]]"
            errors.append(
                _error(
                    path,
                    f"Field '{label}' must be a valid {field.format} ({shape}). Got: {value}",
                    ErrorCode.FIELD_INVALID,
                    value=value,
                    expected=field.format,
                )
            )
    return errors


def _check_range(value: Union[int, float], field: Union[NumberField, IntegerField], path: FieldPath) -> list[ValidationError]:
    label = format_path(path)
    bounds = {k: v for k, v in (("min", field.min), ("max", field.max)) if v is not None}
    errors: list[ValidationError] = []
    if field.min is not None and value < field.min:
        errors.append(
            _error(
                path,
                f"Field '{label}' must be >= {field.min}, got {value}",
                ErrorCode.FIELD_INVALID,
                value=value,
                expected=bounds,
            )
        )
    if field.max is not None and value > field.max:
        errors.append(
            _error(
                path,
                f"Field '{label}' must be <= {field.max}, got {value}",
                ErrorCode.FIELD_INVALID,
                value=value,
                expected=bounds,
            )
        )
    return errors


def _check_array(value: Any, field: ArrayField, path: FieldPath, strict_formats: bool) -> list[ValidationError]:
    if not isinstance(value, list):
        return [_mismatch(path, value, "array")]

    errors: list[ValidationError] = []
    for index, item in enumerate(value):
        item_path = path + (index,)
        if not isinstance(item, Mapping):
            errors.append(_mismatch(item_path, item, "object"))
            continue
        errors.extend(_check_mapping(item, field.items.properties, item_path, strict_formats))
    return errors


def _check_value(value: Any, field: FieldDefinition, path: FieldPath, strict_formats: bool) -> list[ValidationError]:
    if isinstance(field, StringField):
        return _check_string(value, field, path, strict_formats)

    if isinstance(field, NumberField):
        if not is_number(value) or value != value:
            return [_mismatch(path, value, "number")]
        return _check_range(value, field, path)

    if isinstance(field, IntegerField):
        if not is_number(value) or not (isinstance(value, int) or value.is_integer()):
            return [_mismatch(path, value, "integer")]
        return _check_range(value, field, path)

    if isinstance(field, BooleanField):
        if not isinstance(value, bool):
            return [_mismatch(path, value, "boolean")]
        return []

    if isinstance(field, ArrayField):
        return _check_array(value, field, path, strict_formats)

    if isinstance(field, ObjectField):
        if not isinstance(value, Mapping):
            return [_mismatch(path, value, "object")]
        return _check_mapping(value, field.properties, path, strict_formats)

    return []


def _check_mapping(
    data: Mapping[str, Any],
    fields: Mapping[str, FieldDefinition],
    path: FieldPath,
    strict_formats: bool,
) -> list[ValidationError]:
    errors: list[ValidationError] = []
    for name, field in fields.items():
        field_path = path + (name,)
        value = data.get(name)
        if value is None:
            if not field.optional:
                label = format_path(field_path)
                errors.append(
                    _error(field_path, f"Required field '{label}' is missing", ErrorCode.FIELD_MISSING)
                )
            continue
        errors.extend(_check_value(value, field, field_path, strict_formats))
    return errors


def validate_value(
    value: Any,
    field: FieldDefinition,
    path: str = "",
    *,
    strict_formats: bool = True,
) -> list[ValidationError]:
    """Validate one present, non-null value against one field definition."""
    root: FieldPath = (path,) if path else ()
    return _check_value(value, field, root, strict_formats)


def validate(
    data: Any,
    schema: Union[Schema, Mapping[str, FieldDefinition]],
    *,
    strict_formats: bool = True,
) -> ValidationResult:
    """Check *data* against *schema* and report every failure.

    Parameters
    ----------
    data:
        Instance data, normally the output of :func:`ordis.core.coercion.coerce`.
    schema:
        A :class:`Schema`, or a bare mapping of field definitions.
    strict_formats:
        When True, ``format: date`` / ``date-time`` strings must be real ISO
        dates; when False they are treated as plain strings.

    Returns
    -------
    ValidationResult
        ``valid`` is True exactly when ``errors`` is empty.  Errors follow
        schema declaration order, array items in index order.
    """
    fields = schema.fields if isinstance(schema, Schema) else schema

    if not isinstance(data, Mapping):
        actual = type_name(data)
        errors = [
            ValidationError(
                message=f"Extracted data must be an object, got {actual}",
                code=ErrorCode.TYPE_MISMATCH,
                value=data,
                expected="object",
                actual=actual,
            )
        ]
    else:
        errors = _check_mapping(data, fields, (), strict_formats)

    if errors:
        logger.debug("Validation found %d error(s)", len(errors))
    return ValidationResult(valid=not errors, errors=errors)
