"""Coercion engine: best-effort normalization of model output.

Generative models get the *representation* of a value wrong far more often
than the value itself: ``"123"`` instead of ``123``, ``"yes"`` instead of
``true``, ``"Series A"`` instead of ``"series_a"``, ``"11/20/24"`` instead
of ``"2024-11-20"``.  This module repairs those cases and records every
change as a :class:`CoercionWarning`.  It never raises and never guesses at
meaning: anything it cannot resolve is passed through unchanged for the
validation engine to report.

Rules, per declared field present in the data (absent or null values are
left alone):

- null-like strings (``"null"``, ``"none"``, ``"n/a"``, ``"na"``,
  ``"undefined"``, ``""``) become ``None`` on optional fields only;
- number / integer / boolean / string targets get primitive conversion;
- string fields with ``enum`` get separator- and case-insensitive matching;
- string fields with ``format: date`` / ``date-time`` get ISO dates;
- array items and object properties are coerced recursively.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping
from typing import Any, Callable, NamedTuple, Optional, Union

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
from ordis.utils.values import is_number

from .models import CoercionWarning
from .paths import FieldPath, format_path

logger = logging.getLogger(__name__)

__all__ = [
    "NULL_STRINGS",
    "CoercionOutcome",
    "coerce",
    "coerce_value",
    "coerce_enum_value",
    "coerce_date_value",
    "normalize_enum_value",
]

NULL_STRINGS = frozenset({"null", "none", "n/a", "na", "undefined", ""})
TRUE_STRINGS = frozenset({"true", "yes", "1"})
FALSE_STRINGS = frozenset({"false", "no", "0"})

_INT_LITERAL_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_LITERAL_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")
_ENUM_SEPARATOR_RE = re.compile(r"[\s-]+")

# A step returns the (possibly) new value and a warning message, or None
# as the message when the value is unchanged or only lost an ISO time suffix.
_Step = Callable[[Any], tuple[Any, Optional[str]]]


class CoercionOutcome(NamedTuple):
    """Coerced copy of the data plus one warning per change made."""

    data: dict[str, Any]
    warnings: list[CoercionWarning]


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return str(value)


def _is_null_like(value: Any) -> bool:
    return isinstance(value, str) and value.strip().lower() in NULL_STRINGS


# ---------------------------------------------------------------------------
# Primitive targets
# ---------------------------------------------------------------------------


def _to_number(value: Any) -> tuple[Any, Optional[str]]:
    if is_number(value):
        return value, None

    if isinstance(value, bool):
        number = 1 if value else 0
        return number, f"Coerced boolean {_stringify(value)} to number {number}"

    if isinstance(value, str):
        text = value.strip()
        parsed: Union[int, float]
        if _INT_LITERAL_RE.match(text):
            try:
                parsed = int(text)
            except ValueError:
                # Past the interpreter's int string-conversion limit
                parsed = float(text)
        elif _FLOAT_LITERAL_RE.match(text):
            parsed = float(text)
        else:
            return value, None
        if not math.isfinite(parsed):
            return value, None
        return parsed, f"Coerced string '{value}' to number {parsed}"

    return value, None


def _to_integer(value: Any) -> tuple[Any, Optional[str]]:
    number, message = _to_number(value)
    if not is_number(number):
        return value, None
    if isinstance(number, int):
        return number, message
    if not math.isfinite(number):
        return value, None
    if number.is_integer():
        if message is None:
            return number, None
        return int(number), f"Coerced string '{value}' to integer {int(number)}"

    truncated = math.trunc(number)
    shown = f"'{value}'" if isinstance(value, str) else _stringify(value)
    return truncated, f"Coerced {shown} to integer {truncated}"


def _to_boolean(value: Any) -> tuple[Any, Optional[str]]:
    if isinstance(value, bool):
        return value, None

    if isinstance(value, str):
        probe = value.strip().lower()
        if probe in TRUE_STRINGS:
            return True, f"Coerced string '{value}' to boolean true"
        if probe in FALSE_STRINGS:
            return False, f"Coerced string '{value}' to boolean false"
        return value, None

    if is_number(value):
        flag = value != 0
        return flag, f"Coerced number {_stringify(value)} to boolean {_stringify(flag)}"

    return value, None


def _to_string(value: Any) -> tuple[Any, Optional[str]]:
    if isinstance(value, str):
        return value, None
    if isinstance(value, bool) or is_number(value):
        text = _stringify(value)
        kind = "boolean" if isinstance(value, bool) else "number"
        return text, f"Coerced {kind} {text} to string '{text}'"
    return value, None


# ---------------------------------------------------------------------------
# Enum normalization
# ---------------------------------------------------------------------------


def normalize_enum_value(value: str) -> str:
    """Trim, lowercase and collapse runs of spaces/hyphens into ``_``."""
    return _ENUM_SEPARATOR_RE.sub("_", value.strip().lower())


def coerce_enum_value(value: Any, enum_values: tuple[str, ...] | list[str]) -> tuple[Any, Optional[str]]:
    """Map *value* onto a declared enum member.

    Exact membership wins.  Otherwise the first member (in declaration
    order) with the same normalized form is chosen.  No match leaves the
    value unchanged.
    """
    if not isinstance(value, str) or value in enum_values:
        return value, None

    key = normalize_enum_value(value)
    for member in enum_values:
        if normalize_enum_value(member) == key:
            return member, f"Coerced enum value '{value}' to '{member}'"
    return value, None


# ---------------------------------------------------------------------------
# Date normalization
# ---------------------------------------------------------------------------

_MONTHS: dict[str, int] = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sep": 9, "sept": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}

_ISO_TIME_SUFFIX = r"[T ]\d{1,2}(?::\d{2}){0,2}(?:\.\d+)?(?:Z|[+-]\d{2}:?\d{2})?"


def _year_from(text: str) -> int:
    year = int(text)
    if len(text) == 2:
        year += 2000 if year < 50 else 1900
    return year


def _month_from(name: str) -> Optional[int]:
    return _MONTHS.get(name.lower())


# Tried in order; the first regex that matches decides the outcome.
# Parsers return (year, month, day); month is None for an unknown month name.
_DATE_PATTERNS: list[tuple[re.Pattern[str], Callable[[re.Match[str]], tuple[int, Optional[int], int]]]] = [
    # 2024-11-20, 2024-1-5, 2024-11-20T10:30:00Z
    (
        re.compile(rf"^(\d{{4}})-(\d{{1,2}})-(\d{{1,2}})(?:{_ISO_TIME_SUFFIX})?$"),
        lambda m: (int(m.group(1)), int(m.group(2)), int(m.group(3))),
    ),
    # US: 11/20/2024, 11/20/24
    (
        re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4}|\d{2})$"),
        lambda m: (_year_from(m.group(3)), int(m.group(1)), int(m.group(2))),
    ),
    # European: 20-11-2024, 20.11.2024
    (
        re.compile(r"^(\d{1,2})([-.])(\d{1,2})\2(\d{4})$"),
        lambda m: (int(m.group(4)), int(m.group(3)), int(m.group(1))),
    ),
    # Written: January 15, 2024 / Jan 15 2024
    (
        re.compile(r"^([A-Za-z]+)\.?\s+(\d{1,2}),?\s+(\d{4})$"),
        lambda m: (int(m.group(3)), _month_from(m.group(1)), int(m.group(2))),
    ),
    # Written: 15 January 2024 / 15 Jan 2024
    (
        re.compile(r"^(\d{1,2})\s+([A-Za-z]+)\.?,?\s+(\d{4})$"),
        lambda m: (int(m.group(3)), _month_from(m.group(2)), int(m.group(1))),
    ),
]


def coerce_date_value(value: Any) -> tuple[Any, Optional[str]]:
    """Normalize a date-like string to zero-padded ``YYYY-MM-DD``.

    Used for both ``format: date`` and ``format: date-time``.  A time suffix
    after an ISO date is dropped, silently when the date itself already
    reads the same.  Accepted results must have month 1-12, day 1-31 and
    year 1900-2100; anything else (including unrecognized text) is
    returned unchanged.
    """
    if not isinstance(value, str):
        return value, None

    text = value.strip()
    for regex, parse in _DATE_PATTERNS:
        match = regex.match(text)
        if match is None:
            continue
        year, month, day = parse(match)
        if month is None or not (1 <= month <= 12 and 1 <= day <= 31 and 1900 <= year <= 2100):
            return value, None
        iso = f"{year:04d}-{month:02d}-{day:02d}"
        if text.startswith(iso):
            return iso, None
        return iso, f"Coerced date '{value}' to ISO format '{iso}'"
    return value, None


# ---------------------------------------------------------------------------
# Field-level coercion
# ---------------------------------------------------------------------------


def _steps_for(field: FieldDefinition) -> list[_Step]:
    if isinstance(field, NumberField):
        return [_to_number]
    if isinstance(field, IntegerField):
        return [_to_integer]
    if isinstance(field, BooleanField):
        return [_to_boolean]
    if isinstance(field, StringField):
        steps: list[_Step] = [_to_string]
        if field.enum:
            enum_values = field.enum
            steps.append(lambda v: coerce_enum_value(v, enum_values))
        if field.is_date:
            steps.append(coerce_date_value)
        return steps
    return []


def _warning(path: FieldPath, message: str, original: Any, coerced: Any) -> CoercionWarning:
    warning = CoercionWarning(
        field=format_path(path),
        message=message,
        original_value=original,
        coerced_value=coerced,
    )
    logger.debug("Coercion at %s: %s", warning.field, message)
    return warning


def _coerce_field(value: Any, field: FieldDefinition, path: FieldPath) -> tuple[Any, list[CoercionWarning]]:
    if value is None:
        return value, []

    if _is_null_like(value) and field.optional:
        # A declared enum member is a real value, never a null marker.
        if not (isinstance(field, StringField) and field.enum and value in field.enum):
            return None, [_warning(path, f"Coerced '{value}' string to null", value, None)]

    if isinstance(field, ArrayField):
        if not isinstance(value, list):
            return value, []
        items: list[Any] = []
        warnings: list[CoercionWarning] = []
        for index, item in enumerate(value):
            if isinstance(item, Mapping):
                item, item_warnings = _coerce_mapping(item, field.items.properties, path + (index,))
                warnings.extend(item_warnings)
            items.append(item)
        return items, warnings

    if isinstance(field, ObjectField):
        if not isinstance(value, Mapping):
            return value, []
        return _coerce_mapping(value, field.properties, path)

    warnings = []
    current = value
    for step in _steps_for(field):
        new, message = step(current)
        if message is not None:
            warnings.append(_warning(path, message, current, new))
        current = new
    return current, warnings


def _coerce_mapping(
    data: Mapping[str, Any],
    fields: Mapping[str, FieldDefinition],
    path: FieldPath,
) -> tuple[dict[str, Any], list[CoercionWarning]]:
    out = dict(data)
    warnings: list[CoercionWarning] = []
    for name, field in fields.items():
        if name not in data:
            continue
        out[name], field_warnings = _coerce_field(data[name], field, path + (name,))
        warnings.extend(field_warnings)
    return out, warnings


def coerce_value(value: Any, field: FieldDefinition, path: str = "") -> tuple[Any, list[CoercionWarning]]:
    """Coerce a single value against one field definition.

    Returns the coerced value and the warnings produced, with field paths
    rooted at *path*.
    """
    root: FieldPath = (path,) if path else ()
    return _coerce_field(value, field, root)


def coerce(data: Any, fields: Union[Mapping[str, FieldDefinition], Schema]) -> CoercionOutcome:
    """Coerce every declared field of *data* toward its schema type.

    Parameters
    ----------
    data:
        Instance data as decoded from model output.  Undeclared keys are
        copied through untouched; the input is never mutated.
    fields:
        Field declarations, or a whole :class:`Schema`.

    Returns
    -------
    CoercionOutcome
        ``(data, warnings)`` with warnings in schema declaration order
        (array items in index order).
    """
    if isinstance(fields, Schema):
        fields = fields.fields
    if not isinstance(data, Mapping):
        return CoercionOutcome(data, [])

    out, warnings = _coerce_mapping(data, fields, ())
    if warnings:
        logger.debug("Coercion produced %d warning(s)", len(warnings))
    return CoercionOutcome(out, warnings)
