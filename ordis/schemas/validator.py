"""Schema definition validator.

Checks a raw schema document (as decoded from JSON or YAML) for internal
consistency and, when it passes, builds the immutable :class:`Schema`.

Checks run in a fixed order and stop at the first violation, so a schema
author always sees one precise, path-qualified problem at a time:

1. document shape (mapping, non-empty ``fields`` mapping);
2. each field in declaration order: name, definition shape, ``type``,
   ``optional`` / ``description``, then the per-type structural rules,
   recursing into array item and object properties;
3. ``metadata``;
4. ``confidence``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import ValidationError

from ordis.utils.values import is_number, type_name

from .errors import SchemaError, SchemaErrorCode
from .types import FIELD_TYPES, Schema

logger = logging.getLogger(__name__)

__all__ = ["validate_schema", "is_valid_field_name"]

_FIELD_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _reject(
    message: str,
    code: SchemaErrorCode,
    field: Optional[str] = None,
    details: Optional[dict[str, Any]] = None,
) -> SchemaError:
    logger.debug("Schema rejected [%s] at %s: %s", code.value, field or "<schema>", message)
    return SchemaError(message, code, field, details)


def is_valid_field_name(name: Any) -> bool:
    """Return True when *name* is usable as a field name."""
    return isinstance(name, str) and bool(_FIELD_NAME_RE.match(name))


# ---------------------------------------------------------------------------
# Field checks
# ---------------------------------------------------------------------------


def _check_field_name(name: Any, path: str) -> None:
    if not isinstance(name, str) or not name.strip():
        raise _reject("Field name cannot be empty", SchemaErrorCode.INVALID_FIELD_NAME)
    if not _FIELD_NAME_RE.match(name):
        raise _reject(
            f"Invalid field name '{name}'. Field names must start with a letter or "
            "underscore and contain only alphanumeric characters and underscores",
            SchemaErrorCode.INVALID_FIELD_NAME,
            path,
        )


def _check_field_definition(path: str, definition: Any) -> None:
    if not isinstance(definition, Mapping):
        raise _reject(
            f"Field '{path}' definition must be an object",
            SchemaErrorCode.INVALID_FIELD_TYPE,
            path,
        )

    field_type = definition.get("type")
    if field_type is None or field_type == "":
        raise _reject(
            f"Field '{path}' is missing required 'type' property",
            SchemaErrorCode.INVALID_FIELD_TYPE,
            path,
        )
    if not isinstance(field_type, str):
        raise _reject(
            f"Field '{path}' type must be a string",
            SchemaErrorCode.INVALID_FIELD_TYPE,
            path,
        )
    if field_type not in FIELD_TYPES:
        raise _reject(
            f"Field '{path}' has invalid type '{field_type}'. "
            f"Valid types are: {', '.join(FIELD_TYPES)}",
            SchemaErrorCode.INVALID_FIELD_TYPE,
            path,
            {"validTypes": list(FIELD_TYPES), "receivedType": field_type},
        )

    if "optional" in definition and not isinstance(definition["optional"], bool):
        raise _reject(
            f"Field '{path}' optional property must be a boolean",
            SchemaErrorCode.INVALID_CONSTRAINT,
            path,
        )
    if "description" in definition and not isinstance(definition["description"], str):
        raise _reject(
            f"Field '{path}' description must be a string",
            SchemaErrorCode.INVALID_CONSTRAINT,
            path,
        )

    if field_type in ("number", "integer"):
        _check_numeric_field(path, field_type, definition)
    elif field_type == "string":
        _check_string_field(path, definition)
        if definition.get("enum") is not None:
            _check_enum(path, definition["enum"])
    elif field_type == "array":
        _check_array_field(path, definition)
    elif field_type == "object":
        _check_object_field(path, definition)


def _check_numeric_field(path: str, field_type: str, definition: Mapping[str, Any]) -> None:
    for bound in ("min", "max"):
        if bound in definition and not is_number(definition[bound]):
            raise _reject(
                f"Field '{path}' {bound} constraint must be a number",
                SchemaErrorCode.INVALID_CONSTRAINT,
                path,
            )

    low, high = definition.get("min"), definition.get("max")
    if low is not None and high is not None and low > high:
        raise _reject(
            f"Field '{path}' min value ({low}) cannot be greater than max value ({high})",
            SchemaErrorCode.CONSTRAINT_MISMATCH,
            path,
            {"min": low, "max": high},
        )

    if "enum" in definition:
        raise _reject(
            f"Field '{path}' with type '{field_type}' cannot have 'enum' property",
            SchemaErrorCode.INVALID_CONSTRAINT,
            path,
        )


def _check_string_field(path: str, definition: Mapping[str, Any]) -> None:
    if "pattern" in definition:
        pattern = definition["pattern"]
        if not isinstance(pattern, str):
            raise _reject(
                f"Field '{path}' pattern constraint must be a string",
                SchemaErrorCode.INVALID_CONSTRAINT,
                path,
            )
        try:
            re.compile(pattern)
        except re.error as exc:
            raise _reject(
                f"Field '{path}' has invalid regex pattern: {exc}",
                SchemaErrorCode.INVALID_PATTERN,
                path,
                {"pattern": pattern},
            ) from exc

    if "format" in definition and not isinstance(definition["format"], str):
        raise _reject(
            f"Field '{path}' format must be a string",
            SchemaErrorCode.INVALID_CONSTRAINT,
            path,
        )

    if "min" in definition or "max" in definition:
        raise _reject(
            f"Field '{path}' with type 'string' cannot have 'min' or 'max' properties",
            SchemaErrorCode.INVALID_CONSTRAINT,
            path,
        )


def _check_enum(path: str, values: Any) -> None:
    if not isinstance(values, (list, tuple)):
        raise _reject(
            f"Field '{path}' enum property must be an array",
            SchemaErrorCode.INVALID_ENUM_VALUE,
            path,
        )
    if not values:
        raise _reject(
            f"Field '{path}' enum array cannot be empty",
            SchemaErrorCode.EMPTY_ENUM_VALUES,
            path,
        )
    for index, value in enumerate(values):
        if not isinstance(value, str):
            raise _reject(
                f"Field '{path}' enum value at index {index} must be a string, "
                f"got {type_name(value)}",
                SchemaErrorCode.INVALID_ENUM_VALUE,
                path,
                {"index": index, "value": value},
            )

    seen: set[str] = set()
    duplicates: list[str] = []
    for value in values:
        if value in seen and value not in duplicates:
            duplicates.append(value)
        seen.add(value)
    if duplicates:
        raise _reject(
            f"Field '{path}' enum contains duplicate values",
            SchemaErrorCode.DUPLICATE_ENUM_VALUE,
            path,
            {"duplicates": duplicates},
        )


def _check_properties(path: str, properties: Any, label: str, child_prefix: str) -> None:
    if properties is None:
        raise _reject(
            f"{label} must have a 'properties' property defining the object structure",
            SchemaErrorCode.INVALID_CONSTRAINT,
            path,
        )
    if not isinstance(properties, Mapping):
        raise _reject(
            f"{label} properties must be an object",
            SchemaErrorCode.INVALID_CONSTRAINT,
            path,
        )
    if not properties:
        raise _reject(
            f"{label} must have at least one property",
            SchemaErrorCode.INVALID_CONSTRAINT,
            path,
        )
    for prop_name, prop_def in properties.items():
        prop_path = f"{child_prefix}.{prop_name}"
        _check_field_name(prop_name, prop_path)
        _check_field_definition(prop_path, prop_def)


def _check_array_field(path: str, definition: Mapping[str, Any]) -> None:
    items = definition.get("items")
    if items is None:
        raise _reject(
            f"Array field '{path}' must have an 'items' property defining the array element type",
            SchemaErrorCode.INVALID_CONSTRAINT,
            path,
        )
    if not isinstance(items, Mapping):
        raise _reject(
            f"Array field '{path}' items must be an object",
            SchemaErrorCode.INVALID_CONSTRAINT,
            path,
        )
    if items.get("type") != "object":
        raise _reject(
            f"Array field '{path}' items type must be 'object'. Got: {items.get('type')}",
            SchemaErrorCode.INVALID_CONSTRAINT,
            path,
        )
    _check_properties(
        path,
        items.get("properties"),
        f"Array field '{path}' items",
        f"{path}.items",
    )


def _check_object_field(path: str, definition: Mapping[str, Any]) -> None:
    _check_properties(
        path,
        definition.get("properties"),
        f"Object field '{path}'",
        path,
    )


# ---------------------------------------------------------------------------
# Document-level checks
# ---------------------------------------------------------------------------


def _check_metadata(metadata: Any) -> None:
    if not isinstance(metadata, Mapping):
        raise _reject("Schema metadata must be an object", SchemaErrorCode.INVALID_JSON)
    for key in ("name", "version", "description"):
        if key in metadata and not isinstance(metadata[key], str):
            raise _reject(
                f"Schema metadata {key} must be a string",
                SchemaErrorCode.INVALID_JSON,
            )


def _check_confidence(confidence: Any) -> None:
    if not isinstance(confidence, Mapping):
        raise _reject(
            "Confidence configuration must be an object",
            SchemaErrorCode.INVALID_CONFIDENCE_CONFIG,
        )

    if "threshold" not in confidence:
        raise _reject(
            "Confidence configuration must include a threshold value",
            SchemaErrorCode.INVALID_CONFIDENCE_CONFIG,
        )
    threshold = confidence["threshold"]
    if not is_number(threshold):
        raise _reject(
            "Confidence threshold must be a number",
            SchemaErrorCode.INVALID_CONFIDENCE_CONFIG,
            details={"received": type_name(threshold)},
        )
    if threshold < 0 or threshold > 100:
        raise _reject(
            f"Confidence threshold must be between 0 and 100, got {threshold}",
            SchemaErrorCode.INVALID_CONFIDENCE_CONFIG,
            details={"threshold": threshold},
        )

    if "failOnLowConfidence" not in confidence:
        raise _reject(
            "Confidence configuration must include failOnLowConfidence boolean",
            SchemaErrorCode.INVALID_CONFIDENCE_CONFIG,
        )
    flag = confidence["failOnLowConfidence"]
    if not isinstance(flag, bool):
        raise _reject(
            "failOnLowConfidence must be a boolean",
            SchemaErrorCode.INVALID_CONFIDENCE_CONFIG,
            details={"received": type_name(flag)},
        )


def _warn_enum_collisions(fields: Mapping[str, Any], prefix: str = "") -> None:
    """Log enums whose members normalize to the same coercion key."""
    from ordis.core.coercion import normalize_enum_value

    for name, definition in fields.items():
        path = f"{prefix}{name}"
        field_type = definition.get("type")
        if field_type == "string" and definition.get("enum"):
            by_key: dict[str, list[str]] = {}
            for member in definition["enum"]:
                by_key.setdefault(normalize_enum_value(member), []).append(member)
            for key, members in by_key.items():
                if len(members) > 1:
                    logger.warning(
                        "Field '%s' enum members %s normalize to the same key '%s'; "
                        "coercion will always pick '%s'",
                        path,
                        members,
                        key,
                        members[0],
                    )
        elif field_type == "object":
            _warn_enum_collisions(definition["properties"], f"{path}.")
        elif field_type == "array":
            _warn_enum_collisions(definition["items"]["properties"], f"{path}.items.")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_schema(doc: Any) -> Schema:
    """Validate a raw schema document and build the immutable :class:`Schema`.

    Parameters
    ----------
    doc:
        Decoded schema document: ``{"fields": {...}, "metadata"?: {...},
        "confidence"?: {...}}``.

    Returns
    -------
    Schema
        Fully typed schema with every ``pattern`` pre-compiled.

    Raises
    ------
    SchemaError
        On the first violation found, carrying its code, field path and
        structured details.
    """
    if not isinstance(doc, Mapping):
        raise _reject("Schema must be an object", SchemaErrorCode.INVALID_JSON)

    fields = doc.get("fields")
    if fields is None:
        raise _reject(
            "Schema must contain a 'fields' property",
            SchemaErrorCode.MISSING_FIELDS,
        )
    if not isinstance(fields, Mapping):
        raise _reject("'fields' must be an object", SchemaErrorCode.MISSING_FIELDS)
    if not fields:
        raise _reject(
            "Schema must contain at least one field",
            SchemaErrorCode.MISSING_FIELDS,
        )

    for name, definition in fields.items():
        _check_field_name(name, name if isinstance(name, str) else str(name))
        _check_field_definition(name, definition)

    if doc.get("metadata") is not None:
        _check_metadata(doc["metadata"])
    if doc.get("confidence") is not None:
        _check_confidence(doc["confidence"])

    _warn_enum_collisions(fields)

    try:
        schema = Schema.model_validate(doc)
    except ValidationError as exc:
        raise _reject(
            f"Schema could not be built: {exc.error_count()} validation error(s)",
            SchemaErrorCode.INVALID_JSON,
            details={"errors": exc.errors(include_url=False)},
        ) from exc

    logger.debug(
        "Schema %s accepted with %d top-level field(s)",
        schema.name or "<unnamed>",
        len(schema.fields),
    )
    return schema
