"""Schema-definition errors.

A schema document is configuration, not data: the first problem found is
raised as a :class:`SchemaError` and the calling stage stops.  Data-level
problems never come through here (see :mod:`ordis.core.models`).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

__all__ = ["SchemaErrorCode", "SchemaError"]


class SchemaErrorCode(str, Enum):
    """Machine-readable codes carried by :class:`SchemaError`."""

    # Document structure
    INVALID_JSON = "INVALID_JSON"
    MISSING_FIELDS = "MISSING_FIELDS"
    INVALID_FIELD_TYPE = "INVALID_FIELD_TYPE"
    INVALID_FIELD_NAME = "INVALID_FIELD_NAME"
    SCHEMA_NOT_FOUND = "SCHEMA_NOT_FOUND"

    # Field constraints
    INVALID_ENUM_VALUE = "INVALID_ENUM_VALUE"
    INVALID_CONSTRAINT = "INVALID_CONSTRAINT"
    EMPTY_ENUM_VALUES = "EMPTY_ENUM_VALUES"
    INVALID_PATTERN = "INVALID_PATTERN"
    CONSTRAINT_MISMATCH = "CONSTRAINT_MISMATCH"
    DUPLICATE_ENUM_VALUE = "DUPLICATE_ENUM_VALUE"

    # Confidence gate
    INVALID_CONFIDENCE_CONFIG = "INVALID_CONFIDENCE_CONFIG"


class SchemaError(ValueError):
    """Raised when a schema document is internally inconsistent.

    Parameters
    ----------
    message:
        Human-readable description of the single violation found.
    code:
        One of :class:`SchemaErrorCode`.
    field:
        Dotted path of the offending field definition, when there is one.
    details:
        Structured extras needed to fix the schema (valid type list,
        conflicting bounds, offending enum index, ...).
    """

    def __init__(
        self,
        message: str,
        code: SchemaErrorCode,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.field = field
        self.details = details

    def __repr__(self) -> str:
        return (
            f"SchemaError(code={self.code.value!r}, field={self.field!r}, "
            f"message={self.message!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict for JSON serialization."""
        out: dict[str, Any] = {"message": self.message, "code": self.code.value}
        if self.field is not None:
            out["field"] = self.field
        if self.details is not None:
            out["details"] = dict(self.details)
        return out
