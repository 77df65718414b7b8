"""Result models for coercion, validation and extraction reporting."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorCode(str, Enum):
    """Data-level error codes (never raised, always returned)."""

    FIELD_MISSING = "FIELD_MISSING"
    FIELD_INVALID = "FIELD_INVALID"
    TYPE_MISMATCH = "TYPE_MISMATCH"
    CONFIDENCE_ERROR = "CONFIDENCE_ERROR"


class ValidationError(BaseModel):
    """One conformance failure found in instance data.

    Not an exception: validation problems are expected outcomes and are
    collected into a :class:`ValidationResult`.
    """

    model_config = ConfigDict(frozen=True)

    field: Optional[str] = Field(None, description="Field path; absent for whole-result errors")
    message: str
    code: ErrorCode
    value: Any = None
    expected: Any = None
    actual: Any = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class CoercionWarning(BaseModel):
    """Record of a single value changed by coercion."""

    model_config = ConfigDict(frozen=True)

    field: str
    message: str
    original_value: Any = Field(serialization_alias="originalValue")
    coerced_value: Any = Field(serialization_alias="coercedValue")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ValidationResult(BaseModel):
    """Complete outcome of one validation call."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    errors: list[ValidationError] = Field(default_factory=list)

    def errors_for(self, field: str) -> list[ValidationError]:
        """Return the errors reported at exactly *field*."""
        return [e for e in self.errors if e.field == field]

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "errors": [e.to_dict() for e in self.errors]}


class ExtractionResult(BaseModel):
    """Coerced data plus everything a caller needs to accept or reject it."""

    model_config = ConfigDict(frozen=True)

    success: bool
    data: Optional[dict[str, Any]] = None
    confidence: Optional[float] = None
    confidence_by_field: Optional[dict[str, float]] = None
    meets_threshold: bool
    errors: list[ValidationError] = Field(default_factory=list)
    warnings: list[CoercionWarning] = Field(default_factory=list)
    schema_name: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict for JSON serialization."""
        out: dict[str, Any] = {
            "success": self.success,
            "meetsThreshold": self.meets_threshold,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }
        if self.data is not None:
            out["data"] = self.data
        if self.confidence is not None:
            out["confidence"] = self.confidence
        if self.confidence_by_field is not None:
            out["confidenceByField"] = dict(self.confidence_by_field)
        if self.schema_name is not None:
            out["metadata"] = {"schemaName": self.schema_name}
        return out
