"""Schema model: the typed, immutable form of a schema document.

Each declared field becomes one variant of :data:`FieldDefinition`, tagged
by its ``type`` string.  Structural rules that the raw document can only
promise (an array always has an object item schema, an object always has
properties, a pattern always compiles) are carried by the shape of these
classes, so the coercion and validation engines never have to re-check them.

Instances are built by :func:`ordis.schemas.validator.validate_schema`; the
models are frozen and are safe to share across threads.
"""

from __future__ import annotations

import re
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "FIELD_TYPES",
    "DATE_FORMATS",
    "StringField",
    "NumberField",
    "IntegerField",
    "BooleanField",
    "ArrayField",
    "ObjectField",
    "FieldDefinition",
    "SchemaMetadata",
    "ConfidenceConfig",
    "Schema",
]

# Declared ``type`` values, in the order they are reported to schema authors.
FIELD_TYPES: tuple[str, ...] = ("string", "number", "integer", "boolean", "array", "object")

DATE_FORMATS: frozenset[str] = frozenset({"date", "date-time"})


class _FieldBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    description: Optional[str] = None
    optional: bool = False


class StringField(_FieldBase):
    """Free text, optionally restricted by ``enum``, ``pattern`` or ``format``."""

    type: Literal["string"] = "string"
    enum: Optional[tuple[str, ...]] = None
    # Compiled from the document's pattern string when the model is built.
    pattern: Optional[re.Pattern[str]] = None
    format: Optional[str] = None

    @property
    def is_date(self) -> bool:
        return self.format in DATE_FORMATS


class NumberField(_FieldBase):
    type: Literal["number"] = "number"
    min: Optional[Union[int, float]] = None
    max: Optional[Union[int, float]] = None


class IntegerField(_FieldBase):
    type: Literal["integer"] = "integer"
    min: Optional[Union[int, float]] = None
    max: Optional[Union[int, float]] = None


class BooleanField(_FieldBase):
    type: Literal["boolean"] = "boolean"


class ObjectField(_FieldBase):
    """Nested mapping with its own declared properties (never empty)."""

    type: Literal["object"] = "object"
    properties: dict[str, FieldDefinition] = Field(min_length=1)


class ArrayField(_FieldBase):
    """List whose elements all follow one object item schema."""

    type: Literal["array"] = "array"
    items: ObjectField


FieldDefinition = Annotated[
    Union[StringField, NumberField, IntegerField, BooleanField, ArrayField, ObjectField],
    Field(discriminator="type"),
]

ObjectField.model_rebuild()
ArrayField.model_rebuild()


class SchemaMetadata(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None


class ConfidenceConfig(BaseModel):
    """Gate applied by the caller to the model-reported confidence score."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    threshold: float = Field(ge=0, le=100)
    fail_on_low_confidence: bool = Field(alias="failOnLowConfidence")


class Schema(BaseModel):
    """Ordered field declarations plus optional metadata and confidence gate."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    fields: dict[str, FieldDefinition] = Field(min_length=1)
    metadata: Optional[SchemaMetadata] = None
    confidence: Optional[ConfidenceConfig] = None

    @property
    def name(self) -> Optional[str]:
        return self.metadata.name if self.metadata else None

    def to_dict(self) -> dict[str, Any]:
        """Dump back to the document shape (patterns as source strings)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
