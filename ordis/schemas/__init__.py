"""
ORDIS Schema Package - Model, Validation, and Loading

Overview:
---------
Everything needed to turn an untrusted schema document into the immutable,
typed :class:`Schema` consumed by the coercion and validation engines.

Composition:
------------
- ``types``: Tagged field variants, metadata and confidence configuration.
- ``errors``: :class:`SchemaError` and its machine-readable codes.
- ``validator``: Fail-fast consistency checks plus schema construction.
- ``loader``: JSON / YAML decoding on top of the validator.
"""

from .errors import SchemaError, SchemaErrorCode
from .loader import load_schema, load_schema_from_object, parse_schema
from .types import (
    ArrayField,
    BooleanField,
    ConfidenceConfig,
    FieldDefinition,
    IntegerField,
    NumberField,
    ObjectField,
    Schema,
    SchemaMetadata,
    StringField,
)
from .validator import validate_schema

__all__ = [
    # Model
    "Schema",
    "SchemaMetadata",
    "ConfidenceConfig",
    "FieldDefinition",
    "StringField",
    "NumberField",
    "IntegerField",
    "BooleanField",
    "ArrayField",
    "ObjectField",
    # Errors
    "SchemaError",
    "SchemaErrorCode",
    # Validation and loading
    "validate_schema",
    "parse_schema",
    "load_schema",
    "load_schema_from_object",
]
