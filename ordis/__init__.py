"""
ORDIS Package - Schema Validation and Coercion for Structured Model Output

Generative models return JSON that is almost right: numbers as strings,
"N/A" where a value is missing, dates in whatever form the source used.
ORDIS checks a schema document, repairs those representation mistakes with
a warning for every change, validates the result and applies a confidence
gate, so callers can accept, review or reject each output.

Main Components:
    - ordis.schemas: Schema model, fail-fast schema validation and loading
    - ordis.core: Coercion, validation, the output pipeline and formatting
    - ordis.cli: The ``ordis`` command line
"""

__version__ = "0.1.0"

from .core import (
    CoercionWarning,
    ErrorCode,
    ExtractionResult,
    ValidationError,
    ValidationResult,
    check_confidence,
    coerce,
    format_validation_errors,
    process_output,
    validate,
)
from .schemas import Schema, SchemaError, SchemaErrorCode, load_schema, parse_schema, validate_schema

__all__ = [
    "__version__",
    # Schemas
    "Schema",
    "SchemaError",
    "SchemaErrorCode",
    "validate_schema",
    "parse_schema",
    "load_schema",
    # Engines
    "coerce",
    "validate",
    "process_output",
    "check_confidence",
    "format_validation_errors",
    # Results
    "ErrorCode",
    "ValidationError",
    "ValidationResult",
    "CoercionWarning",
    "ExtractionResult",
]
