"""
ORDIS Core Package - Coercion, Validation, and Reporting

Overview:
---------
The data-facing half of ORDIS.  Given a validated :class:`Schema` and the
decoded output of a generative model, these modules repair representation
mistakes, check conformance, and assemble a report the caller can act on.

Composition:
------------
- ``coercion``: Warning-producing normalization toward declared types.
- ``validator``: Pure, exhaustive conformance check.
- ``pipeline``: Coerce -> validate -> confidence gate in one call.
- ``formatter``: Human-readable error rendering with remediation tips.
- ``models`` / ``paths``: Result types and field-path helpers.
"""

from .coercion import CoercionOutcome, coerce, coerce_value
from .formatter import format_schema_error, format_validation_error, format_validation_errors
from .models import CoercionWarning, ErrorCode, ExtractionResult, ValidationError, ValidationResult
from .pipeline import ConfidenceCheck, check_confidence, process_output
from .validator import validate, validate_value

__all__ = [
    # Engines
    "coerce",
    "coerce_value",
    "validate",
    "validate_value",
    "process_output",
    "check_confidence",
    # Results
    "CoercionOutcome",
    "CoercionWarning",
    "ValidationError",
    "ValidationResult",
    "ExtractionResult",
    "ConfidenceCheck",
    "ErrorCode",
    # Formatting
    "format_validation_error",
    "format_validation_errors",
    "format_schema_error",
]
