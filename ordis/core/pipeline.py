"""Post-model half of the extraction pipeline.

The model call itself lives outside this package.  Once its output has been
decoded, :func:`process_output` runs the deterministic stages in order:

1. coerce the raw data toward the schema (warnings collected);
2. validate the coerced data (all errors collected);
3. apply the schema's confidence gate to the externally supplied score.

Nothing here raises for data problems; the caller decides what to do with
an unsuccessful :class:`ExtractionResult`.
"""

from __future__ import annotations

import logging
import time
from typing import Any, NamedTuple, Optional

from ordis.schemas.types import Schema

from .coercion import coerce
from .models import CoercionWarning, ErrorCode, ExtractionResult, ValidationError
from .validator import validate

logger = logging.getLogger(__name__)

__all__ = ["ConfidenceCheck", "check_confidence", "process_output"]


class ConfidenceCheck(NamedTuple):
    meets_threshold: bool
    should_fail: bool


def _format_score(value: float) -> str:
    return f"{value:g}"


def check_confidence(schema: Schema, confidence: Optional[float]) -> ConfidenceCheck:
    """Apply the schema's confidence gate to a 0-100 score.

    A schema without a confidence section always passes.  A missing score
    never meets a configured threshold.
    """
    gate = schema.confidence
    if gate is None:
        return ConfidenceCheck(meets_threshold=True, should_fail=False)

    meets = confidence is not None and confidence >= gate.threshold
    return ConfidenceCheck(
        meets_threshold=meets,
        should_fail=not meets and gate.fail_on_low_confidence,
    )


def process_output(
    data: Any,
    schema: Schema,
    *,
    confidence: Optional[float] = None,
    confidence_by_field: Optional[dict[str, float]] = None,
    coerce_values: bool = True,
    strict_formats: bool = True,
) -> ExtractionResult:
    """Coerce, validate and gate one decoded model output.

    Parameters
    ----------
    data:
        Decoded model output (normally a dict).
    schema:
        Validated schema.
    confidence:
        Overall 0-100 confidence reported alongside the output, if any.
    confidence_by_field:
        Per-field confidence scores, passed through to the result.
    coerce_values:
        Skip the coercion stage when False.
    strict_formats:
        Forwarded to :func:`ordis.core.validator.validate`.

    Returns
    -------
    ExtractionResult
        ``success`` is True only when validation passes and the confidence
        gate does not demand failure.
    """
    started = time.perf_counter()

    warnings: list[CoercionWarning] = []
    if coerce_values:
        data, warnings = coerce(data, schema)

    validation = validate(data, schema, strict_formats=strict_formats)
    payload = data if isinstance(data, dict) else None

    if not validation.valid:
        logger.info(
            "Output for schema %s failed validation: %d error(s), %d warning(s)",
            schema.name or "<unnamed>",
            len(validation.errors),
            len(warnings),
        )
        return ExtractionResult(
            success=False,
            data=payload,
            confidence=confidence,
            confidence_by_field=confidence_by_field,
            meets_threshold=False,
            errors=validation.errors,
            warnings=warnings,
            schema_name=schema.name,
        )

    gate = check_confidence(schema, confidence)
    errors: list[ValidationError] = []
    if gate.should_fail:
        threshold = schema.confidence.threshold if schema.confidence else 0
        shown = _format_score(confidence) if confidence is not None else "n/a"
        errors.append(
            ValidationError(
                message=f"Confidence {shown}% below threshold {_format_score(threshold)}%",
                code=ErrorCode.CONFIDENCE_ERROR,
                value=confidence,
                expected=threshold,
            )
        )

    result = ExtractionResult(
        success=not gate.should_fail,
        data=payload,
        confidence=confidence,
        confidence_by_field=confidence_by_field,
        meets_threshold=gate.meets_threshold,
        errors=errors,
        warnings=warnings,
        schema_name=schema.name,
    )
    logger.info(
        "Output for schema %s processed in %.1f ms: success=%s, %d warning(s)",
        schema.name or "<unnamed>",
        (time.perf_counter() - started) * 1000,
        result.success,
        len(warnings),
    )
    return result
