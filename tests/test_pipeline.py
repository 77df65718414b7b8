# tests/test_pipeline.py
"""Tests for coerce -> validate -> confidence gate assembly."""

from __future__ import annotations

import copy

import pytest

from ordis.core.models import ErrorCode
from ordis.core.pipeline import ConfidenceCheck, check_confidence, process_output
from ordis.schemas import validate_schema

MESSY_OUTPUT = {
    "invoice_number": "INV-0042",
    "amount": "1250.50",
    "paid": "no",
    "status": "Sent",
    "issue_date": "11/20/2024",
}


@pytest.fixture
def ungated_schema(invoice_doc):
    del invoice_doc["confidence"]
    return validate_schema(invoice_doc)


@pytest.fixture
def lenient_gate_schema(invoice_doc):
    invoice_doc["confidence"]["failOnLowConfidence"] = False
    return validate_schema(invoice_doc)


class TestCheckConfidence:

    def test_no_gate(self, ungated_schema):
        assert check_confidence(ungated_schema, None) == ConfidenceCheck(True, False)
        assert check_confidence(ungated_schema, 1) == ConfidenceCheck(True, False)

    @pytest.mark.parametrize(
        "confidence, meets, fails",
        [(95, True, False), (80, True, False), (79.9, False, True), (None, False, True)],
    )
    def test_failing_gate(self, invoice_schema, confidence, meets, fails):
        check = check_confidence(invoice_schema, confidence)
        assert check.meets_threshold is meets
        assert check.should_fail is fails

    def test_lenient_gate(self, lenient_gate_schema):
        check = check_confidence(lenient_gate_schema, 10)
        assert check == ConfidenceCheck(meets_threshold=False, should_fail=False)


class TestProcessOutput:

    def test_messy_output_is_repaired(self, invoice_schema):
        result = process_output(MESSY_OUTPUT, invoice_schema, confidence=95)
        assert result.success is True
        assert result.meets_threshold is True
        assert result.errors == []
        assert result.data["amount"] == 1250.5
        assert result.data["paid"] is False
        assert result.data["status"] == "sent"
        assert result.data["issue_date"] == "2024-11-20"
        assert [w.field for w in result.warnings] == ["amount", "paid", "status", "issue_date"]
        assert result.schema_name == "invoice"

    def test_validation_failure(self, invoice_schema):
        raw = dict(MESSY_OUTPUT)
        del raw["invoice_number"]
        result = process_output(raw, invoice_schema, confidence=99)
        assert result.success is False
        assert result.meets_threshold is False
        assert [(e.field, e.code) for e in result.errors] == [("invoice_number", ErrorCode.FIELD_MISSING)]
        assert len(result.warnings) == 4

    def test_low_confidence_fails(self, invoice_schema):
        result = process_output(MESSY_OUTPUT, invoice_schema, confidence=50)
        assert result.success is False
        assert result.meets_threshold is False
        (error,) = result.errors
        assert error.code == ErrorCode.CONFIDENCE_ERROR
        assert error.field is None
        assert error.message == "Confidence 50% below threshold 80%"

    def test_fractional_scores_in_message(self, invoice_doc):
        invoice_doc["confidence"]["threshold"] = 72.5
        schema = validate_schema(invoice_doc)
        (error,) = process_output(MESSY_OUTPUT, schema, confidence=70.25).errors
        assert error.message == "Confidence 70.25% below threshold 72.5%"

    def test_missing_score_fails_gate(self, invoice_schema):
        result = process_output(MESSY_OUTPUT, invoice_schema)
        assert result.success is False
        assert result.errors[0].code == ErrorCode.CONFIDENCE_ERROR

    def test_low_confidence_without_fail_flag(self, lenient_gate_schema):
        result = process_output(MESSY_OUTPUT, lenient_gate_schema, confidence=10)
        assert result.success is True
        assert result.meets_threshold is False
        assert result.errors == []

    def test_no_gate_without_score(self, ungated_schema):
        result = process_output(MESSY_OUTPUT, ungated_schema)
        assert result.success is True
        assert result.meets_threshold is True

    def test_without_coercion(self, invoice_schema):
        result = process_output(MESSY_OUTPUT, invoice_schema, confidence=95, coerce_values=False)
        assert result.success is False
        assert result.warnings == []
        assert ErrorCode.TYPE_MISMATCH in {e.code for e in result.errors}

    def test_lenient_formats(self, invoice_schema):
        raw = dict(MESSY_OUTPUT, issue_date="13/45/2024")
        assert not process_output(raw, invoice_schema, confidence=95).success
        assert process_output(raw, invoice_schema, confidence=95, strict_formats=False).success

    def test_non_mapping_output(self, invoice_schema):
        result = process_output(["not", "an", "object"], invoice_schema, confidence=95)
        assert result.success is False
        assert result.data is None
        assert result.errors[0].code == ErrorCode.TYPE_MISMATCH

    def test_input_not_mutated(self, invoice_schema):
        raw = copy.deepcopy(MESSY_OUTPUT)
        process_output(raw, invoice_schema, confidence=95)
        assert raw == MESSY_OUTPUT

    def test_confidence_by_field_passed_through(self, invoice_schema):
        scores = {"amount": 91.0, "paid": 60.0}
        result = process_output(MESSY_OUTPUT, invoice_schema, confidence=90, confidence_by_field=scores)
        assert result.confidence_by_field == scores


class TestExtractionResultSerialization:

    def test_wire_shape(self, invoice_schema):
        payload = process_output(
            MESSY_OUTPUT, invoice_schema, confidence=95, confidence_by_field={"amount": 90.0}
        ).to_dict()
        assert payload["success"] is True
        assert payload["meetsThreshold"] is True
        assert payload["confidence"] == 95
        assert payload["confidenceByField"] == {"amount": 90.0}
        assert payload["metadata"] == {"schemaName": "invoice"}
        assert payload["errors"] == []
        assert payload["warnings"][0] == {
            "field": "amount",
            "message": "Coerced string '1250.50' to number 1250.5",
            "originalValue": "1250.50",
            "coercedValue": 1250.5,
        }

    def test_optional_keys_omitted(self, ungated_schema):
        ungated = ungated_schema.model_copy(update={"metadata": None})
        payload = process_output({"amount": 1}, ungated).to_dict()
        assert "confidence" not in payload
        assert "confidenceByField" not in payload
        assert "metadata" not in payload
