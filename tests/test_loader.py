# tests/test_loader.py
"""Tests for JSON / YAML schema loading."""

from __future__ import annotations

import json

import pytest

from ordis.schemas import SchemaError, SchemaErrorCode, load_schema, load_schema_from_object, parse_schema

YAML_SCHEMA = """
fields:
  patient_id:
    type: string
    pattern: "^P\\\\d+$"
  age:
    type: integer
    min: 0
    max: 130
  smoker:
    type: boolean
    optional: true
metadata:
  name: intake
confidence:
  threshold: 70
  failOnLowConfidence: false
"""


class TestParseSchema:

    def test_json_text(self, invoice_doc):
        schema = parse_schema(json.dumps(invoice_doc))
        assert schema.name == "invoice"
        assert len(schema.fields) == 8

    def test_yaml_text(self):
        schema = parse_schema(YAML_SCHEMA, fmt="yaml")
        assert list(schema.fields) == ["patient_id", "age", "smoker"]
        assert schema.fields["patient_id"].pattern.search("P123")
        assert schema.confidence.fail_on_low_confidence is False

    def test_malformed_json(self):
        with pytest.raises(SchemaError) as exc_info:
            parse_schema('{"fields": {')
        assert exc_info.value.code == SchemaErrorCode.INVALID_JSON
        assert "reason" in exc_info.value.details

    def test_malformed_yaml(self):
        with pytest.raises(SchemaError) as exc_info:
            parse_schema("fields: [unclosed", fmt="yaml")
        assert exc_info.value.code == SchemaErrorCode.INVALID_JSON

    def test_decoded_document_still_validated(self):
        with pytest.raises(SchemaError) as exc_info:
            parse_schema('{"fields": {}}')
        assert exc_info.value.code == SchemaErrorCode.MISSING_FIELDS

    def test_yaml_scalar_document(self):
        with pytest.raises(SchemaError) as exc_info:
            parse_schema("just a string", fmt="yaml")
        assert exc_info.value.code == SchemaErrorCode.INVALID_JSON


class TestLoadSchema:

    def test_json_file(self, tmp_path, invoice_doc):
        path = tmp_path / "invoice.json"
        path.write_text(json.dumps(invoice_doc), encoding="utf-8")
        assert load_schema(path).name == "invoice"

    @pytest.mark.parametrize("suffix", [".yaml", ".yml", ".YAML"])
    def test_yaml_file(self, tmp_path, suffix):
        path = tmp_path / f"intake{suffix}"
        path.write_text(YAML_SCHEMA, encoding="utf-8")
        assert load_schema(str(path)).name == "intake"

    def test_missing_file(self, tmp_path):
        missing = tmp_path / "nope.json"
        with pytest.raises(SchemaError) as exc_info:
            load_schema(missing)
        assert exc_info.value.code == SchemaErrorCode.SCHEMA_NOT_FOUND
        assert exc_info.value.details == {"path": str(missing)}

    def test_directory_is_not_a_schema(self, tmp_path):
        with pytest.raises(SchemaError) as exc_info:
            load_schema(tmp_path)
        assert exc_info.value.code == SchemaErrorCode.SCHEMA_NOT_FOUND


class TestLoadSchemaFromObject:

    def test_matches_validate_schema(self, invoice_doc, invoice_schema):
        assert load_schema_from_object(invoice_doc) == invoice_schema
