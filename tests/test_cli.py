# tests/test_cli.py
"""Tests for the ordis command line."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from ordis.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def schema_file(tmp_path, invoice_doc):
    path = tmp_path / "invoice.schema.json"
    path.write_text(json.dumps(invoice_doc), encoding="utf-8")
    return path


@pytest.fixture
def messy_data_file(tmp_path):
    path = tmp_path / "output.json"
    path.write_text(
        json.dumps(
            {
                "invoice_number": "INV-0042",
                "amount": "1250.50",
                "paid": "no",
                "issue_date": "11/20/2024",
            }
        ),
        encoding="utf-8",
    )
    return path


class TestCLISkeleton:

    def test_cli_group_exists(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "check" in result.output

    def test_no_subcommand_shows_help(self, runner):
        result = runner.invoke(cli, [])
        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_version_flag(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    @pytest.mark.parametrize("command", [["schema"], ["schema", "validate"], ["check"], ["config", "show"]])
    def test_commands_registered(self, runner, command):
        result = runner.invoke(cli, command + ["--help"])
        assert result.exit_code == 0


class TestSchemaValidate:

    def test_valid_json_schema(self, runner, schema_file):
        result = runner.invoke(cli, ["schema", "validate", str(schema_file)])
        assert result.exit_code == 0, result.output
        assert "Schema is valid" in result.output
        assert "invoice_number" in result.output
        assert "8 top-level field(s)" in result.output

    def test_valid_yaml_schema(self, runner, tmp_path):
        path = tmp_path / "s.yaml"
        path.write_text("fields:\n  title:\n    type: string\n", encoding="utf-8")
        result = runner.invoke(cli, ["schema", "validate", str(path)])
        assert result.exit_code == 0, result.output
        assert "title" in result.output

    def test_invalid_schema(self, runner, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(
            json.dumps({"fields": {"amount": {"type": "number", "min": 5, "max": 1}}}),
            encoding="utf-8",
        )
        result = runner.invoke(cli, ["schema", "validate", str(path)])
        assert result.exit_code == 1
        assert "CONSTRAINT_MISMATCH" in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["schema", "validate", str(tmp_path / "nope.json")])
        assert result.exit_code == 2


class TestCheck:

    def test_passing_output(self, runner, schema_file, messy_data_file):
        result = runner.invoke(
            cli, ["check", "--schema", str(schema_file), "--data", str(messy_data_file), "--confidence", "90"]
        )
        assert result.exit_code == 0, result.output
        assert "PASS" in result.output
        assert "COERCIONS" in result.output

    def test_json_output(self, runner, schema_file, messy_data_file):
        result = runner.invoke(
            cli,
            ["check", "--schema", str(schema_file), "--data", str(messy_data_file), "--confidence", "90", "--json"],
        )
        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["success"] is True
        assert payload["data"]["amount"] == 1250.5
        assert len(payload["warnings"]) == 3

    def test_low_confidence_exit_code(self, runner, schema_file, messy_data_file):
        result = runner.invoke(
            cli,
            ["check", "--schema", str(schema_file), "--data", str(messy_data_file), "--confidence", "50", "--json"],
        )
        assert result.exit_code == 1
        payload = json.loads(result.output)
        assert payload["errors"][0]["code"] == "CONFIDENCE_ERROR"

    def test_validation_failure_rendered(self, runner, schema_file, tmp_path):
        data = tmp_path / "bad.json"
        data.write_text(json.dumps({"invoice_number": "INV-0001", "paid": True}), encoding="utf-8")
        result = runner.invoke(cli, ["check", "--schema", str(schema_file), "--data", str(data), "--confidence", "90"])
        assert result.exit_code == 1
        assert "FAIL" in result.output
        assert "Required field 'amount' is missing" in result.output

    def test_no_coerce(self, runner, schema_file, messy_data_file):
        result = runner.invoke(
            cli,
            ["check", "--schema", str(schema_file), "--data", str(messy_data_file),
             "--confidence", "90", "--no-coerce", "--json"],
        )
        assert result.exit_code == 1
        payload = json.loads(result.output)
        assert payload["warnings"] == []
        assert {e["code"] for e in payload["errors"]} == {"TYPE_MISMATCH", "FIELD_INVALID"}

    def test_lenient_formats(self, runner, schema_file, tmp_path):
        data = tmp_path / "dates.json"
        data.write_text(
            json.dumps({"invoice_number": "INV-0001", "amount": 1, "paid": True, "issue_date": "13/45/2024"}),
            encoding="utf-8",
        )
        args = ["check", "--schema", str(schema_file), "--data", str(data), "--confidence", "90"]
        assert runner.invoke(cli, args).exit_code == 1
        assert runner.invoke(cli, args + ["--lenient-formats"]).exit_code == 0

    def test_output_file(self, runner, schema_file, messy_data_file, tmp_path):
        out = tmp_path / "reports" / "result.json"
        result = runner.invoke(
            cli,
            ["check", "--schema", str(schema_file), "--data", str(messy_data_file), "--confidence", "90", "-o", str(out)],
        )
        assert result.exit_code == 0, result.output
        assert json.loads(out.read_text(encoding="utf-8"))["metadata"] == {"schemaName": "invoice"}

    def test_output_format_from_config(self, runner, schema_file, messy_data_file, monkeypatch):
        monkeypatch.setenv("ORDIS_OUTPUT_FORMAT", "json")
        result = runner.invoke(
            cli, ["check", "--schema", str(schema_file), "--data", str(messy_data_file), "--confidence", "90"]
        )
        assert json.loads(result.output)["success"] is True

    def test_invalid_data_json(self, runner, schema_file, tmp_path):
        data = tmp_path / "broken.json"
        data.write_text("{not json", encoding="utf-8")
        result = runner.invoke(cli, ["check", "--schema", str(schema_file), "--data", str(data)])
        assert result.exit_code == 1
        assert "not valid JSON" in result.output

    def test_invalid_schema_file(self, runner, tmp_path, messy_data_file):
        schema = tmp_path / "bad.yaml"
        schema.write_text("fields: {}\n", encoding="utf-8")
        result = runner.invoke(cli, ["check", "--schema", str(schema), "--data", str(messy_data_file)])
        assert result.exit_code == 1
        assert "MISSING_FIELDS" in result.output

    def test_confidence_range_enforced(self, runner, schema_file, messy_data_file):
        result = runner.invoke(
            cli, ["check", "--schema", str(schema_file), "--data", str(messy_data_file), "--confidence", "150"]
        )
        assert result.exit_code == 2


class TestConfigAndLogging:

    def test_config_show(self, runner):
        result = runner.invoke(cli, ["config", "show"])
        assert result.exit_code == 0
        assert "strict_formats" in result.output
        assert "output_format" in result.output

    def test_session_log_written(self, runner, schema_file, tmp_path):
        result = runner.invoke(cli, ["--log-level", "DEBUG", "schema", "validate", str(schema_file)])
        assert result.exit_code == 0
        logs = list((tmp_path / "logs").glob("ordis_*.log"))
        assert len(logs) == 1
        assert "ORDIS Logging Session Started" in logs[0].read_text(encoding="utf-8")
