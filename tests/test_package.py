# tests/test_package.py
"""Tests for top-level package API."""


class TestPackageImports:
    """Verify the public API surface."""

    def test_version(self):
        import ordis
        assert ordis.__version__ == "0.1.0"

    def test_public_api(self):
        import ordis

        for name in ordis.__all__:
            assert hasattr(ordis, name), name
        assert callable(ordis.validate_schema)
        assert callable(ordis.coerce)
        assert callable(ordis.validate)
        assert callable(ordis.process_output)

    def test_config_importable(self):
        from ordis.config import OrdisConfig, get_config
        assert OrdisConfig is not None
        assert callable(get_config)

    def test_cli_importable(self):
        from ordis.cli import cli
        assert callable(cli)

    def test_end_to_end_through_top_level(self):
        import ordis

        schema = ordis.validate_schema({"fields": {"total": {"type": "number"}}})
        data, warnings = ordis.coerce({"total": "9.99"}, schema)
        assert data == {"total": 9.99}
        assert len(warnings) == 1
        assert ordis.validate(data, schema).valid
