"""Shared fixtures: a representative invoice schema and test isolation."""

from __future__ import annotations

import copy
import logging

import pytest

INVOICE_DOC = {
    "fields": {
        "invoice_number": {
            "type": "string",
            "description": "Invoice identifier",
            "pattern": r"^INV-\d{4}$",
        },
        "amount": {"type": "number", "description": "Invoice total", "min": 0},
        "quantity": {"type": "integer", "min": 1, "max": 1000, "optional": True},
        "paid": {"type": "boolean"},
        "status": {
            "type": "string",
            "enum": ["draft", "sent", "paid_in_full"],
            "optional": True,
        },
        "issue_date": {"type": "string", "format": "date"},
        "items": {
            "type": "array",
            "optional": True,
            "items": {
                "type": "object",
                "properties": {
                    "description": {"type": "string"},
                    "price": {"type": "number"},
                },
            },
        },
        "customer": {
            "type": "object",
            "optional": True,
            "properties": {
                "name": {"type": "string"},
                "email": {"type": "string", "optional": True},
            },
        },
    },
    "metadata": {"name": "invoice", "version": "1.0"},
    "confidence": {"threshold": 80, "failOnLowConfidence": True},
}

VALID_INVOICE = {
    "invoice_number": "INV-0042",
    "amount": 1250.5,
    "quantity": 3,
    "paid": False,
    "status": "sent",
    "issue_date": "2024-11-20",
    "items": [{"description": "Widget", "price": 10.5}],
    "customer": {"name": "Acme"},
}


@pytest.fixture
def invoice_doc() -> dict:
    return copy.deepcopy(INVOICE_DOC)


@pytest.fixture
def invoice_schema(invoice_doc):
    from ordis.schemas import validate_schema

    return validate_schema(invoice_doc)


@pytest.fixture
def valid_invoice() -> dict:
    return copy.deepcopy(VALID_INVOICE)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch, tmp_path):
    """Keep config and log files out of the real home directory."""
    from ordis.config import get_config

    for var in ("ORDIS_LOG_LEVEL", "ORDIS_STRICT_FORMATS", "ORDIS_OUTPUT_FORMAT",
                "ORDIS_COERCE_BEFORE_VALIDATE", "ORDIS_HOME_DIR"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("ORDIS_LOG_DIR", str(tmp_path / "logs"))
    get_config.cache_clear()
    yield
    get_config.cache_clear()

    ordis_logger = logging.getLogger("ordis")
    for handler in ordis_logger.handlers[:]:
        ordis_logger.removeHandler(handler)
        handler.close()
    for f in ordis_logger.filters[:]:
        ordis_logger.removeFilter(f)
    ordis_logger.setLevel(logging.NOTSET)
    ordis_logger.propagate = True
