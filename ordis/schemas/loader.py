"""Schema loading: decode JSON/YAML schema documents and validate them.

Public API
----------
- :func:`parse_schema`: decode schema text and validate it.
- :func:`load_schema`: same, but reads from a file path.
- :func:`load_schema_from_object`: validate an already-decoded document.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Literal

import yaml

from .errors import SchemaError, SchemaErrorCode
from .types import Schema
from .validator import validate_schema

logger = logging.getLogger(__name__)

__all__ = ["parse_schema", "load_schema", "load_schema_from_object"]

_YAML_SUFFIXES = {".yaml", ".yml"}


def load_schema_from_object(doc: Any) -> Schema:
    """Validate an already-decoded schema document."""
    return validate_schema(doc)


def parse_schema(text: str, *, fmt: Literal["json", "yaml"] = "json") -> Schema:
    """Decode a schema document from *text* and validate it.

    Parameters
    ----------
    text:
        Raw schema document.
    fmt:
        ``"json"`` (default) or ``"yaml"``.

    Raises
    ------
    SchemaError
        ``INVALID_JSON`` when the text cannot be decoded, or whatever
        :func:`validate_schema` raises for the decoded document.
    """
    try:
        if fmt == "yaml":
            doc = yaml.safe_load(text)
        else:
            doc = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise SchemaError(
            f"Schema is not valid {fmt.upper()}: {exc}",
            SchemaErrorCode.INVALID_JSON,
            details={"reason": str(exc)},
        ) from exc
    return validate_schema(doc)


def load_schema(path: str | Path) -> Schema:
    """Read a ``.json`` / ``.yaml`` / ``.yml`` schema file and validate it.

    The format is chosen by file suffix; anything that is not YAML is
    decoded as JSON.
    """
    path = Path(path)
    if not path.is_file():
        raise SchemaError(
            f"Schema file not found: {path}",
            SchemaErrorCode.SCHEMA_NOT_FOUND,
            details={"path": str(path)},
        )

    fmt: Literal["json", "yaml"] = "yaml" if path.suffix.lower() in _YAML_SUFFIXES else "json"
    logger.debug("Loading %s schema from %s", fmt, path)
    return parse_schema(path.read_text(encoding="utf-8"), fmt=fmt)
