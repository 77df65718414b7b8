# ordis/config.py
"""
ORDIS Configuration: single source of truth via Pydantic Settings.

Resolution order: CLI flags > env vars (ORDIS_*) > .env file > defaults.
Only the CLI reads this; library functions take explicit arguments.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OrdisConfig(BaseSettings):
    """Central configuration for the ORDIS command line."""

    model_config = SettingsConfigDict(
        env_prefix="ORDIS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Logging ---
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # --- Checking ---
    strict_formats: bool = True
    coerce_before_validate: bool = True

    # --- Output ---
    output_format: Literal["table", "json"] = "table"

    # --- Paths ---
    home_dir: Path = Field(default_factory=lambda: Path.home() / ".ordis")

    @property
    def log_dir(self) -> Path:
        return self.home_dir / "logs"


@lru_cache(maxsize=1)
def get_config() -> OrdisConfig:
    """Return the global config singleton."""
    return OrdisConfig()
