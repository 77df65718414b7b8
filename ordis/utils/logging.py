"""
ORDIS Logging Utilities - Session Logging for Checks and Schema Loads

Overview:
---------
Centralised logging configuration for ORDIS.  The library modules only ever
call ``logging.getLogger(__name__)``; this module is what an entry point (the
CLI, or an application embedding ORDIS) calls once to route the ``ordis``
logger hierarchy into a per-session file.

Log Location:
-------------
- Default: ~/.ordis/logs/
- Each CLI run creates a timestamped log file with a session ID
- A symlink 'ordis.log' always points to the latest session
- Can be overridden via the ORDIS_LOG_DIR environment variable

Log File Format:
----------------
- ordis_YYYYMMDD_HHMMSS_<session_id>.log  (per-session files)
- ordis.log (symlink to latest)

Log Levels:
-----------
- DEBUG: Schema rejections, every coercion step, error counts
- INFO: One summary line per processed output
- WARNING: Enum values that collide after normalization

Usage:
------
    from ordis.utils.logging import get_logger, setup_logging

    log_file = setup_logging(level="DEBUG")
    logger = get_logger(__name__)
"""

from __future__ import annotations

import logging
import os
import sys
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

# ============================================================================
# Constants
# ============================================================================

ROOT_LOGGER = "ordis"
DEFAULT_LOG_DIR = Path.home() / ".ordis" / "logs"
DEFAULT_LOG_LEVEL = "INFO"
SYMLINK_NAME = "ordis.log"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(session_id)s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# File records carry line numbers
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(session_id)s | %(name)s:%(lineno)d | %(message)s"

_logging_initialised = False
_log_file_path: Optional[Path] = None
_session_id: Optional[str] = None


# ============================================================================
# Session ID Filter
# ============================================================================

class SessionIdFilter(logging.Filter):
    """Add session_id to all log records."""

    def __init__(self, session_id: str):
        super().__init__()
        self.session_id = session_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = self.session_id  # type: ignore[attr-defined]
        return True


class SessionFormatter(logging.Formatter):
    """Formatter that falls back to 'N/A' when a record has no session_id."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "session_id"):
            record.session_id = _session_id or "N/A"  # type: ignore[attr-defined]
        return super().format(record)


# ============================================================================
# Setup Functions
# ============================================================================

def generate_session_id() -> str:
    """Generate a short unique session ID (6 characters)."""
    return uuid.uuid4().hex[:6]


def get_log_directory() -> Path:
    """Get the log directory, respecting ORDIS_LOG_DIR."""
    env_log_dir = os.getenv("ORDIS_LOG_DIR")
    if env_log_dir:
        return Path(env_log_dir)
    return DEFAULT_LOG_DIR


def generate_log_filename(session_id: str) -> str:
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"ordis_{timestamp}_{session_id}.log"


def setup_logging(
    level: Optional[str] = None,
    log_dir: Optional[Path] = None,
    console_output: bool = False,
) -> Path:
    """
    Initialise ORDIS logging with a session file and optional console output.

    Each call starts a new session: a new ID, a new timestamped file, and the
    'ordis.log' symlink moved to point at it.

    Parameters
    ----------
    level : str, optional
        DEBUG, INFO, WARNING or ERROR.  Falls back to ORDIS_LOG_LEVEL, then INFO.
    log_dir : Path, optional
        Directory for log files.  Falls back to ORDIS_LOG_DIR, then ~/.ordis/logs/.
    console_output : bool
        Also log to stderr.

    Returns
    -------
    Path
        Path to the log file being written to.
    """
    global _logging_initialised, _log_file_path, _session_id

    _session_id = generate_session_id()

    if level is None:
        level = os.getenv("ORDIS_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_dir is None:
        log_dir = get_log_directory()
    log_dir.mkdir(parents=True, exist_ok=True)

    log_file = log_dir / generate_log_filename(_session_id)
    _log_file_path = log_file

    ordis_logger = logging.getLogger(ROOT_LOGGER)

    for handler in ordis_logger.handlers[:]:
        ordis_logger.removeHandler(handler)
        handler.close()
    for f in ordis_logger.filters[:]:
        ordis_logger.removeFilter(f)

    ordis_logger.setLevel(log_level)
    ordis_logger.addFilter(SessionIdFilter(_session_id))

    # No rotation, each session gets its own file
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(log_level)
    file_handler.setFormatter(SessionFormatter(FILE_LOG_FORMAT, LOG_DATE_FORMAT))
    ordis_logger.addHandler(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(SessionFormatter(LOG_FORMAT, LOG_DATE_FORMAT))
        ordis_logger.addHandler(console_handler)

    ordis_logger.propagate = False

    symlink_path = log_dir / SYMLINK_NAME
    try:
        if symlink_path.is_symlink() or symlink_path.exists():
            symlink_path.unlink()
        symlink_path.symlink_to(log_file.name)
    except OSError:
        # Symlinks are unavailable on some platforms; the session file still exists
        ordis_logger.debug("Could not update %s symlink", SYMLINK_NAME)

    _logging_initialised = True

    ordis_logger.info("=" * 80)
    ordis_logger.info("ORDIS Logging Session Started")
    ordis_logger.info(f"  Session ID: {_session_id}")
    ordis_logger.info(f"  Log file: {log_file}")
    ordis_logger.info(f"  Log level: {level.upper()}")
    ordis_logger.info("=" * 80)

    return log_file


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the ``ordis`` namespace.

    Unlike the library modules, entry points use this so that a session is
    set up with defaults if nobody called :func:`setup_logging` first.
    """
    if not _logging_initialised:
        setup_logging()

    if name.startswith(ROOT_LOGGER):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def get_current_log_file() -> Optional[Path]:
    """Return the path to the current log file, if logging is initialised."""
    return _log_file_path


def get_session_id() -> Optional[str]:
    """Return the current session ID, if logging is initialised."""
    return _session_id


# ============================================================================
# Structured helpers
# ============================================================================

def log_check_start(
    logger: logging.Logger,
    data_source: str,
    schema_name: Optional[str],
    coerce_values: bool,
    strict_formats: bool,
) -> None:
    """Log the start of a check run."""
    logger.info("-" * 60)
    logger.info("CHECK START")
    logger.info(f"  Data: {data_source}")
    logger.info(f"  Schema: {schema_name or '<unnamed>'}")
    logger.info(f"  Coerce: {coerce_values} | Strict formats: {strict_formats}")
    logger.info("-" * 60)


def log_check_complete(
    logger: logging.Logger,
    data_source: str,
    success: bool,
    error_count: int,
    warning_count: int,
) -> None:
    """Log a check run summary."""
    logger.info("-" * 60)
    logger.info(f"CHECK {'SUCCEEDED' if success else 'FAILED'}")
    logger.info(f"  Data: {data_source}")
    logger.info(f"  Errors: {error_count} | Warnings: {warning_count}")
    logger.info("-" * 60)


def log_schema_info(
    logger: logging.Logger,
    schema_name: Optional[str],
    schema_json: str,
    truncate_at: int = 1500,
) -> None:
    """Log the schema being used, truncated for very large documents."""
    if len(schema_json) > truncate_at:
        display_schema = schema_json[:truncate_at] + f"... [TRUNCATED, {len(schema_json)} chars total]"
    else:
        display_schema = schema_json

    logger.debug(f"SCHEMA ({schema_name or '<unnamed>'}):\n{display_schema}")
