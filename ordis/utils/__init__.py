"""
ORDIS Utilities Package - Cross-Cutting Helpers

Overview:
---------
Small helpers shared by the schema and core packages, plus the session
logging setup used by the CLI.  Nothing here imports pydantic models, so
any ORDIS module can depend on it without import cycles.
"""

from .logging import (
    get_current_log_file,
    get_logger,
    get_session_id,
    log_check_complete,
    log_check_start,
    log_schema_info,
    setup_logging,
)
from .values import is_number, type_name

__all__ = [
    "is_number",
    "type_name",
    # Logging utilities
    "setup_logging",
    "get_logger",
    "get_current_log_file",
    "get_session_id",
    "log_check_start",
    "log_check_complete",
    "log_schema_info",
]
