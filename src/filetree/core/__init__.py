"""Core module exports."""

from filetree.core.errors import (
    ConfigError,
    ErrorCode,
    FilesystemError,
    FiletreeError,
    StorageError,
)
from filetree.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)
from filetree.core.progress import pluralize, spinner, status

__all__ = [
    # Errors
    "FiletreeError",
    "ConfigError",
    "ErrorCode",
    "FilesystemError",
    "StorageError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
    # Progress
    "pluralize",
    "spinner",
    "status",
]
