"""filetree error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Filesystem
- 4xxx: Storage
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Filesystem (3xxx)
    FS_UNREADABLE = 3001
    FS_NOT_A_DIRECTORY = 3002
    FS_NOT_FOUND = 3003
    FS_PERMISSION_DENIED = 3004

    # Storage (4xxx)
    STORAGE_UNAVAILABLE = 4001
    STORAGE_LOCKED = 4002


@dataclass(eq=False)
class FiletreeError(Exception):
    """Base error with structured context for logs and CLI diagnostics.

    Not frozen: raising and re-raising assigns __traceback__ and __context__.
    """

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'FS_UNREADABLE')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output and structured logs."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(FiletreeError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class FilesystemError(FiletreeError):
    """Unreadable file or directory encountered during a scan.

    Content hashing failures (file vanished between listing and read) use
    operation ``"hash"``; names that are not valid UTF-8 use ``"decode"``.
    """

    @property
    def path(self) -> str | None:
        return self.details.get("path")

    @property
    def operation(self) -> str | None:
        return self.details.get("operation")

    @classmethod
    def not_a_directory(cls, path: str) -> "FilesystemError":
        return cls(
            code=ErrorCode.FS_NOT_A_DIRECTORY,
            message=f"Not a directory: {path}",
            details={"path": path, "operation": "stat"},
        )

    @classmethod
    def unreadable(cls, path: str, operation: str, reason: str) -> "FilesystemError":
        return cls(
            code=ErrorCode.FS_UNREADABLE,
            message=f"Cannot {operation} {path}: {reason}",
            details={"path": path, "operation": operation, "reason": reason},
        )

    @classmethod
    def from_os_error(cls, path: str, operation: str, error: OSError) -> "FilesystemError":
        """Map an OSError onto the matching filesystem error code."""
        if isinstance(error, FileNotFoundError):
            code = ErrorCode.FS_NOT_FOUND
        elif isinstance(error, PermissionError):
            code = ErrorCode.FS_PERMISSION_DENIED
        elif isinstance(error, NotADirectoryError):
            code = ErrorCode.FS_NOT_A_DIRECTORY
        else:
            code = ErrorCode.FS_UNREADABLE
        reason = error.strerror or str(error)
        return cls(
            code=code,
            message=f"Cannot {operation} {path}: {reason}",
            details={"path": path, "operation": operation, "reason": reason},
        )


class StorageError(FiletreeError):
    """Read or write against the column store failed."""

    @classmethod
    def unavailable(cls, operation: str, reason: str, **details: Any) -> "StorageError":
        return cls(
            code=ErrorCode.STORAGE_UNAVAILABLE,
            message=f"Store {operation} failed: {reason}",
            details={"operation": operation, "reason": reason, **details},
        )

    @classmethod
    def locked(cls, operation: str, attempts: int) -> "StorageError":
        return cls(
            code=ErrorCode.STORAGE_LOCKED,
            message=f"Store {operation} failed: database is locked after {attempts} attempts",
            retryable=True,
            details={"operation": operation, "attempts": attempts},
        )

