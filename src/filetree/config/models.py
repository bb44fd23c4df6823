"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (FILETREE__SECTION__KEY)
3. YAML config file (--config FILE, or ~/.config/filetree/config.yaml)
4. Built-in defaults (this file)

Environment Variable Format:
    FILETREE__<SECTION>__<KEY>=<VALUE>

Examples:
    FILETREE__LOGGING__LEVEL=DEBUG
    FILETREE__STORE__PATH=/var/lib/filetree/store.db
    FILETREE__BROWSE__PAGE_SIZE=50
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_STORE_PATH = "~/.local/share/filetree/store.db"


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        FILETREE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every unchanged file.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class StoreConfig(BaseModel):
    """Column store configuration.

    Env vars:
        FILETREE__STORE__BACKEND: sqlite (durable) or memory (dry run)
        FILETREE__STORE__PATH: SQLite database file
        FILETREE__STORE__BUSY_TIMEOUT_MS: SQLite busy timeout
        FILETREE__STORE__MAX_RETRIES: Retries when the database is locked
    """

    backend: Literal["sqlite", "memory"] = Field(
        default="sqlite",
        description="Store backend. 'memory' keeps nothing after the process exits.",
    )
    path: str = Field(
        default=DEFAULT_STORE_PATH,
        validate_default=True,
        description="SQLite database file. Parent directories are created on open.",
    )
    busy_timeout_ms: int = Field(
        default=30000,
        description="SQLite busy timeout (ms). How long to wait for locks.",
    )
    max_retries: int = Field(
        default=3,
        description="Max retry attempts for locked database errors.",
    )
    retry_base_delay_sec: float = Field(
        default=0.1,
        description="Base delay between retries (exponential backoff).",
    )

    @field_validator("path")
    @classmethod
    def expand_path(cls, v: str) -> str:
        return str(Path(v).expanduser())

    @field_validator("max_retries", "busy_timeout_ms")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Must be >= 0, got {v}")
        return v


class ScanConfig(BaseModel):
    """Tree scan configuration.

    Env vars:
        FILETREE__SCAN__HASH_CHUNK_SIZE: Bytes read per hashing step
    """

    exclude_names: list[str] = Field(
        default_factory=list,
        description="Extra entry names to skip, in addition to OS metadata files.",
    )
    hash_chunk_size: int = Field(
        default=1024 * 1024,
        description="Bytes read per step while hashing file content.",
    )

    @field_validator("hash_chunk_size")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"Chunk size must be positive, got {v}")
        return v


class BrowseConfig(BaseModel):
    """Read-side defaults.

    Env vars:
        FILETREE__BROWSE__PAGE_SIZE: Directory entries per page
    """

    page_size: int = Field(
        default=25,
        description="Directory entries shown per page (one more is fetched as lookahead).",
    )

    @field_validator("page_size")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Page size must be >= 1, got {v}")
        return v


class FiletreeConfig(BaseModel):
    """Root configuration for filetree."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    scan: ScanConfig = Field(default_factory=ScanConfig)
    browse: BrowseConfig = Field(default_factory=BrowseConfig)
