"""SQLite-backed wide-column store.

Every table (column family) shares one physical table keyed by
``(family, row_key, column_key)``. SQLite's BINARY collation orders
``column_key`` by UTF-8 bytes, which matches Python string ordering, so
range reads map directly onto an indexed ``ORDER BY ... LIMIT``.

Write paths:
- ``insert`` runs in its own short transaction
- ``batch`` stages inserts and applies them in a single transaction on
  exit, so a failure anywhere rolls the whole group back

Both retry with exponential backoff while SQLite reports the database as
locked; any other driver error becomes a StorageError.
"""

from __future__ import annotations

import json
import time
from collections.abc import Generator, Iterable, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import event, text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlmodel import Field, SQLModel, create_engine

from filetree.core.errors import StorageError
from filetree.store.client import Column

if TYPE_CHECKING:
    from sqlalchemy import Engine

    from filetree.config.models import StoreConfig

logger = structlog.get_logger()

DEFAULT_BUSY_TIMEOUT_MS = 30000
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BASE_DELAY = 0.1  # 100ms base
DEFAULT_RETRY_MAX_DELAY = 2.0  # 2s max

_UPSERT_SQL = """
    INSERT INTO wide_columns (family, row_key, column_key, value)
    VALUES (:family, :row_key, :column_key, :value)
    ON CONFLICT (family, row_key, column_key)
    DO UPDATE SET value = excluded.value
"""


class WideColumn(SQLModel, table=True):
    """One cell of a row in a column family."""

    __tablename__ = "wide_columns"

    family: str = Field(primary_key=True)
    row_key: str = Field(primary_key=True)
    column_key: str = Field(primary_key=True)
    value: str  # JSON document


def _is_database_locked_error(error: Exception) -> bool:
    error_str = str(error).lower()
    return "database is locked" in error_str or "database is busy" in error_str


def _escaped(value: str) -> str:
    return value.encode("utf-8", "backslashreplace").decode("utf-8")


def _records(table: str, row_key: str, columns: Mapping[str, Any]) -> list[dict[str, str]]:
    return [
        {
            "family": table,
            "row_key": row_key,
            "column_key": name,
            "value": json.dumps(value, sort_keys=True),
        }
        for name, value in columns.items()
    ]


class SqliteBatch:
    """Staged inserts, applied by SqliteStore in one transaction."""

    def __init__(self) -> None:
        self.records: list[dict[str, str]] = []

    def insert(self, table: str, row_key: str, columns: Mapping[str, Any]) -> None:
        self.records.extend(_records(table, row_key, columns))


class SqliteStore:
    """StorageClient implementation on a local SQLite database."""

    def __init__(
        self,
        db_path: Path,
        *,
        busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY,
        retry_max_delay: float = DEFAULT_RETRY_MAX_DELAY,
    ) -> None:
        self.db_path = db_path
        self._busy_timeout_ms = busy_timeout_ms
        self._max_retries = max_retries
        self._retry_base_delay = retry_base_delay
        self._retry_max_delay = retry_max_delay
        try:
            db_path.parent.mkdir(parents=True, exist_ok=True)
            self.engine = self._create_engine()
            table = WideColumn.__table__  # type: ignore[attr-defined]
            SQLModel.metadata.create_all(self.engine, tables=[table])
        except (OSError, SQLAlchemyError) as e:
            raise StorageError.unavailable("open", str(e), path=str(db_path)) from e

    @classmethod
    def from_config(cls, config: StoreConfig) -> SqliteStore:
        return cls(
            Path(config.path),
            busy_timeout_ms=config.busy_timeout_ms,
            max_retries=config.max_retries,
            retry_base_delay=config.retry_base_delay_sec,
        )

    def _create_engine(self) -> Engine:
        engine = create_engine(
            f"sqlite:///{self.db_path}",
            connect_args={"check_same_thread": False},
            pool_pre_ping=True,
        )
        busy_timeout_ms = self._busy_timeout_ms

        def _configure_pragmas(dbapi_conn: Any, _connection_record: Any) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")
            cursor.execute("PRAGMA synchronous=NORMAL")  # Safe with WAL
            cursor.close()

        event.listen(engine, "connect", _configure_pragmas)
        return engine

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, table: str, row_key: str, columns: Mapping[str, Any]) -> None:
        self._write("insert", _records(table, row_key, columns))

    @contextmanager
    def batch(self) -> Generator[SqliteBatch, None, None]:
        staged = SqliteBatch()
        yield staged
        self._write("batch", staged.records)

    def _write(self, operation: str, records: list[dict[str, str]]) -> None:
        """Apply records in one transaction, retrying while the database is locked."""
        if not records:
            return

        retries = self._max_retries
        for attempt in range(retries + 1):  # +1 for initial attempt
            try:
                with self.engine.begin() as conn:
                    conn.execute(text(_UPSERT_SQL), records)
                return
            except OperationalError as e:
                if _is_database_locked_error(e):
                    if attempt < retries:
                        delay = min(
                            self._retry_base_delay * (2**attempt),
                            self._retry_max_delay,
                        )
                        logger.warning(
                            "sqlite_busy_retry",
                            operation=operation,
                            attempt=attempt + 1,
                            max_retries=retries,
                            delay_sec=delay,
                        )
                        time.sleep(delay)
                        continue
                    raise StorageError.locked(operation, attempts=attempt + 1) from e
                raise StorageError.unavailable(operation, str(e.orig or e)) from e
            except SQLAlchemyError as e:
                raise StorageError.unavailable(operation, str(getattr(e, "orig", None) or e)) from e
            except UnicodeEncodeError as e:
                raise StorageError.unavailable(
                    operation, "key is not valid UTF-8", key=_escaped(e.object)
                ) from e

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(
        self,
        table: str,
        row_key: str,
        *,
        start: str | None = None,
        count: int | None = None,
        reversed: bool = False,
    ) -> list[Column]:
        if count is not None and count <= 0:
            return []

        sql = (
            "SELECT column_key, value FROM wide_columns"
            " WHERE family = :family AND row_key = :row_key"
        )
        params: dict[str, Any] = {"family": table, "row_key": row_key}
        if start is not None:
            sql += " AND column_key <= :start" if reversed else " AND column_key >= :start"
            params["start"] = start
        sql += " ORDER BY column_key DESC" if reversed else " ORDER BY column_key ASC"
        if count is not None:
            sql += " LIMIT :count"
            params["count"] = count

        try:
            with self.engine.connect() as conn:
                rows = conn.execute(text(sql), params).fetchall()
        except SQLAlchemyError as e:
            reason = str(getattr(e, "orig", None) or e)
            raise StorageError.unavailable("get", reason, table=table) from e
        except UnicodeEncodeError as e:
            raise StorageError.unavailable(
                "get", "key is not valid UTF-8", table=table, key=_escaped(e.object)
            ) from e
        return [Column(row[0], json.loads(row[1])) for row in rows]

    def multi_get(
        self,
        table: str,
        row_keys: Iterable[str],
        *,
        start: str | None = None,
        count: int | None = None,
        reversed: bool = False,
    ) -> dict[str, list[Column]]:
        return {
            key: self.get(table, key, start=start, count=count, reversed=reversed)
            for key in row_keys
        }

    def execute_raw(self, sql: str, params: dict[str, Any] | None = None) -> None:
        """Execute raw SQL (schema tweaks in tests, maintenance)."""
        with self.engine.begin() as conn:
            conn.execute(text(sql), params or {})

    def close(self) -> None:
        self.engine.dispose()
