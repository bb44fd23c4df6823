"""In-process ordered column store.

Backs tests and ``--store memory`` dry runs. Rows are plain dicts sorted on
read; that is fine for directory-sized rows and keeps writes O(1).
"""

from __future__ import annotations

import copy
import threading
from collections import defaultdict
from collections.abc import Generator, Iterable, Mapping
from contextlib import contextmanager
from typing import Any

from filetree.store.client import Column, slice_columns


class MemoryBatch:
    """Staged inserts. Nothing is visible until the owning store applies them."""

    def __init__(self) -> None:
        self.pending: list[tuple[str, str, dict[str, Any]]] = []

    def insert(self, table: str, row_key: str, columns: Mapping[str, Any]) -> None:
        self.pending.append((table, row_key, copy.deepcopy(dict(columns))))


class MemoryStore:
    """Dict-backed implementation of the StorageClient contract."""

    def __init__(self) -> None:
        self._tables: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)
        self._lock = threading.RLock()

    def insert(self, table: str, row_key: str, columns: Mapping[str, Any]) -> None:
        with self._lock:
            row = self._tables[table].setdefault(row_key, {})
            row.update(copy.deepcopy(dict(columns)))

    def get(
        self,
        table: str,
        row_key: str,
        *,
        start: str | None = None,
        count: int | None = None,
        reversed: bool = False,
    ) -> list[Column]:
        with self._lock:
            row = self._tables.get(table, {}).get(row_key, {})
            ordered = [Column(name, copy.deepcopy(row[name])) for name in sorted(row)]
        return slice_columns(ordered, start=start, count=count, reversed=reversed)

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

    @contextmanager
    def batch(self) -> Generator[MemoryBatch, None, None]:
        """Collect inserts and apply them in one step under the store lock."""
        staged = MemoryBatch()
        yield staged
        with self._lock:
            for table, row_key, columns in staged.pending:
                self._tables[table].setdefault(row_key, {}).update(columns)

    def row_keys(self, table: str) -> list[str]:
        """All row keys of a table, sorted. Used by tests and debugging."""
        with self._lock:
            return sorted(self._tables.get(table, {}))

    def close(self) -> None:
        pass
