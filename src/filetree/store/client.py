"""Ordered wide-column store contract consumed by the indexing engine.

A store holds named tables (column families). Each row is addressed by a
string key and holds a mapping of column name to JSON-compatible value,
kept sorted by column name so callers can range-read a slice of a row.

The engine never relies on read-your-writes across processes; a stale
``get`` is tolerated wherever the "latest" version of a file is looked up.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from contextlib import AbstractContextManager
from typing import Any, NamedTuple, Protocol


class Column(NamedTuple):
    """A single (column name, value) cell returned by a range read."""

    name: str
    value: Any


class Batch(Protocol):
    """Write group applied as one indivisible unit."""

    def insert(self, table: str, row_key: str, columns: Mapping[str, Any]) -> None: ...


class StorageClient(Protocol):
    """Operations the indexing engine requires from the external store."""

    def insert(self, table: str, row_key: str, columns: Mapping[str, Any]) -> None:
        """Upsert columns under a row. Last write per (row, column) wins."""
        ...

    def get(
        self,
        table: str,
        row_key: str,
        *,
        start: str | None = None,
        count: int | None = None,
        reversed: bool = False,
    ) -> list[Column]:
        """Range-read up to ``count`` columns of one row.

        Columns come back in ascending name order, or descending when
        ``reversed``. ``start`` is inclusive; without it the read begins at
        the first (or last, when reversed) column. A missing row reads as
        an empty list; ``count=None`` returns the whole row.
        """
        ...

    def multi_get(
        self,
        table: str,
        row_keys: Iterable[str],
        *,
        start: str | None = None,
        count: int | None = None,
        reversed: bool = False,
    ) -> dict[str, list[Column]]:
        """Batched ``get``. Every requested key is present in the result."""
        ...

    def batch(self) -> AbstractContextManager[Batch]:
        """Group inserts so they apply together on normal exit, or not at all."""
        ...

    def close(self) -> None: ...


def slice_columns(
    ordered: list[Column],
    *,
    start: str | None,
    count: int | None,
    reversed: bool,
) -> list[Column]:
    """Apply range-read semantics to a row already sorted ascending by name."""
    if count is not None and count <= 0:
        return []
    cells = ordered[::-1] if reversed else ordered
    if start is not None:
        if reversed:
            cells = [c for c in cells if c.name <= start]
        else:
            cells = [c for c in cells if c.name >= start]
    if count is not None:
        cells = cells[:count]
    return list(cells)
