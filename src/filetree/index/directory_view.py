"""Materialized per-directory listing.

The ``directories`` row of a directory caches one column per child. File
columns carry the size/mtime of the latest recorded version so a listing
page renders from a single range read without touching file histories.
Children that disappear from disk stay listed; there is no delete path.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from filetree.index import schema
from filetree.index.models import DirectoryEntry, EntryInfo, FileEntry

if TYPE_CHECKING:
    from filetree.store.client import StorageClient


class DirectoryViewUpdater:
    """Writes child entries into a directory's materialized row."""

    def __init__(self, store: StorageClient) -> None:
        self._store = store

    def upsert_directory(self, owner: str, dir_key: str, name: str) -> None:
        """Record a child directory. Rewriting the same entry is a no-op."""
        self._upsert(owner, dir_key, DirectoryEntry(name=name))

    def upsert_file(self, owner: str, dir_key: str, name: str, size: int, mtime: int) -> None:
        """Record a child file, replacing any cached value for it."""
        self._upsert(owner, dir_key, FileEntry(name=name, size=size, mtime=mtime))

    def _upsert(self, owner: str, dir_key: str, entry: EntryInfo) -> None:
        column, value = schema.encode_entry(entry)
        self._store.insert(schema.DIRECTORIES, schema.row_key(owner, dir_key), {column: value})
