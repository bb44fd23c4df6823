"""Content-addressed change detection for file version history.

A file gets a new version only when the SHA-256 of its bytes differs from
the hash of its most recently recorded version. Size and mtime are stored
alongside but never consulted for the decision.

CRITICAL INVARIANT: check_and_record() is a non-atomic read-compare-append.
Two concurrent callers on the same file can both append. DirectoryScanner
serializes runs per owner inside one process; separate processes must not
scan the same owner concurrently.
"""

from __future__ import annotations

import hashlib
import time
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from filetree.core.errors import FilesystemError
from filetree.index import schema
from filetree.index.models import CheckResult, FileVersion, Recorded, Unchanged, VersionInfo

if TYPE_CHECKING:
    from filetree.store.client import StorageClient

logger = structlog.get_logger()

DEFAULT_CHUNK_SIZE = 1024 * 1024


def _now_micros() -> int:
    return time.time_ns() // 1000


def hash_file(path: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """SHA-256 hex digest of a file's bytes, streamed in chunks.

    Raises:
        FilesystemError: The file vanished or cannot be read (operation "hash").
    """
    digest = hashlib.sha256()
    try:
        with path.open("rb") as f:
            while chunk := f.read(chunk_size):
                digest.update(chunk)
    except OSError as e:
        raise FilesystemError.from_os_error(str(path), "hash", e) from e
    return digest.hexdigest()


class VersionTracker:
    """Decides per file whether a new version must be recorded."""

    def __init__(
        self,
        store: StorageClient,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        clock: Callable[[], int] = _now_micros,
    ) -> None:
        self._store = store
        self._chunk_size = chunk_size
        self._clock = clock

    def latest(self, owner: str, path: str) -> FileVersion | None:
        """Most recent version via a reverse, count-1 range read."""
        columns = self._store.get(
            schema.FILES, schema.row_key(owner, path), count=1, reversed=True
        )
        return schema.decode_version(*columns[0]) if columns else None

    def history(self, owner: str, path: str) -> list[FileVersion]:
        """Full history, oldest first."""
        columns = self._store.get(schema.FILES, schema.row_key(owner, path))
        return [schema.decode_version(*c) for c in columns]

    def check_and_record(self, owner: str, relative_path: str, absolute_path: Path) -> CheckResult:
        """Hash the file and append a version if its content changed.

        Args:
            owner: Namespace of the indexed tree
            relative_path: POSIX path relative to the scan root (history key)
            absolute_path: Where to read the bytes from

        Returns:
            Unchanged when the hash matches the latest version, else Recorded.

        Raises:
            FilesystemError: The file cannot be read or stat'ed.
            StorageError: The store read or append failed.
        """
        previous = self.latest(owner, relative_path)
        content_hash = hash_file(absolute_path, self._chunk_size)

        if previous is not None and previous.info.content_hash == content_hash:
            logger.debug("file_unchanged", path=relative_path, version_id=previous.version_id)
            return Unchanged(version_id=previous.version_id, content_hash=content_hash)

        try:
            st = absolute_path.stat()
        except OSError as e:
            raise FilesystemError.from_os_error(str(absolute_path), "stat", e) from e

        version_id = self._next_version_id(previous)
        info = VersionInfo(
            size=st.st_size,
            mtime=int(st.st_mtime),
            content_hash=content_hash,
            stime=version_id,
        )
        self._store.insert(
            schema.FILES,
            schema.row_key(owner, relative_path),
            {schema.encode_version_id(version_id): info.to_value()},
        )
        logger.info(
            "version_recorded",
            path=relative_path,
            version_id=version_id,
            size=info.size,
            first_version=previous is None,
        )
        return Recorded(version_id=version_id, info=info)

    def _next_version_id(self, previous: FileVersion | None) -> int:
        """Insertion time in microseconds, bumped past the latest id on a clock tie."""
        candidate = self._clock()
        if previous is not None and candidate <= previous.version_id:
            return previous.version_id + 1
        return candidate
