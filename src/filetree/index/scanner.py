"""Recursive tree scan.

Two phases:

- plan(): depth-first traversal of the filesystem producing DirectoryUpsert
  and FileObserved operations. Touches the filesystem only, never the store.
- scan(): consumes the plan lazily and applies each operation through
  DirectoryViewUpdater, VersionTracker and SearchIndexer.

Fail-fast: the first unreadable entry or store failure aborts the run.
Nothing is checkpointed; re-running is safe because unchanged content never
produces a new version and directory upserts are idempotent.
"""

from __future__ import annotations

import os
import stat
import threading
import time
from collections.abc import Generator, Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from filetree.core.errors import FilesystemError
from filetree.core.excludes import build_exclusion_set, is_excluded
from filetree.index.directory_view import DirectoryViewUpdater
from filetree.index.models import (
    DirectoryUpsert,
    FileObserved,
    Recorded,
    ScanOperation,
    ScanResult,
)
from filetree.index.search import SearchIndexer
from filetree.index.versions import DEFAULT_CHUNK_SIZE, VersionTracker

if TYPE_CHECKING:
    from filetree.store.client import StorageClient

logger = structlog.get_logger()

# One lock per owner seen by this process, kept for its lifetime; owners are few.
_owner_locks: dict[str, threading.Lock] = {}
_owner_locks_guard = threading.Lock()


@contextmanager
def owner_lock(owner: str) -> Generator[None, None, None]:
    """Serialize scans of one owner within this process."""
    with _owner_locks_guard:
        lock = _owner_locks.setdefault(owner, threading.Lock())
    with lock:
        yield


def _join(parent: str, name: str) -> str:
    return f"{parent}/{name}" if parent else name


def _printable(path: str) -> str:
    """Render surrogate-escaped bytes as \\xNN so the path can be logged and shown."""
    return path.encode("utf-8", "surrogateescape").decode("utf-8", "backslashreplace")


def _check_name(entry: os.DirEntry[str]) -> None:
    """Reject names that are not valid UTF-8; keys and JSON values must be text."""
    try:
        entry.name.encode("utf-8")
    except UnicodeEncodeError as e:
        raise FilesystemError.unreadable(
            _printable(entry.path), "decode", "name is not valid UTF-8"
        ) from e


def plan_tree(root: Path, exclusions: frozenset[str]) -> Iterator[ScanOperation]:
    """Walk ``root`` depth-first, yielding the operations a scan applies.

    Entries are visited in name order. A directory's DirectoryUpsert is
    yielded before anything inside it. Symlinks are followed; a directory
    already visited through another path is skipped. Entries that are
    neither regular files nor directories (sockets, FIFOs, devices) are
    skipped.

    Raises:
        FilesystemError: A directory cannot be listed, an entry cannot be
            stat'ed, or an entry name is not valid UTF-8 (operation "decode").
    """
    visited: set[tuple[int, int]] = set()

    try:
        root_stat = root.stat()
    except OSError as e:
        raise FilesystemError.from_os_error(str(root), "stat", e) from e
    visited.add((root_stat.st_dev, root_stat.st_ino))

    yield from _walk(root, "", exclusions, visited)


def _walk(
    directory: Path,
    rel_dir: str,
    exclusions: frozenset[str],
    visited: set[tuple[int, int]],
) -> Iterator[ScanOperation]:
    try:
        with os.scandir(directory) as it:
            entries = sorted(
                (e for e in it if not is_excluded(e.name, exclusions)),
                key=lambda e: e.name,
            )
    except OSError as e:
        raise FilesystemError.from_os_error(str(directory), "list", e) from e

    for entry in entries:
        _check_name(entry)
        child_rel = _join(rel_dir, entry.name)
        try:
            st = entry.stat()
        except OSError as e:
            raise FilesystemError.from_os_error(entry.path, "stat", e) from e

        if stat.S_ISDIR(st.st_mode):
            identity = (st.st_dev, st.st_ino)
            yield DirectoryUpsert(dir_key=rel_dir, name=entry.name)
            if identity in visited:
                logger.warning("directory_cycle_skipped", path=child_rel)
                continue
            visited.add(identity)
            yield from _walk(Path(entry.path), child_rel, exclusions, visited)
        elif stat.S_ISREG(st.st_mode):
            yield FileObserved(
                dir_key=rel_dir,
                name=entry.name,
                relative_path=child_rel,
                absolute_path=Path(entry.path),
            )
        else:
            logger.warning("special_file_skipped", path=child_rel, mode=oct(st.st_mode))


class DirectoryScanner:
    """Indexes a directory tree into the store for one owner.

    The store handle is injected once per run and shared by the three
    collaborators; pass them explicitly to substitute fakes in tests.
    """

    def __init__(
        self,
        store: StorageClient,
        *,
        exclude_names: Iterable[str] = (),
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        tracker: VersionTracker | None = None,
        view: DirectoryViewUpdater | None = None,
        indexer: SearchIndexer | None = None,
    ) -> None:
        self.exclusions = build_exclusion_set(exclude_names)
        self.tracker = tracker or VersionTracker(store, chunk_size=chunk_size)
        self.view = view or DirectoryViewUpdater(store)
        self.indexer = indexer or SearchIndexer(store)

    def plan(self, root: Path) -> Iterator[ScanOperation]:
        return plan_tree(root, self.exclusions)

    def scan(self, owner: str, root: Path) -> ScanResult:
        """Recursively index ``root`` under ``owner``.

        Returns:
            ScanResult with per-run counters.

        Raises:
            FilesystemError: root is not a readable directory, or any entry
                below it cannot be listed, stat'ed or read.
            StorageError: Any store read or write failed.
        """
        if not owner or ":" in owner:
            raise ValueError(f"Owner must be non-empty and contain no ':', got {owner!r}")

        root = Path(root)
        if not root.is_dir():
            raise FilesystemError.not_a_directory(str(root))

        result = ScanResult(owner=owner, root=str(root))
        start_time = time.perf_counter()

        with owner_lock(owner), structlog.contextvars.bound_contextvars(owner=owner):
            logger.info("scan_started", root=str(root))
            for op in self.plan(root):
                self.apply(owner, op, result)

        result.duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info("scan_complete", **result.to_dict())
        return result

    def apply(self, owner: str, op: ScanOperation, result: ScanResult) -> None:
        """Execute one planned operation against the store."""
        if isinstance(op, DirectoryUpsert):
            self.view.upsert_directory(owner, op.dir_key, op.name)
            result.directories += 1
            logger.debug("directory_indexed", path=_join(op.dir_key, op.name))
            return

        result.files_checked += 1
        outcome = self.tracker.check_and_record(owner, op.relative_path, op.absolute_path)
        if isinstance(outcome, Recorded):
            self.view.upsert_file(
                owner, op.dir_key, op.name, outcome.info.size, outcome.info.mtime
            )
            self.indexer.index(owner, op.name, op.relative_path)
            result.versions_recorded += 1
            result.recorded_paths.append(op.relative_path)
        else:
            result.files_unchanged += 1
