"""Domain types for the indexing engine.

Storage layout never leaks in here: a directory child is a tagged variant
(``DirectoryEntry | FileEntry``), version ids are plain integers. The
``filetree.index.schema`` module translates to and from stored columns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# ============================================================================
# DIRECTORY VIEW
# ============================================================================


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    """Child directory in a directory listing."""

    name: str


@dataclass(frozen=True, slots=True)
class FileEntry:
    """Child file with the cached size/mtime of its latest recorded version."""

    name: str
    size: int
    mtime: int


EntryInfo = DirectoryEntry | FileEntry


# ============================================================================
# FILE HISTORY
# ============================================================================


@dataclass(frozen=True, slots=True)
class VersionInfo:
    """Snapshot of a file at the time a new version was recorded."""

    size: int
    mtime: int
    content_hash: str
    stime: int  # version id (insertion time, microseconds)

    def to_value(self) -> dict[str, Any]:
        return {
            "size": self.size,
            "mtime": self.mtime,
            "content_hash": self.content_hash,
            "stime": self.stime,
        }

    @classmethod
    def from_value(cls, value: dict[str, Any]) -> VersionInfo:
        return cls(
            size=int(value["size"]),
            mtime=int(value["mtime"]),
            content_hash=str(value["content_hash"]),
            stime=int(value.get("stime", 0)),
        )


@dataclass(frozen=True, slots=True)
class FileVersion:
    """One entry of a file's version history."""

    version_id: int
    info: VersionInfo


@dataclass(frozen=True, slots=True)
class Unchanged:
    """Content hash matched the latest recorded version; nothing written."""

    version_id: int
    content_hash: str


@dataclass(frozen=True, slots=True)
class Recorded:
    """A new version was appended to the file's history."""

    version_id: int
    info: VersionInfo


CheckResult = Unchanged | Recorded


# ============================================================================
# SCAN PLAN
# ============================================================================


@dataclass(frozen=True, slots=True)
class DirectoryUpsert:
    """Record ``name`` as a child directory of ``dir_key``."""

    dir_key: str
    name: str


@dataclass(frozen=True, slots=True)
class FileObserved:
    """A regular file found by the traversal; version check still pending."""

    dir_key: str
    name: str
    relative_path: str
    absolute_path: Path


ScanOperation = DirectoryUpsert | FileObserved


@dataclass
class ScanResult:
    """Counters for one scan run."""

    owner: str
    root: str
    directories: int = 0
    files_checked: int = 0
    versions_recorded: int = 0
    files_unchanged: int = 0
    duration_ms: float = 0.0
    recorded_paths: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "owner": self.owner,
            "root": self.root,
            "directories": self.directories,
            "files_checked": self.files_checked,
            "versions_recorded": self.versions_recorded,
            "files_unchanged": self.files_unchanged,
            "duration_ms": round(self.duration_ms, 1),
        }
