"""Persisted layout: tables, composite keys and column encodings.

Tables::

    directories       owner:dirPath   -> { "0:<dir>" | "1:<file>" -> entry info }
    files             owner:filePath  -> { <version id, 20 digits> -> version info }
    file_name_search  owner:token     -> { filePath -> "" }
    file_tokens       owner:filePath  -> { token -> "" }

Directory children are prefixed "0:" / "1:" so that directories sort before
files in column order and a page of a listing is a single range read.
Version ids are zero-padded so that column order equals numeric order.
"""

from __future__ import annotations

from typing import Any

from filetree.index.models import (
    DirectoryEntry,
    EntryInfo,
    FileEntry,
    FileVersion,
    VersionInfo,
)

DIRECTORIES = "directories"
FILES = "files"
FILE_NAME_SEARCH = "file_name_search"
FILE_TOKENS = "file_tokens"

DIRECTORY_PREFIX = "0:"
FILE_PREFIX = "1:"
POSTING_MARKER = ""

_VERSION_ID_WIDTH = 20


def row_key(owner: str, path: str) -> str:
    """Composite ``owner:path`` row key. The scan root's path is ``""``."""
    return f"{owner}:{path}"


# ---------------------------------------------------------------------------
# Directory entries
# ---------------------------------------------------------------------------


def sort_key(entry: EntryInfo) -> str:
    prefix = DIRECTORY_PREFIX if isinstance(entry, DirectoryEntry) else FILE_PREFIX
    return prefix + entry.name


def display_name(column_name: str) -> str:
    """Strip the "0:" / "1:" prefix."""
    return column_name[len(DIRECTORY_PREFIX) :]


def encode_entry(entry: EntryInfo) -> tuple[str, dict[str, Any]]:
    """Entry to its (column name, stored value) pair."""
    if isinstance(entry, DirectoryEntry):
        return sort_key(entry), {"type": "directory"}
    return sort_key(entry), {"type": "file", "size": entry.size, "mtime": entry.mtime}


def decode_entry(column_name: str, value: dict[str, Any]) -> EntryInfo:
    """Stored column back to the tagged entry variant."""
    name = display_name(column_name)
    kind = value.get("type")
    if column_name.startswith(DIRECTORY_PREFIX) and kind == "directory":
        return DirectoryEntry(name=name)
    if column_name.startswith(FILE_PREFIX) and kind == "file":
        return FileEntry(name=name, size=int(value["size"]), mtime=int(value["mtime"]))
    raise ValueError(f"Malformed directory column {column_name!r}: {value!r}")


# ---------------------------------------------------------------------------
# Version ids
# ---------------------------------------------------------------------------


def encode_version_id(version_id: int) -> str:
    if version_id < 0:
        raise ValueError(f"Version id must be non-negative, got {version_id}")
    return str(version_id).zfill(_VERSION_ID_WIDTH)


def decode_version_id(column_name: str) -> int:
    return int(column_name)


def decode_version(column_name: str, value: dict[str, Any]) -> FileVersion:
    return FileVersion(
        version_id=decode_version_id(column_name),
        info=VersionInfo.from_value(value),
    )
