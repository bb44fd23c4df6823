"""Tests for the persisted key and column encodings."""

from __future__ import annotations

import pytest

from filetree.index import schema
from filetree.index.models import DirectoryEntry, FileEntry, VersionInfo


class TestRowKeys:
    """Composite owner:path keys."""

    @pytest.mark.parametrize(
        ("owner", "path", "expected"),
        [
            ("alice", "", "alice:"),
            ("alice", "docs/a.txt", "alice:docs/a.txt"),
            ("bob", "weird:name", "bob:weird:name"),
        ],
    )
    def test_row_key(self, owner: str, path: str, expected: str) -> None:
        assert schema.row_key(owner, path) == expected


class TestEntryEncoding:
    """Directory listing columns."""

    def test_directories_sort_before_files(self) -> None:
        keys = sorted(
            [
                schema.sort_key(FileEntry(name="a.txt", size=1, mtime=1)),
                schema.sort_key(DirectoryEntry(name="zzz")),
                schema.sort_key(FileEntry(name="B.txt", size=1, mtime=1)),
                schema.sort_key(DirectoryEntry(name="Alpha")),
            ]
        )
        assert keys == ["0:Alpha", "0:zzz", "1:B.txt", "1:a.txt"]

    def test_encode_directory(self) -> None:
        assert schema.encode_entry(DirectoryEntry(name="docs")) == ("0:docs", {"type": "directory"})

    def test_encode_file(self) -> None:
        column, value = schema.encode_entry(FileEntry(name="a.txt", size=10, mtime=1700000000))
        assert column == "1:a.txt"
        assert value == {"type": "file", "size": 10, "mtime": 1700000000}

    def test_decode_restores_variant(self) -> None:
        entry = FileEntry(name="x:y.txt", size=3, mtime=5)
        assert schema.decode_entry(*schema.encode_entry(entry)) == entry
        assert schema.decode_entry("0:docs", {"type": "directory"}) == DirectoryEntry(name="docs")

    @pytest.mark.parametrize(
        ("column", "value"),
        [
            ("0:docs", {"type": "file", "size": 1, "mtime": 1}),
            ("1:a.txt", {"type": "directory"}),
            ("2:odd", {"type": "directory"}),
        ],
    )
    def test_decode_rejects_mismatched_prefix(self, column: str, value: dict) -> None:
        with pytest.raises(ValueError, match="Malformed"):
            schema.decode_entry(column, value)

    def test_display_name(self) -> None:
        assert schema.display_name("1:notes.md") == "notes.md"
        assert schema.display_name("0:Recipes") == "Recipes"


class TestVersionIds:
    """Version id column names."""

    def test_zero_padded_order_matches_numeric_order(self) -> None:
        ids = [9, 10, 1_700_000_000_000_000, 100]
        encoded = sorted(schema.encode_version_id(i) for i in ids)
        assert [schema.decode_version_id(c) for c in encoded] == sorted(ids)

    def test_width(self) -> None:
        assert schema.encode_version_id(42) == "00000000000000000042"

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValueError):
            schema.encode_version_id(-1)

    def test_decode_version(self) -> None:
        info = VersionInfo(size=3, mtime=7, content_hash="ab", stime=42)
        version = schema.decode_version(schema.encode_version_id(42), info.to_value())
        assert version.version_id == 42
        assert version.info == info
