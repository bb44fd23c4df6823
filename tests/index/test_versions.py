"""Tests for content-hash change detection."""

from __future__ import annotations

import hashlib
import os
from pathlib import Path

import pytest

from filetree.core.errors import ErrorCode, FilesystemError
from filetree.index import VersionTracker, hash_file
from filetree.index.models import Recorded, Unchanged
from filetree.store import MemoryStore

EMPTY_SHA256 = hashlib.sha256(b"").hexdigest()


class TestHashFile:
    """Tests for hash_file."""

    def test_matches_hashlib_across_chunks(self, tmp_path: Path) -> None:
        path = tmp_path / "data.bin"
        payload = os.urandom(10_000)
        path.write_bytes(payload)
        assert hash_file(path, chunk_size=333) == hashlib.sha256(payload).hexdigest()

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty"
        path.write_bytes(b"")
        assert hash_file(path) == EMPTY_SHA256

    def test_missing_file_raises_hash_error(self, tmp_path: Path) -> None:
        with pytest.raises(FilesystemError) as exc_info:
            hash_file(tmp_path / "gone.txt")
        assert exc_info.value.operation == "hash"
        assert exc_info.value.code == ErrorCode.FS_NOT_FOUND


class TestCheckAndRecord:
    """Tests for VersionTracker.check_and_record."""

    def test_first_sighting_records_version(self, tracker: VersionTracker, tmp_path: Path) -> None:
        # Given
        path = tmp_path / "a.txt"
        path.write_text("hello")

        # When
        result = tracker.check_and_record("alice", "a.txt", path)

        # Then
        assert isinstance(result, Recorded)
        assert result.info.size == 5
        assert result.info.content_hash == hashlib.sha256(b"hello").hexdigest()
        assert result.info.stime == result.version_id
        assert tracker.latest("alice", "a.txt").version_id == result.version_id

    def test_zero_byte_file_gets_a_version(self, tracker: VersionTracker, tmp_path: Path) -> None:
        path = tmp_path / "empty.txt"
        path.write_bytes(b"")

        result = tracker.check_and_record("alice", "empty.txt", path)

        assert isinstance(result, Recorded)
        assert result.info.size == 0
        assert result.info.content_hash == EMPTY_SHA256

    def test_same_content_is_unchanged(self, tracker: VersionTracker, tmp_path: Path) -> None:
        path = tmp_path / "a.txt"
        path.write_text("hello")
        first = tracker.check_and_record("alice", "a.txt", path)

        second = tracker.check_and_record("alice", "a.txt", path)

        assert isinstance(second, Unchanged)
        assert second.version_id == first.version_id
        assert len(tracker.history("alice", "a.txt")) == 1

    def test_mtime_only_change_is_unchanged(self, tracker: VersionTracker, tmp_path: Path) -> None:
        """Touching a file without changing its bytes records nothing."""
        path = tmp_path / "a.txt"
        path.write_text("hello")
        tracker.check_and_record("alice", "a.txt", path)
        os.utime(path, (1_000_000_000, 1_000_000_000))

        result = tracker.check_and_record("alice", "a.txt", path)

        assert isinstance(result, Unchanged)

    def test_content_change_appends_newer_version(
        self, tracker: VersionTracker, tmp_path: Path
    ) -> None:
        # Given
        path = tmp_path / "a.txt"
        path.write_text("v1")
        first = tracker.check_and_record("alice", "a.txt", path)

        # When
        path.write_text("version two")
        second = tracker.check_and_record("alice", "a.txt", path)

        # Then
        assert isinstance(second, Recorded)
        assert second.version_id > first.version_id
        history = tracker.history("alice", "a.txt")
        assert [v.version_id for v in history] == [first.version_id, second.version_id]
        assert history[-1].info.size == len("version two")

    def test_reverting_content_records_again(self, tracker: VersionTracker, tmp_path: Path) -> None:
        """Only the latest version is compared, so A -> B -> A is three versions."""
        path = tmp_path / "a.txt"
        for content in ("A", "B", "A"):
            path.write_text(content)
            tracker.check_and_record("alice", "a.txt", path)
        assert len(tracker.history("alice", "a.txt")) == 3

    def test_clock_tie_still_increases_id(self, memory_store: MemoryStore, tmp_path: Path) -> None:
        tracker = VersionTracker(memory_store, clock=lambda: 1000)
        path = tmp_path / "a.txt"
        path.write_text("one")
        first = tracker.check_and_record("alice", "a.txt", path)
        path.write_text("two")
        second = tracker.check_and_record("alice", "a.txt", path)

        assert first.version_id == 1000
        assert second.version_id == 1001

    def test_owners_have_separate_histories(self, tracker: VersionTracker, tmp_path: Path) -> None:
        path = tmp_path / "a.txt"
        path.write_text("shared")
        tracker.check_and_record("alice", "a.txt", path)

        result = tracker.check_and_record("bob", "a.txt", path)

        assert isinstance(result, Recorded)
        assert len(tracker.history("alice", "a.txt")) == 1

    def test_vanished_file_raises_and_records_nothing(
        self, tracker: VersionTracker, tmp_path: Path
    ) -> None:
        with pytest.raises(FilesystemError) as exc_info:
            tracker.check_and_record("alice", "gone.txt", tmp_path / "gone.txt")
        assert exc_info.value.operation == "hash"
        assert tracker.history("alice", "gone.txt") == []

    def test_latest_of_unknown_file(self, tracker: VersionTracker) -> None:
        assert tracker.latest("alice", "nope") is None
