"""Tests for filetree scan / ls / history / search commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from filetree.cli.main import cli

runner = CliRunner()


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "state" / "store.db"


@pytest.fixture
def scanned(sample_tree: Path, store_path: Path) -> Path:
    """sample_tree indexed for alice."""
    result = runner.invoke(cli, ["--store", str(store_path), "scan", "alice", str(sample_tree)])
    assert result.exit_code == 0, result.output
    return sample_tree


def _invoke(store_path: Path, *args: str):  # type: ignore[no-untyped-def]
    return runner.invoke(cli, ["--store", str(store_path), *args])


class TestCli:
    """Top-level group options."""

    def test_version(self) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("scan", "ls", "history", "search"):
            assert command in result.output

    def test_missing_config_file(self, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["--config", str(tmp_path / "nope.yaml"), "ls", "alice"])
        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestScanCommand:
    """filetree scan tests."""

    def test_given_tree_when_scan_then_reports_counts(
        self, sample_tree: Path, store_path: Path
    ) -> None:
        # When
        result = _invoke(store_path, "scan", "alice", str(sample_tree))

        # Then
        assert result.exit_code == 0, result.output
        assert "3 directories" in result.stderr
        assert "5 new versions" in result.stderr
        assert store_path.exists()

    def test_given_scanned_tree_when_rescan_then_nothing_new(
        self, scanned: Path, store_path: Path
    ) -> None:
        result = _invoke(store_path, "scan", "alice", str(scanned))
        assert result.exit_code == 0, result.output
        assert "0 new versions, 5 unchanged" in result.stderr

    def test_given_missing_root_when_scan_then_fails(
        self, tmp_path: Path, store_path: Path
    ) -> None:
        result = _invoke(store_path, "scan", "alice", str(tmp_path / "missing"))
        assert result.exit_code == 1
        assert "FS_NOT_A_DIRECTORY" in result.stderr

    def test_given_owner_with_colon_when_scan_then_usage_error(
        self, sample_tree: Path, store_path: Path
    ) -> None:
        result = _invoke(store_path, "scan", "al:ice", str(sample_tree))
        assert result.exit_code == 2
        assert not store_path.exists()

    def test_given_empty_owner_when_scan_then_usage_error(
        self, sample_tree: Path, store_path: Path
    ) -> None:
        result = _invoke(store_path, "scan", "", str(sample_tree))
        assert result.exit_code == 2
        assert "must not be empty" in result.stderr
        assert not store_path.exists()

    def test_given_dry_run_when_scan_then_store_untouched(
        self, sample_tree: Path, store_path: Path
    ) -> None:
        result = _invoke(store_path, "scan", "--dry-run", "alice", str(sample_tree))
        assert result.exit_code == 0, result.output
        assert "5 new versions" in result.stderr
        assert not store_path.exists()


class TestLsCommand:
    """filetree ls tests."""

    def test_root_listing(self, scanned: Path, store_path: Path) -> None:
        result = _invoke(store_path, "ls", "alice")
        assert result.exit_code == 0, result.output
        lines = result.stdout.splitlines()
        assert lines[0].endswith("Documents/")
        assert lines[1].endswith("Music/")
        assert lines[2].endswith(".vimrc")

    def test_subdirectory_json(self, scanned: Path, store_path: Path) -> None:
        result = _invoke(store_path, "ls", "alice", "Documents", "--json")
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        names = [e["name"] for e in data["entries"]]
        assert names == ["Recipes", "My.File.TXT", "report 2024.pdf"]
        assert data["entries"][1]["size"] == len("hello\n")
        assert data["next_cursor"] is None

    def test_paging_hints(self, scanned: Path, store_path: Path) -> None:
        first = _invoke(store_path, "ls", "alice", "Documents", "--page-size", "1")
        assert "Next page: --start '0:Recipes'" not in first.stdout
        assert "Next page: --start '1:My.File.TXT'" in first.stdout

        second = _invoke(
            store_path, "ls", "alice", "Documents", "--page-size", "1", "--start", "1:My.File.TXT"
        )
        assert "My.File.TXT" in second.stdout
        assert "Previous page: --start '1:My.File.TXT' --rev" in second.stdout

        back = _invoke(
            store_path, "ls", "alice", "Documents", "--page-size", "1", "--start", "1:My.File.TXT",
            "--rev",
        )
        assert "Documents/Recipes/" in back.stdout

    def test_unindexed_directory(self, scanned: Path, store_path: Path) -> None:
        result = _invoke(store_path, "ls", "alice", "nowhere")
        assert result.exit_code == 0
        assert "empty or not indexed" in result.stdout


class TestHistoryCommand:
    """filetree history tests."""

    def test_versions_listed(self, scanned: Path, store_path: Path) -> None:
        (scanned / ".vimrc").write_text("set number\n")
        _invoke(store_path, "scan", "alice", str(scanned))

        result = _invoke(store_path, "history", "alice", ".vimrc", "--json")

        assert result.exit_code == 0, result.output
        versions = json.loads(result.stdout)
        assert len(versions) == 2
        assert versions[0]["version_id"] < versions[1]["version_id"]
        assert set(versions[0]) == {"version_id", "size", "mtime", "content_hash", "stime"}

    def test_text_output(self, scanned: Path, store_path: Path) -> None:
        result = _invoke(store_path, "history", "alice", "Documents/Recipes/empty.txt")
        assert result.exit_code == 0, result.output
        assert "0 B" in result.stdout
        assert "sha256 e3b0c44298fc" in result.stdout

    def test_unknown_file(self, scanned: Path, store_path: Path) -> None:
        result = _invoke(store_path, "history", "alice", "nope.txt")
        assert result.exit_code == 1
        assert "No versions recorded for alice:nope.txt" in result.stderr


class TestSearchCommand:
    """filetree search tests."""

    def test_match(self, scanned: Path, store_path: Path) -> None:
        result = _invoke(store_path, "search", "alice", "file txt", "--json")
        assert result.exit_code == 0, result.output
        hits = json.loads(result.stdout)
        assert [h["path"] for h in hits] == ["Documents/My.File.TXT"]
        assert hits[0]["size"] == len("hello\n")

    def test_no_match(self, scanned: Path, store_path: Path) -> None:
        result = _invoke(store_path, "search", "alice", "zzz")
        assert result.exit_code == 0
        assert "No files matching 'zzz'" in result.stdout

    def test_other_owner_sees_nothing(self, scanned: Path, store_path: Path) -> None:
        result = _invoke(store_path, "search", "bob", "txt", "--json")
        assert json.loads(result.stdout) == []
