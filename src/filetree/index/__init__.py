"""Indexing engine: tree scan, version tracking, directory view, filename search.

Public API:
- DirectoryScanner: plan + apply a scan of one tree for one owner
- VersionTracker: content-hash change detection and version history
- DirectoryViewUpdater: materialized per-directory listings
- SearchIndexer / tokenize: filename token postings

Persisted layout lives in `filetree.index.schema`.
"""

from filetree.index.directory_view import DirectoryViewUpdater
from filetree.index.models import (
    CheckResult,
    DirectoryEntry,
    DirectoryUpsert,
    EntryInfo,
    FileEntry,
    FileObserved,
    FileVersion,
    Recorded,
    ScanOperation,
    ScanResult,
    Unchanged,
    VersionInfo,
)
from filetree.index.scanner import DirectoryScanner, plan_tree
from filetree.index.search import SearchIndexer, tokenize
from filetree.index.versions import VersionTracker, hash_file

__all__ = [
    # Components
    "DirectoryScanner",
    "DirectoryViewUpdater",
    "SearchIndexer",
    "VersionTracker",
    # Functions
    "hash_file",
    "plan_tree",
    "tokenize",
    # Models
    "CheckResult",
    "DirectoryEntry",
    "DirectoryUpsert",
    "EntryInfo",
    "FileEntry",
    "FileObserved",
    "FileVersion",
    "Recorded",
    "ScanOperation",
    "ScanResult",
    "Unchanged",
    "VersionInfo",
]
