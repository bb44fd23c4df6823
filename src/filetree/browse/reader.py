"""Read contract for browsing clients.

The store has no offset addressing, only forward/backward range reads from
a column name. Paging therefore works with column-name cursors:

- A page requests ``page_size + 1`` columns; a full response means the
  last column starts the next page and is dropped from this one.
- The previous page is the same query issued ``reversed`` from the current
  page's first column, reversed back locally. The cursor column itself
  comes back too and becomes the next-page cursor of that page.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

from filetree.index import schema
from filetree.index.models import DirectoryEntry, EntryInfo, FileVersion
from filetree.index.search import tokenize

if TYPE_CHECKING:
    from filetree.store.client import Column, StorageClient

logger = structlog.get_logger()

DEFAULT_PAGE_SIZE = 25


@dataclass(frozen=True, slots=True)
class ListedEntry:
    """Directory child together with the cursor that addresses it."""

    cursor: str
    entry: EntryInfo

    @property
    def display_name(self) -> str:
        return self.entry.name

    @property
    def is_directory(self) -> bool:
        return isinstance(self.entry, DirectoryEntry)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.entry.name,
            "type": "directory" if self.is_directory else "file",
            "cursor": self.cursor,
        }
        if not isinstance(self.entry, DirectoryEntry):
            data["size"] = self.entry.size
            data["mtime"] = self.entry.mtime
        return data


@dataclass
class DirectoryPage:
    """One page of a directory listing."""

    owner: str
    path: str
    entries: list[ListedEntry] = field(default_factory=list)
    next_cursor: str | None = None
    prev_cursor: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "owner": self.owner,
            "path": self.path,
            "entries": [e.to_dict() for e in self.entries],
            "next_cursor": self.next_cursor,
            "prev_cursor": self.prev_cursor,
        }


@dataclass(frozen=True, slots=True)
class SearchHit:
    """A file whose name contains every query token, with its latest version."""

    path: str
    latest: FileVersion | None

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"path": self.path, "name": self.name}
        if self.latest is not None:
            data["version_id"] = self.latest.version_id
            data.update(self.latest.info.to_value())
        return data


def _listed(columns: list[Column]) -> list[ListedEntry]:
    return [ListedEntry(cursor=c.name, entry=schema.decode_entry(c.name, c.value)) for c in columns]


class Browser:
    """Directory listing, file history and filename search over the store."""

    def __init__(self, store: StorageClient, *, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        if page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {page_size}")
        self._store = store
        self.page_size = page_size

    # ------------------------------------------------------------------
    # Directory listing
    # ------------------------------------------------------------------

    def list_directory(
        self,
        owner: str,
        path: str = "",
        *,
        start: str | None = None,
        page_size: int | None = None,
        reverse: bool = False,
    ) -> DirectoryPage:
        """Page through a directory's children, directories first.

        Args:
            owner: Namespace of the indexed tree
            path: Directory path relative to the scan root ("" for the root)
            start: Cursor (column name) to start from, inclusive
            page_size: Entries per page; defaults to the browser's page size
            reverse: Fetch the page that ends just before ``start``
        """
        size = self.page_size if page_size is None else page_size
        if size < 1:
            raise ValueError(f"page_size must be >= 1, got {size}")
        key = schema.row_key(owner, normalize_path(path))
        if reverse:
            page = self._previous_page(key, start, size)
        else:
            page = self._forward_page(key, start, size)
        page.owner = owner
        page.path = normalize_path(path)
        return page

    def _forward_page(self, key: str, start: str | None, size: int) -> DirectoryPage:
        count = size + 1
        columns = self._store.get(schema.DIRECTORIES, key, start=start, count=count)

        next_cursor = None
        if len(columns) == count:
            next_cursor = columns[-1].name
            columns = columns[:-1]

        entries = _listed(columns)
        prev_cursor = None
        if start is not None and entries and self._has_before(key, entries[0].cursor):
            prev_cursor = entries[0].cursor
        return DirectoryPage(
            owner="", path="", entries=entries, next_cursor=next_cursor, prev_cursor=prev_cursor
        )

    def _previous_page(self, key: str, start: str | None, size: int) -> DirectoryPage:
        count = size + 1
        columns = self._store.get(schema.DIRECTORIES, key, start=start, count=count, reversed=True)
        columns.reverse()

        if len(columns) < count:
            # Reached the beginning: show a full first page instead of a short one
            return self._forward_page(key, None, size)

        if start is not None and columns[-1].name == start:
            columns = columns[:-1]
        else:
            columns = columns[1:]

        entries = _listed(columns)
        prev_cursor = None
        if entries and self._has_before(key, entries[0].cursor):
            prev_cursor = entries[0].cursor
        return DirectoryPage(
            owner="", path="", entries=entries, next_cursor=start, prev_cursor=prev_cursor
        )

    def _has_before(self, key: str, cursor: str) -> bool:
        probe = self._store.get(schema.DIRECTORIES, key, start=cursor, count=2, reversed=True)
        return any(c.name < cursor for c in probe)

    # ------------------------------------------------------------------
    # File history
    # ------------------------------------------------------------------

    def file_versions(self, owner: str, path: str) -> list[FileVersion]:
        """Full version history of a file, in insertion order."""
        columns = self._store.get(schema.FILES, schema.row_key(owner, normalize_path(path)))
        return [schema.decode_version(c.name, c.value) for c in columns]

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(self, owner: str, query: str) -> list[SearchHit]:
        """Files whose names contain every token of ``query``.

        Only each hit's latest version is fetched, via one multi-row
        reverse read of count 1.
        """
        tokens = tokenize(query)
        if not tokens:
            return []

        paths: set[str] | None = None
        for token in tokens:
            postings = self._store.get(schema.FILE_NAME_SEARCH, schema.row_key(owner, token))
            found = {c.name for c in postings}
            paths = found if paths is None else paths & found
            if not paths:
                logger.debug("search_no_match", owner=owner, query=query, token=token)
                return []

        ordered = sorted(paths or ())
        latest = self._store.multi_get(
            schema.FILES,
            [schema.row_key(owner, p) for p in ordered],
            count=1,
            reversed=True,
        )
        hits: list[SearchHit] = []
        for p in ordered:
            columns = latest.get(schema.row_key(owner, p), [])
            version = schema.decode_version(columns[0].name, columns[0].value) if columns else None
            hits.append(SearchHit(path=p, latest=version))
        return hits


# ----------------------------------------------------------------------
# Path helpers
# ----------------------------------------------------------------------


def normalize_path(path: str) -> str:
    """Strip leading/trailing slashes and empty segments: "/a//b/" -> "a/b"."""
    return "/".join(part for part in path.split("/") if part)


def parent_path(path: str) -> str:
    """Parent directory of a relative path; the root's parent is the root."""
    parts = normalize_path(path).split("/")
    return "/".join(parts[:-1])


def child_path(path: str, name: str) -> str:
    """Relative path of ``name`` inside directory ``path``."""
    base = normalize_path(path)
    return f"{base}/{name}" if base else name
