"""Read side: directory pages, file histories and filename search."""

from filetree.browse.reader import (
    DEFAULT_PAGE_SIZE,
    Browser,
    DirectoryPage,
    ListedEntry,
    SearchHit,
    child_path,
    normalize_path,
    parent_path,
)

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "Browser",
    "DirectoryPage",
    "ListedEntry",
    "SearchHit",
    "child_path",
    "normalize_path",
    "parent_path",
]
