"""Filename token index.

Whole-token matching only: no stemming, stop words or minimum length.
Postings are append-only. Each file's token set is also written to a
``file_tokens`` reverse row so stale postings can be found later.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import structlog

from filetree.index import schema

if TYPE_CHECKING:
    from filetree.store.client import StorageClient

logger = structlog.get_logger()

_TOKEN_SEPARATORS = re.compile(r"[.\s]+")


def tokenize(filename: str) -> list[str]:
    """Split on runs of dots/whitespace, drop empties, lowercase, dedupe in order."""
    tokens: list[str] = []
    for word in _TOKEN_SEPARATORS.split(filename):
        if not word:
            continue
        token = word.lower()
        if token not in tokens:
            tokens.append(token)
    return tokens


class SearchIndexer:
    """Writes token -> path postings for a file name."""

    def __init__(self, store: StorageClient) -> None:
        self._store = store

    def index(self, owner: str, filename: str, full_path: str) -> list[str]:
        """Index one file name. All postings land together or none do.

        Returns:
            The tokens written.
        """
        tokens = tokenize(filename)
        if not tokens:
            return tokens

        with self._store.batch() as batch:
            for token in tokens:
                batch.insert(
                    schema.FILE_NAME_SEARCH,
                    schema.row_key(owner, token),
                    {full_path: schema.POSTING_MARKER},
                )
            batch.insert(
                schema.FILE_TOKENS,
                schema.row_key(owner, full_path),
                dict.fromkeys(tokens, schema.POSTING_MARKER),
            )

        logger.debug("postings_written", path=full_path, tokens=tokens)
        return tokens
