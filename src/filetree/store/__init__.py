"""Column store contract and its adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING

from filetree.store.client import Batch, Column, StorageClient
from filetree.store.memory import MemoryStore
from filetree.store.sqlite import SqliteStore

if TYPE_CHECKING:
    from filetree.config.models import StoreConfig


def open_store(config: StoreConfig) -> StorageClient:
    """Construct the store handle for one run. Callers close it when done."""
    if config.backend == "memory":
        return MemoryStore()
    return SqliteStore.from_config(config)


__all__ = [
    "Batch",
    "Column",
    "MemoryStore",
    "SqliteStore",
    "StorageClient",
    "open_store",
]
