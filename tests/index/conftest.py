"""Shared fixtures for index tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from filetree.index import VersionTracker
from filetree.store import MemoryStore


@pytest.fixture
def ticking_clock() -> Callable[[], int]:
    """Clock that advances one second per call, starting at a fixed instant."""
    state = {"now": 1_700_000_000_000_000}

    def clock() -> int:
        state["now"] += 1_000_000
        return state["now"]

    return clock


@pytest.fixture
def tracker(memory_store: MemoryStore, ticking_clock: Callable[[], int]) -> VersionTracker:
    return VersionTracker(memory_store, chunk_size=4, clock=ticking_clock)
