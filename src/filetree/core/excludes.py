"""Entry names skipped while scanning a tree.

Tier 0 (PLATFORM_NOISE_NAMES): OS metadata files and folders that never
carry user content. Always excluded.

Tier 1 (config ``scan.exclude_names``): extra names supplied by the user,
matched exactly against the entry name at any depth.
"""

from __future__ import annotations

from collections.abc import Iterable

PLATFORM_NOISE_NAMES: frozenset[str] = frozenset(
    (
        # macOS Finder metadata
        ".DS_Store",
        "Icon\r",  # custom folder icon resource
        ".Spotlight-V100",
        ".Trashes",
        ".fseventsd",
        # Windows Explorer metadata
        "Thumbs.db",
        "desktop.ini",
    )
)


def build_exclusion_set(extra: Iterable[str] = ()) -> frozenset[str]:
    """Combine the platform noise names with user-configured names."""
    return PLATFORM_NOISE_NAMES | frozenset(extra)


def is_excluded(name: str, exclusions: frozenset[str] = PLATFORM_NOISE_NAMES) -> bool:
    """Check if a directory entry should be skipped."""
    return name in exclusions or name in (".", "..")


__all__ = [
    "PLATFORM_NOISE_NAMES",
    "build_exclusion_set",
    "is_excluded",
]
