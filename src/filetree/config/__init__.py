"""Config module exports."""

from filetree.config.loader import load_config
from filetree.config.models import (
    BrowseConfig,
    FiletreeConfig,
    LoggingConfig,
    ScanConfig,
    StoreConfig,
)

__all__ = [
    "load_config",
    "FiletreeConfig",
    "BrowseConfig",
    "LoggingConfig",
    "ScanConfig",
    "StoreConfig",
]
