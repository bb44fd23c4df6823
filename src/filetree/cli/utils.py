"""CLI utilities."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

import click

from filetree.config import FiletreeConfig, load_config
from filetree.core.errors import FiletreeError
from filetree.core.logging import get_log_file_path
from filetree.store import StorageClient, open_store


def get_config(ctx: click.Context) -> FiletreeConfig:
    """Resolve the run's config once and cache it on the click context.

    Raises:
        click.ClickException: If the config file is missing or invalid
    """
    obj = ctx.ensure_object(dict)
    config: FiletreeConfig | None = obj.get("config")
    if config is not None:
        return config

    overrides: dict[str, dict[str, object]] = {}
    if obj.get("store_path"):
        overrides["store"] = {"backend": "sqlite", "path": str(obj["store_path"])}
    if obj.get("verbose"):
        overrides["logging"] = {"level": "DEBUG"}

    config_path: Path | None = obj.get("config_path")
    try:
        config = load_config(config_path, **overrides)
    except FiletreeError as e:
        raise click.ClickException(str(e)) from e
    obj["config"] = config
    return config


def fail(error: FiletreeError) -> click.ClickException:
    """Turn a domain error into a CLI failure (exit status 1)."""
    message = str(error)
    log_path = get_log_file_path()
    if log_path is not None:
        message += f"\nDetails: {log_path}"
    return click.ClickException(message)


@contextmanager
def open_cli_store(ctx: click.Context) -> Generator[StorageClient, None, None]:
    """Open the configured store for one command and close it afterwards."""
    config = get_config(ctx)
    try:
        store = open_store(config.store)
    except FiletreeError as e:
        raise fail(e) from e
    try:
        yield store
    finally:
        store.close()


def format_size(size: int) -> str:
    """Human-readable byte count."""
    if size < 1024:
        return f"{size} B"
    value = size / 1024
    for unit in ("KB", "MB"):
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"
