"""filetree CLI - filetree command."""

from pathlib import Path

import click

from filetree.cli.browse import history_command, ls_command, search_command
from filetree.cli.scan import scan_command
from filetree.cli.utils import get_config
from filetree.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="filetree")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML config file (default: ~/.config/filetree/config.yaml)",
)
@click.option(
    "--store",
    "store_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="SQLite store file (overrides store.path)",
)
@click.pass_context
def cli(
    ctx: click.Context, verbose: bool, config_path: Path | None, store_path: Path | None
) -> None:
    """filetree - versioned index of a file tree with paged browsing and filename search."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path
    ctx.obj["store_path"] = store_path
    configure_logging(config=get_config(ctx).logging)


cli.add_command(scan_command, name="scan")
cli.add_command(ls_command, name="ls")
cli.add_command(history_command, name="history")
cli.add_command(search_command, name="search")


if __name__ == "__main__":
    cli()
