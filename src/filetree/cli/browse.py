"""filetree ls / history / search commands - read the indexed tree."""

import json
from datetime import UTC, datetime

import click

from filetree.browse import Browser, child_path
from filetree.cli.utils import fail, format_size, get_config, open_cli_store
from filetree.core.errors import FiletreeError
from filetree.index.models import DirectoryEntry


def _timestamp(seconds: float) -> str:
    return datetime.fromtimestamp(seconds, tz=UTC).strftime("%Y-%m-%d %H:%M:%S")


@click.command()
@click.argument("owner")
@click.argument("path", default="")
@click.option("--start", default=None, help="Cursor to start the page at")
@click.option("--rev", is_flag=True, help="Show the page before --start")
@click.option("--page-size", type=click.IntRange(min=1), default=None, help="Entries per page")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def ls_command(
    ctx: click.Context,
    owner: str,
    path: str,
    start: str | None,
    rev: bool,
    page_size: int | None,
    as_json: bool,
) -> None:
    """List one page of directory PATH (default: the scan root) of OWNER."""
    config = get_config(ctx)
    try:
        with open_cli_store(ctx) as store:
            size = config.browse.page_size if page_size is None else page_size
            browser = Browser(store, page_size=size)
            page = browser.list_directory(owner, path, start=start, reverse=rev)
    except FiletreeError as e:
        raise fail(e) from e

    if as_json:
        click.echo(json.dumps(page.to_dict()))
        return

    if not page.entries:
        click.echo(f"{owner}:/{page.path} is empty or not indexed")
        return

    for listed in page.entries:
        entry = listed.entry
        if isinstance(entry, DirectoryEntry):
            click.echo(f"{'':>10}  {'':19}  {child_path(page.path, entry.name)}/")
        else:
            click.echo(
                f"{format_size(entry.size):>10}  {_timestamp(entry.mtime)}  "
                f"{child_path(page.path, entry.name)}"
            )

    if page.prev_cursor:
        click.echo(f"Previous page: --start '{page.prev_cursor}' --rev")
    if page.next_cursor:
        click.echo(f"Next page: --start '{page.next_cursor}'")


@click.command()
@click.argument("owner")
@click.argument("path")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def history_command(ctx: click.Context, owner: str, path: str, as_json: bool) -> None:
    """Show every recorded version of file PATH of OWNER, oldest first."""
    config = get_config(ctx)
    try:
        with open_cli_store(ctx) as store:
            versions = Browser(store, page_size=config.browse.page_size).file_versions(owner, path)
    except FiletreeError as e:
        raise fail(e) from e

    if as_json:
        click.echo(
            json.dumps(
                [{"version_id": v.version_id, **v.info.to_value()} for v in versions]
            )
        )
        return

    if not versions:
        raise click.ClickException(f"No versions recorded for {owner}:{path}")

    for v in versions:
        recorded = _timestamp(v.version_id / 1_000_000)
        click.echo(
            f"{v.version_id}  recorded {recorded}  {format_size(v.info.size):>10}  "
            f"mtime {_timestamp(v.info.mtime)}  sha256 {v.info.content_hash[:12]}"
        )


@click.command()
@click.argument("owner")
@click.argument("query")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def search_command(ctx: click.Context, owner: str, query: str, as_json: bool) -> None:
    """Find files of OWNER whose names contain every word of QUERY."""
    config = get_config(ctx)
    try:
        with open_cli_store(ctx) as store:
            hits = Browser(store, page_size=config.browse.page_size).search(owner, query)
    except FiletreeError as e:
        raise fail(e) from e

    if as_json:
        click.echo(json.dumps([h.to_dict() for h in hits]))
        return

    if not hits:
        click.echo(f"No files matching '{query}'")
        return

    for hit in hits:
        if hit.latest is None:
            click.echo(f"{'':>10}  {hit.path}")
        else:
            click.echo(f"{format_size(hit.latest.info.size):>10}  {hit.path}")
