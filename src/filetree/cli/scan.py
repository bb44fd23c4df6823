"""filetree scan command - index a directory tree for an owner."""

from pathlib import Path

import click

from filetree.cli.utils import fail, get_config, open_cli_store
from filetree.config import StoreConfig
from filetree.core.errors import FiletreeError
from filetree.core.logging import clear_run_id, get_logger, set_run_id
from filetree.core.progress import pluralize, spinner, status
from filetree.index import DirectoryScanner

log = get_logger("cli.scan")


@click.command()
@click.argument("owner")
@click.argument("root", type=click.Path(path_type=Path))
@click.option("--dry-run", is_flag=True, help="Scan into a throwaway in-memory store")
@click.pass_context
def scan_command(ctx: click.Context, owner: str, root: Path, dry_run: bool) -> None:
    """Index ROOT as the virtual filesystem of OWNER.

    Files whose content hash changed since the last scan get a new version;
    unchanged files are left alone.
    """
    if not owner:
        raise click.BadParameter("must not be empty", param_hint="OWNER")
    if ":" in owner:
        raise click.BadParameter("must not contain ':'", param_hint="OWNER")
    config = get_config(ctx)
    if dry_run:
        config = config.model_copy(update={"store": StoreConfig(backend="memory")})
        ctx.obj["config"] = config
    root = root.expanduser().resolve()
    run_id = set_run_id()

    try:
        with open_cli_store(ctx) as store:
            scanner = DirectoryScanner(
                store,
                exclude_names=config.scan.exclude_names,
                chunk_size=config.scan.hash_chunk_size,
            )
            with spinner(f"Scanning {root}"):
                result = scanner.scan(owner, root)
    except FiletreeError as e:
        log.error("scan_failed", root=str(root), **e.to_dict())
        status(f"Scan of {root} failed", style="error")
        raise fail(e) from e
    finally:
        clear_run_id()

    status(
        f"Scanned {pluralize(result.directories, 'directory', 'directories')}, "
        f"{pluralize(result.files_checked, 'file')}: "
        f"{pluralize(result.versions_recorded, 'new version')}, "
        f"{result.files_unchanged} unchanged ({result.duration_ms / 1000:.1f}s)",
        style="success",
    )
    log.debug("scan_summary", run_id=run_id, **result.to_dict())
