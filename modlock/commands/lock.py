"""Lock reconciliation commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn

import click
from rich.table import Table

from ..console import console
from ..console import error_console
from ..errors import ModlockError
from ..lock import LOCKFILE_NAME
from ..lock import Lockfile
from ..lock import reconcile
from ..manifest import MANIFEST_FILE_NAME
from ..manifest import Manifest
from ..settings import create_resolver
from ..settings import load_settings
from ..utils.error_format import escape_markup
from ..utils.error_format import format_error_message

logger = logging.getLogger(__name__)

project_dir_argument = click.argument(
    "directory",
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)


def _fail(message: str, e: BaseException) -> NoReturn:
    error_console.print(f"[red]✗ {message}:[/red] {escape_markup(format_error_message(e))}")
    raise click.Abort()


def render_lockfile(lockfile: Lockfile) -> None:
    """Print modules and commands of a lockfile as tables."""
    modules = Table(title="Modules", show_header=True, header_style="bold cyan")
    modules.add_column("Key", style="green")
    modules.add_column("Source", style="magenta")
    modules.add_column("Entry")
    for key, module in lockfile.modules.items():
        modules.add_row(escape_markup(key), escape_markup(module.source), escape_markup(module.entry))

    commands = Table(title="Commands", show_header=True, header_style="bold cyan")
    commands.add_column("Name", style="green")
    commands.add_column("Module", style="yellow")
    for name, command in lockfile.commands.items():
        commands.add_row(escape_markup(name), escape_markup(command.module))

    console.print(modules)
    console.print(commands)


@click.command("lock")
@project_dir_argument
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum concurrent registry lookups (default: from settings)",
)
@click.option(
    "--strict/--no-strict",
    default=None,
    help="Reject an existing lockfile whose commands reference missing modules",
)
@click.option("--quiet", "-q", is_flag=True, help="Do not print the resulting lockfile")
def lock_cmd(directory: Path, workers: int | None, strict: bool | None, quiet: bool):
    """Reconcile modlock.toml with modlock.lock and save the result.

    Dependencies whose declared constraint is already locked are reused as-is;
    only new or changed declarations are resolved against the registry.

    Example:

        modlock lock ./my-project
    """
    try:
        settings = load_settings(directory)
        resolver = create_resolver(settings)
        lockfile = reconcile(
            directory,
            resolver,
            max_workers=workers or settings.max_workers,
            strict=settings.strict_references if strict is None else strict,
        )
        lock_path = lockfile.save(directory)
    except ModlockError as e:
        logger.error(f"Lock failed for {directory}: {e}")
        _fail("Lock failed", e)

    if not quiet:
        render_lockfile(lockfile)
    console.print(
        f"[green]✓[/green] Wrote {escape_markup(lock_path)} "
        f"({len(lockfile.modules)} modules, {len(lockfile.commands)} commands)"
    )


@click.command("check")
@project_dir_argument
def check_cmd(directory: Path):
    """Verify that every locked command points at a locked module.

    Commands bound to the project's own module (from modlock.toml, when present)
    are not reported.
    """
    try:
        lockfile = Lockfile.open(directory)
        own_module = Manifest.open(directory).module_key() if (directory / MANIFEST_FILE_NAME).is_file() else None
    except ModlockError as e:
        _fail("Check failed", e)

    dangling = lockfile.dangling_commands(own_module)
    if not dangling:
        console.print(f"[green]✓[/green] {LOCKFILE_NAME} is consistent")
        return

    error_console.print(f"[red]✗ {len(dangling)} command(s) reference modules missing from {LOCKFILE_NAME}:[/red]")
    for name, key in dangling.items():
        error_console.print(f"  - {escape_markup(name)} -> {escape_markup(key)}")
    raise click.Abort()
