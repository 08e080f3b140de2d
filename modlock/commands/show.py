"""Lookup commands for locked modules and commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import NoReturn

import click
from rich.panel import Panel

from ..console import console
from ..console import error_console
from ..errors import ModlockError
from ..errors import NotFoundError
from ..lock import LOCKFILE_NAME
from ..lock import Lockfile
from ..lock import LockfileModule
from ..utils.error_format import escape_markup
from ..utils.error_format import format_error_message

directory_option = click.option(
    "--directory",
    "-C",
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Project directory containing modlock.lock",
)
json_option = click.option("--json", "output_json", is_flag=True, help="Output as JSON")


def _open(directory: Path) -> Lockfile:
    try:
        return Lockfile.open(directory)
    except ModlockError as e:
        error_console.print(f"[red]✗ Cannot read {LOCKFILE_NAME}:[/red] {escape_markup(format_error_message(e))}")
        raise click.Abort() from e


def _not_found(e: NotFoundError) -> NoReturn:
    error_console.print(f"[red]{escape_markup(e)}[/red]")
    raise click.Abort()


def _module_panel(module: LockfileModule) -> Panel:
    lines = [
        f"[bold]Name:[/bold] {escape_markup(module.name)}",
        f"[bold]Version:[/bold] {escape_markup(module.version)}",
        f"[bold]Source:[/bold] [cyan]{escape_markup(module.source)}[/cyan]",
        f"[bold]Resolved:[/bold] {escape_markup(module.resolved or '-')}",
        f"[bold]Integrity:[/bold] [dim]{escape_markup(module.integrity or '-')}[/dim]",
        f"[bold]Hash:[/bold] [dim]{escape_markup(module.hash or '-')}[/dim]",
        f"[bold]ABI:[/bold] {escape_markup(module.abi or 'none')}",
        f"[bold]Entry:[/bold] {escape_markup(module.entry)}",
    ]
    return Panel("\n".join(lines), title=escape_markup(module.key), border_style="cyan", padding=(1, 2))


@click.group(invoke_without_command=True)
@click.pass_context
def show(ctx: click.Context):
    """Look up locked modules and commands."""
    if ctx.invoked_subcommand is None:
        click.echo("\n" + ctx.get_help())
        ctx.exit()


@show.command("module")
@click.argument("key")
@directory_option
@json_option
def show_module(key: str, directory: Path, output_json: bool):
    """Show the locked module stored under KEY ("<name> <version>").

    Example:

        modlock show module "foo 1.0.2"
    """
    lockfile = _open(directory)
    try:
        module = lockfile.get_module(key)
    except NotFoundError as e:
        _not_found(e)

    if output_json:
        click.echo(json.dumps(module.model_dump(), indent=2))
        return
    console.print(_module_panel(module))


@show.command("command")
@click.argument("name")
@directory_option
@json_option
def show_command(name: str, directory: Path, output_json: bool):
    """Show which locked module implements command NAME."""
    lockfile = _open(directory)
    try:
        command = lockfile.get_command(name)
    except NotFoundError as e:
        _not_found(e)

    if output_json:
        click.echo(json.dumps({"name": name, **command.model_dump()}, indent=2))
        return

    console.print(f"[bold]{escape_markup(name)}[/bold] -> [green]{escape_markup(command.module)}[/green]")
    try:
        console.print(_module_panel(lockfile.get_module(command.module)))
    except NotFoundError:
        console.print(f"[yellow]Module '{escape_markup(command.module)}' is not present in {LOCKFILE_NAME}[/yellow]")
