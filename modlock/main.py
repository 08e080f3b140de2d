"""modlock CLI - reconcile module manifests into reproducible lockfiles."""

import logging
import os
from pathlib import Path

import click

from . import __version__
from .commands import check_cmd
from .commands import lock_cmd
from .commands import show
from .logging_setup import init_json_logging

logger = logging.getLogger(__name__)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="modlock")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Append JSONL logs to this file (default: $MODLOCK_LOG_PATH, else no log file)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level (default: $MODLOCK_LOG_LEVEL or INFO)",
)
@click.pass_context
def cli(ctx: click.Context, log_file: Path | None, log_level: str | None):
    """modlock - deterministic lockfiles for module dependencies."""
    if log_file or os.environ.get("MODLOCK_LOG_PATH"):
        init_json_logging(log_file, log_level)
        logger.debug(f"modlock {__version__} invoked: {ctx.invoked_subcommand}")

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()


cli.add_command(lock_cmd)
cli.add_command(check_cmd)
cli.add_command(show)


def main():
    cli()


if __name__ == "__main__":
    main()
