"""
gitsync CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys

import typer
from rich.console import Console

from gitsync import __version__
from gitsync.cli import branch, log, serve, status, sync
from gitsync.core.config.env import load_layered_env

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

app = typer.Typer(
    name="gitsync",
    help="Push, pull and resolve conflicts for git working copies",
    no_args_is_help=True,
    add_completion=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"gitsync {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """
    gitsync - keep a working copy in sync with its remote.

    Common Workflows:
        gitsync status repo                 # What state is the checkout in?
        gitsync sync pull -s theirs         # Pull, preferring remote changes
        gitsync sync push -b main           # Publish local commits
        gitsync sync resolve -s ours        # Finish a conflicted pull
        gitsync serve                       # Run the HTTP API

    Exit codes: 0 success, 1 failure, 2 conflicts remain.
    """
    # Precedence: OS env > project .env > user .env
    load_layered_env()

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )

    ctx.obj = {"debug": debug}


app.add_typer(sync.app, name="sync")
app.add_typer(status.app, name="status")
app.add_typer(branch.app, name="branch")
app.command(name="log")(log.log)
app.add_typer(serve.app, name="serve")


def cli_main() -> None:
    """Console-script entry point."""
    app()


__all__ = ["app", "cli_main"]
