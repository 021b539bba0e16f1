"""
gitsync CLI - branch commands.
"""

from pathlib import Path

import typer
from rich.console import Console

from gitsync.cli.common import build_orchestrator, fail
from gitsync.cli.status import branch_table
from gitsync.core.sync.errors import GitSyncError

console = Console()
app = typer.Typer(
    name="branch",
    help="List and check out branches",
    no_args_is_help=True,
)


@app.command(name="list")
def list_branches(
    repo: Path | None = typer.Option(
        None,
        "--repo",
        "-r",
        help="Repository to inspect (defaults to configured path or cwd)",
    ),
) -> None:
    """List local branches; the current one is marked with *."""
    orchestrator = build_orchestrator()
    try:
        branches = orchestrator.get_local_branches(repo)
    except GitSyncError as e:
        raise fail(e)

    if not branches:
        console.print("[dim]No local branches yet[/dim]")
        return
    console.print(branch_table(branches))


@app.command()
def checkout(
    name: str = typer.Option(
        ...,
        "--name",
        "-n",
        help="Branch to check out",
    ),
    repo: Path | None = typer.Option(
        None,
        "--repo",
        "-r",
        help="Repository to switch (defaults to configured path or cwd)",
    ),
) -> None:
    """
    Check out a branch.

    If only a remote-tracking branch exists (e.g. origin/feature), a local
    branch tracking it is created first.

    Examples:
        gitsync branch checkout --name feature/login
    """
    orchestrator = build_orchestrator()
    try:
        orchestrator.checkout(repo, name)
    except GitSyncError as e:
        raise fail(e)

    console.print(f"[green]✓[/green] Switched to branch {name}")
