"""
gitsync CLI - status command.

Shows the state of a working copy: branch, dirty flag, file counts,
conflicts and local branches.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from gitsync.cli.common import build_orchestrator, fail
from gitsync.core.sync.errors import GitSyncError
from gitsync.core.sync.models import BranchRef, RepositoryStatus

console = Console()
app = typer.Typer(
    name="status",
    help="Show working copy status",
    no_args_is_help=True,
)


def _status_panel(path: Path, status: RepositoryStatus) -> Panel:
    if status.is_detached:
        branch = f"[yellow]detached at {status.current_branch[:12]}[/yellow]"
    else:
        branch = f"[cyan]{status.current_branch}[/cyan]"

    state = "[red]dirty[/red]" if status.has_uncommitted_changes else "[green]clean[/green]"
    if status.has_conflicts:
        state = "[red]merge in progress (conflicts)[/red]"

    lines = [
        f"Repository: {path}",
        f"Branch:     {branch}",
        f"State:      {state}",
        f"Staged:     {status.staged_files_count}",
        f"Modified:   {status.modified_files_count}",
        f"Untracked:  {status.untracked_files_count}",
    ]
    return Panel("\n".join(lines), title="Repository Status", expand=False)


def branch_table(branches: list[BranchRef]) -> Table:
    table = Table(title="Local Branches", show_header=True)
    table.add_column("", width=1)
    table.add_column("Branch", style="cyan")
    table.add_column("Tip", style="dim")
    table.add_column("Tracking")
    table.add_column("Message")
    for ref in branches:
        table.add_row(
            "*" if ref.is_current else "",
            ref.name,
            (ref.tip_commit_id or "")[:8],
            ref.tracking_remote_ref or "-",
            ref.tip_message,
        )
    return table


@app.command()
def repo(
    path: Path | None = typer.Option(
        None,
        "--repo",
        "-r",
        help="Repository to inspect (defaults to configured path or cwd)",
    ),
) -> None:
    """
    Show status, conflicts and branches for a repository.

    Examples:
        gitsync status repo
        gitsync status repo --repo ~/src/app
    """
    orchestrator = build_orchestrator()
    target = path or orchestrator.default_path()

    try:
        status = orchestrator.get_status(target)
        branches = orchestrator.get_local_branches(target)
    except GitSyncError as e:
        raise fail(e)

    console.print(_status_panel(target, status))

    if status.conflict_files:
        conflicts = Table(title="Conflicts", show_header=True)
        conflicts.add_column("Path", style="red")
        for file_path in status.conflict_files:
            conflicts.add_row(file_path)
        console.print(conflicts)

    if branches:
        console.print(branch_table(branches))
    else:
        console.print("[dim]No local branches yet[/dim]")
