"""
gitsync CLI - log command.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from gitsync.cli.common import build_orchestrator, fail
from gitsync.core.sync.errors import GitSyncError
from gitsync.core.sync.models import ChangeType

console = Console()

_CHANGE_MARKS = {
    ChangeType.ADDED: "[green]A[/green]",
    ChangeType.MODIFIED: "[yellow]M[/yellow]",
    ChangeType.DELETED: "[red]D[/red]",
    ChangeType.RENAMED: "[blue]R[/blue]",
}


def log(
    before: str = typer.Option(
        ...,
        "--before",
        help="Commit the range starts after (e.g. the tip before a pull)",
    ),
    after: str = typer.Option(
        "HEAD",
        "--after",
        help="Commit or ref the range ends at",
    ),
    repo: Path | None = typer.Option(
        None,
        "--repo",
        "-r",
        help="Repository to inspect (defaults to configured path or cwd)",
    ),
    files: bool = typer.Option(
        False,
        "--files",
        help="Show changed files for each commit",
    ),
) -> None:
    """
    Show commits reachable from --after but not from --before.

    Examples:
        gitsync log --before 1a2b3c4d              # What a pull brought in
        gitsync log --before v1.0 --after main --files
    """
    orchestrator = build_orchestrator()
    try:
        commits = orchestrator.commits_between(repo, before, after)
    except GitSyncError as e:
        raise fail(e)

    if not commits:
        console.print("[dim]No commits in range[/dim]")
        return

    table = Table(title=f"Commits {before[:12]}..{after}", show_header=True)
    table.add_column("SHA", style="cyan")
    table.add_column("Author")
    table.add_column("Date", style="dim")
    table.add_column("Message")
    table.add_column("+/-", justify="right")

    for commit in commits:
        added = sum(f.added_lines for f in commit.changed_files)
        deleted = sum(f.deleted_lines for f in commit.changed_files)
        date = commit.author_timestamp.strftime("%Y-%m-%d %H:%M") if commit.author_timestamp else ""
        table.add_row(
            commit.sha[:8],
            commit.author_name,
            date,
            commit.message.splitlines()[0] if commit.message else "",
            f"+{added}/-{deleted}",
        )
    console.print(table)

    if files:
        for commit in commits:
            console.print(f"\n[cyan]{commit.sha[:8]}[/cyan]")
            for change in commit.changed_files:
                mark = _CHANGE_MARKS[change.change_type]
                label = f"{change.old_path} → {change.path}" if change.old_path else change.path
                console.print(f"  {mark} {label}")

    console.print(f"\n{len(commits)} commits")
