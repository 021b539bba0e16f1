"""
gitsync CLI - push, pull and conflict resolution.

Thin wrappers over SyncOrchestrator. Exit codes: 0 success, 1 failure,
2 when a pull stopped on (or left) unresolved conflicts.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from gitsync.cli.common import build_orchestrator, fail
from gitsync.cli.errors import ExitCode, print_failed_result
from gitsync.core.sync.errors import GitSyncError
from gitsync.core.sync.models import (
    ConflictStrategy,
    PullRequest,
    PushRequest,
    SyncResult,
)

console = Console()
app = typer.Typer(
    name="sync",
    help="Push, pull and resolve conflicts",
    no_args_is_help=True,
)


def _conflict_table(files: list[str], title: str = "Conflicted files") -> Table:
    table = Table(title=title, show_header=True)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Path", style="yellow")
    for i, path in enumerate(files, 1):
        table.add_row(str(i), path)
    return table


def _finish(result: SyncResult) -> None:
    """Print a push/pull result and exit with its code."""
    if result.success:
        console.print(f"[green]✓[/green] {result.summary()}")
        if result.resolved_files:
            console.print(
                f"[yellow]⚠[/yellow]  Auto-resolved {len(result.resolved_files)} conflicts: "
                + ", ".join(result.resolved_files)
            )
        return

    if result.has_conflicts:
        console.print(f"[yellow]⚠[/yellow]  {result.error_message or result.summary()}")
        console.print(_conflict_table(result.conflict_files))
        console.print(
            "[cyan]→ Try:[/cyan] gitsync sync resolve --strategy theirs  "
            "# or edit the files, git add, git commit"
        )
        raise typer.Exit(ExitCode.CONFLICTS)

    print_failed_result(result)
    raise typer.Exit(result.exit_code())


@app.command()
def push(
    repo: Path | None = typer.Option(
        None,
        "--repo",
        "-r",
        help="Repository to push from (defaults to configured path or cwd)",
    ),
    branch: str | None = typer.Option(
        None,
        "--branch",
        "-b",
        help="Branch to push (defaults to the current branch)",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Allow a non-fast-forward update of the remote branch",
    ),
    tags: list[str] = typer.Option(
        [],
        "--tag",
        "-t",
        help="Tag to push along with the branch (repeatable)",
    ),
) -> None:
    """
    Push a branch to the remote.

    The working tree must be clean; --force only permits a
    non-fast-forward update, it never skips the clean check.

    Examples:
        gitsync sync push                      # Push the current branch
        gitsync sync push -b release -t v1.2   # Push a branch and a tag
        gitsync sync push --force              # Overwrite the remote branch
    """
    orchestrator = build_orchestrator()
    request = PushRequest(branch_name=branch, force=force, tags=tags, repository_path=repo)

    console.print("[blue]Pushing to remote...[/blue]")
    _finish(orchestrator.push(request))


@app.command()
def pull(
    repo: Path | None = typer.Option(
        None,
        "--repo",
        "-r",
        help="Repository to pull into (defaults to configured path or cwd)",
    ),
    branch: str | None = typer.Option(
        None,
        "--branch",
        "-b",
        help="Branch to pull (defaults to the current branch)",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Pull even with uncommitted changes (they are kept, not discarded)",
    ),
    strategy: ConflictStrategy | None = typer.Option(
        None,
        "--strategy",
        "-s",
        case_sensitive=False,
        help="Conflict strategy: ours, theirs or manual (default from config)",
    ),
) -> None:
    """
    Fetch the remote and merge it into a branch.

    With --strategy ours/theirs conflicts are resolved automatically and
    committed. With manual (the default), the merge is left in progress
    and the command exits with code 2.

    Examples:
        gitsync sync pull                       # Pull the current branch
        gitsync sync pull -b main -s theirs     # Prefer remote changes
        gitsync sync pull --force               # Pull into a dirty tree
    """
    orchestrator = build_orchestrator()
    request = PullRequest(
        branch_name=branch,
        local_path=repo or orchestrator.default_path(),
        force=force,
        conflict_strategy=strategy or orchestrator.config.conflict_strategy,
    )

    console.print("[blue]Pulling remote changes...[/blue]")
    _finish(orchestrator.pull(request))


@app.command()
def resolve(
    files: list[str] | None = typer.Argument(
        None,
        help="Conflicted files to resolve (default: all)",
    ),
    repo: Path | None = typer.Option(
        None,
        "--repo",
        "-r",
        help="Repository with an in-progress merge",
    ),
    strategy: ConflictStrategy = typer.Option(
        ConflictStrategy.THEIRS,
        "--strategy",
        "-s",
        case_sensitive=False,
        help="Side to keep: ours or theirs (manual only lists conflicts)",
    ),
) -> None:
    """
    Resolve conflicts left by a pull.

    Once every conflicted file is resolved, a commit is created with the
    message "Resolved conflicts - strategy: <strategy>".

    Examples:
        gitsync sync resolve                        # Take theirs for all files
        gitsync sync resolve -s ours src/app.py     # Keep ours for one file
        gitsync sync resolve -s manual              # Just list what is left
    """
    orchestrator = build_orchestrator()

    try:
        outcome = orchestrator.resolve_conflicts(repo, files or [], strategy)
    except GitSyncError as e:
        raise fail(e)

    if outcome.success:
        if outcome.commit_sha:
            console.print(f"[green]✓[/green] {outcome.message}")
            console.print(f"[green]✓[/green] Committed: {outcome.commit_sha[:8]}")
        else:
            console.print(f"[green]✓[/green] {outcome.message}")
        return

    console.print(f"[yellow]⚠[/yellow]  {outcome.message}")
    console.print(_conflict_table(outcome.remaining_conflicts, title="Remaining conflicts"))
    raise typer.Exit(ExitCode.CONFLICTS)
