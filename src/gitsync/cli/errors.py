"""
Standardized error handling and exit codes for the gitsync CLI.

This module provides consistent error messaging with actionable guidance
and standardized exit codes across all CLI commands.
"""

from enum import IntEnum

from rich.console import Console

from gitsync.core.sync.errors import ErrorKind, GitSyncError
from gitsync.core.sync.models import SyncResult

console = Console()


class ExitCode(IntEnum):
    """Standard exit codes for gitsync CLI operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """The operation failed."""

    CONFLICTS = 2
    """Pull completed but conflicts remain to be resolved."""

    SIGINT = 130
    """Terminated by SIGINT (Ctrl+C) - Unix standard."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it

    Example:
        >>> print_error(
        ...     "Repository has uncommitted changes",
        ...     reason="Push only publishes committed work",
        ...     solution="git stash  # or commit your changes",
        ... )
    """
    console.print(f"[red]Error:[/red] {problem}")

    if reason:
        console.print(f"[dim]{reason}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}")


# Reason and suggested fix for each failure kind
_GUIDANCE: dict[ErrorKind, tuple[str | None, str | None]] = {
    ErrorKind.INVALID_REPOSITORY: (
        "The path does not contain a git working copy",
        "git init  # or pass --repo with your project root",
    ),
    ErrorKind.BRANCH_NOT_FOUND: (
        "No local branch or remote-tracking branch has that name",
        "gitsync branch list  # or git fetch to refresh remote branches",
    ),
    ErrorKind.UNCOMMITTED_CHANGES: (
        "Sync operations only work on a clean working tree",
        "git stash  # or commit, or pass --force to pull anyway",
    ),
    ErrorKind.UNSUPPORTED_STRATEGY: (
        None,
        "use --strategy ours, theirs or manual",
    ),
    ErrorKind.NETWORK: (
        "The remote could not be reached or rejected the credentials",
        "check the remote URL and GITSYNC_ACCESS_TOKEN",
    ),
    ErrorKind.TIMEOUT: (
        "The remote did not respond in time",
        "retry, or raise GITSYNC_NETWORK_TIMEOUT",
    ),
    ErrorKind.CANCELLED: (None, None),
    ErrorKind.INTERNAL: (None, "rerun with --debug for details"),
}


def print_kind_error(kind: ErrorKind, message: str) -> None:
    reason, solution = _GUIDANCE.get(kind, (None, None))
    print_error(message, reason=reason, solution=solution)


def print_sync_error(error: GitSyncError) -> None:
    """Print an engine error with guidance for its kind."""
    print_kind_error(error.kind, str(error))


def print_failed_result(result: SyncResult) -> None:
    """Print a failed push/pull result."""
    kind = result.error_kind or ErrorKind.INTERNAL
    print_kind_error(kind, result.error_message or f"{result.operation.value} failed")


__all__ = [
    "ExitCode",
    "console",
    "print_error",
    "print_failed_result",
    "print_kind_error",
    "print_sync_error",
]
