"""
Error taxonomy for the sync engine.

Every failure raised by the engine derives from GitSyncError and carries an
ErrorKind. The kind is what the HTTP and CLI layers map to status codes and
exit codes; conflicts are deliberately not part of this hierarchy because a
pull that stops on conflicts is an expected outcome, not an error.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Kinds of failure the engine can report."""

    INVALID_REPOSITORY = "invalid_repository"
    BRANCH_NOT_FOUND = "branch_not_found"
    UNCOMMITTED_CHANGES = "uncommitted_changes"
    UNSUPPORTED_STRATEGY = "unsupported_strategy"
    NETWORK = "network"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    INTERNAL = "internal"

    @property
    def code(self) -> str:
        """Upper-case error code used in API envelopes."""
        return self.value.upper()


class GitSyncError(Exception):
    """Base exception for sync engine failures."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation


class InvalidRepositoryError(GitSyncError):
    """Raised when a path is not (or is no longer) a valid git repository."""

    kind = ErrorKind.INVALID_REPOSITORY

    def __init__(self, path: object, *, operation: str | None = None) -> None:
        super().__init__(f"Not a valid git repository: {path}", operation=operation)
        self.path = path


class BranchNotFoundError(GitSyncError):
    """Raised when neither a local nor a remote-tracking branch exists."""

    kind = ErrorKind.BRANCH_NOT_FOUND

    def __init__(
        self, branch: str | None, message: str | None = None, *, operation: str | None = None
    ) -> None:
        super().__init__(message or f"Branch not found: {branch}", operation=operation)
        self.branch = branch


class UncommittedChangesError(GitSyncError):
    """Raised when the working tree has uncommitted changes."""

    kind = ErrorKind.UNCOMMITTED_CHANGES

    def __init__(self, change_count: int, *, operation: str | None = None) -> None:
        super().__init__(
            f"Repository has uncommitted changes ({change_count} files); "
            "commit or stash them first",
            operation=operation,
        )
        self.change_count = change_count


class UnsupportedStrategyError(GitSyncError):
    """Raised for a conflict strategy outside ours/theirs/manual."""

    kind = ErrorKind.UNSUPPORTED_STRATEGY

    def __init__(self, strategy: object, *, operation: str | None = None) -> None:
        super().__init__(
            f"Unsupported conflict strategy: {strategy!r} (expected ours, theirs or manual)",
            operation=operation,
        )
        self.strategy = strategy


class NetworkError(GitSyncError):
    """Raised when the remote is unreachable or rejects our credentials."""

    kind = ErrorKind.NETWORK

    def __init__(self, message: str, *, stderr: str = "", operation: str | None = None) -> None:
        super().__init__(message, operation=operation)
        self.stderr = stderr


class GitTimeoutError(GitSyncError):
    """Raised when a network operation exceeds its time budget."""

    kind = ErrorKind.TIMEOUT


class OperationCancelledError(GitSyncError):
    """Raised when a workflow is cancelled before any local write."""

    kind = ErrorKind.CANCELLED


class InternalGitError(GitSyncError):
    """Raised when an underlying git primitive fails for any other reason."""

    kind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        command: list[str] | None = None,
        stderr: str = "",
        operation: str | None = None,
    ) -> None:
        super().__init__(message, operation=operation)
        self.command = command
        self.stderr = stderr

    def __str__(self) -> str:
        if self.stderr:
            return f"{self.message}: {self.stderr}"
        return self.message


__all__ = [
    "BranchNotFoundError",
    "ErrorKind",
    "GitSyncError",
    "GitTimeoutError",
    "InternalGitError",
    "InvalidRepositoryError",
    "NetworkError",
    "OperationCancelledError",
    "UncommittedChangesError",
    "UnsupportedStrategyError",
]
