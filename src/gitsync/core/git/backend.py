"""
Version-control primitive interface.

The sync engine only talks to repositories through the protocols defined
here. A GitBackend opens a path and hands back a RepositoryHandle, a
short-lived object exposing the primitive operations (status, branches,
fetch/push, merge, conflict inspection, commit, history). Handles are
acquired with open_repository() so they are released on every exit path.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Literal, Protocol

from gitsync.core.sync.models import CommitSummary

ConflictSide = Literal["ours", "theirs"]

# Porcelain XY codes that mark an unmerged path.
UNMERGED_CODES = frozenset({"DD", "AU", "UD", "UA", "DU", "AA", "UU"})


@dataclass(frozen=True)
class StatusEntry:
    """
    One line of `git status --porcelain`.

    Attributes:
        path: Path relative to the repository root
        index: Index (staged) state code, e.g. "M", "A", " "
        worktree: Working tree state code, e.g. "M", "D", " "
        orig_path: Source path for renames and copies
    """

    path: str
    index: str
    worktree: str
    orig_path: str | None = None

    @property
    def code(self) -> str:
        return self.index + self.worktree

    @property
    def is_untracked(self) -> bool:
        return self.code == "??"

    @property
    def is_ignored(self) -> bool:
        return self.code == "!!"

    @property
    def is_conflicted(self) -> bool:
        return self.code in UNMERGED_CODES

    @property
    def is_staged(self) -> bool:
        if self.is_untracked or self.is_ignored or self.is_conflicted:
            return False
        return self.index not in (" ", "?", "!")

    @property
    def is_modified(self) -> bool:
        if self.is_untracked or self.is_ignored or self.is_conflicted:
            return False
        return self.worktree not in (" ", "?", "!")


@dataclass(frozen=True)
class RefInfo:
    """A branch ref and its tip commit metadata."""

    name: str
    tip: str | None
    upstream: str | None = None
    remote: str | None = None
    subject: str = ""
    author: str = ""
    date: datetime | None = None


@dataclass(frozen=True)
class MergeOutcome:
    """What a merge did to the current branch."""

    conflicted: list[str] = field(default_factory=list)
    up_to_date: bool = False
    fast_forward: bool = False

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicted)


@dataclass(frozen=True)
class ConflictSides:
    """Which sides of a conflicted path still carry the file."""

    ours_present: bool
    theirs_present: bool


@dataclass(frozen=True)
class Identity:
    """Author/committer identity used for commits the engine creates."""

    name: str
    email: str


class RepositoryHandle(Protocol):
    """An opened, validated repository. Owned by a single operation."""

    @property
    def path(self) -> Path:
        """Root of the working tree."""
        ...

    def ensure_valid(self) -> None:
        """Raise InvalidRepositoryError if the backing path stopped being a repository."""
        ...

    def head_branch(self) -> str | None:
        """Short name of the checked-out branch, or None when HEAD is detached."""
        ...

    def head_commit(self) -> str | None:
        """SHA of HEAD, or None on an unborn branch."""
        ...

    def status_entries(self) -> list[StatusEntry]: ...

    def local_branches(self) -> list[RefInfo]: ...

    def remote_branches(self) -> list[RefInfo]: ...

    def branch_tip(self, name: str) -> str | None:
        """SHA a branch (local or remote-tracking) points at, or None if it does not exist."""
        ...

    def create_tracking_branch(self, name: str, remote_ref: str) -> None: ...

    def checkout(self, name: str) -> None: ...

    def has_remote(self, name: str) -> bool: ...

    def add_remote(self, name: str, url: str) -> None: ...

    def fetch(self, remote: str, *, timeout: float | None = None) -> None: ...

    def push(
        self,
        remote: str,
        branch: str,
        *,
        force: bool = False,
        tags: list[str] | None = None,
        timeout: float | None = None,
    ) -> None: ...

    def merge(
        self,
        ref: str,
        *,
        strategy_hint: str | None = None,
        identity: Identity | None = None,
    ) -> MergeOutcome:
        """Merge ref into the checked-out branch; conflicts are reported, not raised."""
        ...

    def conflicted_paths(self) -> list[str]: ...

    def conflict_sides(self, path: str) -> ConflictSides: ...

    def checkout_side(self, path: str, side: ConflictSide) -> None: ...

    def stage(self, path: str) -> None: ...

    def remove(self, path: str) -> None: ...

    def commit(self, message: str, identity: Identity) -> str: ...

    def rev_list(self, include: list[str], exclude: list[str] | None = None) -> list[str]: ...

    def commit_summary(self, sha: str) -> CommitSummary: ...

    def close(self) -> None: ...


class GitBackend(Protocol):
    """Factory for repository handles."""

    def open(self, path: Path) -> RepositoryHandle:
        """
        Open and validate the repository rooted at path.

        Raises:
            InvalidRepositoryError: If path is not a valid (non-bare) repository.
        """
        ...


@contextmanager
def open_repository(backend: GitBackend, path: Path | str) -> Iterator[RepositoryHandle]:
    """
    Open a repository handle for the duration of a with-block.

    The handle is closed on success, on error and on cancellation.

    Example:
        >>> with open_repository(backend, "/srv/checkout") as repo:
        ...     repo.head_branch()
        'main'
    """
    handle = backend.open(Path(path))
    try:
        yield handle
    finally:
        handle.close()
