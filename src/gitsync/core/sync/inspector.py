"""
Read-only repository state.

RepositoryStateInspector never mutates the working copy; it is safe to
run alongside other read-only calls on the same path.
"""

from __future__ import annotations

import logging
from pathlib import Path

from gitsync.core.git.backend import GitBackend, RefInfo, RepositoryHandle, open_repository
from gitsync.core.sync.models import BranchRef, RepositoryStatus

logger = logging.getLogger(__name__)


def to_branch_ref(ref: RefInfo, current: str | None) -> BranchRef:
    """Build a BranchRef from a listed ref, marking it current if it matches HEAD."""
    return BranchRef(
        name=ref.name,
        tracking_remote_ref=ref.upstream,
        tip_commit_id=ref.tip,
        is_current=current is not None and ref.name == current,
        tip_message=ref.subject,
        tip_author=ref.author,
        tip_date=ref.date,
    )


class RepositoryStateInspector:
    """
    Reports branch, dirty state, file counts and conflicts for a working copy.

    Example:
        >>> inspector = RepositoryStateInspector(GitPythonBackend())
        >>> status = inspector.get_status(Path("."))
        >>> status.has_uncommitted_changes
        False
    """

    def __init__(self, backend: GitBackend) -> None:
        self.backend = backend

    def get_status(self, path: Path) -> RepositoryStatus:
        """
        Snapshot the working copy at path.

        Raises:
            InvalidRepositoryError: If path is not a valid repository.
        """
        with open_repository(self.backend, path) as repo:
            return self.status_of(repo)

    def get_local_branches(self, path: Path) -> list[BranchRef]:
        """List local branches with exactly one marked current (none if detached)."""
        with open_repository(self.backend, path) as repo:
            return self.branches_of(repo)

    def status_of(self, repo: RepositoryHandle) -> RepositoryStatus:
        """Status for an already opened handle."""
        entries = repo.status_entries()

        untracked = sum(1 for e in entries if e.is_untracked)
        modified = sum(1 for e in entries if e.is_modified)
        staged = sum(1 for e in entries if e.is_staged)
        conflicts = sorted({e.path for e in entries if e.is_conflicted})

        branch = repo.head_branch()
        is_detached = branch is None
        if branch is None:
            branch = repo.head_commit() or "HEAD"

        status = RepositoryStatus(
            current_branch=branch,
            is_detached=is_detached,
            # Untracked files are counted but never make the tree dirty
            has_uncommitted_changes=bool(modified or staged or conflicts),
            untracked_files_count=untracked,
            modified_files_count=modified,
            staged_files_count=staged,
            has_conflicts=bool(conflicts),
            conflict_files=conflicts,
        )
        logger.debug(
            "Status of %s: branch=%s dirty=%s conflicts=%d",
            repo.path,
            status.current_branch,
            status.has_uncommitted_changes,
            len(conflicts),
        )
        return status

    def branches_of(self, repo: RepositoryHandle) -> list[BranchRef]:
        current = repo.head_branch()
        return [to_branch_ref(ref, current) for ref in repo.local_branches()]
