"""
Branch resolution shared by push, pull and checkout.
"""

from __future__ import annotations

import logging
from pathlib import Path

from gitsync.core.git.backend import GitBackend, RepositoryHandle, open_repository
from gitsync.core.sync.errors import BranchNotFoundError
from gitsync.core.sync.inspector import to_branch_ref
from gitsync.core.sync.models import BranchRef

logger = logging.getLogger(__name__)


class BranchResolver:
    """
    Maps a requested branch name to a usable local branch.

    Resolution order:
        1. No name given: the current branch (detached HEAD is an error)
        2. A local branch with that name
        3. A remote-tracking branch with that short name, from which a new
           tracking branch is created (the configured remote wins when
           several remotes carry the name)

    Resolution never checks the branch out; callers decide that.
    """

    def __init__(self, backend: GitBackend, remote_name: str = "origin") -> None:
        self.backend = backend
        self.remote_name = remote_name

    def resolve(self, path: Path, requested_branch: str | None = None) -> BranchRef:
        """
        Resolve a branch in the working copy at path.

        Raises:
            InvalidRepositoryError: If path is not a valid repository.
            BranchNotFoundError: If no local or remote branch matches.
        """
        with open_repository(self.backend, path) as repo:
            return self.resolve_in(repo, requested_branch)

    def resolve_in(self, repo: RepositoryHandle, requested_branch: str | None = None) -> BranchRef:
        current = repo.head_branch()
        name = (requested_branch or "").strip() or None

        if name is None:
            if current is None:
                raise BranchNotFoundError(
                    None, "HEAD is detached; specify a branch name", operation="resolve_branch"
                )
            name = current

        for ref in repo.local_branches():
            if ref.name == name:
                return to_branch_ref(ref, current)

        candidates = sorted(
            (
                ref
                for ref in repo.remote_branches()
                if ref.remote is not None and ref.name == f"{ref.remote}/{name}"
            ),
            key=lambda ref: (ref.remote != self.remote_name, ref.remote or ""),
        )
        if not candidates:
            raise BranchNotFoundError(name, operation="resolve_branch")

        source = candidates[0]
        logger.info("Creating local branch %s from %s", name, source.name)
        repo.create_tracking_branch(name, source.name)

        for ref in repo.local_branches():
            if ref.name == name:
                return to_branch_ref(ref, current)

        # create_tracking_branch succeeded, so the ref must be listed
        raise BranchNotFoundError(name, f"Branch {name} missing after creation")
