"""
Commit-range accounting.

Counts and lists the commits reachable from an "after" point but not from
a "before" point, i.e. `git rev-list after ^before`.
"""

from __future__ import annotations

from pathlib import Path

from gitsync.core.git.backend import GitBackend, RepositoryHandle, open_repository
from gitsync.core.sync.errors import BranchNotFoundError
from gitsync.core.sync.models import CommitSummary


class CommitRangeCalculator:
    """
    Example:
        >>> calc = CommitRangeCalculator(GitPythonBackend())
        >>> calc.count_new(Path("."), before_sha, "HEAD")
        3
    """

    def __init__(self, backend: GitBackend) -> None:
        self.backend = backend

    def count_new(self, path: Path, before_tip: str | None, after_tip: str | None) -> int:
        with open_repository(self.backend, path) as repo:
            return self.count_in(repo, before_tip, after_tip)

    def enumerate(
        self, path: Path, before_tip: str | None, after_tip: str | None
    ) -> list[CommitSummary]:
        """
        Summaries of the new commits, newest first.

        Raises:
            BranchNotFoundError: If before_tip or after_tip does not name a commit
        """
        with open_repository(self.backend, path) as repo:
            for ref in (before_tip, after_tip):
                if ref is not None and repo.branch_tip(ref) is None:
                    raise BranchNotFoundError(
                        ref, f"Revision not found: {ref}", operation="commits"
                    )
            return self.enumerate_in(repo, before_tip, after_tip)

    def _range(self, repo: RepositoryHandle, before: str | None, after: str | None) -> list[str]:
        # No baseline (e.g. first pull into an unborn branch) counts as nothing new
        if before is None or after is None or before == after:
            return []
        return repo.rev_list([after], [before])

    def count_in(self, repo: RepositoryHandle, before: str | None, after: str | None) -> int:
        return len(self._range(repo, before, after))

    def enumerate_in(
        self, repo: RepositoryHandle, before: str | None, after: str | None
    ) -> list[CommitSummary]:
        return [repo.commit_summary(sha) for sha in self._range(repo, before, after)]
