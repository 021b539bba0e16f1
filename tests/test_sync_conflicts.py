"""
Tests for ConflictResolver.

Tests cover:
- Ours/theirs resolution and the resolution commit
- Manual strategy leaving the merge untouched
- Partial selection and ignored paths
- Modify/delete conflicts
"""

from __future__ import annotations

from pathlib import Path

import pytest

from gitsync.core.git import GitPythonBackend, Identity
from gitsync.core.sync.conflicts import ConflictResolver
from gitsync.core.sync.errors import InvalidRepositoryError, UnsupportedStrategyError
from gitsync.core.sync.models import ConflictStrategy

from git_helpers import commit_file, head_sha, run_git, start_conflicted_merge


@pytest.fixture
def resolver() -> ConflictResolver:
    return ConflictResolver(GitPythonBackend())


def unmerged(repo: Path) -> str:
    return run_git(repo, "diff", "--name-only", "--diff-filter=U")


class TestResolve:
    """Tests for ConflictResolver.resolve."""

    def test_nothing_to_resolve(self, resolver: ConflictResolver, local_repo: Path) -> None:
        sha = head_sha(local_repo)

        outcome = resolver.resolve(local_repo, None, "theirs")

        assert outcome.success is True
        assert outcome.commit_sha is None
        assert head_sha(local_repo) == sha

    def test_theirs_resolves_all_and_commits(
        self, resolver: ConflictResolver, local_repo: Path, other_repo: Path
    ) -> None:
        start_conflicted_merge(local_repo, other_repo, ["a.txt", "b.txt"])

        outcome = resolver.resolve(local_repo, [], ConflictStrategy.THEIRS)

        assert outcome.success is True
        assert outcome.resolved_files == ["a.txt", "b.txt"]
        assert outcome.remaining_conflicts == []
        assert outcome.commit_sha == head_sha(local_repo)
        assert (local_repo / "a.txt").read_text() == "a.txt: remote version\n"
        assert (local_repo / "b.txt").read_text() == "b.txt: remote version\n"
        assert unmerged(local_repo) == ""
        assert run_git(local_repo, "log", "-1", "--format=%s") == (
            "Resolved conflicts - strategy: theirs"
        )
        assert run_git(local_repo, "log", "-1", "--format=%an <%ae>") == (
            "gitsync <gitsync@localhost>"
        )
        # merge commit: local edits and remote edits are both parents
        assert len(run_git(local_repo, "log", "-1", "--format=%P").split()) == 2

    def test_ours_keeps_local_content(
        self, resolver: ConflictResolver, local_repo: Path, other_repo: Path
    ) -> None:
        start_conflicted_merge(local_repo, other_repo, ["a.txt"])

        outcome = resolver.resolve(local_repo, ["a.txt"], "OURS")

        assert outcome.success is True
        assert (local_repo / "a.txt").read_text() == "a.txt: local version\n"
        assert run_git(local_repo, "log", "-1", "--format=%s") == (
            "Resolved conflicts - strategy: ours"
        )

    def test_manual_changes_nothing(
        self, resolver: ConflictResolver, local_repo: Path, other_repo: Path
    ) -> None:
        start_conflicted_merge(local_repo, other_repo, ["a.txt", "b.txt"])
        sha = head_sha(local_repo)
        content = (local_repo / "a.txt").read_text()

        outcome = resolver.resolve(local_repo, None, "manual")

        assert outcome.success is False
        assert outcome.remaining_conflicts == ["a.txt", "b.txt"]
        assert outcome.commit_sha is None
        assert head_sha(local_repo) == sha
        assert (local_repo / "a.txt").read_text() == content
        assert "<<<<<<<" in content

    def test_unsupported_strategy_mutates_nothing(
        self, resolver: ConflictResolver, local_repo: Path, other_repo: Path
    ) -> None:
        start_conflicted_merge(local_repo, other_repo, ["a.txt"])
        content = (local_repo / "a.txt").read_text()

        with pytest.raises(UnsupportedStrategyError):
            resolver.resolve(local_repo, None, "union")

        assert (local_repo / "a.txt").read_text() == content
        assert unmerged(local_repo) == "a.txt"

    def test_subset_leaves_remaining_conflicts(
        self, resolver: ConflictResolver, local_repo: Path, other_repo: Path
    ) -> None:
        start_conflicted_merge(local_repo, other_repo, ["a.txt", "b.txt"])
        sha = head_sha(local_repo)

        outcome = resolver.resolve(local_repo, ["a.txt"], "theirs")

        assert outcome.success is False
        assert outcome.resolved_files == ["a.txt"]
        assert outcome.remaining_conflicts == ["b.txt"]
        assert outcome.commit_sha is None
        assert head_sha(local_repo) == sha
        assert unmerged(local_repo) == "b.txt"

    def test_non_conflicted_paths_are_ignored(
        self, resolver: ConflictResolver, local_repo: Path, other_repo: Path
    ) -> None:
        start_conflicted_merge(local_repo, other_repo, ["a.txt"])

        outcome = resolver.resolve(local_repo, ["a.txt", "shared.txt", "missing.txt"], "theirs")

        assert outcome.success is True
        assert outcome.resolved_files == ["a.txt"]
        assert (local_repo / "shared.txt").read_text() == "shared.txt: base version\n"

    def test_modify_delete_conflict(
        self, resolver: ConflictResolver, local_repo: Path, other_repo: Path
    ) -> None:
        commit_file(other_repo, "b.txt", "b.txt: remote edit\n")
        run_git(other_repo, "push", "origin", "main")
        run_git(local_repo, "rm", "-q", "b.txt")
        run_git(local_repo, "commit", "-m", "Drop b")
        run_git(local_repo, "fetch", "origin")
        run_git(local_repo, "merge", "--no-edit", "origin/main", check=False)
        assert unmerged(local_repo) == "b.txt"

        outcome = resolver.resolve(local_repo, None, "ours")

        assert outcome.success is True
        assert not (local_repo / "b.txt").exists()
        assert "b.txt" not in run_git(local_repo, "ls-files")

    def test_modify_delete_conflict_theirs(
        self, resolver: ConflictResolver, local_repo: Path, other_repo: Path
    ) -> None:
        commit_file(other_repo, "b.txt", "b.txt: remote edit\n")
        run_git(other_repo, "push", "origin", "main")
        run_git(local_repo, "rm", "-q", "b.txt")
        run_git(local_repo, "commit", "-m", "Drop b")
        run_git(local_repo, "fetch", "origin")
        run_git(local_repo, "merge", "--no-edit", "origin/main", check=False)

        outcome = resolver.resolve(local_repo, None, "theirs")

        assert outcome.success is True
        assert (local_repo / "b.txt").read_text() == "b.txt: remote edit\n"

    def test_invalid_repository(self, resolver: ConflictResolver, not_a_repo: Path) -> None:
        with pytest.raises(InvalidRepositoryError):
            resolver.resolve(not_a_repo, None, "theirs")

    def test_custom_identity(self, local_repo: Path, other_repo: Path) -> None:
        resolver = ConflictResolver(GitPythonBackend(), Identity("Sync Bot", "bot@example.com"))
        start_conflicted_merge(local_repo, other_repo, ["a.txt"])

        resolver.resolve(local_repo, None, "theirs")

        assert run_git(local_repo, "log", "-1", "--format=%an") == "Sync Bot"
