"""
Tests for RepositoryStateInspector.

Tests cover:
- Clean, dirty, staged and untracked states
- Detached HEAD reporting
- Conflict detection mid-merge
- Local branch listing with current-branch marking
"""

from __future__ import annotations

from pathlib import Path

import pytest

from gitsync.core.git import GitPythonBackend
from gitsync.core.sync.errors import InvalidRepositoryError
from gitsync.core.sync.inspector import RepositoryStateInspector

from git_helpers import commit_file, head_sha, run_git, start_conflicted_merge


@pytest.fixture
def inspector() -> RepositoryStateInspector:
    return RepositoryStateInspector(GitPythonBackend())


class TestGetStatus:
    """Tests for get_status."""

    def test_clean_repository(self, inspector: RepositoryStateInspector, local_repo: Path) -> None:
        status = inspector.get_status(local_repo)

        assert status.current_branch == "main"
        assert status.is_detached is False
        assert status.has_uncommitted_changes is False
        assert status.modified_files_count == 0
        assert status.staged_files_count == 0
        assert status.untracked_files_count == 0
        assert status.has_conflicts is False
        assert status.conflict_files == []

    def test_untracked_files_do_not_make_tree_dirty(
        self, inspector: RepositoryStateInspector, local_repo: Path
    ) -> None:
        (local_repo / "new.txt").write_text("new\n")
        (local_repo / "nested").mkdir()
        (local_repo / "nested" / "deep.txt").write_text("deep\n")

        status = inspector.get_status(local_repo)

        assert status.untracked_files_count == 2
        assert status.has_uncommitted_changes is False

    def test_modified_and_staged_counts(
        self, inspector: RepositoryStateInspector, local_repo: Path
    ) -> None:
        (local_repo / "a.txt").write_text("changed\n")
        (local_repo / "b.txt").write_text("staged\n")
        run_git(local_repo, "add", "b.txt")

        status = inspector.get_status(local_repo)

        assert status.modified_files_count == 1
        assert status.staged_files_count == 1
        assert status.has_uncommitted_changes is True

    def test_staged_rename_counts_once(
        self, inspector: RepositoryStateInspector, local_repo: Path
    ) -> None:
        run_git(local_repo, "mv", "a.txt", "renamed.txt")

        status = inspector.get_status(local_repo)

        assert status.staged_files_count == 1
        assert status.untracked_files_count == 0

    def test_detached_head_reports_commit(
        self, inspector: RepositoryStateInspector, local_repo: Path
    ) -> None:
        sha = head_sha(local_repo)
        run_git(local_repo, "checkout", "--detach", "HEAD")

        status = inspector.get_status(local_repo)

        assert status.is_detached is True
        assert status.current_branch == sha

    def test_conflicts_detected_mid_merge(
        self, inspector: RepositoryStateInspector, local_repo: Path, other_repo: Path
    ) -> None:
        start_conflicted_merge(local_repo, other_repo, ["a.txt", "b.txt"])

        status = inspector.get_status(local_repo)

        assert status.has_conflicts is True
        assert status.conflict_files == ["a.txt", "b.txt"]
        assert status.has_uncommitted_changes is True

    def test_invalid_repository(
        self, inspector: RepositoryStateInspector, not_a_repo: Path
    ) -> None:
        with pytest.raises(InvalidRepositoryError):
            inspector.get_status(not_a_repo)

    def test_missing_path(self, inspector: RepositoryStateInspector, tmp_path: Path) -> None:
        with pytest.raises(InvalidRepositoryError):
            inspector.get_status(tmp_path / "does-not-exist")


class TestGetLocalBranches:
    """Tests for get_local_branches."""

    def test_marks_current_branch(
        self, inspector: RepositoryStateInspector, local_repo: Path
    ) -> None:
        run_git(local_repo, "branch", "feature")

        branches = {b.name: b for b in inspector.get_local_branches(local_repo)}

        assert set(branches) == {"main", "feature"}
        assert branches["main"].is_current is True
        assert branches["feature"].is_current is False
        assert branches["main"].tracking_remote_ref == "origin/main"
        assert branches["main"].tip_commit_id == head_sha(local_repo)
        assert branches["main"].tip_message == "Initial commit"
        assert branches["main"].tip_author == "Test User"
        assert branches["main"].tip_date is not None

    def test_detached_head_has_no_current_branch(
        self, inspector: RepositoryStateInspector, local_repo: Path
    ) -> None:
        commit_file(local_repo, "c.txt", "c\n")
        run_git(local_repo, "checkout", "--detach", "HEAD~1")

        branches = inspector.get_local_branches(local_repo)

        assert branches
        assert not any(b.is_current for b in branches)

    def test_remote_tracking_branches_not_listed(
        self, inspector: RepositoryStateInspector, local_repo: Path
    ) -> None:
        names = [b.name for b in inspector.get_local_branches(local_repo)]
        assert "origin/main" not in names
