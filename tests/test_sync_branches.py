"""
Tests for BranchResolver.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from gitsync.core.git import GitPythonBackend
from gitsync.core.sync.branches import BranchResolver
from gitsync.core.sync.errors import BranchNotFoundError

from git_helpers import commit_file, head_sha, run_git


@pytest.fixture
def resolver() -> BranchResolver:
    return BranchResolver(GitPythonBackend(), remote_name="origin")


class TestResolve:
    """Tests for BranchResolver.resolve."""

    def test_defaults_to_current_branch(self, resolver: BranchResolver, local_repo: Path) -> None:
        branch = resolver.resolve(local_repo)

        assert branch.name == "main"
        assert branch.is_current is True
        assert branch.tip_commit_id == head_sha(local_repo)

    def test_detached_head_without_name_fails(
        self, resolver: BranchResolver, local_repo: Path
    ) -> None:
        run_git(local_repo, "checkout", "--detach", "HEAD")

        with pytest.raises(BranchNotFoundError):
            resolver.resolve(local_repo)

    def test_existing_local_branch_is_not_checked_out(
        self, resolver: BranchResolver, local_repo: Path
    ) -> None:
        run_git(local_repo, "branch", "feature")

        branch = resolver.resolve(local_repo, "feature")

        assert branch.name == "feature"
        assert branch.is_current is False
        assert run_git(local_repo, "symbolic-ref", "--short", "HEAD") == "main"

    def test_creates_tracking_branch_from_remote(
        self, resolver: BranchResolver, local_repo: Path, other_repo: Path
    ) -> None:
        run_git(other_repo, "checkout", "-b", "feature")
        tip = commit_file(other_repo, "feature.txt", "feature\n")
        run_git(other_repo, "push", "origin", "feature")
        run_git(local_repo, "fetch", "origin")

        branch = resolver.resolve(local_repo, "feature")

        assert branch.name == "feature"
        assert branch.tip_commit_id == tip
        assert branch.tracking_remote_ref == "origin/feature"
        assert run_git(local_repo, "rev-parse", "--abbrev-ref", "feature@{upstream}") == (
            "origin/feature"
        )

    def test_prefers_configured_remote(
        self, local_repo: Path, other_repo: Path, remote_repo: Path, tmp_path: Path
    ) -> None:
        mirror = tmp_path / "mirror.git"
        run_git(tmp_path, "clone", "--bare", str(remote_repo), str(mirror))
        run_git(other_repo, "checkout", "-b", "feature")
        upstream_tip = commit_file(other_repo, "feature.txt", "upstream\n")
        run_git(other_repo, "push", "origin", "feature")

        run_git(local_repo, "remote", "add", "aaa-mirror", str(mirror))
        run_git(local_repo, "fetch", "aaa-mirror")
        run_git(local_repo, "push", "aaa-mirror", "main:feature")
        run_git(local_repo, "fetch", "aaa-mirror")
        run_git(local_repo, "fetch", "origin")

        branch = BranchResolver(GitPythonBackend(), remote_name="origin").resolve(
            local_repo, "feature"
        )

        assert branch.tracking_remote_ref == "origin/feature"
        assert branch.tip_commit_id == upstream_tip

    def test_unknown_branch(self, resolver: BranchResolver, local_repo: Path) -> None:
        with pytest.raises(BranchNotFoundError) as exc_info:
            resolver.resolve(local_repo, "does-not-exist")
        assert exc_info.value.branch == "does-not-exist"
