"""
Tests for sync engine models and the error taxonomy.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from gitsync.core.sync.errors import (
    ErrorKind,
    InternalGitError,
    UnsupportedStrategyError,
)
from gitsync.core.sync.models import (
    ChangeType,
    ConflictStrategy,
    FileChange,
    PullRequest,
    PushRequest,
    SyncOperation,
    SyncResult,
    coerce_strategy,
)


class TestCoerceStrategy:
    """Tests for coerce_strategy."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("ours", ConflictStrategy.OURS),
            ("Theirs", ConflictStrategy.THEIRS),
            (" MANUAL ", ConflictStrategy.MANUAL),
            (ConflictStrategy.OURS, ConflictStrategy.OURS),
        ],
    )
    def test_accepts_known_values(self, value: object, expected: ConflictStrategy) -> None:
        assert coerce_strategy(value) is expected

    @pytest.mark.parametrize("value", ["union", "", 3, None])
    def test_rejects_unknown_values(self, value: object) -> None:
        with pytest.raises(UnsupportedStrategyError) as exc_info:
            coerce_strategy(value)
        assert exc_info.value.kind is ErrorKind.UNSUPPORTED_STRATEGY


class TestSyncResult:
    """Tests for SyncResult invariants and helpers."""

    def test_conflicts_require_files(self) -> None:
        """has_conflicts without any conflict file is rejected."""
        with pytest.raises(ValidationError):
            SyncResult(success=False, operation=SyncOperation.PULL, has_conflicts=True)

    def test_conflict_files_sorted_and_unique(self) -> None:
        result = SyncResult(
            success=False,
            operation=SyncOperation.PULL,
            has_conflicts=True,
            conflict_files=["b.txt", "a.txt", "b.txt"],
        )
        assert result.conflict_files == ["a.txt", "b.txt"]

    def test_exit_codes(self) -> None:
        ok = SyncResult(success=True, operation=SyncOperation.PUSH)
        failed = SyncResult(
            success=False,
            operation=SyncOperation.PUSH,
            error_message="boom",
            error_kind=ErrorKind.NETWORK,
        )
        conflicted = SyncResult(
            success=False,
            operation=SyncOperation.PULL,
            has_conflicts=True,
            conflict_files=["a.txt"],
        )

        assert ok.exit_code() == 0
        assert failed.exit_code() == 1
        assert conflicted.exit_code() == 2

    def test_summary_success(self) -> None:
        result = SyncResult(
            success=True,
            operation=SyncOperation.PULL,
            branch_name="main",
            commit_count=3,
            latest_commit_sha="0123456789abcdef",
        )
        summary = result.summary()
        assert "pull succeeded" in summary
        assert "branch main" in summary
        assert "3 commits" in summary
        assert "tip 01234567" in summary

    def test_summary_failure(self) -> None:
        result = SyncResult(
            success=False, operation=SyncOperation.PUSH, error_message="remote unavailable"
        )
        assert result.summary() == "push failed: remote unavailable"

    def test_serializes_camel_case(self) -> None:
        result = SyncResult(success=True, operation=SyncOperation.PUSH, commit_count=2)
        data = result.model_dump(mode="json", by_alias=True)

        assert data["commitCount"] == 2
        assert data["hasConflicts"] is False
        assert data["operation"] == "push"
        assert "processedAt" in data


class TestFileChange:
    """Tests for FileChange validation."""

    def test_old_path_allowed_for_rename(self) -> None:
        change = FileChange(path="new.txt", change_type=ChangeType.RENAMED, old_path="old.txt")
        assert change.old_path == "old.txt"

    def test_old_path_rejected_for_other_changes(self) -> None:
        with pytest.raises(ValidationError):
            FileChange(path="a.txt", change_type=ChangeType.MODIFIED, old_path="b.txt")


class TestRequests:
    """Tests for request models."""

    def test_requests_are_frozen(self) -> None:
        request = PullRequest(local_path=Path("/tmp/repo"))
        with pytest.raises(ValidationError):
            request.force = True  # type: ignore[misc]

    def test_pull_defaults(self) -> None:
        request = PullRequest(local_path=Path("/tmp/repo"))
        assert request.conflict_strategy is ConflictStrategy.MANUAL
        assert request.force is False
        assert request.branch_name is None

    def test_push_accepts_camel_case(self) -> None:
        request = PushRequest.model_validate(
            {"projectId": 7, "branchName": "main", "repositoryPath": "/srv/app", "tags": ["v1"]}
        )
        assert request.project_id == 7
        assert request.branch_name == "main"
        assert request.repository_path == Path("/srv/app")
        assert request.tags == ["v1"]


class TestErrors:
    """Tests for the error taxonomy."""

    def test_error_codes_are_upper_case(self) -> None:
        assert ErrorKind.BRANCH_NOT_FOUND.code == "BRANCH_NOT_FOUND"
        assert ErrorKind.UNCOMMITTED_CHANGES.code == "UNCOMMITTED_CHANGES"

    def test_internal_error_includes_stderr(self) -> None:
        error = InternalGitError("Failed to merge", command=["git", "merge"], stderr="fatal: x")
        assert str(error) == "Failed to merge: fatal: x"
        assert error.kind is ErrorKind.INTERNAL
        assert error.command == ["git", "merge"]
