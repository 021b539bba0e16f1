"""
Data models for the sync engine.

Defines Pydantic models for requests, results, repository status, branches,
and commits. API-facing models serialize with camelCase aliases so the same
objects can be returned from the HTTP layer unchanged.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from gitsync.core.sync.errors import ErrorKind, UnsupportedStrategyError


class ConflictStrategy(str, Enum):
    """How file conflicts are resolved during a pull."""

    OURS = "ours"
    THEIRS = "theirs"
    MANUAL = "manual"


def coerce_strategy(value: object) -> ConflictStrategy:
    """
    Convert a free-form strategy value into a ConflictStrategy.

    Args:
        value: A ConflictStrategy or a string such as "Theirs".

    Returns:
        The matching ConflictStrategy.

    Raises:
        UnsupportedStrategyError: If the value is not ours, theirs or manual.
    """
    if isinstance(value, ConflictStrategy):
        return value
    if isinstance(value, str):
        try:
            return ConflictStrategy(value.strip().lower())
        except ValueError:
            pass
    raise UnsupportedStrategyError(value)


class SyncOperation(str, Enum):
    """Workflow that produced a SyncResult."""

    PUSH = "push"
    PULL = "pull"


class ChangeType(str, Enum):
    """Kind of change a commit made to a file."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


class ApiModel(BaseModel):
    """Base for models exchanged with the HTTP API (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FileChange(ApiModel):
    """A single file touched by a commit."""

    path: str
    change_type: ChangeType
    old_path: str | None = Field(
        default=None,
        description="Previous path, set only for renames",
    )
    added_lines: int = Field(default=0, ge=0)
    deleted_lines: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _old_path_only_for_renames(self) -> FileChange:
        if self.old_path is not None and self.change_type != ChangeType.RENAMED:
            raise ValueError("old_path may only be set for renamed files")
        return self


class CommitSummary(ApiModel):
    """Metadata for one commit, including the files it changed."""

    sha: str
    message: str = ""
    author_name: str = ""
    author_email: str = ""
    author_timestamp: datetime | None = None
    committer_name: str = ""
    committer_email: str = ""
    committer_timestamp: datetime | None = None
    changed_files: list[FileChange] = Field(default_factory=list)


class BranchRef(ApiModel):
    """A local branch and the commit at its tip."""

    name: str
    tracking_remote_ref: str | None = Field(
        default=None,
        description="Upstream remote-tracking ref, e.g. origin/main",
    )
    tip_commit_id: str | None = Field(
        default=None,
        description="SHA of the tip commit (None for an unborn branch)",
    )
    is_current: bool = False
    tip_message: str = ""
    tip_author: str = ""
    tip_date: datetime | None = None


class RepositoryStatus(ApiModel):
    """Snapshot of a working copy's state."""

    current_branch: str
    is_detached: bool = False
    has_uncommitted_changes: bool = False
    untracked_files_count: int = 0
    modified_files_count: int = 0
    staged_files_count: int = 0
    has_conflicts: bool = False
    conflict_files: list[str] = Field(default_factory=list)

    @property
    def change_count(self) -> int:
        """Number of files with uncommitted tracked changes."""
        return self.modified_files_count + self.staged_files_count + len(self.conflict_files)


class ConflictEntry(ApiModel):
    """A conflicted path and the strategy applied to it, if any."""

    path: str
    strategy_applied: ConflictStrategy | None = None


class ResolutionOutcome(ApiModel):
    """Result of a ConflictResolver invocation."""

    success: bool
    strategy: ConflictStrategy
    resolved_files: list[str] = Field(default_factory=list)
    remaining_conflicts: list[str] = Field(default_factory=list)
    entries: list[ConflictEntry] = Field(default_factory=list)
    commit_sha: str | None = None
    message: str = ""


class PushRequest(ApiModel):
    """Request to publish local commits to a remote branch."""

    model_config = ConfigDict(frozen=True)

    project_id: int = Field(default=0, ge=0)
    branch_name: str | None = None
    commits: list[CommitSummary] = Field(default_factory=list)
    force: bool = False
    tags: list[str] = Field(default_factory=list)
    repository_path: Path | None = Field(
        default=None,
        description="Working copy to push from (defaults to the configured repository)",
    )


class PullRequest(ApiModel):
    """Request to fetch and merge a remote branch into a working copy."""

    model_config = ConfigDict(frozen=True)

    project_id: int = Field(default=0, ge=0)
    branch_name: str | None = None
    local_path: Path
    force: bool = False
    conflict_strategy: ConflictStrategy = ConflictStrategy.MANUAL


class SyncResult(ApiModel):
    """
    Result of a push or pull.

    Failures are reported in-band: the orchestrator never raises from a
    push or pull, it returns a SyncResult with success=False and an
    error_message/error_kind instead.
    """

    success: bool
    operation: SyncOperation
    branch_name: str | None = None
    commit_count: int = Field(default=0, ge=0)
    latest_commit_sha: str | None = None
    has_conflicts: bool = False
    conflict_files: list[str] = Field(default_factory=list)
    resolved_files: list[str] = Field(default_factory=list)
    error_message: str | None = None
    error_kind: ErrorKind | None = None
    processed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("conflict_files", "resolved_files")
    @classmethod
    def _sorted_unique(cls, value: list[str]) -> list[str]:
        return sorted(set(value))

    @model_validator(mode="after")
    def _conflicts_have_files(self) -> SyncResult:
        if self.has_conflicts and not self.conflict_files:
            raise ValueError("has_conflicts requires at least one conflict file")
        return self

    def exit_code(self) -> int:
        """CLI exit code: 0 success, 1 failure, 2 conflicts remain."""
        if self.success:
            return 0
        if self.has_conflicts:
            return 2
        return 1

    def summary(self) -> str:
        """Generate a human-readable summary of the result."""
        if not self.success and not self.has_conflicts:
            return f"{self.operation.value} failed: {self.error_message}"

        outcome = "completed with conflicts" if self.has_conflicts else "succeeded"
        parts = [f"{self.operation.value} {outcome}"]

        if self.branch_name:
            parts.append(f"branch {self.branch_name}")

        parts.append(f"{self.commit_count} commits")

        if self.latest_commit_sha:
            parts.append(f"tip {self.latest_commit_sha[:8]}")

        if self.resolved_files:
            parts.append(f"{len(self.resolved_files)} conflicts resolved")

        if self.has_conflicts:
            parts.append(f"{len(self.conflict_files)} files need manual resolution")

        return ", ".join(parts)
