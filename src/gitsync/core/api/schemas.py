"""
Request bodies accepted by the HTTP API.

Paths arrive as strings so empty values can be rejected before they turn
into Path("."); the routes convert them into engine requests.
"""

from __future__ import annotations

from pydantic import Field, field_validator

from gitsync.core.sync.errors import UnsupportedStrategyError
from gitsync.core.sync.models import ApiModel, CommitSummary, ConflictStrategy, coerce_strategy


def _strategy(value: object) -> ConflictStrategy:
    try:
        return coerce_strategy(value)
    except UnsupportedStrategyError as e:
        raise ValueError(e.message) from e


class PushBody(ApiModel):
    project_id: int
    branch_name: str | None = None
    commits: list[CommitSummary] = Field(default_factory=list)
    force: bool = False
    tags: list[str] = Field(default_factory=list)
    repository_path: str | None = Field(default=None, min_length=1)


class PullBody(ApiModel):
    project_id: int
    branch_name: str | None = None
    local_path: str = Field(min_length=1)
    force: bool = False
    conflict_strategy: ConflictStrategy = ConflictStrategy.MANUAL

    @field_validator("conflict_strategy", mode="before")
    @classmethod
    def _coerce(cls, v: object) -> ConflictStrategy:
        return _strategy(v)


class CheckoutBody(ApiModel):
    repository_path: str = Field(min_length=1)
    branch_name: str = Field(min_length=1)


class ResolveConflictsBody(ApiModel):
    repository_path: str = Field(min_length=1)
    conflict_files: list[str] = Field(min_length=1)
    strategy: ConflictStrategy

    @field_validator("strategy", mode="before")
    @classmethod
    def _coerce(cls, v: object) -> ConflictStrategy:
        return _strategy(v)
