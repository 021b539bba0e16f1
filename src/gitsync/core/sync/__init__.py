"""
Synchronization and conflict-resolution engine.

The engine reconciles a local working copy with its remote: push, pull
(fetch + merge with strategy-driven conflict handling), and status.
Its components live in submodules:

- inspector: RepositoryStateInspector (read-only status)
- branches: BranchResolver
- commits: CommitRangeCalculator
- conflicts: ConflictResolver
- orchestrator: SyncOrchestrator, the push/pull state machine

Only the data models and errors are re-exported here; the components
depend on gitsync.core.git, which itself imports these models.

Example:
    >>> from gitsync.core.sync.orchestrator import SyncOrchestrator
    >>> from gitsync.core.sync import PullRequest, ConflictStrategy
    >>> result = SyncOrchestrator().pull(
    ...     PullRequest(local_path=Path("."), conflict_strategy=ConflictStrategy.THEIRS)
    ... )
    >>> result.success
    True
"""

from gitsync.core.sync.errors import (
    BranchNotFoundError,
    ErrorKind,
    GitSyncError,
    GitTimeoutError,
    InternalGitError,
    InvalidRepositoryError,
    NetworkError,
    OperationCancelledError,
    UncommittedChangesError,
    UnsupportedStrategyError,
)
from gitsync.core.sync.models import (
    BranchRef,
    ChangeType,
    CommitSummary,
    ConflictEntry,
    ConflictStrategy,
    FileChange,
    PullRequest,
    PushRequest,
    RepositoryStatus,
    ResolutionOutcome,
    SyncOperation,
    SyncResult,
    coerce_strategy,
)

__all__ = [
    # Models
    "BranchRef",
    "ChangeType",
    "CommitSummary",
    "ConflictEntry",
    "ConflictStrategy",
    "FileChange",
    "PullRequest",
    "PushRequest",
    "RepositoryStatus",
    "ResolutionOutcome",
    "SyncOperation",
    "SyncResult",
    "coerce_strategy",
    # Errors
    "BranchNotFoundError",
    "ErrorKind",
    "GitSyncError",
    "GitTimeoutError",
    "InternalGitError",
    "InvalidRepositoryError",
    "NetworkError",
    "OperationCancelledError",
    "UncommittedChangesError",
    "UnsupportedStrategyError",
]
