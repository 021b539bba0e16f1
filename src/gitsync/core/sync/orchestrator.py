"""
Push/pull orchestration.

SyncOrchestrator drives the state machines behind `gitsync sync push`,
`gitsync sync pull` and the matching HTTP endpoints:

    push: CheckClean -> ResolveBranch -> PushRemote -> Done | Failed
    pull: CheckClean -> ResolveBranch -> Fetch -> Merge -> DetectConflicts
          -> [ResolveConflicts] -> Done | Failed

Push and pull never raise: every failure comes back as a SyncResult with
success=False and an error_kind. The direct operations (status, branches,
checkout, resolve_conflicts, commits_between) raise GitSyncError subclasses
for the caller to map.
"""

from __future__ import annotations

import logging
from pathlib import Path

from gitsync.core.config.models import GitSyncConfig
from gitsync.core.git.backend import GitBackend, Identity, RepositoryHandle, open_repository
from gitsync.core.git.repository import GitPythonBackend
from gitsync.core.sync.branches import BranchResolver
from gitsync.core.sync.cancellation import CancellationToken
from gitsync.core.sync.commits import CommitRangeCalculator
from gitsync.core.sync.conflicts import ConflictResolver
from gitsync.core.sync.errors import (
    BranchNotFoundError,
    ErrorKind,
    GitSyncError,
    NetworkError,
    UncommittedChangesError,
)
from gitsync.core.sync.inspector import RepositoryStateInspector
from gitsync.core.sync.locks import RepositoryLockRegistry, default_registry
from gitsync.core.sync.models import (
    BranchRef,
    CommitSummary,
    ConflictStrategy,
    PullRequest,
    PushRequest,
    RepositoryStatus,
    ResolutionOutcome,
    SyncOperation,
    SyncResult,
    coerce_strategy,
)

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """
    Shared core behind the CLI and the HTTP API.

    Example:
        >>> orchestrator = SyncOrchestrator(load_config())
        >>> result = orchestrator.pull(PullRequest(local_path=Path(".")))
        >>> print(result.summary())
    """

    def __init__(
        self,
        config: GitSyncConfig | None = None,
        backend: GitBackend | None = None,
        locks: RepositoryLockRegistry | None = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            config: Loaded configuration (defaults to built-in defaults)
            backend: Repository backend (defaults to GitPython)
            locks: Lock registry (defaults to the process-wide registry)
        """
        self.config = config or GitSyncConfig()
        self.backend = backend or GitPythonBackend(access_token=self.config.remote.access_token)
        self.locks = locks or default_registry

        self.identity = Identity(
            name=self.config.identity.name, email=self.config.identity.email
        )
        self.inspector = RepositoryStateInspector(self.backend)
        self.branches = BranchResolver(self.backend, remote_name=self.config.remote.name)
        self.commits = CommitRangeCalculator(self.backend)
        self.conflicts = ConflictResolver(self.backend, identity=self.identity)

    @property
    def remote_name(self) -> str:
        return self.config.remote.name

    def default_path(self) -> Path:
        """Configured repository path, else the current directory."""
        return self.config.repository_path or Path.cwd()

    # ------------------------------------------------------------------
    # Push
    # ------------------------------------------------------------------

    def push(self, request: PushRequest, token: CancellationToken | None = None) -> SyncResult:
        """
        Push the resolved branch (and any requested tags) to the remote.

        Args:
            request: What to push and from where
            token: Optional cancellation token, honored until the push starts

        Returns:
            SyncResult; failures are reported in-band
        """
        token = token or CancellationToken()
        path = request.repository_path or self.default_path()
        logger.info("Push requested for %s (branch=%s)", path, request.branch_name or "<current>")

        try:
            with self.locks.exclusive(path), open_repository(self.backend, path) as repo:
                return self._push(repo, request, token)
        except GitSyncError as e:
            logger.error("Push failed: %s", e)
            return self._failed(SyncOperation.PUSH, e.kind, str(e), request.branch_name)
        except Exception as e:
            logger.exception("Unexpected error during push")
            return self._failed(
                SyncOperation.PUSH, ErrorKind.INTERNAL, str(e) or type(e).__name__,
                request.branch_name,
            )

    def _push(
        self, repo: RepositoryHandle, request: PushRequest, token: CancellationToken
    ) -> SyncResult:
        token.check("push")

        # CheckClean: force never bypasses this for push
        status = self.inspector.status_of(repo)
        if status.has_uncommitted_changes:
            raise UncommittedChangesError(status.change_count, operation="push")

        branch = self._resolve_and_checkout(repo, request.branch_name)

        token.check("push")
        remote = self._ensure_remote(repo)
        timeout = token.bound(self.config.remote.network_timeout_seconds)
        logger.info("Pushing %s to %s (force=%s)", branch.name, remote, request.force)
        repo.push(
            remote, branch.name, force=request.force, tags=list(request.tags), timeout=timeout
        )

        tip = repo.branch_tip(branch.name)
        result = SyncResult(
            success=True,
            operation=SyncOperation.PUSH,
            branch_name=branch.name,
            commit_count=len(request.commits),
            latest_commit_sha=tip,
        )
        logger.info(result.summary())
        return result

    # ------------------------------------------------------------------
    # Pull
    # ------------------------------------------------------------------

    def pull(self, request: PullRequest, token: CancellationToken | None = None) -> SyncResult:
        """
        Fetch the remote and merge it into the resolved branch.

        With ours/theirs, merge conflicts are resolved and committed. With
        manual, the merge is left in progress and the result lists the
        conflicted files.

        Args:
            request: Where to pull and how to treat conflicts
            token: Optional cancellation token, honored until the merge starts

        Returns:
            SyncResult; failures are reported in-band
        """
        token = token or CancellationToken()
        path = request.local_path
        logger.info(
            "Pull requested for %s (branch=%s, strategy=%s)",
            path,
            request.branch_name or "<current>",
            request.conflict_strategy.value,
        )

        try:
            with self.locks.exclusive(path), open_repository(self.backend, path) as repo:
                return self._pull(repo, request, token)
        except GitSyncError as e:
            logger.error("Pull failed: %s", e)
            return self._failed(SyncOperation.PULL, e.kind, str(e), request.branch_name)
        except Exception as e:
            logger.exception("Unexpected error during pull")
            return self._failed(
                SyncOperation.PULL, ErrorKind.INTERNAL, str(e) or type(e).__name__,
                request.branch_name,
            )

    def _pull(
        self, repo: RepositoryHandle, request: PullRequest, token: CancellationToken
    ) -> SyncResult:
        strategy = coerce_strategy(request.conflict_strategy)
        token.check("pull")

        # CheckClean: force only skips the check, local changes are kept
        status = self.inspector.status_of(repo)
        if status.has_uncommitted_changes:
            if not request.force:
                raise UncommittedChangesError(status.change_count, operation="pull")
            logger.warning(
                "Pulling into %s with %d uncommitted changes (force)",
                repo.path,
                status.change_count,
            )

        branch = self._resolve_and_checkout(repo, request.branch_name)

        # Fetch
        remote = self._ensure_remote(repo)
        before_tip = repo.head_commit()
        token.check("fetch")
        timeout = token.bound(self.config.remote.network_timeout_seconds)
        logger.info("Fetching %s", remote)
        repo.fetch(remote, timeout=timeout)
        token.check("merge")

        # Merge: from here on cancellation is not honored
        merge_ref = branch.tracking_remote_ref or f"{remote}/{branch.name}"
        if repo.branch_tip(merge_ref) is None:
            raise BranchNotFoundError(
                branch.name, f"Remote branch not found: {merge_ref}", operation="pull"
            )
        hint = strategy.value if strategy != ConflictStrategy.MANUAL else None
        logger.info("Merging %s into %s", merge_ref, branch.name)
        merged = repo.merge(merge_ref, strategy_hint=hint, identity=self.identity)
        if merged.up_to_date:
            logger.info("%s is already up to date with %s", branch.name, merge_ref)
        elif merged.fast_forward:
            logger.info("Fast-forwarded %s to %s", branch.name, merge_ref)

        # DetectConflicts
        conflicts = (
            self.inspector.status_of(repo).conflict_files if merged.has_conflicts else []
        )
        resolved: list[str] = []

        if conflicts and strategy != ConflictStrategy.MANUAL:
            outcome = self.conflicts.resolve_in(repo, conflicts, strategy)
            resolved = outcome.resolved_files
            if not outcome.success:
                return SyncResult(
                    success=False,
                    operation=SyncOperation.PULL,
                    branch_name=branch.name,
                    has_conflicts=True,
                    conflict_files=outcome.remaining_conflicts,
                    resolved_files=resolved,
                    error_message=outcome.message,
                    latest_commit_sha=repo.head_commit(),
                )
            conflicts = []

        after_tip = repo.head_commit()
        has_conflicts = bool(conflicts)
        result = SyncResult(
            success=not has_conflicts or strategy != ConflictStrategy.MANUAL,
            operation=SyncOperation.PULL,
            branch_name=branch.name,
            commit_count=self.commits.count_in(repo, before_tip, after_tip),
            latest_commit_sha=after_tip,
            has_conflicts=has_conflicts,
            conflict_files=conflicts,
            resolved_files=resolved,
        )
        if has_conflicts:
            logger.warning(
                "Pull stopped with %d conflicts; resolve them and commit", len(conflicts)
            )
        else:
            logger.info(result.summary())
        return result

    # ------------------------------------------------------------------
    # Direct operations
    # ------------------------------------------------------------------

    def get_status(self, path: Path | None = None) -> RepositoryStatus:
        path = path or self.default_path()
        with self.locks.shared(path):
            return self.inspector.get_status(path)

    def get_local_branches(self, path: Path | None = None) -> list[BranchRef]:
        path = path or self.default_path()
        with self.locks.shared(path):
            return self.inspector.get_local_branches(path)

    def checkout(self, path: Path | None, branch_name: str) -> bool:
        """
        Check out a branch, creating it from the remote if only a
        remote-tracking branch exists.

        Raises:
            BranchNotFoundError: If no branch matches
        """
        path = path or self.default_path()
        with self.locks.exclusive(path), open_repository(self.backend, path) as repo:
            branch = self._resolve_and_checkout(repo, branch_name)
            logger.info("Checked out %s in %s", branch.name, path)
            return True

    def resolve_conflicts(
        self,
        path: Path | None,
        conflict_files: list[str] | None,
        strategy: ConflictStrategy | str,
    ) -> ResolutionOutcome:
        path = path or self.default_path()
        with self.locks.exclusive(path):
            return self.conflicts.resolve(path, conflict_files, strategy)

    def commits_between(
        self, path: Path | None, before: str | None, after: str = "HEAD"
    ) -> list[CommitSummary]:
        """Commits reachable from after but not from before, newest first."""
        path = path or self.default_path()
        with self.locks.shared(path):
            return self.commits.enumerate(path, before, after)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve_and_checkout(self, repo: RepositoryHandle, requested: str | None) -> BranchRef:
        branch = self.branches.resolve_in(repo, requested)
        if branch.name != repo.head_branch():
            logger.info("Checking out %s", branch.name)
            repo.checkout(branch.name)
            branch = branch.model_copy(update={"is_current": True})
        return branch

    def _ensure_remote(self, repo: RepositoryHandle) -> str:
        name = self.remote_name
        if repo.has_remote(name):
            return name
        url = self.config.remote.url
        if not url:
            raise NetworkError(f"Remote '{name}' is not configured and no remote URL is set")
        repo.add_remote(name, url)
        return name

    def _failed(
        self,
        operation: SyncOperation,
        kind: ErrorKind,
        message: str,
        branch_name: str | None,
    ) -> SyncResult:
        return SyncResult(
            success=False,
            operation=operation,
            branch_name=branch_name,
            error_message=message,
            error_kind=kind,
        )
