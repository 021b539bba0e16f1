"""
Strategy-driven conflict resolution.

ConflictResolver takes a repository that is in the middle of a merge and
resolves some or all conflicted paths by picking one side, then records
the result with a resolution commit.
"""

from __future__ import annotations

import logging
from pathlib import Path

from gitsync.core.git.backend import (
    ConflictSide,
    GitBackend,
    Identity,
    RepositoryHandle,
    open_repository,
)
from gitsync.core.sync.models import (
    ConflictEntry,
    ConflictStrategy,
    ResolutionOutcome,
    coerce_strategy,
)

logger = logging.getLogger(__name__)

RESOLUTION_COMMIT_MESSAGE = "Resolved conflicts - strategy: {strategy}"

DEFAULT_IDENTITY = Identity(name="gitsync", email="gitsync@localhost")


class ConflictResolver:
    """
    Applies ours/theirs/manual to conflicted paths.

    - ours: keep the local version (stage 2), removing the path if the
      local side deleted it
    - theirs: take the incoming MERGE_HEAD version (stage 3), removing the
      path if the incoming side deleted it
    - manual: change nothing and report what is still conflicted

    A resolution commit is only created once no conflicted path remains.
    """

    def __init__(self, backend: GitBackend, identity: Identity = DEFAULT_IDENTITY) -> None:
        self.backend = backend
        self.identity = identity

    def resolve(
        self,
        path: Path,
        conflict_files: list[str] | None,
        strategy: ConflictStrategy | str,
    ) -> ResolutionOutcome:
        """
        Resolve conflicts in the working copy at path.

        Args:
            path: Repository root
            conflict_files: Paths to resolve; empty or None means all of them
            strategy: ours, theirs or manual

        Raises:
            InvalidRepositoryError: If path is not a valid repository
            UnsupportedStrategyError: If strategy is not recognised
            InternalGitError: If staging or committing fails
        """
        with open_repository(self.backend, path) as repo:
            return self.resolve_in(repo, conflict_files, strategy)

    def resolve_in(
        self,
        repo: RepositoryHandle,
        conflict_files: list[str] | None,
        strategy: ConflictStrategy | str,
    ) -> ResolutionOutcome:
        # Both checks run before anything is touched
        repo.ensure_valid()
        strategy = coerce_strategy(strategy)

        conflicted = repo.conflicted_paths()
        if not conflicted:
            logger.info("No conflicts to resolve in %s", repo.path)
            return ResolutionOutcome(
                success=True, strategy=strategy, message="No conflicts to resolve"
            )

        selected = self._select(conflicted, conflict_files)

        if strategy == ConflictStrategy.MANUAL:
            return ResolutionOutcome(
                success=False,
                strategy=strategy,
                remaining_conflicts=conflicted,
                entries=[ConflictEntry(path=p) for p in conflicted],
                message=f"{len(conflicted)} conflicted files require manual resolution",
            )

        side: ConflictSide = "ours" if strategy == ConflictStrategy.OURS else "theirs"
        entries: list[ConflictEntry] = []
        for file_path in selected:
            sides = repo.conflict_sides(file_path)
            present = sides.ours_present if side == "ours" else sides.theirs_present
            if present:
                repo.checkout_side(file_path, side)
                repo.stage(file_path)
            else:
                logger.debug("%s was deleted on the %s side, removing", file_path, side)
                repo.remove(file_path)
            entries.append(ConflictEntry(path=file_path, strategy_applied=strategy))

        remaining = repo.conflicted_paths()
        if remaining:
            return ResolutionOutcome(
                success=False,
                strategy=strategy,
                resolved_files=selected,
                remaining_conflicts=remaining,
                entries=entries,
                message=f"{len(remaining)} conflicted files were not selected for resolution",
            )

        sha = repo.commit(
            RESOLUTION_COMMIT_MESSAGE.format(strategy=strategy.value), self.identity
        )
        logger.info(
            "Resolved %d conflicts with strategy %s (commit %s)",
            len(selected),
            strategy.value,
            sha[:8],
        )
        return ResolutionOutcome(
            success=True,
            strategy=strategy,
            resolved_files=selected,
            entries=entries,
            commit_sha=sha,
            message=f"Resolved {len(selected)} conflicts using {strategy.value}",
        )

    def _select(self, conflicted: list[str], requested: list[str] | None) -> list[str]:
        if not requested:
            return list(conflicted)

        conflicted_set = set(conflicted)
        ignored = [p for p in requested if p not in conflicted_set]
        if ignored:
            logger.warning("Ignoring paths that are not conflicted: %s", ", ".join(ignored))
        return sorted({p for p in requested if p in conflicted_set})
