"""
Repository introspection routes.

- GET  /api/v1/git/status?repositoryPath=...
- GET  /api/v1/git/branches?repositoryPath=...
- POST /api/v1/git/checkout
- GET  /api/v1/git/commits?repositoryPath=...&before=...&after=...

repositoryPath falls back to the configured repository when omitted.
"""

from pathlib import Path

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from gitsync.core.api.dependencies import get_orchestrator
from gitsync.core.api.responses import envelope
from gitsync.core.api.schemas import CheckoutBody
from gitsync.core.sync.orchestrator import SyncOrchestrator

router = APIRouter()


def _path(value: str | None) -> Path | None:
    return Path(value) if value else None


@router.get("/status")
def get_status(
    repository_path: str | None = Query(default=None, alias="repositoryPath", min_length=1),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    """Current branch, dirty flag, file counts and conflicts."""
    return envelope(data=orchestrator.get_status(_path(repository_path)))


@router.get("/branches")
def get_branches(
    repository_path: str | None = Query(default=None, alias="repositoryPath", min_length=1),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    """Local branches, with the checked-out one marked isCurrent."""
    return envelope(data=orchestrator.get_local_branches(_path(repository_path)))


@router.post("/checkout")
def checkout(
    body: CheckoutBody, orchestrator: SyncOrchestrator = Depends(get_orchestrator)
) -> JSONResponse:
    success = orchestrator.checkout(Path(body.repository_path), body.branch_name)
    return envelope(data={"success": success}, message=f"Checked out {body.branch_name}")


@router.get("/commits")
def get_commits(
    before: str | None = Query(default=None),
    after: str = Query(default="HEAD", min_length=1),
    repository_path: str | None = Query(default=None, alias="repositoryPath", min_length=1),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    """Commits reachable from `after` but not from `before`, newest first."""
    commits = orchestrator.commits_between(_path(repository_path), before, after)
    return envelope(data=commits, message=f"{len(commits)} commits")
