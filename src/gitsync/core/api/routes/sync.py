"""
Push, pull and conflict-resolution routes.

- POST /api/v1/git/push
- POST /api/v1/git/pull
- POST /api/v1/git/resolve-conflicts

Handlers are plain `def` so the blocking git work runs in FastAPI's
threadpool instead of on the event loop.
"""

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from gitsync.core.api.dependencies import get_orchestrator
from gitsync.core.api.responses import envelope, sync_result_response
from gitsync.core.api.schemas import PullBody, PushBody, ResolveConflictsBody
from gitsync.core.sync.models import PullRequest, PushRequest
from gitsync.core.sync.orchestrator import SyncOrchestrator

router = APIRouter()


def _check_project_id(project_id: int) -> None:
    if project_id <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="projectId must be a positive integer",
        )


@router.post("/push")
def push(
    body: PushBody, orchestrator: SyncOrchestrator = Depends(get_orchestrator)
) -> JSONResponse:
    """
    Push local commits on a branch to the configured remote.

    Example request:
        {"projectId": 1, "branchName": "main", "repositoryPath": "/srv/app", "force": false}
    """
    _check_project_id(body.project_id)
    request = PushRequest(
        project_id=body.project_id,
        branch_name=body.branch_name,
        commits=body.commits,
        force=body.force,
        tags=body.tags,
        repository_path=Path(body.repository_path) if body.repository_path else None,
    )
    return sync_result_response(orchestrator.push(request))


@router.post("/pull")
def pull(
    body: PullBody, orchestrator: SyncOrchestrator = Depends(get_orchestrator)
) -> JSONResponse:
    """
    Fetch and merge the remote branch into localPath.

    A pull that stops on conflicts with the manual strategy returns 200
    with data.hasConflicts=true and the conflicted files.
    """
    _check_project_id(body.project_id)
    request = PullRequest(
        project_id=body.project_id,
        branch_name=body.branch_name,
        local_path=Path(body.local_path),
        force=body.force,
        conflict_strategy=body.conflict_strategy,
    )
    return sync_result_response(orchestrator.pull(request))


@router.post("/resolve-conflicts")
def resolve_conflicts(
    body: ResolveConflictsBody, orchestrator: SyncOrchestrator = Depends(get_orchestrator)
) -> JSONResponse:
    """Resolve conflicted files in a repository that is mid-merge."""
    outcome = orchestrator.resolve_conflicts(
        Path(body.repository_path), body.conflict_files, body.strategy
    )
    return envelope(data=outcome, message=outcome.message)
