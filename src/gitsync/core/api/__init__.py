"""
HTTP API for gitsync.

API Endpoints (prefix /api/v1/git):
- POST /push - Push a branch to the remote
- POST /pull - Fetch and merge with a conflict strategy
- POST /resolve-conflicts - Resolve files in a repository that is mid-merge
- GET /status - Working copy status
- GET /branches - Local branches
- POST /checkout - Check out (or create from remote) a branch
- GET /commits - Commits between two points

Usage:
    # Run the server
    gitsync serve

    # Or with uvicorn directly
    uvicorn gitsync.core.api.app:app --reload
"""

from gitsync.core.api.app import app

__all__ = ["app"]
