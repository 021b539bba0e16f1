"""
Helpers shared by CLI commands.
"""

from __future__ import annotations

import typer

from gitsync.cli.errors import ExitCode, print_error, print_sync_error
from gitsync.core.config import load_config
from gitsync.core.sync.errors import GitSyncError
from gitsync.core.sync.orchestrator import SyncOrchestrator


def build_orchestrator() -> SyncOrchestrator:
    """Create an orchestrator from the layered configuration."""
    try:
        config = load_config()
    except ValueError as e:
        # pydantic.ValidationError is a ValueError
        print_error(
            "Invalid configuration",
            reason=str(e),
            solution="check .gitsync.json and GITSYNC_* environment variables",
        )
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    return SyncOrchestrator(config)


def fail(error: GitSyncError) -> typer.Exit:
    """Print an engine error and return the Exit to raise."""
    print_sync_error(error)
    return typer.Exit(ExitCode.GENERAL_ERROR)
