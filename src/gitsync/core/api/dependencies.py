"""
FastAPI dependencies.
"""

from functools import lru_cache

from gitsync.core.config.loader import load_config
from gitsync.core.sync.orchestrator import SyncOrchestrator


@lru_cache(maxsize=1)
def get_orchestrator() -> SyncOrchestrator:
    """
    Process-wide orchestrator built from the loaded configuration.

    Override with app.dependency_overrides[get_orchestrator] in tests.
    """
    return SyncOrchestrator(load_config())
