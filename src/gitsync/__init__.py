"""
gitsync - Push, pull and conflict resolution for git working copies

A CLI and HTTP service that keeps a local working copy in sync with its
remote, with ours/theirs/manual conflict strategies.
"""

__version__ = "0.1.0"

# Re-export core models for convenience
from gitsync.core.config.models import GitSyncConfig
from gitsync.core.sync.models import ConflictStrategy, SyncResult

__all__ = ["ConflictStrategy", "GitSyncConfig", "SyncResult", "__version__"]
