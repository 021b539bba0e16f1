"""
Repository access for gitsync.

The sync engine is written against the RepositoryHandle protocol; the
GitPython-backed implementation lives in repository.py.
"""

from gitsync.core.git.backend import (
    ConflictSide,
    ConflictSides,
    GitBackend,
    Identity,
    MergeOutcome,
    RefInfo,
    RepositoryHandle,
    StatusEntry,
    open_repository,
)
from gitsync.core.git.repository import GitPythonBackend, GitPythonRepository

__all__ = [
    "ConflictSide",
    "ConflictSides",
    "GitBackend",
    "GitPythonBackend",
    "GitPythonRepository",
    "Identity",
    "MergeOutcome",
    "RefInfo",
    "RepositoryHandle",
    "StatusEntry",
    "open_repository",
]
