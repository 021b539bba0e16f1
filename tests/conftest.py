"""
Pytest configuration and shared fixtures.

Provides real git repositories for the sync tests: a bare "remote", a
working clone used as the local checkout, and a second clone that plays
another user pushing to the same remote.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from gitsync.core.config import clear_cache
from gitsync.core.config.models import GitSyncConfig
from gitsync.core.sync.locks import RepositoryLockRegistry
from gitsync.core.sync.orchestrator import SyncOrchestrator

from git_helpers import configure_user, run_git

# ==============================================================================
# Repository Fixtures
# ==============================================================================


@pytest.fixture
def remote_repo(tmp_path: Path) -> Path:
    """A bare repository acting as the shared remote."""
    remote = tmp_path / "remote.git"
    run_git(tmp_path, "init", "--bare", "--initial-branch=main", str(remote))
    return remote


@pytest.fixture
def local_repo(tmp_path: Path, remote_repo: Path) -> Path:
    """
    The local checkout, on main, tracking origin/main.

    Contains shared.txt, a.txt and b.txt in its initial commit.
    """
    local = tmp_path / "local"
    local.mkdir()
    run_git(local, "init", "--initial-branch=main")
    configure_user(local)

    for name in ("shared.txt", "a.txt", "b.txt"):
        (local / name).write_text(f"{name}: base version\n")
    run_git(local, "add", ".")
    run_git(local, "commit", "-m", "Initial commit")

    run_git(local, "remote", "add", "origin", str(remote_repo))
    run_git(local, "push", "-u", "origin", "main")
    return local


@pytest.fixture
def other_repo(tmp_path: Path, remote_repo: Path, local_repo: Path) -> Path:
    """A second clone of the remote, used to simulate another user."""
    other = tmp_path / "other"
    run_git(tmp_path, "clone", str(remote_repo), str(other))
    configure_user(other, name="Other User", email="other@example.com")
    return other


@pytest.fixture
def not_a_repo(tmp_path: Path) -> Path:
    plain = tmp_path / "plain"
    plain.mkdir()
    return plain


# ==============================================================================
# Engine Fixtures
# ==============================================================================


@pytest.fixture
def config() -> GitSyncConfig:
    return GitSyncConfig()


@pytest.fixture
def orchestrator(config: GitSyncConfig) -> SyncOrchestrator:
    """Orchestrator with a private lock registry."""
    return SyncOrchestrator(config, locks=RepositoryLockRegistry())


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep user config and GITSYNC_* variables from leaking into tests."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for name in (
        "GITSYNC_REMOTE",
        "GITSYNC_REMOTE_URL",
        "GITSYNC_ACCESS_TOKEN",
        "GITSYNC_REPOSITORY_PATH",
        "GITSYNC_CONFLICT_STRATEGY",
        "GITSYNC_NETWORK_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_cache()
    yield
    clear_cache()
