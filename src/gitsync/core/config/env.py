"""Environment file loading.

GITSYNC_* settings (remote URL, access token, ...) can live in .env files
so tokens stay out of shell history and JSON config:

- OS environment (highest precedence, never overwritten)
- Project files: .env, .env.local in the project directory
- User file: ~/.config/gitsync/.env

Project files may override values that came from the user file.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values

logger = logging.getLogger(__name__)


def default_env_paths(project_dir: Path) -> tuple[list[Path], list[Path]]:
    """Return (user paths, project paths) searched when none are given."""
    xdg_home = Path(os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config")))
    return [xdg_home / "gitsync" / ".env"], [project_dir / ".env", project_dir / ".env.local"]


def read_env_file(path: Path) -> dict[str, str]:
    """Parse one .env file, skipping keys without a value."""
    if not path.is_file():
        return {}
    return {
        str(key): str(value)
        for key, value in dotenv_values(path).items()
        if key is not None and value is not None
    }


def load_layered_env(
    *,
    project_dir: Path | None = None,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> dict[str, str]:
    """Populate os.environ from user and project .env files.

    Args:
        project_dir: base directory for project env paths (defaults to cwd)
        user_env_paths: explicit user env file paths
        project_env_paths: explicit project env file paths

    Returns:
        The variables that were set, keyed by name.
    """
    default_user, default_project = default_env_paths(project_dir or Path.cwd())
    user_paths = list(user_env_paths) if user_env_paths is not None else default_user
    project_paths = list(project_env_paths) if project_env_paths is not None else default_project

    applied: dict[str, str] = {}
    preexisting = set(os.environ)

    for layer in (user_paths, project_paths):
        for path in layer:
            values = read_env_file(Path(path))
            if values:
                logger.debug("Loading %d variables from %s", len(values), path)
            for key, value in values.items():
                if key in preexisting:
                    continue
                os.environ[key] = value
                applied[key] = value

    return applied
