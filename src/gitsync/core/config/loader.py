"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import GitSyncConfig

logger = logging.getLogger(__name__)

# Global cache to avoid reloading config multiple times per process
_config_cache: GitSyncConfig | None = None


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """
    Get path to user configuration file.

    Returns:
        Path to ~/.config/gitsync/config.json (or XDG equivalent)
    """
    return get_xdg_config_home() / "gitsync" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """
    Get path to project configuration file.

    Args:
        cwd: Working directory to search from (defaults to current directory)

    Returns:
        Path to .gitsync.json in the project root
    """
    if cwd is None:
        cwd = Path.cwd()
    return cwd / ".gitsync.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in `override` take precedence over values in `base`. Nested
    dicts are merged, not replaced.

    Example:
        >>> base = {"remote": {"name": "origin", "network_timeout_seconds": 120}}
        >>> override = {"remote": {"name": "upstream"}}
        >>> deep_merge(base, override)
        {"remote": {"name": "upstream", "network_timeout_seconds": 120}}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if file doesn't exist or can't be parsed
    """
    if not path.exists():
        return None

    try:
        with path.open() as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            logger.warning("Ignoring config at %s: top level is not an object", path)
            return None
    except (json.JSONDecodeError, OSError) as e:
        # Config system stays usable with a broken file
        logger.warning("Failed to parse config at %s: %s", path, e)
        return None


def _set(result: dict[str, Any], section: str | None, key: str, value: Any) -> None:
    if section is None:
        result[key] = value
        return
    nested = result.get(section)
    if not isinstance(nested, dict):
        nested = {}
    result[section] = {**nested, key: value}


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Env vars have the highest precedence and override all config files.

    Supported env vars:
        GITSYNC_REMOTE - overrides remote.name
        GITSYNC_REMOTE_URL - overrides remote.url
        GITSYNC_ACCESS_TOKEN - overrides remote.access_token
        GITSYNC_NETWORK_TIMEOUT - overrides remote.network_timeout_seconds
        GITSYNC_REPOSITORY_PATH - overrides repository_path
        GITSYNC_CONFLICT_STRATEGY - overrides conflict_strategy

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = config_dict.copy()

    if remote := os.environ.get("GITSYNC_REMOTE"):
        _set(result, "remote", "name", remote)

    if url := os.environ.get("GITSYNC_REMOTE_URL"):
        _set(result, "remote", "url", url)

    if token := os.environ.get("GITSYNC_ACCESS_TOKEN"):
        _set(result, "remote", "access_token", token)

    if timeout_str := os.environ.get("GITSYNC_NETWORK_TIMEOUT"):
        try:
            timeout = float(timeout_str)
        except ValueError:
            logger.warning("Invalid GITSYNC_NETWORK_TIMEOUT value '%s', ignoring", timeout_str)
        else:
            if timeout <= 0:
                logger.warning("GITSYNC_NETWORK_TIMEOUT must be > 0, got %s, ignoring", timeout)
            else:
                _set(result, "remote", "network_timeout_seconds", timeout)

    if repo_path := os.environ.get("GITSYNC_REPOSITORY_PATH"):
        _set(result, None, "repository_path", repo_path)

    if strategy := os.environ.get("GITSYNC_CONFLICT_STRATEGY"):
        _set(result, None, "conflict_strategy", strategy)

    return result


def get_default_config() -> dict[str, Any]:
    """
    Get hardcoded default configuration.

    Returns:
        Dictionary with default configuration values
    """
    return {
        "remote": {
            "name": "origin",
            "network_timeout_seconds": 120,
        },
        "conflict_strategy": "manual",
        "identity": {"name": "gitsync", "email": "gitsync@localhost"},
        "server": {"host": "127.0.0.1", "port": 8080},
    }


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> GitSyncConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (GITSYNC_*)
        2. Project config (.gitsync.json)
        3. User config (~/.config/gitsync/config.json)
        4. Hardcoded defaults

    Args:
        project_dir: Project directory to load .gitsync.json from (defaults to cwd)
        use_cache: If True, return cached config from previous load

    Returns:
        Validated GitSyncConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation

    Example:
        >>> config = load_config()
        >>> config.remote.name
        'origin'
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()

    user_config_path = get_user_config_path()
    if user_config := load_json_file(user_config_path):
        merged = deep_merge(merged, user_config)

    # Project config wins over user config
    project_config_path = get_project_config_path(project_dir)
    if project_config := load_json_file(project_config_path):
        merged = deep_merge(merged, project_config)

    merged = apply_env_overrides(merged)

    config = GitSyncConfig(**merged)

    _config_cache = config

    return config


def clear_cache() -> None:
    """
    Clear the cached configuration.

    Useful for testing or when config files change during execution.
    """
    global _config_cache
    _config_cache = None
