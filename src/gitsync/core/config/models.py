"""
Configuration data models for gitsync.

These models define the structure of .gitsync.json and
~/.config/gitsync/config.json files, with validation and type safety via
Pydantic.
"""

from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gitsync.core.sync.errors import UnsupportedStrategyError
from gitsync.core.sync.models import ConflictStrategy, coerce_strategy


class RemoteConfig(BaseModel):
    """
    The remote repository that push and pull talk to.

    If url is set and the working copy has no remote called name, the
    remote is added before the first network operation.
    """
    name: str = Field(
        default="origin",
        min_length=1,
        description="Name of the remote to fetch from and push to"
    )
    url: Optional[str] = Field(
        default=None,
        description="Remote URL, used to add the remote when it is missing"
    )
    access_token: Optional[str] = Field(
        default=None,
        repr=False,
        description="Token sent as HTTP basic auth (oauth2:<token>) to https remotes"
    )
    network_timeout_seconds: float = Field(
        default=120,
        gt=0,
        description="Upper bound for a single fetch or push"
    )


class IdentityConfig(BaseModel):
    """Author and committer used for conflict resolution commits."""
    name: str = Field(default="gitsync", min_length=1)
    email: str = Field(default="gitsync@localhost", min_length=1)


class ServerConfig(BaseModel):
    """Bind address for `gitsync serve`."""
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8080, ge=1, le=65535)


class GitSyncConfig(BaseModel):
    """
    Top-level gitsync configuration.

    Loaded from defaults, user config, project config, and env vars.

    Example:
        >>> config = GitSyncConfig(
        ...     remote=RemoteConfig(name="upstream"),
        ...     conflict_strategy="theirs",
        ... )
        >>> config.conflict_strategy
        <ConflictStrategy.THEIRS: 'theirs'>
    """
    remote: RemoteConfig = Field(
        default_factory=RemoteConfig,
        description="Remote repository settings"
    )
    repository_path: Optional[Path] = Field(
        default=None,
        description="Working copy used when a request does not name one"
    )
    conflict_strategy: ConflictStrategy = Field(
        default=ConflictStrategy.MANUAL,
        description="Default strategy for `gitsync sync pull`"
    )
    identity: IdentityConfig = Field(
        default_factory=IdentityConfig,
        description="Identity for commits created by gitsync"
    )
    server: ServerConfig = Field(
        default_factory=ServerConfig,
        description="HTTP server settings"
    )

    model_config = ConfigDict(
        extra="allow",  # Allow extra fields for forward compatibility
        validate_assignment=True,
    )

    @field_validator('remote', mode='before')
    @classmethod
    def validate_remote(cls, v: Union[str, dict, RemoteConfig]) -> Union[dict, RemoteConfig]:
        """Convert a bare remote name to RemoteConfig."""
        if isinstance(v, str):
            return {"name": v}
        return v

    @field_validator('conflict_strategy', mode='before')
    @classmethod
    def validate_conflict_strategy(cls, v: object) -> ConflictStrategy:
        """Accept strategy names in any case ("Theirs", "OURS")."""
        try:
            return coerce_strategy(v)
        except UnsupportedStrategyError as e:
            raise ValueError(e.message) from e
