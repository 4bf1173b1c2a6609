"""
Engine configuration.

Settings are plain pydantic models so they validate on construction and
can be filled from `GIT_PLAYGROUND_*` environment variables.
"""

import os
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class EngineConfig(BaseModel):
    """Configuration for a repository model instance.

    Attributes:
        default_branch: Branch HEAD is attached to after init
        initial_message: Message of the root commit created by init
        short_id_length: Characters kept when displaying commit ids
        backend: Commit graph storage, "memory" or "sql"
        database_url: SQLAlchemy URL used by the sql backend
        log_level: Level for configure_logging
    """

    default_branch: str = Field(default="main", description="Initial branch name")
    initial_message: str = Field(
        default="Initial commit", description="Message of the root commit"
    )
    short_id_length: int = Field(default=7, description="Display length of ids")
    backend: Literal["memory", "sql"] = Field(
        default="memory", description="Commit graph backend"
    )
    database_url: str = Field(
        default="sqlite://", description="Database for the sql backend"
    )
    log_level: str = Field(default="WARNING", description="Loguru level name")

    @field_validator("default_branch")
    @classmethod
    def validate_default_branch(cls, value: str) -> str:
        """Reject names that could never be a branch."""
        value = value.strip()
        if not value or value == "HEAD" or " " in value:
            raise ValueError("default_branch must be a valid branch name")
        return value

    @field_validator("short_id_length")
    @classmethod
    def validate_short_id_length(cls, value: int) -> int:
        if value < 4 or value > 40:
            raise ValueError("short_id_length must be between 4 and 40")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return value

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Create configuration from environment variables.

        Environment variables:
        - GIT_PLAYGROUND_DEFAULT_BRANCH
        - GIT_PLAYGROUND_SHORT_ID_LENGTH
        - GIT_PLAYGROUND_BACKEND
        - GIT_PLAYGROUND_DATABASE_URL
        - GIT_PLAYGROUND_LOG_LEVEL

        Returns:
            EngineConfig populated from environment
        """
        return cls(
            default_branch=os.environ.get("GIT_PLAYGROUND_DEFAULT_BRANCH", "main"),
            short_id_length=int(os.environ.get("GIT_PLAYGROUND_SHORT_ID_LENGTH", "7")),
            backend=os.environ.get("GIT_PLAYGROUND_BACKEND", "memory"),
            database_url=os.environ.get("GIT_PLAYGROUND_DATABASE_URL", "sqlite://"),
            log_level=os.environ.get("GIT_PLAYGROUND_LOG_LEVEL", "WARNING"),
        )
