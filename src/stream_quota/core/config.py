"""Application configuration using pydantic-settings."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

IN_MEMORY_DB = ":memory:"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables with
    the STREAM_QUOTA_ prefix.

    Example:
        export STREAM_QUOTA_LOG_LEVEL=DEBUG
        export STREAM_QUOTA_MAX_CONCURRENCY=5
    """

    model_config = SettingsConfigDict(
        env_prefix="STREAM_QUOTA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["simple", "detailed", "json"] = "simple"

    # Storage
    storage_backend: Literal["memory", "sqlite"] = "sqlite"
    db_path: str = "stream_quota.db"

    # Admission control
    # System-wide ceiling applied to every per-identity limit. None disables it.
    max_concurrency: int | None = Field(default=None, ge=1)

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 3000

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_ephemeral(self) -> bool:
        """True when records do not survive a process restart."""
        return self.storage_backend == "memory" or self.db_path == IN_MEMORY_DB

    @field_validator("db_path")
    @classmethod
    def db_path_not_blank(cls, v: str) -> str:
        """Reject empty database paths."""
        if not v.strip():
            raise ValueError("db_path must not be empty")
        return v


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the current settings instance."""
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment (useful for testing)."""
    global settings
    settings = Settings()
    return settings
