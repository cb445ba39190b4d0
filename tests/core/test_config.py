"""Tests for configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from stream_quota.core.config import Settings, reload_settings

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def _restore_global_settings() -> Generator[None, None, None]:
    """Keep env changes made by a test out of the global settings."""
    yield
    reload_settings()


class TestSettings:
    """Tests for Settings."""

    def test_default_values(self) -> None:
        """Has sensible defaults."""
        settings = Settings()
        assert settings.log_level == "INFO"
        assert settings.storage_backend == "sqlite"
        assert settings.db_path == "stream_quota.db"
        # No ceiling unless configured
        assert settings.max_concurrency is None

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Environment variables override defaults."""
        monkeypatch.setenv("STREAM_QUOTA_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("STREAM_QUOTA_MAX_CONCURRENCY", "5")
        monkeypatch.setenv("STREAM_QUOTA_STORAGE_BACKEND", "memory")

        settings = Settings()
        assert settings.log_level == "DEBUG"
        assert settings.max_concurrency == 5
        assert settings.storage_backend == "memory"

    def test_max_concurrency_must_be_positive(self) -> None:
        """A ceiling of 0 is rejected."""
        with pytest.raises(ValidationError):
            Settings(max_concurrency=0)

    def test_blank_db_path_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(db_path="   ")

    def test_reload_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that reload_settings updates the global instance."""
        from stream_quota.core import config

        monkeypatch.setenv("STREAM_QUOTA_LOG_LEVEL", "ERROR")

        new_settings = reload_settings()

        assert new_settings.log_level == "ERROR"
        assert config.settings.log_level == "ERROR"
        # Ensure it's the same object instance reference in the module
        assert config.settings is new_settings


class TestSettingsComputedFields:
    """Tests for Settings computed fields."""

    def test_sqlite_file_is_not_ephemeral(self) -> None:
        assert Settings(storage_backend="sqlite", db_path="quota.db").is_ephemeral is False

    def test_memory_backend_is_ephemeral(self) -> None:
        assert Settings(storage_backend="memory").is_ephemeral is True

    def test_in_memory_sqlite_is_ephemeral(self) -> None:
        assert Settings(storage_backend="sqlite", db_path=":memory:").is_ephemeral is True
