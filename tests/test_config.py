"""Tests for application configuration."""

import pytest

from tournify.config import Settings


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings(database_url="sqlite+aiosqlite:///:memory:")
        assert settings.tournify_env == "development"
        assert settings.tournify_log_level == "INFO"
        assert not settings.is_production

    def test_production_rejects_memory_db(self) -> None:
        """In production, an in-memory database would lose every calendar."""
        with pytest.raises(ValueError, match="persistent database"):
            Settings(tournify_env="production", database_url="sqlite+aiosqlite:///:memory:")

    def test_production_with_file_db(self) -> None:
        settings = Settings(
            tournify_env="production",
            database_url="sqlite+aiosqlite:///tournify.db",
        )
        assert settings.is_production

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOURNIFY_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("TOURNIFY_SSE_MAX_CONNECTIONS", "5")
        settings = Settings(database_url="sqlite+aiosqlite:///:memory:")
        assert settings.tournify_log_level == "DEBUG"
        assert settings.tournify_sse_max_connections == 5
