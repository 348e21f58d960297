"""Application settings via pydantic-settings. Loads from environment and .env file."""

from __future__ import annotations

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Tournify application configuration.

    All values can be overridden via environment variables or .env file.
    """

    # Database
    database_url: str = "sqlite+aiosqlite:///tournify.db"

    # Environment
    tournify_env: str = "development"

    # Live updates
    tournify_sse_max_connections: int = 100

    # Logging
    tournify_log_level: str = "INFO"

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    @model_validator(mode="after")
    def _reject_memory_db_in_production(self) -> Settings:
        """An in-memory database loses every calendar on restart; refuse it in production."""
        if self.tournify_env == "production" and ":memory:" in self.database_url:
            msg = "DATABASE_URL must point to a persistent database in production."
            raise ValueError(msg)
        return self

    @property
    def is_production(self) -> bool:
        return self.tournify_env == "production"
