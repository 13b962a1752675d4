# ==============================================================================
# Application Configuration
# ==============================================================================
"""
Configuration management using pydantic-settings.

All configuration is loaded from environment variables, with support for
.env files via python-dotenv.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file before any settings are instantiated
load_dotenv()


class StorageSettings(BaseSettings):
    """Backing store selection."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    backend: Literal["sqlite", "postgres"] = Field(
        default="sqlite",
        description="Storage backend (sqlite for local development, postgres for production)",
    )


class SqliteSettings(BaseSettings):
    """Embedded SQLite store settings."""

    model_config = SettingsConfigDict(env_prefix="SQLITE_")

    path: Path = Field(default=Path("analytics.db"), description="SQLite database file")
    timeout_seconds: float = Field(default=10.0, description="Lock wait timeout")


class PostgresSettings(BaseSettings):
    """Hosted PostgreSQL connection settings."""

    model_config = SettingsConfigDict(env_prefix="PG_")

    host: str = Field(default="localhost", description="PostgreSQL host")
    port: int = Field(default=5432, description="PostgreSQL port")
    user: str = Field(default="postgres", description="PostgreSQL username")
    password: str = Field(default="", description="PostgreSQL password")
    database: str = Field(default="postgres", description="Database name")
    schema_name: str = Field(default="analytics", description="Schema name")
    sslmode: str = Field(default="require", description="SSL mode")

    @property
    def connection_string(self) -> str:
        """Build PostgreSQL connection string."""
        return (
            f"postgresql://{self.user}:{self.password}@"
            f"{self.host}:{self.port}/{self.database}?sslmode={self.sslmode}"
        )


class ServerSettings(BaseSettings):
    """HTTP API settings."""

    model_config = SettingsConfigDict(env_prefix="SERVER_")

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=3001, description="Listen port")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"], description="Allowed CORS origins"
    )


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    # Nested settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    sqlite: SqliteSettings = Field(default_factory=SqliteSettings)
    postgres: PostgresSettings = Field(default_factory=PostgresSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)

    # General settings
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    def describe_storage(self) -> str:
        """Human-readable description of the active backend."""
        if self.storage.backend == "postgres":
            return f"PostgreSQL ({self.postgres.host}/{self.postgres.database})"
        return f"SQLite ({self.sqlite.path})"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once and cached for subsequent calls.
    """
    return Settings()
