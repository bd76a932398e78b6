"""Application configuration using Pydantic Settings.

Reads configuration from environment variables with sensible defaults.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Application
    # =========================================================================
    environment: Literal["prod", "staging", "dev"] = Field(
        default="dev",
        description="Environment name",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode (echoes SQL)",
    )

    # =========================================================================
    # Storage
    # =========================================================================
    data_dir: str = Field(
        default="./data",
        description="Directory holding the preferences file and the catalog database",
    )
    preferences_file: str = Field(
        default="settings.preferences.json",
        description="Preferences file name inside data_dir",
    )
    database_file: str = Field(
        default="app_database.db",
        description="SQLite catalog database file name inside data_dir",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def preferences_path(self) -> Path:
        """Full path of the preferences file."""
        return Path(self.data_dir) / self.preferences_file

    @computed_field  # type: ignore[prop-decorator]
    @property
    def database_url(self) -> str:
        """Async SQLAlchemy URL for the catalog database."""
        return f"sqlite+aiosqlite:///{Path(self.data_dir) / self.database_file}"

    # =========================================================================
    # Catalog seeding
    # =========================================================================
    seed_on_startup: bool = Field(
        default=True,
        description="Insert the seed palette when the catalog is empty",
    )
    seed_palette_path: str | None = Field(
        default=None,
        description="YAML palette file (falls back to config/palette.yaml, then built-ins)",
    )

    # =========================================================================
    # Logging
    # =========================================================================
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    log_json: bool = Field(
        default=True,
        description="Output logs as JSON outside of dev",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Singleton instance for convenience
settings = get_settings()
