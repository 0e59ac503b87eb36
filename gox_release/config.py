"""Configuration settings for gox_release.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the GOX_RELEASE_ prefix.
    CLI flags can override these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="GOX_RELEASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Tools
    cross_compiler: str = Field(
        default="gox",
        min_length=1,
        description="Cross-compiler executable",
    )
    archiver: str = Field(
        default="zip",
        min_length=1,
        description="Archiver executable",
    )

    # Paths
    output_dir: str = Field(
        default="pkg",
        min_length=1,
        description="Directory compiled binaries are written to",
    )
    package_name: str | None = Field(
        default=None,
        description="Package name override (read from package.json if not set)",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # Execution
    process_timeout: int | None = Field(
        default=None,
        ge=1,
        description="Timeout per external process in seconds (no limit if not set)",
    )
    max_parallel_archives: int = Field(
        default=1,
        ge=1,
        le=16,
        description="Maximum concurrent archive invocations",
    )


def get_settings() -> Settings:
    """Get the application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = ["Settings", "get_settings", "print_settings_json"]
