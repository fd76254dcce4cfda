"""Configuration settings for resforge.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TOOLCHAIN = "ink"
DEFAULT_AGGREGATE_TARGET = "all"


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the RESFORGE_ prefix.
    CLI flags can override these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="RESFORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Build
    build_root: Path = Field(
        default_factory=Path.cwd,
        description="Directory that relative target paths resolve against",
    )
    targets_file: Path | None = Field(
        default=None,
        description="YAML/JSON target declaration (uses built-in targets if not set)",
    )
    toolchain: str = Field(
        default=DEFAULT_TOOLCHAIN,
        min_length=1,
        description="Contract toolchain name used in manifest artifact paths",
    )
    build_timeout: int | None = Field(
        default=None,
        ge=1,
        description="Timeout in seconds for a single recipe (no timeout if not set)",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # Release
    dist_dir: Path = Field(
        default=Path("dist"),
        description="Directory holding downloaded upstream artifact bundles",
    )
    contracts_dir: Path = Field(
        default=Path("e2e") / "res",
        description="Directory holding repository-resident contract artifacts",
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        description="Base URL of the release host API",
    )
    github_repository: str | None = Field(
        default=None,
        description="Repository to publish releases to (owner/name)",
    )
    github_token: SecretStr | None = Field(
        default=None,
        description="Token used to publish and prune releases",
    )
    release_tag_prefix: str = Field(
        default="nightly",
        min_length=1,
        description="Tag prefix of dated releases, also the prune match pattern",
    )
    release_keep_latest: int = Field(
        default=30,
        ge=1,
        description="Number of most recent matching releases kept when pruning",
    )
    http_timeout: int = Field(
        default=300,
        ge=1,
        description="Timeout in seconds for release host requests",
    )


def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Secrets are masked by pydantic's SecretStr serialization.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = [
    "DEFAULT_AGGREGATE_TARGET",
    "DEFAULT_TOOLCHAIN",
    "Settings",
    "get_settings",
    "print_settings_json",
]
