"""Configuration settings for xbot-sync."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from xbot_sync.schemas.xcode_api import BotConfigTemplate


class ConfigError(Exception):
    """Raised when configuration or the bot template cannot be loaded."""

    pass


class SyncConfig(BaseModel):
    """Configuration for reconciliation runs.

    Controls the per-operation bounded wait and the interval used
    when running in watch mode.
    """

    operation_timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        le=600.0,
        description="Bounded wait applied to every collaborator call",
    )
    interval_seconds: int = Field(
        default=60,
        ge=1,
        description="Seconds between runs in watch mode",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging behavior.

    Controls file logging, rotation, and output format.
    """

    log_file: str | None = Field(
        default=None,
        description="Optional path for file logging (enables rotation)",
    )
    rotation: str = Field(
        default="10 MB",
        description="When to rotate log file (e.g., '10 MB', '1 day')",
    )
    retention: str = Field(
        default="7 days",
        description="How long to keep rotated logs",
    )
    serialize: bool = Field(
        default=False,
        description="If True, output JSON format to file",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # --------------------------------------------------------------------------
    # GitHub
    # --------------------------------------------------------------------------
    github_token: str = Field(
        default="",
        description="GitHub personal access token",
    )
    github_repo: str = Field(
        default="",
        description="Repository whose pull requests drive the bots (owner/repo)",
    )
    github_status_context: str = Field(
        default="xbot-sync",
        description="Context name used for posted commit statuses",
    )

    # --------------------------------------------------------------------------
    # Xcode Server
    # --------------------------------------------------------------------------
    xcode_server_url: str = Field(
        default="https://localhost:20343/api",
        description="Base URL of the Xcode Server API",
    )
    xcode_server_user: str = Field(
        default="",
        description="Xcode Server user for HTTP basic auth",
    )
    xcode_server_password: str = Field(
        default="",
        description="Xcode Server password for HTTP basic auth",
    )
    xcode_server_verify_tls: bool = Field(
        default=False,
        description="Verify the server certificate (Xcode Server ships self-signed)",
    )

    # --------------------------------------------------------------------------
    # Bot template
    # --------------------------------------------------------------------------
    bot_template_file: str = Field(
        default="bot_template.json",
        description="JSON file with the shared bot configuration",
    )

    # --------------------------------------------------------------------------
    # Application
    # --------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # --------------------------------------------------------------------------
    # Sync Configuration
    # --------------------------------------------------------------------------
    sync: SyncConfig = Field(
        default_factory=SyncConfig,
        description="Reconciliation run configuration",
    )

    # --------------------------------------------------------------------------
    # Logging Configuration
    # --------------------------------------------------------------------------
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration (file output, rotation)",
    )


def load_bot_template(path: str | Path) -> BotConfigTemplate:
    """Load the shared bot configuration template from a JSON file.

    Args:
        path: Path to the template file

    Returns:
        Validated BotConfigTemplate

    Raises:
        ConfigError: If the file is missing or does not validate
    """
    template_path = Path(path)
    try:
        raw = template_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read bot template {template_path}: {e}") from e

    try:
        return BotConfigTemplate.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid bot template {template_path}: {e}") from e


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
