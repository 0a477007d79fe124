"""Configuration management for dualtrack."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging_utils import LogProfile, configure_logging

DEFAULT_COMMAND_TIMEOUT_SECONDS = 30.0


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="DUALTRACK_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Grounded reasoning model
    model: Optional[str] = Field(None, description="Model identifier, e.g. 'openai:gpt-4o-mini'")
    api_key: Optional[str] = Field(None, description="API key for the LLM provider")
    api_base: Optional[str] = Field(None, description="Optional API base URL")
    max_tokens: int = Field(default=2048, description="Maximum tokens for grounded responses")

    # Command execution
    command_timeout_seconds: float = Field(
        default=DEFAULT_COMMAND_TIMEOUT_SECONDS,
        gt=0,
        description="Hard timeout while waiting for a command exit event",
    )
    allowed_commands: list[str] = Field(
        default_factory=lambda: ["npm", "ls", "node"],
        description="Executables the local runtime is allowed to spawn",
    )
    workspace_path: Optional[Path] = Field(None, description="Workspace directory path")

    # Diagnostics
    event_history_limit: Optional[int] = Field(None, ge=1, description="Cap on the event channel history")
    trace_limit: int = Field(default=500, ge=1, description="Trace recorder ring buffer size")
    trace_file: Optional[Path] = Field(None, description="Append trace entries to this JSON lines file")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")

    def resolve_workspace(self) -> Path:
        """Return the configured workspace, defaulting to the current directory."""
        return (self.workspace_path or Path.cwd()).resolve()


def get_settings(workspace_path: Optional[Path] = None, *, log_profile: LogProfile = "default") -> Settings:
    """Get application settings.

    Args:
        workspace_path: Optional workspace path override
        log_profile: Logging profile to configure

    Returns:
        Settings instance
    """
    settings = Settings() if workspace_path is None else Settings(workspace_path=workspace_path)

    configure_logging(profile=log_profile, level=settings.log_level)

    return settings
