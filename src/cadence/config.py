"""Centralized configuration management using Pydantic Settings.

All environment variables understood by the scheduler are declared here,
grouped by concern and loaded with an env prefix per section.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchedulerConfig(BaseSettings):
    """Execution loop configuration."""

    tick_interval: float = Field(
        default=0.2,
        ge=0.01,
        le=60.0,
        description="Seconds between two ticks of the execution loop"
    )
    timezone: str | None = Field(
        default=None,
        description="IANA zone applied to new jobs (None = local time)"
    )
    release_lock_during_run: bool = Field(
        default=False,
        description="Invoke job callables outside the registry lock"
    )
    start_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Seconds start() waits for the first tick (None = forever)"
    )

    model_config = SettingsConfigDict(env_prefix="SCHEDULER_")

    @field_validator("timezone", mode="before")
    @classmethod
    def empty_timezone_is_local(cls, v):
        """Treat an empty string as 'use local time'."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class LoggingConfig(BaseSettings):
    """Logging configuration with structured logging support."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Application log level"
    )

    # Structured Logging
    json_logs: bool = Field(
        default=False,
        description="Enable JSON formatted logs (recommended for production)"
    )

    log_file: str | None = Field(
        default=None,
        description="Path to log file (None = stderr)"
    )

    # Log Rotation
    log_rotation_size: int = Field(
        default=10 * 1024 * 1024,  # 10MB
        ge=1024 * 1024,  # Min 1MB
        description="Log file size before rotation (bytes)"
    )
    log_rotation_count: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Number of rotated log files to keep"
    )

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    """Main settings combining all configuration sections."""

    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Runtime environment"
    )

    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def validate_settings(self) -> list[str]:
        """Validate settings and return list of warnings/info messages."""
        messages = []

        if self.environment == "production":
            if not self.logging.json_logs:
                messages.append("INFO: JSON logs recommended for production")

            if self.scheduler.start_timeout is None:
                messages.append("WARNING: start() may block forever without SCHEDULER_START_TIMEOUT")

        if self.scheduler.release_lock_during_run:
            messages.append("WARNING: job callables run outside the registry lock")

        messages.append(f"INFO: Tick interval: {self.scheduler.tick_interval}s")
        messages.append(f"INFO: Timezone: {self.scheduler.timezone or 'local'}")

        return messages


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Reload settings from environment (useful for testing)."""
    global _settings
    _settings = Settings()
    return _settings
