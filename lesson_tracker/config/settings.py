"""Tracker settings using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Tracker settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="lesson-tracker", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Literal["development", "staging", "production", "testing"] = Field(
        default="development", description="Environment name"
    )

    # Remote API
    api_base_url: str = Field(
        default="http://localhost:52563/api",
        description="Learning platform REST API base URL",
    )
    api_request_timeout: float = Field(
        default=30.0, description="Request timeout (seconds)"
    )

    # Playback tracking
    sample_interval: float = Field(
        default=0.5, gt=0, description="Player sampling cadence (seconds)"
    )
    progress_save_interval: float = Field(
        default=10.0, gt=0, description="Periodic progress save while playing (seconds)"
    )
    controls_hide_delay: float = Field(
        default=3.0, ge=0, description="Auto-hide delay for player controls (seconds)"
    )
    resume_seek_delay: float = Field(
        default=0.5,
        ge=0,
        description="Delay before the resume seek, lets autoplay settle (seconds)",
    )
    auto_advance_delay: float = Field(
        default=2.0, ge=0, description="Delay before advancing to the next lesson"
    )
    completion_threshold: float = Field(
        default=0.9, gt=0, le=1, description="Watched fraction that completes a lesson"
    )
    save_min_delta_seconds: int = Field(
        default=5, ge=0, description="Debounce for non-forced saves (seconds)"
    )
    seek_step_seconds: float = Field(
        default=10.0, gt=0, description="Step for seek forward/backward (seconds)"
    )
    default_video_url: str = Field(
        default="https://d3dcmqyicbxyjj.cloudfront.net/raw/sample-20s.mp4",
        description="Fallback video when a lesson has no usable source",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log format"
    )
    log_include_caller_info: bool = Field(
        default=False, description="Include caller info"
    )
    log_file_enabled: bool = Field(
        default=False, description="Write JSON log files in addition to the console"
    )
    log_dir: str = Field(default="logs", description="Directory for log files")
    log_file_max_bytes: int = Field(
        default=10 * 1024 * 1024, description="Max size per log file (10MB default)"
    )
    log_file_backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
