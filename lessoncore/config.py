"""
Application configuration using pydantic-settings.
Loads from environment variables with .env file support.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./lessoncore.db"

    # Application
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR
    slow_request_ms: float = 1000.0

    # API Settings
    api_v1_prefix: str = "/api/v1"
    project_name: str = "Lesson Scoring & Checkpoint Engine"
    version: str = "1.0.0"

    # Checkpoint scheduler
    checkpoint_base_probability: float = 0.12
    checkpoint_struggle_boost: float = 0.15
    checkpoint_struggle_failure_rate: float = 0.4  # strictly above this fraction
    checkpoint_history_window: int = 5  # most recent lesson attempts considered
    checkpoint_cooldown_penalty: float = 0.08
    checkpoint_cooldown_hours: float = 2.0

    # Checkpoint instances
    checkpoint_question_count: int = 4
    checkpoint_time_buffer_seconds: int = 30

    # Mastery
    mastery_pass_threshold: float = 98.0


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
