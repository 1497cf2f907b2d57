"""Application configuration via environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "Shift Checklist"
    debug: bool = False
    log_file: str = ""  # Empty logs to stderr

    # Server
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all

    # Database
    database_url: str = "sqlite:///./shift_checklist.db"

    # Identity: header set by the upstream identity provider / auth proxy
    identity_header: str = "X-Identity-Id"

    # Business day
    default_timezone: str = "America/Toronto"
    business_day_cutoff_hour: int = Field(default=5, ge=0, le=23)
    retention_days: int = Field(default=400, ge=1)

    # Auto-lock job
    auto_lock_enabled: bool = True
    auto_lock_interval_minutes: int = 5


settings = Settings()
