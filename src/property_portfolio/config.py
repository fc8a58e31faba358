"""Centralized configuration management using pydantic-settings.

Configuration is loaded from environment variables with sensible defaults.
All settings can be overridden via environment variables or a .env file.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SECRET_KEY = "dev-secret-key-change-in-production"


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Override via environment variables (prefixed with PP_) or .env file.

    Examples:
        PP_SQLITE_PATH=/var/lib/portfolio/portfolio.db
        PP_LOG_LEVEL=DEBUG
        PP_ENVIRONMENT=production
    """

    model_config = SettingsConfigDict(
        env_prefix="PP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Property Portfolio"
    app_version: str = "0.1.0"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = Field(
        default=False, validate_default=True, description="Enable debug mode"
    )

    # Database
    sqlite_path: Path = Field(
        default=Path("property_portfolio.db"),
        description="SQLite database file path",
    )
    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy URL used by Alembic. Defaults to sqlite_path.",
    )

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_format: Literal["json", "console"] = Field(
        default=None,
        validate_default=True,
        description="Log output format: 'json' for production, 'console' for development",
    )
    log_file: Path | None = Field(default=None, description="Optional log file path")

    # API Server
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    api_reload: bool = Field(
        default=False, description="Enable auto-reload (development only)"
    )

    # Security
    secret_key: str = Field(
        default=DEFAULT_SECRET_KEY,
        description="Key used to hash session tokens. MUST be changed in production.",
    )
    session_cookie_name: str = "session"
    session_ttl_hours: int = Field(default=24, ge=1)
    invitation_ttl_days: int = Field(default=7, ge=1)
    password_hash_iterations: int = Field(default=600_000, ge=1_000)

    @field_validator("secret_key", mode="after")
    @classmethod
    def validate_secret_key_in_production(cls, v: str, info) -> str:
        """Refuse the development secret key outside development and testing."""
        environment = info.data.get("environment")
        if v == DEFAULT_SECRET_KEY and environment in (
            Environment.PRODUCTION,
            Environment.STAGING,
        ):
            raise ValueError(
                f"Default secret key cannot be used in {environment.value}. "
                "Set PP_SECRET_KEY to a secure random value."
            )
        return v

    @field_validator("debug", mode="before")
    @classmethod
    def set_debug_from_environment(cls, v: bool, info) -> bool:
        """Auto-enable debug in development environment."""
        if info.data.get("environment") == Environment.DEVELOPMENT:
            return True
        return v

    @field_validator("log_format", mode="before")
    @classmethod
    def set_log_format_from_environment(cls, v: str | None, info) -> str:
        """Default to JSON logging in production."""
        if v is None:
            if info.data.get("environment") == Environment.PRODUCTION:
                return "json"
        return v or "console"

    @property
    def effective_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.sqlite_path}"

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_testing(self) -> bool:
        return self.environment == Environment.TESTING


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
