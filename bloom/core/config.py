"""
Configuration management using Pydantic Settings
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# config.py is at: bloom/core/config.py -> project root is two levels up
_current_file = Path(__file__).resolve()
PROJECT_ROOT = _current_file.parent.parent.parent
ENV_FILE = PROJECT_ROOT / ".env"
if ENV_FILE.exists():
    load_dotenv(ENV_FILE, override=False)


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "BloomAfter40"
    app_env: str = Field(default="development", description="Application environment")
    log_level: str = Field(default="INFO", description="Logging level")
    secret_key: str = Field(default="change-me", description="Secret key for signing")
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API port")
    allowed_origins: str = Field(
        default="http://localhost:5173",
        description="Allowed CORS origins (comma-separated)"
    )

    # Logging
    log_sqlalchemy: bool = Field(default=False, description="Enable SQLAlchemy query logging")
    log_uvicorn_access: bool = Field(default=False, description="Enable Uvicorn access logging")
    log_module_levels: Optional[str] = Field(
        default=None,
        description='Module-specific log levels (JSON string, e.g., {"bloom.services": "DEBUG"})'
    )
    log_format: str = Field(
        default="json",
        description="Log format: 'json' for structured logging, 'text' for plain text"
    )
    log_file_enabled: bool = Field(default=False, description="Enable file logging")
    log_file_path: str = Field(default="logs/bloom.log", description="Path to log file (relative to project root)")
    log_file_retention: int = Field(default=30, ge=1, description="Number of days to keep log files")
    log_sensitive_data: bool = Field(
        default=False,
        description="Enable logging of sensitive data (passwords, tokens) - NOT RECOMMENDED"
    )

    # Database
    database_url_override: Optional[str] = Field(
        default=None,
        alias="DATABASE_URL",
        description="Full SQLAlchemy URL; takes precedence over POSTGRES_* parts"
    )
    postgres_host: str = Field(default="localhost", description="PostgreSQL host")
    postgres_db: str = Field(default="bloom", description="PostgreSQL database name")
    postgres_user: str = Field(default="bloom", description="PostgreSQL user")
    postgres_password: str = Field(default="bloom", description="PostgreSQL password")
    postgres_port: int = Field(default=5432, ge=1, le=65535, description="PostgreSQL port")
    database_pool_size: int = Field(default=10, ge=1, description="Database pool size")
    database_max_overflow: int = Field(default=10, ge=0, description="Database max overflow")

    # Auth
    session_duration_hours: int = Field(default=24 * 7, ge=1, description="Session lifetime in hours")

    # Coaching
    coaching_loading_delay_ms: int = Field(
        default=300,
        ge=0,
        description="Loading state shown before an exercise becomes ready"
    )

    # Email
    sendgrid_api_key: Optional[str] = Field(default=None, description="SendGrid API key")
    sendgrid_api_url: str = Field(default="https://api.sendgrid.com/v3/mail/send")
    email_from_address: str = Field(default="coaching@thrivemidlife.com", description="Nurture sender")
    http_timeout_seconds: float = Field(default=10.0, gt=0, description="Timeout for outbound HTTP calls")

    # Payments
    stripe_secret_key: Optional[str] = Field(default=None, description="Stripe secret key")
    stripe_api_base: str = Field(default="https://api.stripe.com/v1")
    coaching_currency: str = Field(default="usd")

    # Nurture dispatcher
    enable_nurture_dispatcher: bool = Field(default=True, description="Run the nurture dispatcher loop")
    nurture_poll_interval_seconds: int = Field(default=60, ge=1, description="Dispatcher poll interval")
    nurture_dispatch_batch_size: int = Field(default=50, ge=1, description="Max emails sent per tick")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept lowercase level names"""
        return v.upper() if isinstance(v, str) else v

    @property
    def database_url(self) -> str:
        """Construct database URL"""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
