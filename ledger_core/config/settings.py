"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from urllib.parse import unquote, urlparse

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Redis (for Dramatiq and the accrual lock)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0

    # Application
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str = "logs/ledger.log"

    # Notifications (delivered by the worker, never inside a commit)
    notification_webhook_url: str | None = None
    notification_timeout_seconds: float = Field(
        default=10.0, gt=0, description="HTTP timeout for notification delivery"
    )
    admin_email: str | None = None
    client_url: str = "http://localhost:3000"

    # Accrual
    accrual_lock_timeout_seconds: int = Field(
        default=600, ge=1, description="Redis lock TTL for one accrual pass"
    )
    emergency_stop_accrual: bool = Field(
        default=False,
        description="Emergency stop for all yield accrual passes"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith((
            'postgresql://',
            'postgresql+asyncpg://',
            'sqlite+aiosqlite://',
        )):
            raise ValueError(
                'DATABASE_URL must start with postgresql+asyncpg:// '
                '(or sqlite+aiosqlite:// for local runs)'
            )
        return v

    @field_validator('admin_email')
    @classmethod
    def validate_admin_email(cls, v: str | None) -> str | None:
        """Normalize admin email; empty string disables it."""
        if v is None:
            return None
        v = v.strip()
        return v.lower() or None

    @model_validator(mode='after')
    def validate_production(self) -> 'Settings':
        """Validate production-specific requirements."""
        if self.environment != 'production':
            return self

        if self.debug:
            raise ValueError(
                'DEBUG must be False in production environment. '
                'Set DEBUG=false in your .env file.'
            )

        if self.database_url.startswith('sqlite'):
            raise ValueError(
                'SQLite is not supported in production. '
                'Use a postgresql+asyncpg:// DATABASE_URL.'
            )

        parsed = urlparse(self.database_url)
        if parsed.password:
            password = unquote(parsed.password).lower()
            username = unquote(parsed.username or '').lower()
            if password in ('password', 'changeme', 'admin', 'root'):
                logger.warning(
                    f'DATABASE_URL uses insecure password "{password}". '
                    'Please change it in .env file for production security.'
                )
            elif username and password == username:
                logger.warning(
                    'DATABASE_URL password is the same as username. '
                    'Please change it in .env file for production security.'
                )

        if not self.notification_webhook_url:
            logger.warning(
                'NOTIFICATION_WEBHOOK_URL is not set: '
                'notifications will only be logged.'
            )

        return self

    @property
    def is_sqlite(self) -> bool:
        """True when running against a local SQLite database."""
        return self.database_url.startswith('sqlite')


# Global settings instance
settings = Settings()
