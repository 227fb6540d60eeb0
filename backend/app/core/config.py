"""
AfriVerse Editorial Desk - Configuration Module
===============================================
All configuration is loaded from environment variables.
Secrets never have usable defaults outside development.
"""

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env."""

    # App
    app_name: str = "AfriVerse Editorial Desk"
    app_env: str = "development"
    app_debug: bool = True
    app_secret_key: str = Field(..., min_length=32)
    app_port: int = 8000

    @property
    def secret_key(self) -> str:
        return self.app_secret_key

    @property
    def is_development(self) -> bool:
        return self.app_env.lower() == "development"

    # Database
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "afriverse_db"
    postgres_user: str = "afriverse"
    postgres_password: str = Field(..., min_length=8)
    database_pool_size: int = 10
    database_max_overflow: int = 10

    @property
    def database_url(self) -> str:
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def database_url_sync(self) -> str:
        return (
            f"postgresql+psycopg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Redis (Celery broker/result backend)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str = ""
    redis_queue_db: int = 1

    @property
    def redis_queue_url(self) -> str:
        auth = f":{self.redis_password}@" if self.redis_password else ""
        return f"redis://{auth}{self.redis_host}:{self.redis_port}/{self.redis_queue_db}"

    # Email (SendGrid)
    sendgrid_api_key: str = ""
    sendgrid_api_url: str = "https://api.sendgrid.com/v3/mail/send"
    sendgrid_from_email: str = "tips@afriverse.africa"
    sendgrid_from_name: str = "AfriVerse"
    email_timeout_seconds: float = 10.0
    public_site_url: str = "http://localhost:3000"

    # Editorial workflow
    workflow_min_title_chars: int = 10
    workflow_min_words: int = 300
    workflow_max_editors_notified: int = 5

    # Scheduled publisher
    cron_secret: str = ""
    scheduled_publish_enabled: bool = False
    scheduled_publish_interval_minutes: int = 5
    scheduled_publish_batch_limit: int = 100
    scheduled_publish_query_timeout_seconds: float = 10.0

    # Notification dispatch
    queue_enabled: bool = True
    notification_queue_name: str = "notifications"
    notification_dispatch_enabled: bool = True
    notification_dispatch_interval_seconds: int = 120
    notification_max_attempts: int = 5
    notification_dispatch_batch_limit: int = 50

    # CORS
    cors_origins: str = "http://localhost:3000,http://localhost:8000"

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        env_prefix = "AFRIVERSE_"


def _load_dotenv_pairs(dotenv_path: str = ".env") -> dict[str, str]:
    path = Path(dotenv_path)
    if not path.exists():
        return {}

    values: dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            values[key] = value
    return values


def _bootstrap_prefixed_env() -> None:
    """Populate AFRIVERSE_ vars from un-prefixed keys (CRON_SECRET, SENDGRID_API_KEY, ...)."""
    legacy_pairs = _load_dotenv_pairs(".env")
    prefix = "AFRIVERSE_"

    for field_name in Settings.model_fields.keys():
        legacy_key = field_name.upper()
        prefixed_key = f"{prefix}{legacy_key}"

        if os.getenv(prefixed_key):
            continue

        legacy_value = os.getenv(legacy_key)
        if legacy_value is not None:
            os.environ[prefixed_key] = legacy_value
            continue

        if legacy_key in legacy_pairs:
            os.environ[prefixed_key] = legacy_pairs[legacy_key]


_bootstrap_prefixed_env()


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
