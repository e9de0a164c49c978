# app/core/config.py
from functools import lru_cache

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Global application configuration.

    Values are loaded from environment variables (or a local `.env` file)
    at runtime.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    APP_NAME: str = "SiteLog"
    APP_ENV: str = Field("local", description="Environment name: local/dev/stage/prod")

    LOG_LEVEL: str = Field("INFO", description="Root log level.")
    LOG_FORMAT: str = Field(
        "text",
        description="Log output format: 'text' for humans, 'json' for aggregators.",
    )

    DB_URL: str = Field(
        "sqlite+aiosqlite:///./sitelog.db",
        description="SQLAlchemy-compatible async database URL",
    )

    # --- Attachments ---
    UPLOAD_DIR: str = Field(
        "./uploads",
        description="Root directory under which photo/document uploads are stored.",
    )
    PHOTO_MAX_BYTES: int = Field(
        default=5 * 1024 * 1024,
        description="Maximum accepted size of a single photo upload.",
    )
    DOCUMENT_MAX_BYTES: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum accepted size of a single document upload.",
    )

    # --- Notifications ---
    NOTIFICATION_WEBHOOK_URL: AnyHttpUrl | None = Field(
        default=None,
        description=(
            "Optional endpoint that receives every lifecycle notification as JSON, "
            "in addition to the in-app notification record."
        ),
    )
    NOTIFICATION_TIMEOUT_SECONDS: float = Field(
        default=5.0,
        description="Timeout for a single webhook delivery attempt.",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Cached accessor for application settings.

    Using LRU cache ensures settings are read and validated only once,
    while still being easily importable across the app.
    """
    return Settings()
