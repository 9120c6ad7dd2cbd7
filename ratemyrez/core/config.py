"""Application configuration settings."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_default_database_url() -> str:
    """Get the default database URL, using Fly Volume path if available."""
    if os.path.isdir("/data"):
        return "sqlite:////data/ratemyrez.db"
    return "sqlite:///./ratemyrez.db"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )

    PROJECT_NAME: str = "Rate My Rez"
    VERSION: str = "0.1.0"
    DEBUG: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # Database - defaults to Fly Volume path if /data exists
    DATABASE_URL: str = _get_default_database_url()

    # Namespace key every stored record is scoped under
    APP_ID: str = "rate-my-rez-default"

    # Session cookies and accounts
    SECRET_KEY: str = "your-secret-key-change-this-in-production"
    ALLOWED_EMAIL_DOMAIN: str = "@uwaterloo.ca"
    PASSWORD_MIN_LENGTH: int = 6
    RESET_TOKEN_TTL_MINUTES: int = 60

    # Outgoing mail
    RESEND_API_KEY: str = ""
    MAIL_FROM: str = "Rate My Rez <noreply@ratemyrez.ca>"
    APP_URL: str = "http://localhost:8000"

    # Feed and uploads
    HOME_FEED_LIMIT: int = 20
    IMAGE_MAX_WIDTH: int = 800
    IMAGE_JPEG_QUALITY: int = 70


settings = Settings()
