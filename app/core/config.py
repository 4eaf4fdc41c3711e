"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "veteran_jobs"

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 30  # 30 days

    # Password reset
    reset_token_expire_minutes: int = 10
    frontend_url: str = "http://localhost:5173"

    # Outgoing email (password reset)
    smtp_host: str = ""
    smtp_port: int = 2525
    smtp_user: str = ""
    smtp_password: str = ""
    from_name: str = "Boots2Suits"
    from_email: str = "noreply@boots2suits.com"

    # HTTP
    cors_origins: List[str] = ["*"]
    max_upload_size_mb: int = 5
    rate_limit_enabled: bool = True
    auth_rate_limit: str = "20/minute"
    upload_rate_limit: str = "10/minute"

    # App
    log_level: str = "INFO"
    debug: bool = False

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
