"""
Configuration and settings for the portfolio API.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")
    cors_origins: list[str] = Field(default_factory=list)

    # Database (Postgres expected; any SQLAlchemy URL works)
    database_url: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Sessions and login throttling live in Redis when configured
    redis_url: Optional[str] = Field(default=None)
    redis_key_prefix: str = Field(default="portfolio")

    # Admin session gate
    session_cookie_name: str = Field(default="portfolio_session")
    session_ttl_seconds: int = Field(default=24 * 60 * 60)
    session_cookie_secure: bool = Field(default=False)
    admin_username: str = Field(default="admin")
    admin_password: str = Field(default="password123")
    login_max_attempts: int = Field(default=5)
    login_window_seconds: int = Field(default=15 * 60)

    # Public testimonial submissions
    testimonial_max_submissions: int = Field(default=3)
    testimonial_window_seconds: int = Field(default=60 * 60)

    # Social media notifier
    site_url: str = Field(default="http://localhost:5001/blog/")
    social_post_format: str = Field(default="{title}\n\n{excerpt}\n\nRead more: {url}")
    social_include_tags: bool = Field(default=True)
    twitter_enabled: bool = Field(default=False)
    twitter_access_token: Optional[str] = Field(default=None)
    bluesky_enabled: bool = Field(default=False)
    bluesky_identifier: Optional[str] = Field(default=None)
    bluesky_password: Optional[str] = Field(default=None)
    bluesky_service_url: str = Field(default="https://bsky.social")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
