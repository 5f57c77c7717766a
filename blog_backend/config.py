"""
Configuration and settings for the blog backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_JWT_SECRET = "CHANGE_ME_IN_PRODUCTION"


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")

    # Database (Postgres expected; unset means in-memory)
    database_url: Optional[str] = Field(default=None)
    use_in_memory_backends: bool = Field(default=False)

    # Session tokens
    jwt_secret: str = Field(default=DEFAULT_JWT_SECRET)
    jwt_algorithm: str = Field(default="HS256")
    # None issues tokens without an expiry claim.
    token_expire_minutes: Optional[int] = Field(default=None, ge=1)
    password_hash_rounds: int = Field(default=10, ge=4, le=31)

    # Cookies / browser access
    environment: str = Field(default="development")
    cookie_domain: Optional[str] = Field(default=None)
    cors_origins: list[str] = Field(default=["http://localhost:3000"])

    # Cover uploads
    upload_dir: str = Field(default="uploads")
    uploads_url_path: str = Field(default="/uploads")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000)
    log_level: str = Field(default="INFO")

    @property
    def secure_cookies(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
