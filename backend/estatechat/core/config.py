"""
Application configuration using Pydantic Settings.

Every value can be overridden from the environment or a local .env file.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "production"] = "local"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Encryption
    # ===========================================
    # Hex-encoded 256-bit key (64 hex chars). Used verbatim when well-formed.
    CHAT_ENCRYPTION_KEY: str = ""

    # Fallback secret hashed into the key when CHAT_ENCRYPTION_KEY is unset.
    APP_SECRET: str = ""

    # ===========================================
    # Session cookie
    # ===========================================
    CHAT_SESSION_COOKIE: str = "chat_session_id"
    CHAT_SESSION_COOKIE_SECURE: bool = False
    CHAT_SESSION_MAX_AGE_SECONDS: int = 60 * 60 * 24 * 30

    # ===========================================
    # Thread store
    # ===========================================
    # Storage backend: only "memory" ships; data lives for the process lifetime.
    STORAGE_BACKEND: Literal["memory"] = "memory"
    CHAT_MAX_THREADS: int = 50

    # Reset activeThreadId to null on save when it names no retained thread.
    CHAT_ENFORCE_ACTIVE_THREAD: bool = False

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == "production"

    @property
    def is_local(self) -> bool:
        """Check if running in local environment."""
        return self.ENVIRONMENT == "local"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
