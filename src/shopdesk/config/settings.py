"""Application settings and configuration."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SHOPDESK_",
        extra="ignore",
    )

    app_name: str = "ShopDesk"
    app_version: str = "0.1.0"

    # Backing store for the remote data service
    database_url: str = "sqlite:///shopdesk.db"

    log_level: str = "INFO"
    local_timezone: str = "America/Sao_Paulo"

    # Cache behavior
    cache_ttl_seconds: float = 300  # products, sales, sessions
    static_cache_ttl_seconds: float = 1800  # permission profiles, parameter tables
    cache_channel_name: str = "app_cache_sync"

    # Remote call resilience
    retry_attempts: int = 3
    retry_delay_seconds: float = 1.0
    remote_timeout_seconds: float = 15.0

    # Waiting for the backend to provision a profile after sign-up
    provisioning_poll_interval_seconds: float = 0.5
    provisioning_max_attempts: int = 10

    background_workers: int = 2

    # Outbound notifications (disabled when unset)
    telegram_bot_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None
    notification_timeout_seconds: float = 10.0


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
