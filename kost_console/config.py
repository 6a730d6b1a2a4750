"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Server configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret key for signing JWT tokens", min_length=1
    )
    access_token_expire_minutes: int = Field(
        description="Number of minutes before access tokens expire",
        gt=0,
    )
    app_timezone: str = Field(
        default="Asia/Jakarta",
        description="IANA timezone (or UTC+HH:MM offset) used for timestamps",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        description="Origins allowed to call the API from a browser",
    )


class ClientSettings(BaseSettings):
    """Configuration for the realtime notification client."""

    model_config = SettingsConfigDict(
        env_prefix="KOST_CLIENT_",
        env_file=ENV_FILE,
        env_file_encoding=ENV_FILE_ENCODING,
        extra="ignore",
    )

    api_base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the REST API hosting the /notifications routes",
        min_length=1,
    )
    stream_url: str = Field(
        default="ws://localhost:8000/notifications/ws",
        description="Websocket endpoint streaming notification events",
        min_length=1,
    )
    request_timeout: float = Field(
        default=10.0, description="Timeout in seconds for REST calls", gt=0
    )
    reconnect_base_delay: float = Field(
        default=1.0, description="First reconnect delay in seconds", gt=0
    )
    reconnect_max_delay: float = Field(
        default=30.0, description="Upper bound for the reconnect delay", gt=0
    )
    reconnect_max_attempts: int = Field(
        default=5, description="Reconnect attempts before giving up", gt=0
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


@lru_cache
def get_client_settings() -> ClientSettings:
    """Return cached client settings instance."""

    return ClientSettings()


def reset_settings_cache() -> None:
    """Clear the settings caches to force reloading from the environment."""

    get_settings.cache_clear()
    get_client_settings.cache_clear()


__all__ = [
    "ClientSettings",
    "Settings",
    "get_client_settings",
    "get_settings",
    "reset_settings_cache",
]
