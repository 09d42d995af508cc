"""Application settings using Pydantic."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AISettings(BaseSettings):
    """Remote language-model configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="OPENAI_",
        extra="ignore",
    )

    # Presence of the key enables the remote path
    api_key: Optional[SecretStr] = Field(default=None)
    model: str = Field(default="gpt-3.5-turbo")
    base_url: str = Field(default="https://api.openai.com/v1")


class CommunicationSettings(BaseSettings):
    """Credentials for communication services."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    gmail_client_id: Optional[str] = Field(default=None)
    gmail_client_secret: Optional[SecretStr] = Field(default=None)
    discord_bot_token: Optional[SecretStr] = Field(default=None)

    @property
    def gmail_enabled(self) -> bool:
        return bool(self.gmail_client_id and self.gmail_client_secret)

    @property
    def discord_enabled(self) -> bool:
        return self.discord_bot_token is not None


class StorageSettings(BaseSettings):
    """Task store configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TASKPULSE_STORAGE_",
        extra="ignore",
    )

    backend: Literal["memory", "sqlite"] = Field(default="sqlite")
    path: str = Field(default="~/.taskpulse/app.db")


class NotificationSettings(BaseSettings):
    """Notification delivery configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TASKPULSE_NOTIFY_",
        extra="ignore",
    )

    enabled: bool = Field(default=True)
    webhook_url: Optional[str] = Field(default=None)
    webhook_api_key: Optional[SecretStr] = Field(default=None)


class SchedulerSettings(BaseSettings):
    """Scheduler configuration. Intervals are in seconds."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TASKPULSE_SCHEDULER_",
        extra="ignore",
    )

    enabled: bool = Field(default=True)
    timezone: str = Field(default="UTC")
    accountability_interval: int = Field(default=3600, gt=0)
    insights_interval: int = Field(default=1800, gt=0)
    communication_interval: int = Field(default=900, gt=0)


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TASKPULSE_",
        extra="ignore",
    )

    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000)

    # Nested settings - manually create to avoid env prefix issues
    @property
    def ai(self) -> AISettings:
        return AISettings()

    @property
    def communication(self) -> CommunicationSettings:
        return CommunicationSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def notifications(self) -> NotificationSettings:
        return NotificationSettings()

    @property
    def scheduler(self) -> SchedulerSettings:
        return SchedulerSettings()


@lru_cache
def get_settings() -> AppSettings:
    """Get cached application settings."""
    return AppSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
