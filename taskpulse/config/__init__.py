"""Configuration module."""

from .settings import (
    AppSettings,
    AISettings,
    CommunicationSettings,
    StorageSettings,
    NotificationSettings,
    SchedulerSettings,
    get_settings,
    clear_settings_cache,
)

__all__ = [
    "AppSettings",
    "AISettings",
    "CommunicationSettings",
    "StorageSettings",
    "NotificationSettings",
    "SchedulerSettings",
    "get_settings",
    "clear_settings_cache",
]
