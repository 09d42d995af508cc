"""Tests for dependency injection container."""

import pytest
from unittest.mock import MagicMock

from pydantic import SecretStr

from taskpulse.ai.engine import InsightEngine
from taskpulse.config.settings import (
    AISettings,
    CommunicationSettings,
    NotificationSettings,
    StorageSettings,
)
from taskpulse.container import Container, Provider, get_container, reset_container
from taskpulse.notifications import LogNotificationSender, WebhookNotificationSender
from taskpulse.repositories import InMemoryTaskStore, SQLiteTaskStore
from taskpulse.services import CoachService, NotificationService, TaskService


class TestProvider:
    """Tests for Provider class."""

    def test_lazy_creation(self):
        """Should create the instance on first access only."""
        factory = MagicMock(return_value="instance")
        provider = Provider(factory)

        factory.assert_not_called()
        assert provider.get() == "instance"
        assert provider.get() == "instance"
        factory.assert_called_once()

    def test_override_and_reset(self):
        provider = Provider(lambda: "fresh")
        provider.override("fake")

        assert provider.get() == "fake"
        provider.reset()
        assert provider.get() == "fresh"


def make_settings(*, backend="memory", path="", api_key=None, webhook_url=None, enabled=True):
    settings = MagicMock()
    settings.storage = StorageSettings(backend=backend, path=path or "unused.db")
    settings.ai = AISettings(api_key=SecretStr(api_key) if api_key else None)
    settings.communication = CommunicationSettings(
        gmail_client_id=None, gmail_client_secret=None, discord_bot_token=None
    )
    settings.notifications = NotificationSettings(enabled=enabled, webhook_url=webhook_url)
    return settings


class TestContainer:
    """Tests for Container class."""

    @pytest.fixture
    def container(self):
        return Container()

    def test_store_not_configured(self, container):
        """Should raise when the store is not configured."""
        assert container.is_configured is False
        with pytest.raises(RuntimeError):
            _ = container.store

    def test_configure_store(self, container):
        container.configure_store(InMemoryTaskStore)

        assert isinstance(container.store, InMemoryTaskStore)
        assert container.store is container.store

    def test_defaults_for_engine_and_communication(self, container):
        assert container.engine.has_remote is False
        assert container.communication.enabled_services == []

    def test_services(self, container):
        container.configure_store(InMemoryTaskStore)

        assert isinstance(container.task_service, TaskService)
        assert isinstance(container.coach_service, CoachService)
        assert isinstance(container.notification_service, NotificationService)
        assert container.notification_service is container.notification_service

    def test_adding_sender_rebuilds_notification_service(self, container):
        container.configure_store(InMemoryTaskStore)
        first = container.notification_service

        container.add_notification_sender(LogNotificationSender)

        assert container.notification_service is not first
        assert len(container.notification_service.senders) == 1

    def test_configure_from_settings_memory(self, container):
        container.configure_from_settings(make_settings())

        assert isinstance(container.store, InMemoryTaskStore)
        assert container.engine.has_remote is False
        assert [s.channel_name for s in container.notification_senders] == ["desktop"]

    def test_configure_from_settings_sqlite(self, container, tmp_path):
        container.configure_from_settings(
            make_settings(backend="sqlite", path=str(tmp_path / "app.db"))
        )

        assert isinstance(container.store, SQLiteTaskStore)

    def test_configure_with_api_key_and_webhook(self, container):
        container.configure_from_settings(
            make_settings(api_key="sk-test", webhook_url="https://hooks.example.com")
        )

        assert isinstance(container.engine, InsightEngine)
        assert container.engine.has_remote is True
        senders = container.notification_senders
        assert isinstance(senders[1], WebhookNotificationSender)

    def test_notifications_disabled(self, container):
        container.configure_from_settings(make_settings(enabled=False))

        assert container.notification_service.enabled is False


class TestGlobalContainer:
    def test_reset_container(self):
        container = get_container()
        container.configure_store(InMemoryTaskStore)

        reset_container()

        assert get_container() is not container
        assert get_container().is_configured is False
