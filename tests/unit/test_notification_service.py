"""Tests for NotificationService and notification senders."""

import logging
import pytest
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock
import httpx

from taskpulse.domain.errors import StorageError
from taskpulse.domain.models import NotificationItem, NotificationType
from taskpulse.events import EventBus, EventType
from taskpulse.notifications import LogNotificationSender, WebhookNotificationSender
from taskpulse.repositories.memory import InMemoryTaskStore
from taskpulse.services.notification_service import NotificationService


def make_sender(name="mock", result=True):
    sender = MagicMock()
    sender.channel_name = name
    sender.send = AsyncMock(return_value=result)
    return sender


class TestWebhookNotificationSender:
    """Tests for WebhookNotificationSender."""

    @pytest.fixture
    def mock_client(self):
        """Create mock HTTP client."""
        return AsyncMock(spec=httpx.AsyncClient)

    @pytest.fixture
    def sender(self, mock_client) -> WebhookNotificationSender:
        return WebhookNotificationSender(
            webhook_url="https://hooks.example.com/notify",
            api_key="secret",
            http_client=mock_client,
        )

    @pytest.fixture
    def notification(self, now):
        return NotificationItem.create(
            "Task Reminder",
            "Due soon",
            NotificationType.TASK_REMINDER,
            action_url="app://task/1",
            now=now,
        )

    def test_channel_name(self, sender):
        """Should return 'webhook' as channel name."""
        assert sender.channel_name == "webhook"

    @pytest.mark.asyncio
    async def test_send_success(self, sender, mock_client, notification):
        """Should return True on successful send."""
        mock_response = MagicMock()
        mock_response.status_code = 202
        mock_client.post.return_value = mock_response

        result = await sender.send(notification)

        assert result is True
        call = mock_client.post.call_args
        payload = call.kwargs["json"]
        assert payload["type"] == "task_reminder"
        assert payload["action_url"] == "app://task/1"
        assert payload["timestamp"] == notification.created_at.isoformat()
        assert call.kwargs["headers"]["X-API-Key"] == "secret"

    @pytest.mark.asyncio
    async def test_send_bad_status(self, sender, mock_client, notification):
        mock_response = MagicMock()
        mock_response.status_code = 500
        mock_client.post.return_value = mock_response

        assert await sender.send(notification) is False

    @pytest.mark.asyncio
    async def test_send_failure(self, sender, mock_client, notification):
        """Should return False on HTTP error."""
        mock_client.post.side_effect = httpx.HTTPError("Connection failed")

        assert await sender.send(notification) is False


class TestLogNotificationSender:
    @pytest.mark.asyncio
    async def test_logs_formatted_line(self, now, caplog):
        sender = LogNotificationSender(app_name="TaskPulse")
        item = NotificationItem.create(
            "Achievement Unlocked!", "🎉 Done", NotificationType.ACHIEVEMENT, now=now
        )

        with caplog.at_level(logging.INFO):
            assert await sender.send(item) is True

        assert sender.channel_name == "desktop"
        assert "TaskPulse - Achievement Unlocked!: 🎉 Done" in caplog.text


class TestNotificationService:
    """Tests for NotificationService."""

    @pytest.fixture
    def store(self, clock):
        return InMemoryTaskStore(clock=clock)

    @pytest.fixture
    def events(self):
        return EventBus()

    @pytest.fixture
    def sender(self):
        return make_sender()

    @pytest.fixture
    def service(self, store, sender, events, clock):
        return NotificationService(store, [sender], events, clock=clock)

    @pytest.mark.asyncio
    async def test_notify_persists_delivers_publishes(self, service, store, sender, events):
        received = []
        events.subscribe(EventType.NOTIFICATION, received.append)

        item = await service.notify("Hi", "There", NotificationType.INSIGHT)

        assert item is not None
        assert [n.id for n in await store.list_notifications()] == [item.id]
        sender.send.assert_awaited_once()
        assert received[0].payload.id == item.id

    @pytest.mark.asyncio
    async def test_disabled_is_noop(self, service, store, sender):
        service.set_enabled(False)

        result = await service.notify("Hi", "There", NotificationType.INSIGHT)

        assert result is None
        assert await store.list_notifications() == []
        sender.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failing_sender_does_not_stop_others(self, store, events, clock):
        broken = make_sender("broken")
        broken.send.side_effect = RuntimeError("display unavailable")
        working = make_sender("working")
        service = NotificationService(store, [broken, working], events, clock=clock)

        item = await service.notify("Hi", "There", NotificationType.INSIGHT)

        assert item is not None
        working.send.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_storage_error_propagates(self, sender, events, clock):
        store = MagicMock()
        store.save_notification = AsyncMock(side_effect=StorageError("disk full"))
        service = NotificationService(store, [sender], events, clock=clock)

        with pytest.raises(StorageError):
            await service.notify("Hi", "There", NotificationType.INSIGHT)
        sender.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_send_accountability(self, service):
        item = await service.send_accountability("Keep going!")

        assert item.title == "Accountability Check"
        assert item.notification_type == NotificationType.ACCOUNTABILITY

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "delta,expected_type,expected_message",
        [
            (timedelta(minutes=-5), NotificationType.DEADLINE, "⚠️ Task 'Report' is overdue!"),
            (timedelta(minutes=20), NotificationType.TASK_REMINDER, "⏰ Task 'Report' is due in 20 minutes"),
            (timedelta(minutes=90), NotificationType.TASK_REMINDER, "📋 Reminder: 'Report' is due in 90 minutes"),
        ],
    )
    async def test_task_reminder_wording(
        self, service, task_factory, now, delta, expected_type, expected_message
    ):
        task = task_factory("Report", due_date=now + delta)

        item = await service.send_task_reminder(task, now)

        assert item.notification_type == expected_type
        assert item.message == expected_message
        assert item.action_url == f"app://task/{task.id.value}"

    @pytest.mark.asyncio
    async def test_send_achievement(self, service):
        item = await service.send_achievement("Completed 'Report'")

        assert item.title == "Achievement Unlocked!"
        assert item.message == "🎉 Achievement unlocked: Completed 'Report'"

    @pytest.mark.asyncio
    async def test_communication_alert(self, service):
        item = await service.send_communication_alert("gmail", 4)

        assert item.message == "📧 4 new emails require attention"
        assert item.action_url == "app://communication/gmail"
        assert item.notification_type == NotificationType.COMMUNICATION

    @pytest.mark.asyncio
    async def test_communication_alert_zero_is_noop(self, service, store):
        assert await service.send_communication_alert("gmail", 0) is None
        assert await store.list_notifications() == []

    @pytest.mark.asyncio
    async def test_overdue_reminders(self, service, store, overdue_task, task_factory, now):
        await store.create_task(overdue_task)
        await store.create_task(task_factory("future", due_date=now + timedelta(days=1)))

        sent = await service.send_overdue_reminders(now)

        assert sent == 1
        notifications = await service.list_notifications()
        assert notifications[0].notification_type == NotificationType.DEADLINE

    @pytest.mark.asyncio
    async def test_mark_read_and_count(self, service):
        item = await service.notify("Hi", "There", NotificationType.INSIGHT)

        assert await service.unread_count() == 1
        assert await service.mark_read(item.id) is True
        assert await service.unread_count() == 0
