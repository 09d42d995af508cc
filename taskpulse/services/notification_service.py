"""Notification service: build, persist, deliver and publish notifications."""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..domain.models import NotificationItem, NotificationType, Task, utcnow
from ..domain.protocols import NotificationSender, TaskStore
from ..events import EventBus, EventType

logger = logging.getLogger(__name__)

SOON_MINUTES = 30

_COMMUNICATION_MESSAGES = {
    "gmail": "📧 {count} new emails require attention",
    "discord": "💬 {count} new Discord messages",
    "messenger": "📱 {count} new messages in Messenger",
}


class NotificationService:
    """Service for creating and sending notifications."""

    def __init__(
        self,
        store: TaskStore,
        senders: Sequence[NotificationSender],
        events: EventBus,
        *,
        enabled: bool = True,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize notification service.

        Args:
            store: Store the notification records are written to
            senders: Delivery surfaces, tried in order
            events: Bus the "notification" event is published on
            enabled: When False every send is a no-op
            clock: Source of the current time
        """
        self._store = store
        self._senders = list(senders)
        self._events = events
        self._enabled = enabled
        self._clock = clock
        self._lock = asyncio.Lock()

    @property
    def senders(self) -> list[NotificationSender]:
        """Get list of registered senders."""
        return self._senders

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled
        logger.info(f"Notifications {'enabled' if enabled else 'disabled'}")

    async def notify(
        self,
        title: str,
        message: str,
        notification_type: NotificationType,
        action_url: Optional[str] = None,
    ) -> Optional[NotificationItem]:
        """Persist, deliver and publish one notification.

        Storage failures propagate. Delivery is best effort: a sender that
        fails is logged and the remaining senders still run.

        Returns:
            The stored notification, or None when notifications are disabled
        """
        if not self._enabled:
            return None

        notification = NotificationItem.create(
            title=title,
            message=message,
            notification_type=notification_type,
            action_url=action_url,
            now=self._clock(),
        )

        async with self._lock:
            await self._store.save_notification(notification)
            await self._deliver(notification)

        await self._events.publish(EventType.NOTIFICATION, notification)
        return notification

    async def _deliver(self, notification: NotificationItem) -> dict[str, bool]:
        results = {}
        for sender in self._senders:
            try:
                success = await sender.send(notification)
            except Exception as e:
                logger.error(f"Sender {sender.channel_name} raised: {e}")
                success = False
            if not success:
                logger.warning(f"Failed to deliver notification via {sender.channel_name}")
            results[sender.channel_name] = success
        return results

    async def send_accountability(self, message: str) -> Optional[NotificationItem]:
        """Send an accountability check-in."""
        return await self.notify(
            "Accountability Check", message, NotificationType.ACCOUNTABILITY
        )

    async def send_task_reminder(
        self, task: Task, now: Optional[datetime] = None
    ) -> Optional[NotificationItem]:
        """Send a reminder worded by how soon the task is due.

        Args:
            task: Task with a due date
            now: Reference time, defaults to the service clock
        """
        now = now or self._clock()
        minutes = 0
        if task.due_date:
            minutes = int((task.due_date - now).total_seconds() // 60)

        if minutes <= 0:
            message = f"⚠️ Task '{task.title}' is overdue!"
            notification_type = NotificationType.DEADLINE
        elif minutes <= SOON_MINUTES:
            message = f"⏰ Task '{task.title}' is due in {minutes} minutes"
            notification_type = NotificationType.TASK_REMINDER
        else:
            message = f"📋 Reminder: '{task.title}' is due in {minutes} minutes"
            notification_type = NotificationType.TASK_REMINDER

        return await self.notify(
            "Task Reminder",
            message,
            notification_type,
            action_url=f"app://task/{task.id.value}",
        )

    async def send_achievement(self, achievement: str) -> Optional[NotificationItem]:
        """Celebrate an accomplishment."""
        return await self.notify(
            "Achievement Unlocked!",
            f"🎉 Achievement unlocked: {achievement}",
            NotificationType.ACHIEVEMENT,
        )

    async def send_communication_alert(
        self, service: str, count: int
    ) -> Optional[NotificationItem]:
        """Alert about unread messages; nothing is sent for a zero count."""
        if count == 0:
            return None

        template = _COMMUNICATION_MESSAGES.get(
            service, "📢 {count} new messages in {service}"
        )
        return await self.notify(
            "Communication Alert",
            template.format(count=count, service=service),
            NotificationType.COMMUNICATION,
            action_url=f"app://communication/{service}",
        )

    async def send_overdue_reminders(self, now: Optional[datetime] = None) -> int:
        """Send a reminder for every overdue task.

        Returns:
            Number of reminders sent
        """
        now = now or self._clock()
        overdue = await self._store.list_overdue_tasks(now)

        sent = 0
        for task in overdue:
            if await self.send_task_reminder(task, now):
                sent += 1
        return sent

    async def list_notifications(self, limit: int = 20) -> Sequence[NotificationItem]:
        return await self._store.list_notifications(limit)

    async def mark_read(self, notification_id: str) -> bool:
        return await self._store.mark_notification_read(notification_id)

    async def unread_count(self) -> int:
        return await self._store.count_unread_notifications()
