"""Notification sender that writes to the application log."""

import logging

from ..domain.models import NotificationItem, NotificationType

logger = logging.getLogger(__name__)

_ICONS = {
    NotificationType.ACCOUNTABILITY: "⏰",
    NotificationType.TASK_REMINDER: "📋",
    NotificationType.DEADLINE: "⚠️",
    NotificationType.ACHIEVEMENT: "🎉",
    NotificationType.COMMUNICATION: "💬",
    NotificationType.INSIGHT: "💡",
}


class LogNotificationSender:
    """Stand-in for the desktop notification surface."""

    def __init__(self, app_name: str = "TaskPulse"):
        self._app_name = app_name

    @property
    def channel_name(self) -> str:
        """Return channel name for this sender."""
        return "desktop"

    async def send(self, notification: NotificationItem) -> bool:
        logger.info(self.format(notification))
        return True

    def format(self, notification: NotificationItem) -> str:
        icon = _ICONS.get(notification.notification_type, "🔔")
        return f"{icon} {self._app_name} - {notification.title}: {notification.message}"
