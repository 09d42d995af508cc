"""Service layer implementations."""

from .task_service import TaskService
from .notification_service import NotificationService
from .coach_service import CoachService

__all__ = [
    "TaskService",
    "NotificationService",
    "CoachService",
]
