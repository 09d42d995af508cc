"""Domain models and protocols."""

from .errors import (
    TaskPulseError,
    StorageError,
    NotFoundError,
    RemoteServiceError,
)
from .models import (
    Task,
    TaskId,
    TaskStatus,
    TaskPriority,
    CreateTaskRequest,
    UpdateTaskRequest,
    ProductivityStats,
    DailyProgress,
    Insight,
    InsightType,
    NotificationItem,
    NotificationType,
    CommunicationActivity,
    utcnow,
    ensure_utc,
)
from .protocols import (
    TaskStore,
    NotificationSender,
    CommunicationConnector,
)

__all__ = [
    "TaskPulseError",
    "StorageError",
    "NotFoundError",
    "RemoteServiceError",
    "Task",
    "TaskId",
    "TaskStatus",
    "TaskPriority",
    "CreateTaskRequest",
    "UpdateTaskRequest",
    "ProductivityStats",
    "DailyProgress",
    "Insight",
    "InsightType",
    "NotificationItem",
    "NotificationType",
    "CommunicationActivity",
    "utcnow",
    "ensure_utc",
    "TaskStore",
    "NotificationSender",
    "CommunicationConnector",
]
