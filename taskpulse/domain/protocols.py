"""Protocol definitions for dependency injection."""

from datetime import datetime
from typing import Protocol, runtime_checkable, Optional, Sequence

from .models import (
    CommunicationActivity,
    Insight,
    NotificationItem,
    ProductivityStats,
    Task,
    TaskId,
    TaskStatus,
)


@runtime_checkable
class TaskStore(Protocol):
    """Protocol for persistence of tasks and derived records."""

    async def create_task(self, task: Task) -> Task:
        """Persist a new task, return the stored task."""
        ...

    async def get_task(self, task_id: TaskId) -> Optional[Task]:
        """Retrieve a single task by ID, None if missing."""
        ...

    async def update_task(self, task: Task) -> Task:
        """Overwrite an existing task by ID."""
        ...

    async def delete_task(self, task_id: TaskId) -> bool:
        """Delete a task, return True if a row existed."""
        ...

    async def list_tasks(self) -> Sequence[Task]:
        """List all tasks, newest first."""
        ...

    async def list_tasks_by_status(self, status: TaskStatus) -> Sequence[Task]:
        """List tasks with the given status, newest first."""
        ...

    async def list_overdue_tasks(self, now: datetime) -> Sequence[Task]:
        """List overdue tasks, soonest due date first."""
        ...

    async def productivity_stats(self, now: datetime) -> ProductivityStats:
        """Aggregate counts and average completion time."""
        ...

    async def save_insight(self, insight: Insight) -> None:
        """Append an insight."""
        ...

    async def list_insights(self, limit: int = 20) -> Sequence[Insight]:
        """Most recent insights first."""
        ...

    async def save_notification(self, notification: NotificationItem) -> None:
        """Append a notification."""
        ...

    async def list_notifications(self, limit: int = 20) -> Sequence[NotificationItem]:
        """Most recent notifications first."""
        ...

    async def mark_notification_read(self, notification_id: str) -> bool:
        """Flag a notification as read, return False if missing."""
        ...

    async def count_unread_notifications(self) -> int:
        """Number of unread notifications."""
        ...

    async def save_communication_activity(
        self, activity: CommunicationActivity
    ) -> CommunicationActivity:
        """Upsert a snapshot keyed by service name."""
        ...

    async def list_communication_activity(self) -> Sequence[CommunicationActivity]:
        """All snapshots, most recently updated first."""
        ...


@runtime_checkable
class NotificationSender(Protocol):
    """Protocol for delivering notifications to a user-facing surface."""

    async def send(self, notification: NotificationItem) -> bool:
        """Send a notification, return True if successful."""
        ...

    @property
    def channel_name(self) -> str:
        """Return the channel name this sender handles."""
        ...


@runtime_checkable
class CommunicationConnector(Protocol):
    """Protocol for an external email/chat service connector."""

    @property
    def service(self) -> str:
        """Service name, e.g. "gmail"."""
        ...

    async def fetch_activity(self) -> CommunicationActivity:
        """Return the current activity summary for the service."""
        ...
