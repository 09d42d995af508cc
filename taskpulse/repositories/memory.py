"""In-memory implementation of the task store."""

import asyncio
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..analytics.stats import summarize
from ..domain.errors import NotFoundError, StorageError
from ..domain.models import (
    CommunicationActivity,
    Insight,
    NotificationItem,
    ProductivityStats,
    Task,
    TaskId,
    TaskStatus,
    utcnow,
)


def _newest_first(tasks: Sequence[Task]) -> list[Task]:
    # Stable sorts: id ascending breaks ties between equal timestamps
    by_id = sorted(tasks, key=lambda t: t.id.value)
    return sorted(by_id, key=lambda t: t.created_at, reverse=True)


class InMemoryTaskStore:
    """In-memory TaskStore, used for tests and the "memory" backend."""

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock
        self._lock = asyncio.Lock()
        self._tasks: dict[str, Task] = {}
        self._insights: list[Insight] = []
        self._notifications: dict[str, NotificationItem] = {}
        self._communication: dict[str, CommunicationActivity] = {}

    async def create_task(self, task: Task) -> Task:
        """Create a new task."""
        async with self._lock:
            if task.id.value in self._tasks:
                raise StorageError(f"Task {task.id.value} already exists")
            self._tasks[task.id.value] = task
            return task

    async def get_task(self, task_id: TaskId) -> Optional[Task]:
        """Retrieve a single task by ID."""
        async with self._lock:
            return self._tasks.get(task_id.value)

    async def update_task(self, task: Task) -> Task:
        """Update an existing task."""
        async with self._lock:
            if task.id.value not in self._tasks:
                raise NotFoundError(f"Task {task.id.value} not found")
            self._tasks[task.id.value] = task
            return task

    async def delete_task(self, task_id: TaskId) -> bool:
        """Delete a task."""
        async with self._lock:
            return self._tasks.pop(task_id.value, None) is not None

    async def list_tasks(self) -> Sequence[Task]:
        async with self._lock:
            return _newest_first(list(self._tasks.values()))

    async def list_tasks_by_status(self, status: TaskStatus) -> Sequence[Task]:
        async with self._lock:
            return _newest_first(
                [t for t in self._tasks.values() if t.status == status]
            )

    async def list_overdue_tasks(self, now: datetime) -> Sequence[Task]:
        async with self._lock:
            overdue = [t for t in self._tasks.values() if t.is_overdue(now)]
            return sorted(overdue, key=lambda t: (t.due_date, t.id.value))

    async def productivity_stats(self, now: datetime) -> ProductivityStats:
        async with self._lock:
            return summarize(list(self._tasks.values()), now)

    async def save_insight(self, insight: Insight) -> None:
        async with self._lock:
            self._insights.append(insight)

    async def list_insights(self, limit: int = 20) -> Sequence[Insight]:
        async with self._lock:
            # Stable reverse sort keeps save order within a timestamp
            ordered = sorted(
                self._insights, key=lambda i: i.created_at, reverse=True
            )
            return ordered[:limit]

    async def save_notification(self, notification: NotificationItem) -> None:
        async with self._lock:
            if notification.id in self._notifications:
                raise StorageError(f"Notification {notification.id} already exists")
            self._notifications[notification.id] = replace(notification)

    async def list_notifications(self, limit: int = 20) -> Sequence[NotificationItem]:
        async with self._lock:
            ordered = sorted(
                self._notifications.values(),
                key=lambda n: n.created_at,
                reverse=True,
            )
            return [replace(n) for n in ordered[:limit]]

    async def mark_notification_read(self, notification_id: str) -> bool:
        async with self._lock:
            notification = self._notifications.get(notification_id)
            if notification is None:
                return False
            notification.is_read = True
            return True

    async def count_unread_notifications(self) -> int:
        async with self._lock:
            return sum(1 for n in self._notifications.values() if not n.is_read)

    async def save_communication_activity(
        self, activity: CommunicationActivity
    ) -> CommunicationActivity:
        """Upsert by service; the first creation time is kept."""
        async with self._lock:
            now = self._clock()
            existing = self._communication.get(activity.service)
            stored = replace(
                activity,
                keywords_detected=list(activity.keywords_detected),
                created_at=existing.created_at if existing else now,
                updated_at=now,
            )
            self._communication[activity.service] = stored
            return replace(stored)

    async def list_communication_activity(self) -> Sequence[CommunicationActivity]:
        async with self._lock:
            ordered = sorted(
                self._communication.values(),
                key=lambda a: a.updated_at,
                reverse=True,
            )
            return [replace(a) for a in ordered]
