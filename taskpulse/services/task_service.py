"""Task commands on top of the task store."""

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..domain.errors import NotFoundError
from ..domain.models import (
    CreateTaskRequest,
    Task,
    TaskId,
    TaskStatus,
    UpdateTaskRequest,
    utcnow,
)
from ..domain.protocols import TaskStore

logger = logging.getLogger(__name__)


class TaskService:
    """Task service orchestrating the store and task lifecycle."""

    def __init__(
        self,
        store: TaskStore,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._clock = clock

    async def create_task(self, request: CreateTaskRequest) -> Task:
        """Create a new pending task."""
        task = Task.create(request, now=self._clock())
        created = await self._store.create_task(task)
        logger.info(f"Created task {created.id.value}: {created.title}")
        return created

    async def get_task(self, task_id: TaskId) -> Optional[Task]:
        return await self._store.get_task(task_id)

    async def list_tasks(self, status: Optional[TaskStatus] = None) -> Sequence[Task]:
        """List tasks newest first, optionally by status."""
        if status is None:
            return await self._store.list_tasks()
        return await self._store.list_tasks_by_status(status)

    async def list_overdue(self) -> Sequence[Task]:
        """Overdue tasks, soonest due first."""
        return await self._store.list_overdue_tasks(self._clock())

    async def update_task(self, task_id: TaskId, request: UpdateTaskRequest) -> Task:
        """Fetch, merge and write back a task.

        Raises:
            NotFoundError: If the task does not exist
        """
        task = await self._store.get_task(task_id)
        if not task:
            raise NotFoundError(f"Task {task_id.value} not found")

        updated = task.apply_update(request, now=self._clock())
        result = await self._store.update_task(updated)
        logger.debug(f"Updated task {task_id.value}")
        return result

    async def update_task_status(self, task_id: TaskId, status: TaskStatus) -> Task:
        """Update a task's status."""
        return await self.update_task(task_id, UpdateTaskRequest(status=status))

    async def delete_task(self, task_id: TaskId) -> bool:
        """Delete a task, return True if it existed."""
        deleted = await self._store.delete_task(task_id)
        if deleted:
            logger.info(f"Deleted task {task_id.value}")
        return deleted
