"""Shared pytest fixtures."""

import pytest
from datetime import datetime, timedelta, timezone
from typing import Optional

from taskpulse.domain.models import Task, TaskId, TaskStatus, TaskPriority

# Friday 10:30 UTC; falls in the 9-11 productivity bucket
FIXED_NOW = datetime(2024, 3, 15, 10, 30, tzinfo=timezone.utc)


def build_task(
    title: str = "Test task",
    *,
    status: TaskStatus = TaskStatus.PENDING,
    priority: TaskPriority = TaskPriority.MEDIUM,
    category: str = "general",
    estimated_time: int = 30,
    actual_time: Optional[int] = None,
    due_date: Optional[datetime] = None,
    created_at: datetime = FIXED_NOW,
    completed_at: Optional[datetime] = None,
    task_id: Optional[str] = None,
) -> Task:
    """Build a task directly, bypassing the lifecycle helpers."""
    if status == TaskStatus.COMPLETED and completed_at is None:
        completed_at = created_at
    return Task(
        id=TaskId(task_id) if task_id else TaskId.generate(),
        title=title,
        priority=priority,
        status=status,
        category=category,
        estimated_time=estimated_time,
        actual_time=actual_time,
        due_date=due_date,
        created_at=created_at,
        updated_at=created_at,
        completed_at=completed_at,
    )


@pytest.fixture
def now() -> datetime:
    """Fixed reference time."""
    return FIXED_NOW


@pytest.fixture
def clock(now):
    """Clock returning the fixed reference time."""
    return lambda: now


@pytest.fixture
def task_factory():
    """Factory building tasks with sensible defaults."""
    return build_task


@pytest.fixture
def sample_task() -> Task:
    """Create a sample task for testing."""
    return build_task("Write report", category="work")


@pytest.fixture
def overdue_task() -> Task:
    """A pending task whose due date passed a day ago."""
    return build_task(
        "Pay invoice",
        priority=TaskPriority.HIGH,
        category="finance",
        due_date=FIXED_NOW - timedelta(days=1),
        created_at=FIXED_NOW - timedelta(days=3),
    )
