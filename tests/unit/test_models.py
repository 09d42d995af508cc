"""Tests for domain models."""

import pytest
from datetime import datetime, timedelta, timezone

from taskpulse.domain.models import (
    CreateTaskRequest,
    InsightType,
    Insight,
    NotificationItem,
    NotificationType,
    Task,
    TaskId,
    TaskPriority,
    TaskStatus,
    UpdateTaskRequest,
    ensure_utc,
)


class TestTaskId:
    """Tests for TaskId value object."""

    def test_generate_unique(self):
        """Should generate unique IDs."""
        assert TaskId.generate() != TaskId.generate()

    def test_equality(self):
        """Equal values give equal ids."""
        assert TaskId("abc") == TaskId("abc")
        assert str(TaskId("abc")) == "abc"


class TestEnsureUtc:
    def test_naive_treated_as_utc(self):
        value = ensure_utc(datetime(2024, 1, 1, 12, 0))
        assert value.tzinfo == timezone.utc
        assert value.hour == 12

    def test_aware_converted(self):
        plus_two = timezone(timedelta(hours=2))
        value = ensure_utc(datetime(2024, 1, 1, 12, 0, tzinfo=plus_two))
        assert value.hour == 10

    def test_none(self):
        assert ensure_utc(None) is None


class TestTaskCreate:
    """Tests for creating tasks from requests."""

    def test_create_defaults(self, now):
        """New tasks are pending with matching timestamps."""
        task = Task.create(CreateTaskRequest(title="Plan week"), now=now)

        assert task.status == TaskStatus.PENDING
        assert task.priority == TaskPriority.MEDIUM
        assert task.category == "general"
        assert task.estimated_time == 0
        assert task.created_at == task.updated_at == now
        assert task.completed_at is None
        assert task.actual_time is None

    def test_create_normalizes_due_date(self, now):
        request = CreateTaskRequest(title="Ship", due_date=datetime(2024, 3, 20, 9, 0))
        task = Task.create(request, now=now)

        assert task.due_date == datetime(2024, 3, 20, 9, 0, tzinfo=timezone.utc)


class TestTaskUpdate:
    """Tests for applying partial updates."""

    def test_only_supplied_fields_change(self, sample_task, now):
        later = now + timedelta(minutes=5)
        updated = sample_task.apply_update(UpdateTaskRequest(title="New"), now=later)

        assert updated.title == "New"
        assert updated.category == sample_task.category
        assert updated.priority == sample_task.priority
        assert updated.updated_at == later
        assert sample_task.title == "Write report"

    def test_first_completion_sets_completed_at(self, sample_task, now):
        later = now + timedelta(hours=1)
        updated = sample_task.apply_update(
            UpdateTaskRequest(status=TaskStatus.COMPLETED), now=later
        )

        assert updated.status == TaskStatus.COMPLETED
        assert updated.completed_at == later

    def test_recompletion_keeps_first_stamp(self, sample_task, now):
        first = now + timedelta(hours=1)
        completed = sample_task.apply_update(
            UpdateTaskRequest(status=TaskStatus.COMPLETED), now=first
        )
        reopened = completed.apply_update(
            UpdateTaskRequest(status=TaskStatus.IN_PROGRESS), now=first + timedelta(hours=1)
        )
        again = reopened.apply_update(
            UpdateTaskRequest(status=TaskStatus.COMPLETED), now=first + timedelta(hours=2)
        )

        assert reopened.completed_at == first
        assert again.completed_at == first

    def test_other_statuses_leave_completed_at_unset(self, sample_task, now):
        updated = sample_task.apply_update(
            UpdateTaskRequest(status=TaskStatus.PAUSED), now=now
        )
        assert updated.completed_at is None

    def test_updated_at_never_moves_backwards(self, sample_task, now):
        earlier = now - timedelta(hours=1)
        updated = sample_task.apply_update(UpdateTaskRequest(title="x"), now=earlier)

        assert updated.updated_at == sample_task.updated_at


class TestTaskDueDates:
    def test_is_overdue(self, overdue_task, now):
        assert overdue_task.is_overdue(now) is True

    def test_completed_never_overdue(self, overdue_task, now):
        done = overdue_task.apply_update(
            UpdateTaskRequest(status=TaskStatus.COMPLETED), now=now
        )
        assert done.is_overdue(now) is False

    def test_no_due_date(self, sample_task, now):
        assert sample_task.is_overdue(now) is False
        assert sample_task.days_until_due(now) is None

    @pytest.mark.parametrize(
        "delta,expected",
        [
            (timedelta(days=2, hours=3), 2),
            (timedelta(hours=5), 0),
            (timedelta(days=-1, hours=-2), -1),
        ],
    )
    def test_days_until_due(self, task_factory, now, delta, expected):
        task = task_factory(due_date=now + delta)
        assert task.days_until_due(now) == expected


class TestPriority:
    def test_is_high(self):
        assert TaskPriority.HIGH.is_high
        assert TaskPriority.CRITICAL.is_high
        assert not TaskPriority.MEDIUM.is_high
        assert not TaskPriority.LOW.is_high


class TestRecords:
    def test_insight_create(self, now):
        insight = Insight.create("Tip", InsightType.PRODUCTIVITY_TIP, 0.6, now=now)

        assert insight.message == "Tip"
        assert insight.created_at == now
        assert insight.id

    def test_notification_create_unread(self, now):
        item = NotificationItem.create(
            "Title", "Body", NotificationType.INSIGHT, now=now
        )

        assert item.is_read is False
        assert item.action_url is None
        assert item.created_at == now
