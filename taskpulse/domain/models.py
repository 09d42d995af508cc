"""Domain models for the productivity tracker."""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional
import uuid


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TaskStatus(Enum):
    """Task status values."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    PAUSED = "paused"
    CANCELLED = "cancelled"


class TaskPriority(Enum):
    """Task priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def is_high(self) -> bool:
        """High and critical both count as high priority."""
        return self in (TaskPriority.HIGH, TaskPriority.CRITICAL)


class InsightType(Enum):
    """Category of a generated insight."""

    PRODUCTIVITY_TIP = "productivity_tip"
    TASK_PRIORITIZATION = "task_prioritization"
    TIME_MANAGEMENT = "time_management"
    PATTERN_RECOGNITION = "pattern_recognition"
    ACCOUNTABILITY = "accountability"


class NotificationType(Enum):
    """Category of a user-facing notification."""

    ACCOUNTABILITY = "accountability"
    TASK_REMINDER = "task_reminder"
    DEADLINE = "deadline"
    ACHIEVEMENT = "achievement"
    COMMUNICATION = "communication"
    INSIGHT = "insight"


@dataclass(frozen=True)
class TaskId:
    """Value object for task identification."""

    value: str

    @classmethod
    def generate(cls) -> "TaskId":
        """Generate a new unique TaskId."""
        return cls(str(uuid.uuid4()))

    def __str__(self) -> str:
        return self.value


@dataclass
class CreateTaskRequest:
    """Fields supplied when creating a task."""

    title: str
    priority: TaskPriority = TaskPriority.MEDIUM
    category: str = "general"
    estimated_time: int = 0
    description: Optional[str] = None
    due_date: Optional[datetime] = None


@dataclass
class UpdateTaskRequest:
    """Partial update; None means the field is left unchanged."""

    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    category: Optional[str] = None
    estimated_time: Optional[int] = None
    actual_time: Optional[int] = None
    due_date: Optional[datetime] = None


@dataclass
class Task:
    """Core task entity."""

    id: TaskId
    title: str
    priority: TaskPriority
    status: TaskStatus
    category: str
    estimated_time: int
    created_at: datetime
    updated_at: datetime
    description: Optional[str] = None
    actual_time: Optional[int] = None
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @classmethod
    def create(
        cls, request: CreateTaskRequest, now: Optional[datetime] = None
    ) -> "Task":
        """Build a new pending task from a creation request."""
        now = now or utcnow()
        return cls(
            id=TaskId.generate(),
            title=request.title,
            description=request.description,
            priority=request.priority,
            status=TaskStatus.PENDING,
            category=request.category,
            estimated_time=request.estimated_time,
            actual_time=None,
            due_date=ensure_utc(request.due_date),
            created_at=now,
            updated_at=now,
            completed_at=None,
        )

    def apply_update(
        self, request: UpdateTaskRequest, now: Optional[datetime] = None
    ) -> "Task":
        """Return a copy with every supplied field overwritten.

        The first transition into COMPLETED stamps ``completed_at``. Moving
        out of COMPLETED, or completing the task again later, leaves the
        original stamp in place. ``updated_at`` is refreshed even when no
        field changed.
        """
        now = now or utcnow()
        changes = {
            name: value
            for name, value in vars(request).items()
            if value is not None
        }
        if "due_date" in changes:
            changes["due_date"] = ensure_utc(changes["due_date"])

        new_status = changes.get("status")
        if (
            new_status == TaskStatus.COMPLETED
            and self.status != TaskStatus.COMPLETED
            and self.completed_at is None
        ):
            changes["completed_at"] = now

        changes["updated_at"] = max(now, self.updated_at)
        return replace(self, **changes)

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        """Check if task is overdue."""
        if not self.due_date:
            return False
        if self.status == TaskStatus.COMPLETED:
            return False
        return (now or utcnow()) > self.due_date

    def days_until_due(self, now: Optional[datetime] = None) -> Optional[int]:
        """Whole days until the due date, negative once it has passed."""
        if not self.due_date:
            return None
        delta = self.due_date - (now or utcnow())
        # timedelta.days floors; truncate toward zero instead
        return int(delta.total_seconds() / 86400)


@dataclass
class DailyProgress:
    """Per-day completion summary."""

    date: date
    completed: int = 0
    created: int = 0
    total_time: int = 0


@dataclass
class ProductivityStats:
    """Aggregate statistics over a task snapshot."""

    total_tasks: int
    completed_tasks: int
    pending_tasks: int
    overdue_tasks: int
    completion_rate: float
    average_completion_time: Optional[float] = None
    most_productive_hours: list[int] = field(default_factory=list)
    common_categories: list[str] = field(default_factory=list)
    weekly_progress: list[DailyProgress] = field(default_factory=list)


@dataclass(frozen=True)
class Insight:
    """A generated piece of guidance. Never mutated after creation."""

    id: str
    message: str
    insight_type: InsightType
    confidence: float
    created_at: datetime

    @classmethod
    def create(
        cls,
        message: str,
        insight_type: InsightType,
        confidence: float,
        now: Optional[datetime] = None,
    ) -> "Insight":
        return cls(
            id=str(uuid.uuid4()),
            message=message,
            insight_type=insight_type,
            confidence=confidence,
            created_at=now or utcnow(),
        )


@dataclass
class NotificationItem:
    """Record of a user-facing alert."""

    id: str
    title: str
    message: str
    notification_type: NotificationType
    created_at: datetime
    is_read: bool = False
    action_url: Optional[str] = None

    @classmethod
    def create(
        cls,
        title: str,
        message: str,
        notification_type: NotificationType,
        action_url: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "NotificationItem":
        return cls(
            id=str(uuid.uuid4()),
            title=title,
            message=message,
            notification_type=notification_type,
            created_at=now or utcnow(),
            is_read=False,
            action_url=action_url,
        )


@dataclass
class CommunicationActivity:
    """Status summary of one communication service."""

    service: str
    message_count: int = 0
    unread_count: int = 0
    last_activity: Optional[datetime] = None
    mentions: int = 0
    keywords_detected: list[str] = field(default_factory=list)
    # Managed by the store
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
