"""SQLite implementation of the task store."""

import asyncio
import json
import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Generator, Optional, Sequence, TypeVar

from ..domain.errors import NotFoundError, StorageError
from ..domain.models import (
    CommunicationActivity,
    Insight,
    InsightType,
    NotificationItem,
    NotificationType,
    ProductivityStats,
    Task,
    TaskId,
    TaskPriority,
    TaskStatus,
    ensure_utc,
    utcnow,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS tasks (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        description TEXT,
        priority TEXT NOT NULL CHECK (priority IN ('low', 'medium', 'high', 'critical')),
        status TEXT NOT NULL CHECK (
            status IN ('pending', 'in_progress', 'completed', 'paused', 'cancelled')
        ),
        category TEXT NOT NULL,
        estimated_time INTEGER NOT NULL,
        actual_time INTEGER,
        due_date TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        completed_at TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_tasks_created_at ON tasks(created_at)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status)",
    """
    CREATE TABLE IF NOT EXISTS ai_insights (
        id TEXT PRIMARY KEY,
        message TEXT NOT NULL,
        insight_type TEXT NOT NULL,
        confidence REAL NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS notifications (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        message TEXT NOT NULL,
        notification_type TEXT NOT NULL,
        is_read INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        action_url TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS communication_activity (
        id TEXT PRIMARY KEY,
        service TEXT NOT NULL UNIQUE,
        message_count INTEGER NOT NULL DEFAULT 0,
        unread_count INTEGER NOT NULL DEFAULT 0,
        last_activity TEXT,
        mentions INTEGER NOT NULL DEFAULT 0,
        keywords_detected TEXT NOT NULL DEFAULT '[]',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
)


def _dt_to_db(value: Optional[datetime]) -> Optional[str]:
    # Fixed-width UTC text keeps lexicographic and chronological order equal
    if value is None:
        return None
    return ensure_utc(value).isoformat(timespec="microseconds")


def _dt_from_db(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    return ensure_utc(datetime.fromisoformat(value))


class SQLiteTaskStore:
    """TaskStore backed by a single SQLite database file.

    Every operation opens its own connection in a worker thread and is
    serialized by an ``asyncio.Lock``, so there is exactly one writer.
    """

    def __init__(
        self,
        db_path: str,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._db_path = os.path.expanduser(db_path)
        self._clock = clock
        self._lock = asyncio.Lock()
        try:
            os.makedirs(os.path.dirname(self._db_path) or ".", exist_ok=True)
            self._init_db()
        except (OSError, sqlite3.Error) as e:
            raise StorageError(f"Failed to initialize database: {e}") from e

    @property
    def db_path(self) -> str:
        return self._db_path

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        logger.info(f"Initializing database at {self._db_path}")
        with self._conn() as conn:
            for statement in _SCHEMA:
                conn.execute(statement)

    async def _run(self, func: Callable[..., T], *args: Any) -> T:
        """Run a blocking database call under the store lock."""
        async with self._lock:
            try:
                return await asyncio.to_thread(func, *args)
            except sqlite3.Error as e:
                logger.error(f"Database operation {func.__name__} failed: {e}")
                raise StorageError(str(e)) from e

    # Row mapping

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=TaskId(row["id"]),
            title=row["title"],
            description=row["description"],
            priority=TaskPriority(row["priority"]),
            status=TaskStatus(row["status"]),
            category=row["category"],
            estimated_time=int(row["estimated_time"]),
            actual_time=row["actual_time"],
            due_date=_dt_from_db(row["due_date"]),
            created_at=_dt_from_db(row["created_at"]),
            updated_at=_dt_from_db(row["updated_at"]),
            completed_at=_dt_from_db(row["completed_at"]),
        )

    @staticmethod
    def _task_params(task: Task) -> dict:
        return {
            "id": task.id.value,
            "title": task.title,
            "description": task.description,
            "priority": task.priority.value,
            "status": task.status.value,
            "category": task.category,
            "estimated_time": task.estimated_time,
            "actual_time": task.actual_time,
            "due_date": _dt_to_db(task.due_date),
            "created_at": _dt_to_db(task.created_at),
            "updated_at": _dt_to_db(task.updated_at),
            "completed_at": _dt_to_db(task.completed_at),
        }

    @staticmethod
    def _row_to_insight(row: sqlite3.Row) -> Insight:
        return Insight(
            id=row["id"],
            message=row["message"],
            insight_type=InsightType(row["insight_type"]),
            confidence=float(row["confidence"]),
            created_at=_dt_from_db(row["created_at"]),
        )

    @staticmethod
    def _row_to_notification(row: sqlite3.Row) -> NotificationItem:
        return NotificationItem(
            id=row["id"],
            title=row["title"],
            message=row["message"],
            notification_type=NotificationType(row["notification_type"]),
            is_read=bool(row["is_read"]),
            created_at=_dt_from_db(row["created_at"]),
            action_url=row["action_url"],
        )

    @staticmethod
    def _row_to_activity(row: sqlite3.Row) -> CommunicationActivity:
        try:
            keywords = json.loads(row["keywords_detected"] or "[]")
        except ValueError:
            logger.warning(f"Unreadable keywords for service {row['service']}")
            keywords = []
        return CommunicationActivity(
            service=row["service"],
            message_count=int(row["message_count"]),
            unread_count=int(row["unread_count"]),
            last_activity=_dt_from_db(row["last_activity"]),
            mentions=int(row["mentions"]),
            keywords_detected=keywords,
            created_at=_dt_from_db(row["created_at"]),
            updated_at=_dt_from_db(row["updated_at"]),
        )

    # Tasks

    async def create_task(self, task: Task) -> Task:
        def op() -> Task:
            with self._conn() as conn:
                conn.execute(
                    """
                    INSERT INTO tasks (
                        id, title, description, priority, status, category,
                        estimated_time, actual_time, due_date,
                        created_at, updated_at, completed_at
                    ) VALUES (
                        :id, :title, :description, :priority, :status, :category,
                        :estimated_time, :actual_time, :due_date,
                        :created_at, :updated_at, :completed_at
                    )
                    """,
                    self._task_params(task),
                )
            return task

        return await self._run(op)

    async def get_task(self, task_id: TaskId) -> Optional[Task]:
        def op() -> Optional[Task]:
            with self._conn() as conn:
                row = conn.execute(
                    "SELECT * FROM tasks WHERE id = ?", (task_id.value,)
                ).fetchone()
                return self._row_to_task(row) if row else None

        return await self._run(op)

    async def update_task(self, task: Task) -> Task:
        def op() -> Task:
            with self._conn() as conn:
                cur = conn.execute(
                    """
                    UPDATE tasks SET
                        title = :title, description = :description,
                        priority = :priority, status = :status,
                        category = :category, estimated_time = :estimated_time,
                        actual_time = :actual_time, due_date = :due_date,
                        updated_at = :updated_at, completed_at = :completed_at
                    WHERE id = :id
                    """,
                    self._task_params(task),
                )
                if cur.rowcount == 0:
                    raise NotFoundError(f"Task {task.id.value} not found")
            return task

        return await self._run(op)

    async def delete_task(self, task_id: TaskId) -> bool:
        def op() -> bool:
            with self._conn() as conn:
                cur = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id.value,))
                return cur.rowcount > 0

        return await self._run(op)

    def _select_tasks(self, where: str = "", params: tuple = (), order: str = "") -> list[Task]:
        order = order or "created_at DESC, id ASC"
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT * FROM tasks {where} ORDER BY {order}", params
            ).fetchall()
            return [self._row_to_task(r) for r in rows]

    async def list_tasks(self) -> Sequence[Task]:
        return await self._run(self._select_tasks)

    async def list_tasks_by_status(self, status: TaskStatus) -> Sequence[Task]:
        return await self._run(
            self._select_tasks, "WHERE status = ?", (status.value,)
        )

    async def list_overdue_tasks(self, now: datetime) -> Sequence[Task]:
        return await self._run(
            self._select_tasks,
            "WHERE due_date IS NOT NULL AND due_date < ? AND status != 'completed'",
            (_dt_to_db(now),),
            "due_date ASC, id ASC",
        )

    async def productivity_stats(self, now: datetime) -> ProductivityStats:
        def op() -> ProductivityStats:
            with self._conn() as conn:
                row = conn.execute(
                    """
                    SELECT
                        COUNT(*) AS total,
                        COALESCE(SUM(status = 'completed'), 0) AS completed,
                        COALESCE(SUM(status = 'pending'), 0) AS pending,
                        COALESCE(SUM(
                            due_date IS NOT NULL AND due_date < ?
                            AND status != 'completed'
                        ), 0) AS overdue
                    FROM tasks
                    """,
                    (_dt_to_db(now),),
                ).fetchone()
                average = conn.execute(
                    """
                    SELECT AVG(actual_time) FROM tasks
                    WHERE status = 'completed' AND actual_time IS NOT NULL
                    """
                ).fetchone()[0]

            total = int(row["total"])
            completed = int(row["completed"])
            return ProductivityStats(
                total_tasks=total,
                completed_tasks=completed,
                pending_tasks=int(row["pending"]),
                overdue_tasks=int(row["overdue"]),
                completion_rate=(completed / total) * 100 if total else 0.0,
                average_completion_time=float(average) if average is not None else None,
            )

        return await self._run(op)

    # Insights

    async def save_insight(self, insight: Insight) -> None:
        def op() -> None:
            with self._conn() as conn:
                conn.execute(
                    """
                    INSERT INTO ai_insights (id, message, insight_type, confidence, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        insight.id,
                        insight.message,
                        insight.insight_type.value,
                        insight.confidence,
                        _dt_to_db(insight.created_at),
                    ),
                )

        await self._run(op)

    async def list_insights(self, limit: int = 20) -> Sequence[Insight]:
        def op() -> list[Insight]:
            with self._conn() as conn:
                rows = conn.execute(
                    "SELECT * FROM ai_insights ORDER BY created_at DESC, rowid ASC LIMIT ?",
                    (max(limit, 0),),
                ).fetchall()
                return [self._row_to_insight(r) for r in rows]

        return await self._run(op)

    # Notifications

    async def save_notification(self, notification: NotificationItem) -> None:
        def op() -> None:
            with self._conn() as conn:
                conn.execute(
                    """
                    INSERT INTO notifications (
                        id, title, message, notification_type, is_read, created_at, action_url
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        notification.id,
                        notification.title,
                        notification.message,
                        notification.notification_type.value,
                        1 if notification.is_read else 0,
                        _dt_to_db(notification.created_at),
                        notification.action_url,
                    ),
                )

        await self._run(op)

    async def list_notifications(self, limit: int = 20) -> Sequence[NotificationItem]:
        def op() -> list[NotificationItem]:
            with self._conn() as conn:
                rows = conn.execute(
                    "SELECT * FROM notifications ORDER BY created_at DESC, rowid ASC LIMIT ?",
                    (max(limit, 0),),
                ).fetchall()
                return [self._row_to_notification(r) for r in rows]

        return await self._run(op)

    async def mark_notification_read(self, notification_id: str) -> bool:
        def op() -> bool:
            with self._conn() as conn:
                cur = conn.execute(
                    "UPDATE notifications SET is_read = 1 WHERE id = ?",
                    (notification_id,),
                )
                return cur.rowcount > 0

        return await self._run(op)

    async def count_unread_notifications(self) -> int:
        def op() -> int:
            with self._conn() as conn:
                return int(
                    conn.execute(
                        "SELECT COUNT(*) FROM notifications WHERE is_read = 0"
                    ).fetchone()[0]
                )

        return await self._run(op)

    # Communication activity

    async def save_communication_activity(
        self, activity: CommunicationActivity
    ) -> CommunicationActivity:
        """Upsert by service; created_at is written once and kept."""
        now = _dt_to_db(self._clock())

        def op() -> CommunicationActivity:
            with self._conn() as conn:
                conn.execute(
                    """
                    INSERT INTO communication_activity (
                        id, service, message_count, unread_count, last_activity,
                        mentions, keywords_detected, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        message_count = excluded.message_count,
                        unread_count = excluded.unread_count,
                        last_activity = excluded.last_activity,
                        mentions = excluded.mentions,
                        keywords_detected = excluded.keywords_detected,
                        updated_at = excluded.updated_at
                    """,
                    (
                        activity.service,
                        activity.service,
                        activity.message_count,
                        activity.unread_count,
                        _dt_to_db(activity.last_activity),
                        activity.mentions,
                        json.dumps(activity.keywords_detected),
                        now,
                        now,
                    ),
                )
                row = conn.execute(
                    "SELECT * FROM communication_activity WHERE service = ?",
                    (activity.service,),
                ).fetchone()
                return self._row_to_activity(row)

        return await self._run(op)

    async def list_communication_activity(self) -> Sequence[CommunicationActivity]:
        def op() -> list[CommunicationActivity]:
            with self._conn() as conn:
                rows = conn.execute(
                    "SELECT * FROM communication_activity ORDER BY updated_at DESC, service ASC"
                ).fetchall()
                return [self._row_to_activity(r) for r in rows]

        return await self._run(op)
