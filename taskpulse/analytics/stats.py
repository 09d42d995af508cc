"""Productivity statistics and behavioural patterns.

Everything here is a pure function of a task snapshot and, where time
matters, an explicit ``now``. Nothing is persisted or mutated.
"""

from collections import Counter
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional, Sequence

from ..domain.models import (
    DailyProgress,
    ProductivityStats,
    Task,
    TaskStatus,
)

TOP_CATEGORIES = 3
TOP_HOURS = 3
WEEK_DAYS = 7


def _completed_with_time(tasks: Sequence[Task]) -> list[Task]:
    return [
        t for t in tasks
        if t.status == TaskStatus.COMPLETED and t.actual_time is not None
    ]


def average_completion_time(tasks: Sequence[Task]) -> Optional[float]:
    """Mean actual time of completed tasks with a recorded time."""
    timed = _completed_with_time(tasks)
    if not timed:
        return None
    return sum(t.actual_time for t in timed) / len(timed)


def summarize(tasks: Sequence[Task], now: datetime) -> ProductivityStats:
    """Scalar counts, completion rate and average completion time."""
    total = len(tasks)
    completed = sum(1 for t in tasks if t.status == TaskStatus.COMPLETED)
    pending = sum(1 for t in tasks if t.status == TaskStatus.PENDING)
    overdue = sum(1 for t in tasks if t.is_overdue(now))

    completion_rate = (completed / total) * 100 if total else 0.0

    return ProductivityStats(
        total_tasks=total,
        completed_tasks=completed,
        pending_tasks=pending,
        overdue_tasks=overdue,
        completion_rate=completion_rate,
        average_completion_time=average_completion_time(tasks),
    )


def _ranked(counts: Counter) -> list:
    # Highest count first; equal counts in ascending key order
    return sorted(counts, key=lambda key: (-counts[key], key))


def common_categories(tasks: Sequence[Task], limit: int = TOP_CATEGORIES) -> list[str]:
    """Most used categories, ties broken lexicographically."""
    return _ranked(Counter(t.category for t in tasks))[:limit]


def most_productive_hours(tasks: Sequence[Task], limit: int = TOP_HOURS) -> list[int]:
    """Hours of day with the most completions, ties broken by earlier hour."""
    hours = Counter(t.completed_at.hour for t in tasks if t.completed_at)
    return _ranked(hours)[:limit]


def weekly_progress(tasks: Sequence[Task], now: datetime) -> list[DailyProgress]:
    """Seven days of progress ending today, oldest first."""
    today = now.date()
    days = {
        today - timedelta(days=offset): DailyProgress(date=today - timedelta(days=offset))
        for offset in range(WEEK_DAYS - 1, -1, -1)
    }

    for task in tasks:
        created = days.get(task.created_at.date())
        if created:
            created.created += 1
        if task.completed_at:
            done = days.get(task.completed_at.date())
            if done:
                done.completed += 1
                done.total_time += task.actual_time or 0

    return list(days.values())


def compute_stats(tasks: Sequence[Task], now: datetime) -> ProductivityStats:
    """Full productivity statistics for a task snapshot."""
    return replace(
        summarize(tasks, now),
        most_productive_hours=most_productive_hours(tasks),
        common_categories=common_categories(tasks),
        weekly_progress=weekly_progress(tasks, now),
    )


def most_frequent_category(tasks: Sequence[Task]) -> Optional[tuple[str, int]]:
    """Category with the highest count.

    When several categories share the maximum the lexicographically
    smallest name wins, so the result never depends on input order.
    """
    counts = Counter(t.category for t in tasks)
    if not counts:
        return None
    name = _ranked(counts)[0]
    return name, counts[name]


def analyze_patterns(tasks: Sequence[Task]) -> list[str]:
    """Human-readable findings, in detection order."""
    patterns: list[str] = []

    frequent = most_frequent_category(tasks)
    if frequent:
        name, count = frequent
        patterns.append(f"Most frequent category: {name} ({count} tasks)")

    average = average_completion_time(tasks)
    if average is not None:
        patterns.append(f"Average completion time: {average:.1f} minutes")

    high_priority = sum(1 for t in tasks if t.priority.is_high)
    if high_priority > 0:
        percentage = high_priority / len(tasks) * 100
        patterns.append(f"{percentage:.0f}% of tasks are high priority")

    return patterns
