"""Productivity analytics."""

from .stats import (
    analyze_patterns,
    average_completion_time,
    common_categories,
    compute_stats,
    most_frequent_category,
    most_productive_hours,
    summarize,
    weekly_progress,
)

__all__ = [
    "analyze_patterns",
    "average_completion_time",
    "common_categories",
    "compute_stats",
    "most_frequent_category",
    "most_productive_hours",
    "summarize",
    "weekly_progress",
]
