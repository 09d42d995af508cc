"""Insight and accountability generation.

Each operation tries the remote language model when a client is
configured and falls back to deterministic, locally computed text when no
client is configured or the remote call fails.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Generic, Optional, Sequence, TypeVar

from ..analytics.stats import analyze_patterns
from ..domain.errors import RemoteServiceError
from ..domain.models import Task, TaskStatus, utcnow
from .client import ChatCompletionClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_INSIGHTS = 3

INSIGHTS_SYSTEM_PROMPT = (
    "You are an AI productivity coach that provides brief, actionable insights. "
    "Each insight should be under 100 characters and actionable."
)
ACCOUNTABILITY_SYSTEM_PROMPT = (
    "You are a supportive productivity coach. "
    "Create brief, encouraging check-in messages under 150 characters."
)


class GenerationSource(Enum):
    """Which path produced a result."""

    REMOTE = "remote"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class Generated(Generic[T]):
    """A generated value tagged with the path that produced it."""

    value: T
    source: GenerationSource


@dataclass(frozen=True)
class TaskCounts:
    """Counts the prompts and fallback rules are built from."""

    total: int
    completed: int
    high_priority_pending: int
    overdue: int

    @property
    def pending(self) -> int:
        return self.total - self.completed

    @property
    def completion_rate(self) -> float:
        return (self.completed / self.total) * 100 if self.total else 0.0

    @classmethod
    def from_tasks(cls, tasks: Sequence[Task], now: datetime) -> "TaskCounts":
        return cls(
            total=len(tasks),
            completed=sum(1 for t in tasks if t.status == TaskStatus.COMPLETED),
            high_priority_pending=sum(
                1 for t in tasks
                if t.priority.is_high and t.status != TaskStatus.COMPLETED
            ),
            overdue=sum(1 for t in tasks if t.is_overdue(now)),
        )


def time_of_day_insight(hour: int) -> Optional[str]:
    """Tip for the current hour bucket, None outside the buckets."""
    if 9 <= hour <= 11:
        return "Peak productivity hours: 9-11 AM. Use this time for challenging tasks."
    if 14 <= hour <= 16:
        return "Post-lunch dip is normal. Consider lighter tasks or a short break."
    if 17 <= hour <= 19:
        return "End of workday approaching. Review what you've accomplished today."
    return None


def fallback_insights(tasks: Sequence[Task], now: datetime) -> list[str]:
    """Rule-based insights; the same tasks and ``now`` give the same output."""
    counts = TaskCounts.from_tasks(tasks, now)
    insights: list[str] = []

    if counts.total == 0:
        insights.append("Start by adding your daily tasks to track progress effectively.")
    elif counts.completion_rate >= 80:
        insights.append(
            f"Excellent progress! You've completed {counts.completion_rate:.0f}% "
            f"of your tasks. 🎉"
        )
    elif counts.completion_rate >= 50:
        insights.append(
            f"Good momentum! Focus on completing the remaining {counts.pending} tasks."
        )
    elif counts.high_priority_pending > 0:
        insights.append(
            f"{counts.high_priority_pending} high-priority tasks need attention. "
            f"Consider tackling these first."
        )
    else:
        insights.append(
            "Break down large tasks into smaller, manageable chunks for better progress."
        )

    if counts.overdue > 0:
        insights.append(
            f"{counts.overdue} tasks are overdue. Prioritize these to get back on track."
        )

    tip = time_of_day_insight(now.hour)
    if tip:
        insights.append(tip)

    if not insights:
        insights.append(
            "Stay focused on your goals. Small consistent progress leads to big results!"
        )

    return insights[:MAX_INSIGHTS]


def fallback_accountability_message(completed: int, pending: int, now: datetime) -> str:
    """Pick one of five templates by ``int(now.timestamp()) % 5``.

    The choice changes every second and repeats every five seconds.
    """
    messages = [
        f"Great job completing {completed} tasks! {pending} more to go - you've got this! 💪",
        f"Time check! You've finished {completed} tasks. Which one will you tackle next?",
        f"Progress update: {completed}/{completed + pending} tasks done. "
        f"Keep up the momentum! 🚀",
        "Accountability moment: Focus on your next priority task. "
        "You're making solid progress! ✨",
        f"You're {completed} tasks closer to your goals! Stay focused and keep pushing forward.",
    ]
    return messages[int(now.timestamp()) % len(messages)]


def parse_insight_lines(content: str) -> list[str]:
    """Non-blank, stripped lines of a model reply, at most three."""
    lines = [line.strip() for line in content.splitlines()]
    return [line for line in lines if line][:MAX_INSIGHTS]


class InsightEngine:
    """Produces insights and accountability messages."""

    def __init__(
        self,
        client: Optional[ChatCompletionClient] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize the engine.

        Args:
            client: Remote model client; None means fallback only
            clock: Source of the current time
        """
        self._client = client
        self._clock = clock
        self._lock = asyncio.Lock()

    @property
    def has_remote(self) -> bool:
        """Whether a remote model is configured."""
        return self._client is not None

    async def _generate(
        self,
        name: str,
        remote: Callable[[ChatCompletionClient], Awaitable[T]],
        fallback: Callable[[], T],
    ) -> Generated[T]:
        if self._client is not None:
            try:
                async with self._lock:
                    value = await remote(self._client)
                return Generated(value, GenerationSource.REMOTE)
            except RemoteServiceError as e:
                logger.warning(f"Remote {name} generation failed, using fallback: {e}")
        return Generated(fallback(), GenerationSource.FALLBACK)

    async def generate_insights_result(self, tasks: Sequence[Task]) -> Generated[list[str]]:
        """Insights tagged with the path that produced them."""
        now = self._clock()
        counts = TaskCounts.from_tasks(tasks, now)

        async def remote(client: ChatCompletionClient) -> list[str]:
            prompt = (
                "Analyze this productivity data and provide 3 brief, actionable insights "
                "(each under 100 characters):\n\n"
                "Tasks Status:\n"
                f"- Total tasks: {counts.total}\n"
                f"- Completed: {counts.completed}\n"
                f"- High priority pending: {counts.high_priority_pending}\n"
                f"- Overdue: {counts.overdue}\n\n"
                "Focus on task completion strategies, time management, and motivation. "
                "Keep responses concise and encouraging."
            )
            content = await client.complete(
                INSIGHTS_SYSTEM_PROMPT, prompt, max_tokens=300, temperature=0.7
            )
            insights = parse_insight_lines(content)
            if not insights:
                raise RemoteServiceError("Language model returned no insights")
            logger.info(f"Generated {len(insights)} AI insights")
            return insights

        return await self._generate(
            "insights", remote, lambda: fallback_insights(tasks, now)
        )

    async def generate_insights(self, tasks: Sequence[Task]) -> list[str]:
        """Between one and three short insights."""
        result = await self.generate_insights_result(tasks)
        return result.value

    async def generate_accountability_result(self, tasks: Sequence[Task]) -> Generated[str]:
        """Accountability message tagged with the path that produced it."""
        now = self._clock()
        completed = sum(1 for t in tasks if t.status == TaskStatus.COMPLETED)
        pending = len(tasks) - completed

        async def remote(client: ChatCompletionClient) -> str:
            prompt = (
                "Generate a brief, encouraging accountability check-in message "
                "(under 150 characters) based on:\n"
                f"- {completed} completed tasks\n"
                f"- {pending} pending tasks\n"
                f"- Current time: {now.strftime('%H:%M')}\n\n"
                "Keep it motivating, specific, and actionable."
            )
            content = await client.complete(
                ACCOUNTABILITY_SYSTEM_PROMPT, prompt, max_tokens=100, temperature=0.8
            )
            message = content.strip()
            if not message:
                raise RemoteServiceError("Language model returned an empty message")
            return message

        return await self._generate(
            "accountability",
            remote,
            lambda: fallback_accountability_message(completed, pending, now),
        )

    async def generate_accountability_message(self, tasks: Sequence[Task]) -> str:
        """A short check-in nudging the user toward their next task."""
        result = await self.generate_accountability_result(tasks)
        return result.value

    def analyze_productivity_patterns(self, tasks: Sequence[Task]) -> list[str]:
        """Behavioural patterns in the task snapshot."""
        return analyze_patterns(tasks)
