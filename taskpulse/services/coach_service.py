"""Coaching workflows: accountability checks, insight refresh, communication sync.

These are the bodies of the scheduled jobs and of the matching user
commands. Each one snapshots the store, runs a generator or connector, and
publishes the outcome. The steps are not atomic as a whole: a task deleted
mid-way only makes the resulting message slightly stale.
"""

import logging
from datetime import datetime
from typing import Callable, Sequence

from ..ai.engine import GenerationSource, InsightEngine
from ..analytics.stats import compute_stats
from ..communication.manager import CommunicationManager
from ..domain.models import (
    CommunicationActivity,
    Insight,
    InsightType,
    ProductivityStats,
    utcnow,
)
from ..domain.protocols import TaskStore
from ..events import EventBus, EventType
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

CONFIDENCE = {
    GenerationSource.REMOTE: 0.8,
    GenerationSource.FALLBACK: 0.6,
}


class CoachService:
    """Drives the insight engine and publishes its results."""

    def __init__(
        self,
        store: TaskStore,
        engine: InsightEngine,
        notifications: NotificationService,
        communication: CommunicationManager,
        events: EventBus,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._engine = engine
        self._notifications = notifications
        self._communication = communication
        self._events = events
        self._clock = clock

    async def productivity_stats(self) -> ProductivityStats:
        """Full statistics over the current tasks."""
        tasks = await self._store.list_tasks()
        return compute_stats(tasks, self._clock())

    async def productivity_patterns(self) -> list[str]:
        tasks = await self._store.list_tasks()
        return self._engine.analyze_productivity_patterns(tasks)

    async def generate_insights(self) -> list[str]:
        """Generate insights without persisting them."""
        tasks = await self._store.list_tasks()
        return await self._engine.generate_insights(tasks)

    async def perform_accountability_check(self) -> str:
        """Generate a check-in, notify the user and publish it."""
        tasks = await self._store.list_tasks()
        message = await self._engine.generate_accountability_message(tasks)

        await self._notifications.send_accountability(message)
        await self._events.publish(EventType.ACCOUNTABILITY_CHECK, message)

        logger.info("Accountability check completed")
        return message

    async def refresh_insights(self) -> list[str]:
        """Generate, store and publish a fresh set of insights."""
        tasks = await self._store.list_tasks()
        result = await self._engine.generate_insights_result(tasks)

        now = self._clock()
        for message in result.value:
            await self._store.save_insight(
                Insight.create(
                    message,
                    InsightType.PRODUCTIVITY_TIP,
                    CONFIDENCE[result.source],
                    now=now,
                )
            )

        await self._events.publish(EventType.INSIGHTS_UPDATED, result.value)
        logger.info(f"AI insights refreshed ({result.source.value})")
        return result.value

    async def sync_communications(self) -> list[CommunicationActivity]:
        """Sync connectors, store snapshots and alert on unread messages.

        A service is alerted only when its unread count grew since the last
        stored snapshot, so an unchanged inbox does not repeat the alert.
        """
        activities = await self._communication.sync_all()
        previous = {
            a.service: a.unread_count
            for a in await self._store.list_communication_activity()
        }

        stored = []
        for activity in activities:
            stored.append(await self._store.save_communication_activity(activity))

        for activity in stored:
            if activity.unread_count > previous.get(activity.service, 0):
                await self._notifications.send_communication_alert(
                    activity.service, activity.unread_count
                )

        await self._events.publish(EventType.COMMUNICATION_SYNCED, stored)
        logger.info(f"Communication sync completed ({len(stored)} services)")
        return stored

    async def recent_insights(self, limit: int = 20) -> Sequence[Insight]:
        return await self._store.list_insights(limit)
