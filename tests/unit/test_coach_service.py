"""Tests for CoachService workflows."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from taskpulse.ai.engine import InsightEngine, fallback_accountability_message
from taskpulse.communication import CommunicationManager
from taskpulse.domain.errors import RemoteServiceError
from taskpulse.domain.models import (
    CommunicationActivity,
    InsightType,
    NotificationType,
    TaskStatus,
)
from taskpulse.events import EventBus, EventType
from taskpulse.repositories.memory import InMemoryTaskStore
from taskpulse.services import CoachService, NotificationService


@pytest.fixture
def store(clock):
    return InMemoryTaskStore(clock=clock)


@pytest.fixture
def events():
    return EventBus()


@pytest.fixture
def notifications(store, events, clock):
    return NotificationService(store, [], events, clock=clock)


def build_service(store, events, notifications, clock, engine=None, communication=None):
    return CoachService(
        store=store,
        engine=engine or InsightEngine(clock=clock),
        notifications=notifications,
        communication=communication or CommunicationManager(clock=clock),
        events=events,
        clock=clock,
    )


@pytest.fixture
def service(store, events, notifications, clock):
    return build_service(store, events, notifications, clock)


class TestAccountabilityCheck:
    @pytest.mark.asyncio
    async def test_notifies_and_publishes(self, service, store, events, task_factory, now):
        await store.create_task(task_factory(status=TaskStatus.COMPLETED))
        await store.create_task(task_factory())
        published = []
        events.subscribe(EventType.ACCOUNTABILITY_CHECK, published.append)

        message = await service.perform_accountability_check()

        assert message == fallback_accountability_message(1, 1, now)
        assert published[0].payload == message
        stored = await store.list_notifications()
        assert stored[0].notification_type == NotificationType.ACCOUNTABILITY
        assert stored[0].message == message


class TestRefreshInsights:
    @pytest.mark.asyncio
    async def test_fallback_insights_saved_with_low_confidence(self, service, store, events):
        published = []
        events.subscribe(EventType.INSIGHTS_UPDATED, published.append)

        insights = await service.refresh_insights()

        stored = await store.list_insights()
        assert {i.message for i in stored} == set(insights)
        assert all(i.confidence == 0.6 for i in stored)
        assert all(i.insight_type == InsightType.PRODUCTIVITY_TIP for i in stored)
        assert published[0].payload == insights

    @pytest.mark.asyncio
    async def test_remote_insights_saved_with_high_confidence(
        self, store, events, notifications, clock
    ):
        client = MagicMock()
        client.complete = AsyncMock(return_value="One\nTwo")
        service = build_service(
            store, events, notifications, clock, engine=InsightEngine(client, clock=clock)
        )

        insights = await service.refresh_insights()

        assert insights == ["One", "Two"]
        assert all(i.confidence == 0.8 for i in await store.list_insights())

    @pytest.mark.asyncio
    async def test_remote_failure_still_saves_fallback(self, store, events, notifications, clock):
        client = MagicMock()
        client.complete = AsyncMock(side_effect=RemoteServiceError("down"))
        service = build_service(
            store, events, notifications, clock, engine=InsightEngine(client, clock=clock)
        )

        insights = await service.refresh_insights()

        assert insights
        assert all(i.confidence == 0.6 for i in await store.list_insights())

    @pytest.mark.asyncio
    async def test_generate_does_not_persist(self, service, store):
        await service.generate_insights()

        assert await store.list_insights() == []


class TestSyncCommunications:
    @pytest.mark.asyncio
    async def test_stores_alerts_and_publishes(self, store, events, notifications, clock, now):
        connector = MagicMock()
        connector.service = "gmail"
        connector.fetch_activity = AsyncMock(
            return_value=CommunicationActivity(service="gmail", unread_count=3)
        )
        manager = CommunicationManager(
            gmail_enabled=True, discord_enabled=True, connectors=[connector], clock=clock
        )
        service = build_service(store, events, notifications, clock, communication=manager)
        published = []
        events.subscribe(EventType.COMMUNICATION_SYNCED, published.append)

        stored = await service.sync_communications()

        assert [a.service for a in stored] == ["gmail", "discord"]
        assert stored[0].created_at == now
        alerts = await store.list_notifications()
        assert len(alerts) == 1
        assert alerts[0].message == "📧 3 new emails require attention"
        assert published[0].payload == stored

    @pytest.mark.asyncio
    async def test_alerts_only_when_unread_grows(self, store, events, notifications, clock):
        connector = MagicMock()
        connector.service = "gmail"
        connector.fetch_activity = AsyncMock(
            side_effect=[
                CommunicationActivity(service="gmail", unread_count=3),
                CommunicationActivity(service="gmail", unread_count=3),
                CommunicationActivity(service="gmail", unread_count=1),
                CommunicationActivity(service="gmail", unread_count=4),
            ]
        )
        manager = CommunicationManager(gmail_enabled=True, connectors=[connector], clock=clock)
        service = build_service(store, events, notifications, clock, communication=manager)

        for _ in range(4):
            await service.sync_communications()

        alerts = await store.list_notifications()
        assert len(alerts) == 2
        assert {a.message for a in alerts} == {
            "📧 3 new emails require attention",
            "📧 4 new emails require attention",
        }


class TestStatsAndPatterns:
    @pytest.mark.asyncio
    async def test_stats(self, service, store, task_factory):
        await store.create_task(task_factory(category="work", status=TaskStatus.COMPLETED))
        await store.create_task(task_factory(category="work"))

        result = await service.productivity_stats()

        assert result.total_tasks == 2
        assert result.completion_rate == 50.0
        assert result.common_categories == ["work"]
        assert len(result.weekly_progress) == 7

    @pytest.mark.asyncio
    async def test_patterns(self, service, store, task_factory):
        await store.create_task(task_factory(category="home"))

        assert await service.productivity_patterns() == [
            "Most frequent category: home (1 tasks)"
        ]
