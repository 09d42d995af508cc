"""Tests for insight, notification, communication and event endpoints."""

import pytest
from datetime import timedelta
from fastapi.testclient import TestClient

from taskpulse.api.app import create_app
from taskpulse.communication import CommunicationManager
from taskpulse.container import get_container, reset_container
from taskpulse.domain.models import utcnow
from taskpulse.repositories.memory import InMemoryTaskStore


@pytest.fixture(autouse=True)
def setup_container():
    """Set up container with an in-memory store and fallback-only engine."""
    reset_container()
    container = get_container()
    container.configure_store(InMemoryTaskStore)
    container.configure_communication(lambda: CommunicationManager(gmail_enabled=True))
    yield
    reset_container()


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(create_app())


def create(client, **fields):
    response = client.post("/tasks", json={"title": "Task", **fields})
    assert response.status_code == 201
    return response.json()


class TestInsights:
    def test_generate_without_tasks(self, client):
        response = client.get("/insights")

        assert response.status_code == 200
        insights = response.json()["insights"]
        assert 1 <= len(insights) <= 3
        assert insights[0] == "Start by adding your daily tasks to track progress effectively."

    def test_generate_does_not_store(self, client):
        client.get("/insights")

        assert client.get("/insights/history").json()["total"] == 0

    def test_stats(self, client):
        done = create(client, category="work")
        create(client, category="work")
        client.patch(f"/tasks/{done['id']}", json={"status": "completed", "actual_time": 30})

        response = client.get("/insights/stats")

        assert response.status_code == 200
        data = response.json()
        assert data["total_tasks"] == 2
        assert data["completed_tasks"] == 1
        assert data["completion_rate"] == 50.0
        assert data["average_completion_time"] == 30.0
        assert data["common_categories"] == ["work"]
        assert len(data["weekly_progress"]) == 7

    def test_patterns(self, client):
        create(client, category="home", priority="high")

        response = client.get("/insights/patterns")

        assert response.json()["patterns"] == [
            "Most frequent category: home (1 tasks)",
            "100% of tasks are high priority",
        ]

    def test_accountability_creates_notification_and_event(self, client):
        response = client.post("/insights/accountability")

        assert response.status_code == 200
        message = response.json()["message"]
        notifications = client.get("/notifications").json()["notifications"]
        assert notifications[0]["title"] == "Accountability Check"
        assert notifications[0]["message"] == message

        events = client.get("/events").json()["events"]
        types = [e["type"] for e in events]
        assert "accountability_check" in types
        assert "notification" in types


class TestNotifications:
    def test_mark_read(self, client):
        client.post("/insights/accountability")
        item = client.get("/notifications").json()["notifications"][0]

        assert client.get("/notifications/unread-count").json()["unread"] == 1
        response = client.post(f"/notifications/{item['id']}/read")

        assert response.status_code == 204
        assert client.get("/notifications/unread-count").json()["unread"] == 0

    def test_mark_read_missing(self, client):
        assert client.post("/notifications/missing/read").status_code == 404

    def test_reminders_for_overdue(self, client):
        past = (utcnow() - timedelta(hours=3)).isoformat()
        create(client, title="Late", due_date=past)

        response = client.post("/notifications/reminders")

        assert response.json()["sent"] == 1
        notification = client.get("/notifications").json()["notifications"][0]
        assert notification["notification_type"] == "deadline"
        assert notification["message"] == "⚠️ Task 'Late' is overdue!"


class TestCommunication:
    def test_status_lists_known_services(self, client):
        response = client.get("/communication")

        assert response.status_code == 200
        services = {s["service"]: s["enabled"] for s in response.json()["services"]}
        assert services == {"gmail": True, "discord": False, "messenger": False}

    def test_sync(self, client):
        response = client.post("/communication/sync")

        assert [s["service"] for s in response.json()["services"]] == ["gmail"]
        events = client.get("/events").json()["events"]
        assert events[0]["type"] == "communication_synced"
        assert events[0]["payload"][0]["service"] == "gmail"

    def test_connect(self, client):
        response = client.post("/communication/messenger/connect")

        assert response.json()["message"] == "Messenger integration coming soon!"

    def test_connect_unknown(self, client):
        assert client.post("/communication/fax/connect").status_code == 400


class TestEvents:
    def test_empty(self, client):
        assert client.get("/events").json()["events"] == []

    def test_limit_returns_newest(self, client):
        client.post("/insights/accountability")

        events = client.get("/events", params={"limit": 1}).json()["events"]

        assert len(events) == 1
        assert events[0]["type"] == "accountability_check"
        assert isinstance(events[0]["payload"], str)
