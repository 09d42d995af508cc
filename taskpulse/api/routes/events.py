"""Recent event routes."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Query
from pydantic import BaseModel

from ...container import get_container
from ...domain.models import CommunicationActivity, NotificationItem
from ...events import Event

router = APIRouter(prefix="/events", tags=["events"])


class EventResponse(BaseModel):
    type: str
    payload: Any
    created_at: datetime


class EventListResponse(BaseModel):
    events: list[EventResponse]


def _payload(value: Any) -> Any:
    """Reduce an event payload to JSON-friendly values."""
    if isinstance(value, NotificationItem):
        return {
            "id": value.id,
            "title": value.title,
            "message": value.message,
            "notification_type": value.notification_type.value,
        }
    if isinstance(value, CommunicationActivity):
        return {
            "service": value.service,
            "message_count": value.message_count,
            "unread_count": value.unread_count,
            "mentions": value.mentions,
        }
    if isinstance(value, list):
        return [_payload(v) for v in value]
    return value


def event_to_response(event: Event) -> EventResponse:
    return EventResponse(
        type=event.type.value,
        payload=_payload(event.payload),
        created_at=event.created_at,
    )


@router.get("", response_model=EventListResponse)
async def recent_events(limit: int = Query(20, ge=1, le=100)) -> EventListResponse:
    """Most recent events first."""
    events = get_container().events.recent(limit)
    return EventListResponse(events=[event_to_response(e) for e in events])
