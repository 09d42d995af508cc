"""Event bus between background jobs and the presentation layer."""

import asyncio
import logging
from collections import defaultdict, deque
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable

from .domain.models import utcnow

logger = logging.getLogger(__name__)

Handler = Callable[["Event"], Any]


class EventType(Enum):
    """Events published to subscribers."""

    ACCOUNTABILITY_CHECK = "accountability_check"
    INSIGHTS_UPDATED = "insights_updated"
    COMMUNICATION_SYNCED = "communication_synced"
    NOTIFICATION = "notification"


@dataclass(frozen=True)
class Event:
    """A published event and its payload."""

    type: EventType
    payload: Any
    created_at: datetime


class EventBus:
    """Broadcasts events to subscribed handlers.

    Handlers may be plain functions or coroutine functions. They run in
    subscription order; a handler that raises is logged and skipped.
    """

    def __init__(self, history_size: int = 100) -> None:
        self._handlers: dict[EventType, list[Handler]] = defaultdict(list)
        self._history: deque[Event] = deque(maxlen=history_size)

    def subscribe(self, event_type: EventType, handler: Handler) -> Callable[[], None]:
        """Register a handler, returning a function that removes it."""
        self._handlers[event_type].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)

        return unsubscribe

    async def publish(self, event_type: EventType, payload: Any) -> Event:
        """Deliver an event to every handler of its type."""
        event = Event(type=event_type, payload=payload, created_at=utcnow())
        self._history.append(event)

        for handler in list(self._handlers[event_type]):
            try:
                result = handler(event)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error(f"Event handler for {event_type.value} failed: {e}")

        logger.debug(f"Published {event_type.value}")
        return event

    def recent(self, limit: int = 20) -> list[Event]:
        """Most recent events first."""
        return list(reversed(self._history))[:limit]
