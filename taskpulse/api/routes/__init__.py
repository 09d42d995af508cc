"""API route modules."""

from .tasks import router as tasks_router
from .insights import router as insights_router
from .notifications import router as notifications_router
from .communication import router as communication_router
from .events import router as events_router

__all__ = [
    "tasks_router",
    "insights_router",
    "notifications_router",
    "communication_router",
    "events_router",
]
