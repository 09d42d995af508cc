"""Communication service routes."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ...container import get_container
from ...domain.models import CommunicationActivity

router = APIRouter(prefix="/communication", tags=["communication"])


class ActivityResponse(BaseModel):
    """Communication activity snapshot."""

    service: str
    enabled: bool
    message_count: int
    unread_count: int
    mentions: int
    last_activity: Optional[datetime] = None
    keywords_detected: list[str] = Field(default_factory=list)


class ActivityListResponse(BaseModel):
    services: list[ActivityResponse]


class ConnectResponse(BaseModel):
    service: str
    message: str


def activity_to_response(activity: CommunicationActivity, enabled: bool) -> ActivityResponse:
    return ActivityResponse(
        service=activity.service,
        enabled=enabled,
        message_count=activity.message_count,
        unread_count=activity.unread_count,
        mentions=activity.mentions,
        last_activity=activity.last_activity,
        keywords_detected=activity.keywords_detected,
    )


@router.get("", response_model=ActivityListResponse)
async def communication_status() -> ActivityListResponse:
    """Current status of every known service."""
    manager = get_container().communication
    activities = await manager.get_status()

    return ActivityListResponse(
        services=[
            activity_to_response(a, manager.is_service_enabled(a.service))
            for a in activities
        ]
    )


@router.post("/sync", response_model=ActivityListResponse)
async def sync_communications() -> ActivityListResponse:
    """Sync enabled services, store the snapshots and alert on unread messages."""
    container = get_container()
    activities = await container.coach_service.sync_communications()

    return ActivityListResponse(
        services=[activity_to_response(a, True) for a in activities]
    )


@router.post("/{service}/connect", response_model=ConnectResponse)
async def connect_service(service: str) -> ConnectResponse:
    manager = get_container().communication
    try:
        message = await manager.connect_service(service)
    except ValueError as e:
        raise HTTPException(400, str(e))

    return ConnectResponse(service=service, message=message)
