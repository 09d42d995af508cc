"""Notification routes."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from ...container import get_container
from ...domain.models import NotificationItem

router = APIRouter(prefix="/notifications", tags=["notifications"])


class NotificationResponse(BaseModel):
    """Notification response model."""

    id: str
    title: str
    message: str
    notification_type: str
    created_at: datetime
    is_read: bool
    action_url: Optional[str] = None


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    total: int


class UnreadCountResponse(BaseModel):
    unread: int


class RemindersResponse(BaseModel):
    sent: int


def notification_to_response(item: NotificationItem) -> NotificationResponse:
    return NotificationResponse(
        id=item.id,
        title=item.title,
        message=item.message,
        notification_type=item.notification_type.value,
        created_at=item.created_at,
        is_read=item.is_read,
        action_url=item.action_url,
    )


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    limit: int = Query(20, ge=1, le=200),
) -> NotificationListResponse:
    """Recent notifications, newest first."""
    service = get_container().notification_service
    items = await service.list_notifications(limit)

    return NotificationListResponse(
        notifications=[notification_to_response(n) for n in items],
        total=len(items),
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count() -> UnreadCountResponse:
    service = get_container().notification_service
    return UnreadCountResponse(unread=await service.unread_count())


@router.post("/reminders", response_model=RemindersResponse)
async def send_reminders() -> RemindersResponse:
    """Send a reminder for every overdue task."""
    service = get_container().notification_service
    return RemindersResponse(sent=await service.send_overdue_reminders())


@router.post("/{notification_id}/read", status_code=204)
async def mark_read(notification_id: str) -> None:
    """Mark a notification as read."""
    service = get_container().notification_service

    if not await service.mark_read(notification_id):
        raise HTTPException(404, f"Notification not found: {notification_id}")
