from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from tableside.application.notification_service import NotificationService
from tableside.interfaces.dependencies import get_notification_service, require_admin
from tableside.interfaces.schemas import MessageOut, NotificationOut

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationOut])
def list_notifications(
    is_read: Optional[bool] = Query(None, alias="isRead"),
    notifications: NotificationService = Depends(get_notification_service),
):
    """Poll-on-reconnect source for admin clients. Newest first."""
    return notifications.list_notifications(is_read=is_read)


@router.put("/mark-all-read", response_model=MessageOut, dependencies=[Depends(require_admin)])
def mark_all_read(notifications: NotificationService = Depends(get_notification_service)):
    count = notifications.mark_all_read()
    return MessageOut(message="All notifications marked as read", count=count)


@router.put("/{notification_id}/read", response_model=NotificationOut, dependencies=[Depends(require_admin)])
def mark_read(notification_id: int, notifications: NotificationService = Depends(get_notification_service)):
    return notifications.mark_read(notification_id)


@router.delete("/cleanup", response_model=MessageOut, dependencies=[Depends(require_admin)])
def cleanup(notifications: NotificationService = Depends(get_notification_service)):
    deleted = notifications.cleanup()
    return MessageOut(message=f"Deleted {deleted} old notifications", count=deleted)
