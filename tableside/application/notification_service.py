import logging
from datetime import datetime, timedelta
from typing import List, Optional

from tableside.core.errors import NotFoundError
from tableside.domain.models import Notification, utcnow
from tableside.interfaces.INotificationRepository import INotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    """Admin-facing read/unread list. This, not the websocket, is the source of truth."""

    def __init__(self, repo: INotificationRepository, retention_days: int = 3):
        self.repo = repo
        self.retention_days = retention_days

    def list_notifications(self, is_read: Optional[bool] = None) -> List[Notification]:
        return self.repo.list_notifications(is_read=is_read)

    def mark_read(self, notification_id: int) -> Notification:
        notification = self.repo.mark_read(notification_id)
        if notification is None:
            raise NotFoundError("Notification not found")
        return notification

    def mark_all_read(self) -> int:
        count = self.repo.mark_all_read()
        logger.info(f"Marked {count} notification(s) as read")
        return count

    def cleanup(self, now: Optional[datetime] = None) -> int:
        """Deletes read notifications older than the retention window."""
        cutoff = (now or utcnow()) - timedelta(days=self.retention_days)
        deleted = self.repo.delete_read_before(cutoff)
        logger.info(f"🧹 Deleted {deleted} old notification(s)")
        return deleted
