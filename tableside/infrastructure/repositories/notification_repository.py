import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from tableside.core.errors import TransientError
from tableside.core.retry import retry_read
from tableside.domain.models import Notification, utcnow
from tableside.infrastructure.database import SessionLocal
from tableside.interfaces.INotificationRepository import INotificationRepository

logger = logging.getLogger(__name__)


class SqlNotificationRepository(INotificationRepository):

    def __init__(self, session_factory: sessionmaker = SessionLocal, read_attempts: int = 3, read_base_delay: float = 0.2):
        self.session_factory = session_factory
        self.read_attempts = read_attempts
        self.read_base_delay = read_base_delay

    def list_notifications(self, is_read: Optional[bool] = None) -> List[Notification]:
        def read():
            session = self.session_factory()
            try:
                query = session.query(Notification)
                if is_read is not None:
                    query = query.filter(Notification.is_read == is_read)
                return query.order_by(desc(Notification.created_at), desc(Notification.id)).all()
            finally:
                session.close()

        return retry_read(
            read,
            retry_on=(OperationalError,),
            attempts=self.read_attempts,
            base_delay=self.read_base_delay,
            description="Notification list",
        )

    def mark_read(self, notification_id: int) -> Optional[Notification]:
        session = self.session_factory()
        try:
            notification = session.get(Notification, notification_id)
            if notification is None:
                return None
            if not notification.is_read:
                notification.is_read = True
                notification.read_at = utcnow()
                session.commit()
            return notification
        except SQLAlchemyError as e:
            logger.error(f"❌ DB Error marking notification {notification_id}: {e}")
            session.rollback()
            raise TransientError("Could not update the notification.") from e
        finally:
            session.close()

    def mark_all_read(self) -> int:
        session = self.session_factory()
        try:
            count = (
                session.query(Notification)
                .filter(Notification.is_read.is_(False))
                .update({"is_read": True, "read_at": utcnow()}, synchronize_session=False)
            )
            session.commit()
            return count
        except SQLAlchemyError as e:
            logger.error(f"❌ DB Error marking all notifications: {e}")
            session.rollback()
            raise TransientError("Could not update notifications.") from e
        finally:
            session.close()

    def delete_read_before(self, cutoff: datetime) -> int:
        session = self.session_factory()
        try:
            count = (
                session.query(Notification)
                .filter(Notification.is_read.is_(True), Notification.created_at < cutoff)
                .delete(synchronize_session=False)
            )
            session.commit()
            return count
        except SQLAlchemyError as e:
            logger.error(f"❌ DB Error cleaning notifications: {e}")
            session.rollback()
            raise TransientError("Could not clean up notifications.") from e
        finally:
            session.close()
