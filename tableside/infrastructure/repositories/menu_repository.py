import logging
from typing import List, Optional

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from tableside.core.errors import TransientError
from tableside.core.retry import retry_read
from tableside.domain.models import MenuItem
from tableside.infrastructure.database import SessionLocal
from tableside.interfaces.IMenuRepository import IMenuRepository

logger = logging.getLogger(__name__)


class SqlMenuRepository(IMenuRepository):

    def __init__(self, session_factory: sessionmaker = SessionLocal, read_attempts: int = 3, read_base_delay: float = 0.2):
        self.session_factory = session_factory
        self.read_attempts = read_attempts
        self.read_base_delay = read_base_delay

    def _read(self, fn, description: str):
        def read():
            session = self.session_factory()
            try:
                return fn(session)
            finally:
                session.close()

        return retry_read(
            read,
            retry_on=(OperationalError,),
            attempts=self.read_attempts,
            base_delay=self.read_base_delay,
            description=description,
        )

    def get_item(self, item_id: int) -> Optional[MenuItem]:
        return self._read(lambda session: session.get(MenuItem, item_id), "Menu item read")

    def list_items(self, category: Optional[str] = None, available: Optional[bool] = None) -> List[MenuItem]:
        def query(session):
            q = session.query(MenuItem)
            if category:
                q = q.filter(MenuItem.category == category)
            if available is not None:
                q = q.filter(MenuItem.available == available)
            return q.order_by(MenuItem.category, MenuItem.name).all()

        return self._read(query, "Menu list")

    def add_item(self, item: MenuItem) -> MenuItem:
        session = self.session_factory()
        try:
            session.add(item)
            session.commit()
            return item
        except SQLAlchemyError as e:
            logger.error(f"❌ DB Error adding menu item: {e}")
            session.rollback()
            raise TransientError("Could not save the menu item.") from e
        finally:
            session.close()

    def update_item(self, item_id: int, changes: dict) -> Optional[MenuItem]:
        session = self.session_factory()
        try:
            item = session.get(MenuItem, item_id)
            if item is None:
                return None
            for field, value in changes.items():
                setattr(item, field, value)
            session.commit()
            return item
        except SQLAlchemyError as e:
            logger.error(f"❌ DB Error updating menu item {item_id}: {e}")
            session.rollback()
            raise TransientError("Could not update the menu item.") from e
        finally:
            session.close()

    def delete_item(self, item_id: int) -> bool:
        session = self.session_factory()
        try:
            item = session.get(MenuItem, item_id)
            if item is None:
                return False
            session.delete(item)
            session.commit()
            return True
        except SQLAlchemyError as e:
            logger.error(f"❌ DB Error deleting menu item {item_id}: {e}")
            session.rollback()
            raise TransientError("Could not delete the menu item.") from e
        finally:
            session.close()
