import logging
from typing import Callable, List, Optional, Tuple

from sqlalchemy import desc
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from tableside.core.errors import AppError, ConflictError, NotFoundError, TransientError
from tableside.core.retry import retry_read
from tableside.domain.models import Notification, Order, format_order_number
from tableside.infrastructure.database import SessionLocal
from tableside.interfaces.IOrderRepository import IOrderRepository

logger = logging.getLogger(__name__)


class SqlOrderRepository(IOrderRepository):

    def __init__(self, session_factory: sessionmaker = SessionLocal, read_attempts: int = 3, read_base_delay: float = 0.2):
        self.session_factory = session_factory
        self.read_attempts = read_attempts
        self.read_base_delay = read_base_delay

    def save_order(self, order: Order, local_date) -> Tuple[Order, Notification]:
        session = self.session_factory()
        try:
            session.add(order)
            session.flush()  # Assigns order.id
            order.order_number = format_order_number(order.id, local_date)
            notification = Notification.for_order(order)
            session.add(notification)
            session.commit()
            return order, notification
        except SQLAlchemyError as e:
            logger.error(f"❌ DB Error saving order for guest {order.guest_id}: {e}")
            session.rollback()
            raise TransientError("Could not save the order. Please try again.") from e
        finally:
            session.close()

    def get_order(self, order_id: int) -> Optional[Order]:
        def read():
            session = self.session_factory()
            try:
                return session.get(Order, order_id)
            finally:
                session.close()

        return retry_read(
            read,
            retry_on=(OperationalError,),
            attempts=self.read_attempts,
            base_delay=self.read_base_delay,
            description="Order read",
        )

    def list_orders(
        self,
        status: Optional[str] = None,
        table_number: Optional[int] = None,
        payment_status: Optional[str] = None,
        guest_id: Optional[str] = None,
    ) -> List[Order]:
        """
        Retrieves orders matching every given filter.
        Ordered by created_at DESC (Newest first).
        """
        def read():
            session = self.session_factory()
            try:
                query = session.query(Order)
                if status:
                    query = query.filter(Order.status == status)
                if table_number is not None:
                    query = query.filter(Order.table_number == table_number)
                if payment_status:
                    query = query.filter(Order.payment_status == payment_status)
                if guest_id:
                    query = query.filter(Order.guest_id == guest_id)
                return query.order_by(desc(Order.created_at), desc(Order.id)).all()
            finally:
                session.close()

        return retry_read(
            read,
            retry_on=(OperationalError,),
            attempts=self.read_attempts,
            base_delay=self.read_base_delay,
            description="Order list",
        )

    def apply(self, order_id: int, change: Callable[[Order], None]) -> Order:
        session = self.session_factory()
        try:
            # Row lock where the backend has one; the version column catches the rest
            order = session.query(Order).filter_by(id=order_id).with_for_update().one_or_none()
            if order is None:
                raise NotFoundError("Order not found")
            change(order)
            session.commit()
            return order
        except AppError:
            session.rollback()
            raise
        except StaleDataError as e:
            logger.warning(f"⚠️ Order {order_id} changed underneath this update: {e}")
            session.rollback()
            raise ConflictError("Order was changed by another request. Reload and try again.") from e
        except SQLAlchemyError as e:
            logger.error(f"❌ DB Error updating order {order_id}: {e}")
            session.rollback()
            raise TransientError("Could not update the order. Please try again.") from e
        finally:
            session.close()
