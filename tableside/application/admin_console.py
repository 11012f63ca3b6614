import logging
from collections import Counter
from typing import Iterable, List, Optional

from tableside.domain.models import Order, utcnow
from tableside.domain.status import (
    OrderStatus,
    PaymentStatus,
    next_order_status,
    next_payment_status,
    parse_order_status,
    parse_payment_status,
)
from tableside.infrastructure.event_relay import EventRelay, guest_topic
from tableside.interfaces.IOrderRepository import IOrderRepository
from tableside.interfaces.schemas import OrderOut

logger = logging.getLogger(__name__)


class AdminConsole:
    def __init__(self, order_repo: IOrderRepository, relay: Optional[EventRelay] = None):
        self.order_repo = order_repo
        self.relay = relay

    def list_orders(
        self,
        status: Optional[str] = None,
        table_number: Optional[int] = None,
        payment_status: Optional[str] = None,
    ) -> List[Order]:
        """Newest first. Filters are validated before hitting the database."""
        if status:
            parse_order_status(status)
        if payment_status:
            parse_payment_status(payment_status)
        return self.order_repo.list_orders(
            status=status,
            table_number=table_number,
            payment_status=payment_status,
        )

    def set_status(self, order_id: int, status: str) -> Order:
        parse_order_status(status)

        def change(order: Order):
            _advance_status(order, status)

        order = self.order_repo.apply(order_id, change)
        logger.info(f"Order {order.order_number}: status -> {order.status}")
        return order

    def set_payment_status(self, order_id: int, payment_status: str) -> Order:
        parse_payment_status(payment_status)

        def change(order: Order):
            order.payment_status = next_payment_status(order.payment_status, payment_status).value

        order = self.order_repo.apply(order_id, change)
        logger.info(f"Order {order.order_number}: payment -> {order.payment_status}")
        return order

    def complete_order(self, order_id: int, payment_method: str = "cash") -> Order:
        """status=completed + paymentStatus=paid in one commit; both moves must be legal."""
        def change(order: Order):
            target_payment = next_payment_status(order.payment_status, PaymentStatus.PAID.value)
            _advance_status(order, OrderStatus.COMPLETED.value)
            order.payment_status = target_payment.value
            order.payment_method = payment_method or "cash"

        order = self.order_repo.apply(order_id, change)
        logger.info(f"✅ Order {order.order_number} completed ({order.payment_method})")
        return order

    async def push_to_guest(self, order: Order, event: str) -> int:
        """Best-effort: the guest can always fall back to GET /orders/guest/{id}."""
        if self.relay is None:
            return 0
        try:
            payload = OrderOut.model_validate(order).model_dump(mode="json", by_alias=True)
            return await self.relay.broadcast(event, payload, topic=guest_topic(order.guest_id))
        except Exception as e:
            logger.error(f"❌ Guest push failed for order {order.order_number}: {e}")
            return 0

    def order_stats(self, orders: Optional[Iterable[Order]] = None) -> dict:
        orders = list(orders) if orders is not None else self.order_repo.list_orders()
        total_revenue = round(sum(o.total for o in orders), 2)
        return {
            "total_orders": len(orders),
            "total_revenue": total_revenue,
            "total_items": sum(o.item_count or 0 for o in orders),
            "average_order_value": round(total_revenue / len(orders), 2) if orders else 0.0,
            "status_breakdown": dict(Counter(o.status for o in orders)),
            "payment_breakdown": dict(Counter(o.payment_status for o in orders)),
        }


def _advance_status(order: Order, status: str):
    target = next_order_status(order.status, status)
    if target.value == order.status:
        return
    order.status = target.value
    if target == OrderStatus.READY:
        order.ready_at = utcnow()
    elif target == OrderStatus.COMPLETED:
        order.completed_at = utcnow()
