import asyncio
import logging
from datetime import datetime
from typing import List, Optional, Tuple

import pytz
from starlette.concurrency import run_in_threadpool

from tableside.application.cart_service import CartService
from tableside.core.errors import NotFoundError, TransientError, ValidationError
from tableside.domain.cart import cart_subtotal
from tableside.domain.models import Notification, Order
from tableside.domain.status import OrderStatus, PaymentStatus
from tableside.infrastructure.event_relay import EventRelay
from tableside.interfaces.IOrderRepository import IOrderRepository
from tableside.interfaces.schemas import NotificationOut

logger = logging.getLogger(__name__)


class CheckoutService:
    """
    Turns a guest cart into an immutable order.

    Order + notification are one SQL transaction, so the pollable
    notification list always covers every order. The session cleanup
    (cart, table binding) happens after the commit; if it fails the guest
    is queued and re-cleared in the background. The websocket push comes
    last and is best-effort.
    A table number passed at checkout is only used for this order; the
    session binding is cleared on success anyway.
    """

    def __init__(
        self,
        carts: CartService,
        order_repo: IOrderRepository,
        relay: EventRelay,
        timezone: str = "UTC",
        reclear_attempts: int = 5,
        reclear_base_delay: float = 1.0,
    ):
        self.carts = carts
        self.order_repo = order_repo
        self.relay = relay
        self.timezone = pytz.timezone(timezone)
        self.reclear_attempts = reclear_attempts
        self.reclear_base_delay = reclear_base_delay
        self.pending_clears: set[str] = set()
        self._tasks: set[asyncio.Task] = set()

    async def create_order(self, guest_id: str, customer_info: Optional[dict] = None) -> Order:
        # Store and database calls block, so they run off the event loop
        order, notification = await run_in_threadpool(self.place_order, guest_id, customer_info)

        if guest_id in self.pending_clears:
            self._schedule_reclear(guest_id)

        # --- PUSH ---
        try:
            payload = NotificationOut.model_validate(notification).model_dump(mode="json", by_alias=True)
            await self.relay.broadcast("new_order", payload)
        except Exception as e:
            logger.error(f"❌ Admin push failed for order {order.order_number}: {e}")

        return order

    def place_order(self, guest_id: str, customer_info: Optional[dict] = None) -> Tuple[Order, Notification]:
        """Gates, snapshot, persist, session cleanup. Nothing is written unless every gate passes."""
        info = dict(customer_info or {})

        # A previous checkout left this session dirty; its cart already became an order.
        if guest_id in self.pending_clears and not self.reclear(guest_id):
            raise TransientError("Your previous order is still being finalised. Please try again shortly.")

        # --- VALIDATION GATES ---
        table_number = info.pop("table_number", None)
        if table_number is not None:
            self.carts.check_table(table_number)
        else:
            table_number = self.carts.get_table(guest_id)
        if not table_number:
            raise ValidationError("missing table number")

        lines = self.carts.get_cart(guest_id)
        if not lines:
            raise ValidationError("empty cart")

        # --- SNAPSHOT ---
        subtotal = float(cart_subtotal(lines))
        order = Order(
            guest_id=guest_id,
            table_number=table_number,
            customer_name=info.get("customer_name") or "Guest",
            customer_email=info.get("customer_email") or "",
            customer_phone=info.get("customer_phone") or "",
            items=[line.to_order_line() for line in lines],
            item_count=sum(line.quantity for line in lines),
            subtotal=subtotal,
            tax=0.0,
            discount=0.0,
            total=subtotal,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.UNPAID.value,
            payment_method=info.get("payment_method") or "cash",
            order_type=info.get("order_type") or "dine-in",
            notes=info.get("notes") or "",
            special_instructions=info.get("special_instructions") or "",
        )

        # --- PERSIST (order + notification) ---
        order, notification = self.order_repo.save_order(order, datetime.now(self.timezone))
        logger.info(
            f"✅ Order {order.order_number} created for table {order.table_number} "
            f"({order.item_count} items, total {order.total:.2f})"
        )

        # --- SESSION CLEANUP ---
        self._clear_session(guest_id)
        return order, notification

    def get_order(self, order_id: int) -> Order:
        order = self.order_repo.get_order(order_id)
        if order is None:
            raise NotFoundError("Order not found")
        return order

    def list_guest_orders(self, guest_id: str) -> List[Order]:
        return self.order_repo.list_orders(guest_id=guest_id)

    # --- Compensation ---

    def reclear(self, guest_id: str) -> bool:
        try:
            self.carts.clear(guest_id)
            self.carts.unbind_table(guest_id)
        except TransientError as e:
            logger.warning(f"⚠️ Re-clear of session {guest_id} failed: {e}")
            return False
        self.pending_clears.discard(guest_id)
        return True

    async def flush_pending_clears(self) -> int:
        """Retries every queued session once. Returns how many are still dirty."""
        for guest_id in list(self.pending_clears):
            await run_in_threadpool(self.reclear, guest_id)
        return len(self.pending_clears)

    def _clear_session(self, guest_id: str):
        try:
            self.carts.clear(guest_id)
            self.carts.unbind_table(guest_id)
        except TransientError as e:
            logger.error(f"❌ Session cleanup failed for {guest_id} after checkout: {e}. Queued for re-clear.")
            self.pending_clears.add(guest_id)

    def _schedule_reclear(self, guest_id: str):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return  # No loop; flush_pending_clears() or the next checkout will pick it up
        task = loop.create_task(self._reclear_with_backoff(guest_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _reclear_with_backoff(self, guest_id: str):
        delay = self.reclear_base_delay
        for attempt in range(1, self.reclear_attempts + 1):
            await asyncio.sleep(delay)
            if guest_id not in self.pending_clears or await run_in_threadpool(self.reclear, guest_id):
                logger.info(f"✅ Session {guest_id} re-cleared (attempt {attempt})")
                return
            delay *= 2
        logger.error(f"❌ Session {guest_id} still dirty after {self.reclear_attempts} re-clear attempts")
