from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text

from tableside.domain.status import OrderStatus, PaymentStatus
from tableside.infrastructure.database import Base

PREDEFINED_SIZES = {
    "S": "Small",
    "M": "Medium",
    "L": "Large",
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_order_number(order_id: int, local_date: datetime) -> str:
    """Display label only. Uniqueness comes from the primary key, not from the label."""
    return f"ORD-{local_date.strftime('%Y%m%d')}-{order_id:04d}"


def validate_size_options(sizes: list[dict]) -> list[str]:
    errors = []
    seen = set()
    for index, size in enumerate(sizes, start=1):
        if not size.get("name"):
            errors.append(f"Size option {index}: Name is required")
        code = size.get("code")
        if not code:
            errors.append(f"Size option {index}: Code is required")
        elif code in seen:
            errors.append(f"Size option {index}: Duplicate code '{code}'")
        seen.add(code)
        price = size.get("price")
        if price is None or price < 0:
            errors.append(f"Size option {index}: Valid price is required")
    return errors


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, default="")
    category = Column(String, default="", index=True)
    price = Column(Float, nullable=False, default=0.0)
    has_sizes = Column(Boolean, default=False)
    # [{"name": "Medium", "code": "M", "price": 4.5, "available": true}]
    sizes = Column(JSON, default=list)
    available = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def find_size(self, code: str) -> dict | None:
        for size in self.sizes or []:
            if size.get("code") == code and size.get("available", True):
                return size
        return None


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String, unique=True, index=True)
    guest_id = Column(String, index=True, nullable=False)
    table_number = Column(Integer, index=True, nullable=False)

    customer_name = Column(String, default="Guest")
    customer_email = Column(String, default="")
    customer_phone = Column(String, default="")

    # Snapshot of the cart lines at checkout; never recomputed.
    items = Column(JSON, nullable=False)
    item_count = Column(Integer, default=0)

    subtotal = Column(Float, nullable=False)
    tax = Column(Float, default=0.0)
    discount = Column(Float, default=0.0)
    total = Column(Float, nullable=False)

    status = Column(String, default=OrderStatus.PENDING.value, index=True)
    payment_status = Column(String, default=PaymentStatus.UNPAID.value, index=True)
    payment_method = Column(String, default="cash")
    order_type = Column(String, default="dine-in")
    notes = Column(Text, default="")
    special_instructions = Column(Text, default="")

    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    ready_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    # Bumped on every UPDATE; a write based on a stale read matches no row and fails.
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), index=True, nullable=False)
    type = Column(String, default="new_order")
    table_number = Column(Integer)
    customer_name = Column(String, default="Guest")
    items = Column(JSON)
    item_count = Column(Integer, default=0)
    total = Column(Float)
    is_read = Column(Boolean, default=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    read_at = Column(DateTime(timezone=True), nullable=True)

    @classmethod
    def for_order(cls, order: Order) -> "Notification":
        return cls(
            order_id=order.id,
            type="new_order",
            table_number=order.table_number,
            customer_name=order.customer_name,
            items=order.items,
            item_count=order.item_count,
            total=order.total,
            is_read=False,
            created_at=order.created_at,
        )
