import enum

from tableside.core.errors import ConflictError, ValidationError


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    SERVED = "served"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PAID = "paid"
    REFUNDED = "refunded"


# Kitchen progression. An order may skip ahead, never go back.
ORDER_PROGRESSION = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.SERVED,
    OrderStatus.COMPLETED,
]

TERMINAL_ORDER_STATUSES = {OrderStatus.COMPLETED, OrderStatus.CANCELLED}

ORDER_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {}
for index, state in enumerate(ORDER_PROGRESSION):
    if state in TERMINAL_ORDER_STATUSES:
        ORDER_TRANSITIONS[state] = set()
    else:
        ORDER_TRANSITIONS[state] = set(ORDER_PROGRESSION[index + 1:]) | {OrderStatus.CANCELLED}
ORDER_TRANSITIONS[OrderStatus.CANCELLED] = set()

PAYMENT_TRANSITIONS: dict[PaymentStatus, set[PaymentStatus]] = {
    PaymentStatus.UNPAID: {PaymentStatus.PAID, PaymentStatus.REFUNDED},
    PaymentStatus.PAID: {PaymentStatus.REFUNDED},
    PaymentStatus.REFUNDED: set(),
}


def parse_order_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        valid = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(f"Invalid status. Must be one of: {valid}") from None


def parse_payment_status(value: str) -> PaymentStatus:
    try:
        return PaymentStatus(value)
    except ValueError:
        valid = ", ".join(s.value for s in PaymentStatus)
        raise ValidationError(f"Invalid payment status. Must be one of: {valid}") from None


def next_order_status(current: str, target: str) -> OrderStatus:
    """Returns the validated target; same-state is allowed as a no-op."""
    target_status = parse_order_status(target)
    current_status = OrderStatus(current)
    if target_status == current_status:
        return target_status
    if target_status not in ORDER_TRANSITIONS[current_status]:
        raise ConflictError(f"Cannot move order from '{current_status.value}' to '{target_status.value}'")
    return target_status


def next_payment_status(current: str, target: str) -> PaymentStatus:
    target_status = parse_payment_status(target)
    current_status = PaymentStatus(current)
    if target_status == current_status:
        return target_status
    if target_status not in PAYMENT_TRANSITIONS[current_status]:
        raise ConflictError(
            f"Cannot move payment from '{current_status.value}' to '{target_status.value}'"
        )
    return target_status
