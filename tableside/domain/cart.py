import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def make_unique_key(menu_item_id: int, size_code: str | None) -> str:
    """Line identity inside one cart: one line per (menu item, size)."""
    return f"{menu_item_id}:{size_code or 'none'}"


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class SelectedSize:
    name: str
    code: str
    price: float


@dataclass
class CartLine:
    menu_item_id: int
    name: str
    unit_price: float
    quantity: int
    unique_key: str
    display_name: str = ""
    category: str = ""
    selected_size: SelectedSize | None = None
    table_number: int | None = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: str = field(default_factory=_now_iso)
    updated_at: str = field(default_factory=_now_iso)

    @property
    def line_total(self) -> Decimal:
        return money(money(self.unit_price) * self.quantity)

    def touch(self):
        self.updated_at = _now_iso()

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "CartLine":
        data = dict(data)
        size = data.pop("selected_size", None)
        return cls(selected_size=SelectedSize(**size) if size else None, **data)

    def to_order_line(self) -> dict:
        """Immutable snapshot stored inside an Order."""
        return {
            "menu_item_id": self.menu_item_id,
            "name": self.name,
            "display_name": self.display_name or self.name,
            "unit_price": float(money(self.unit_price)),
            "quantity": self.quantity,
            "selected_size": asdict(self.selected_size) if self.selected_size else None,
            "subtotal": float(self.line_total),
        }


def cart_subtotal(lines: list[CartLine]) -> Decimal:
    return sum((line.line_total for line in lines), Decimal("0.00"))
