import logging
from typing import List, Optional, Tuple

from tableside.core.errors import NotFoundError, TransientError, ValidationError
from tableside.domain.cart import CartLine, SelectedSize, make_unique_key
from tableside.interfaces.IMenuRepository import IMenuRepository
from tableside.interfaces.ISessionStore import ISessionStore

logger = logging.getLogger(__name__)


class CartService:
    """
    Guest carts. A cart has exactly one writer (its guest session), so
    every mutation is read-snapshot -> change in memory -> one write back.
    If the write fails the stored snapshot is untouched.
    """

    def __init__(self, store: ISessionStore, menu_repo: IMenuRepository):
        self.store = store
        self.menu_repo = menu_repo

    # --- Reads ---

    def get_cart(self, guest_id: str) -> List[CartLine]:
        return [CartLine.from_dict(raw) for raw in self.store.get_cart(guest_id)]

    def get_table(self, guest_id: str) -> Optional[int]:
        return self.store.get_table(guest_id)

    # --- Mutations ---

    def add_item(
        self,
        guest_id: str,
        menu_item_id: int,
        size_code: Optional[str] = None,
        qty: int = 1,
        table_number: Optional[int] = None,
    ) -> Tuple[CartLine, bool]:
        """Returns (line, created). Same (item, size) merges into one line."""
        if qty < 1:
            raise ValidationError("Quantity must be at least 1")

        item = self.menu_repo.get_item(menu_item_id)
        if item is None:
            raise NotFoundError("Menu item not found")
        if not item.available:
            raise ValidationError(f"'{item.name}' is currently unavailable")

        selected_size = None
        unit_price = item.price
        if item.has_sizes:
            if not size_code:
                raise ValidationError("Size selection is required for this item")
            size = item.find_size(size_code)
            if size is None:
                raise ValidationError(f"Size '{size_code}' is not offered for '{item.name}'")
            selected_size = SelectedSize(name=size["name"], code=size["code"], price=size["price"])
            unit_price = size["price"]
        elif size_code:
            raise ValidationError(f"'{item.name}' does not come in sizes")

        if unit_price is None or unit_price <= 0:
            raise ValidationError("Valid price is required")

        if table_number is not None:
            self.check_table(table_number)
        bound_table = table_number if table_number is not None else self.store.get_table(guest_id)

        snapshot = self.store.get_cart(guest_id)
        lines = [CartLine.from_dict(raw) for raw in snapshot]
        unique_key = make_unique_key(item.id, selected_size.code if selected_size else None)

        for line in lines:
            if line.unique_key == unique_key:
                line.quantity += qty
                if bound_table is not None:
                    line.table_number = bound_table
                line.touch()
                self._save_with_table(guest_id, lines, table_number, snapshot)
                logger.info(f"Cart {guest_id}: merged {qty}x {unique_key} -> {line.quantity}")
                return line, False

        line = CartLine(
            menu_item_id=item.id,
            name=item.name,
            display_name=f"{item.name} ({selected_size.name})" if selected_size else item.name,
            category=item.category or "",
            unit_price=unit_price,
            quantity=qty,
            unique_key=unique_key,
            selected_size=selected_size,
            table_number=bound_table,
        )
        lines.append(line)
        self._save_with_table(guest_id, lines, table_number, snapshot)
        logger.info(f"Cart {guest_id}: added {qty}x {unique_key}")
        return line, True

    def update_quantity(self, guest_id: str, line_id: str, delta: int) -> Optional[CartLine]:
        """Applies a relative change. Returns None when the line was removed."""
        lines = self.get_cart(guest_id)
        line = self._find(lines, line_id)
        return self._apply_quantity(guest_id, lines, line, line.quantity + delta)

    def set_quantity(self, guest_id: str, line_id: str, qty: int) -> Optional[CartLine]:
        lines = self.get_cart(guest_id)
        line = self._find(lines, line_id)
        return self._apply_quantity(guest_id, lines, line, qty)

    def remove_item(self, guest_id: str, line_id: str) -> CartLine:
        lines = self.get_cart(guest_id)
        line = self._find(lines, line_id)
        self._save(guest_id, [l for l in lines if l.id != line_id])
        logger.info(f"Cart {guest_id}: removed {line.unique_key}")
        return line

    def clear(self, guest_id: str):
        """Idempotent: clearing an empty cart is fine."""
        self.store.delete_cart(guest_id)
        logger.info(f"Cart {guest_id}: cleared")

    def bind_table(self, guest_id: str, table_number: int):
        self.check_table(table_number)
        self.store.set_table(guest_id, table_number)

    def unbind_table(self, guest_id: str):
        self.store.delete_table(guest_id)

    def check_table(self, table_number):
        if not isinstance(table_number, int) or isinstance(table_number, bool) or table_number < 1:
            raise ValidationError("Table number must be a positive integer")

    # --- Helpers ---

    def _save_with_table(self, guest_id: str, lines: List[CartLine], table_number: Optional[int], snapshot: List[dict]):
        """Cart write, then the optional table binding. A failed binding puts the old cart back."""
        self._save(guest_id, lines)
        if table_number is None:
            return
        try:
            self.store.set_table(guest_id, table_number)
        except TransientError:
            logger.warning(f"⚠️ Cart {guest_id}: table binding failed, restoring previous cart")
            self.store.save_cart(guest_id, snapshot)
            raise

    def _apply_quantity(self, guest_id: str, lines: List[CartLine], line: CartLine, new_qty: int) -> Optional[CartLine]:
        if new_qty <= 0:
            self._save(guest_id, [l for l in lines if l.id != line.id])
            logger.info(f"Cart {guest_id}: {line.unique_key} dropped to {new_qty}, removed")
            return None
        line.quantity = new_qty
        line.touch()
        self._save(guest_id, lines)
        return line

    def _find(self, lines: List[CartLine], line_id: str) -> CartLine:
        for line in lines:
            if line.id == line_id:
                return line
        raise NotFoundError("Cart item not found")

    def _save(self, guest_id: str, lines: List[CartLine]):
        self.store.save_cart(guest_id, [line.to_dict() for line in lines])
