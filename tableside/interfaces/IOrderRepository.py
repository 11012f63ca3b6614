from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

from tableside.domain.models import Notification, Order

class IOrderRepository(ABC):
    @abstractmethod
    def save_order(self, order: Order, local_date) -> Tuple[Order, Notification]:
        """Persist the order and its notification in one transaction."""
        pass

    @abstractmethod
    def get_order(self, order_id: int) -> Optional[Order]:
        pass

    @abstractmethod
    def list_orders(
        self,
        status: Optional[str] = None,
        table_number: Optional[int] = None,
        payment_status: Optional[str] = None,
        guest_id: Optional[str] = None,
    ) -> List[Order]:
        pass

    @abstractmethod
    def apply(self, order_id: int, change: Callable[[Order], None]) -> Order:
        """Load, mutate and commit one order atomically."""
        pass
