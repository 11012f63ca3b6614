from abc import ABC, abstractmethod
from typing import List, Optional

class ISessionStore(ABC):
    """Per-guest session data: the cart document and the table binding."""

    @abstractmethod
    def get_cart(self, guest_id: str) -> List[dict]:
        pass

    @abstractmethod
    def save_cart(self, guest_id: str, lines: List[dict]):
        pass

    @abstractmethod
    def delete_cart(self, guest_id: str):
        pass

    @abstractmethod
    def get_table(self, guest_id: str) -> Optional[int]:
        pass

    @abstractmethod
    def set_table(self, guest_id: str, table_number: int):
        pass

    @abstractmethod
    def delete_table(self, guest_id: str):
        pass
