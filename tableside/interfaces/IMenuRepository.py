from abc import ABC, abstractmethod
from typing import List, Optional

from tableside.domain.models import MenuItem

class IMenuRepository(ABC):
    @abstractmethod
    def get_item(self, item_id: int) -> Optional[MenuItem]:
        pass

    @abstractmethod
    def list_items(self, category: Optional[str] = None, available: Optional[bool] = None) -> List[MenuItem]:
        pass

    @abstractmethod
    def add_item(self, item: MenuItem) -> MenuItem:
        pass

    @abstractmethod
    def update_item(self, item_id: int, changes: dict) -> Optional[MenuItem]:
        pass

    @abstractmethod
    def delete_item(self, item_id: int) -> bool:
        pass
