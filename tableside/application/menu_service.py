import logging
from typing import List, Optional

from tableside.core.errors import NotFoundError, ValidationError
from tableside.domain.models import MenuItem, validate_size_options
from tableside.interfaces.IMenuRepository import IMenuRepository

logger = logging.getLogger(__name__)


class MenuService:
    def __init__(self, repo: IMenuRepository):
        self.repo = repo

    def list_items(self, category: Optional[str] = None, available: Optional[bool] = None) -> List[MenuItem]:
        return self.repo.list_items(category=category, available=available)

    def get_item(self, item_id: int) -> MenuItem:
        item = self.repo.get_item(item_id)
        if item is None:
            raise NotFoundError("Menu item not found")
        return item

    def create_item(self, data: dict) -> MenuItem:
        _check_sizes(data.get("has_sizes", False), data.get("sizes") or [])
        item = self.repo.add_item(MenuItem(**data))
        logger.info(f"Menu item {item.id} '{item.name}' created")
        return item

    def update_item(self, item_id: int, changes: dict) -> MenuItem:
        current = self.get_item(item_id)
        has_sizes = changes.get("has_sizes", current.has_sizes)
        sizes = changes.get("sizes", current.sizes or [])
        _check_sizes(has_sizes, sizes)
        item = self.repo.update_item(item_id, changes)
        if item is None:
            raise NotFoundError("Menu item not found")
        return item

    def delete_item(self, item_id: int):
        if not self.repo.delete_item(item_id):
            raise NotFoundError("Menu item not found")
        logger.info(f"Menu item {item_id} deleted")


def _check_sizes(has_sizes: bool, sizes: list):
    if has_sizes and not sizes:
        raise ValidationError("An item with sizes needs at least one size option")
    errors = validate_size_options(sizes)
    if errors:
        raise ValidationError("; ".join(errors))
