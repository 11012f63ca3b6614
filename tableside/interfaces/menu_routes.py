from typing import List, Optional

from fastapi import APIRouter, Depends, status

from tableside.application.menu_service import MenuService
from tableside.interfaces.dependencies import get_menu_service, require_admin
from tableside.interfaces.schemas import MenuItemIn, MenuItemOut, MenuItemUpdate, MessageOut

router = APIRouter(prefix="/menu-items", tags=["menu"])


@router.get("", response_model=List[MenuItemOut])
def list_menu_items(
    category: Optional[str] = None,
    available: Optional[bool] = None,
    menu: MenuService = Depends(get_menu_service),
):
    return menu.list_items(category=category, available=available)


@router.get("/{item_id}", response_model=MenuItemOut)
def get_menu_item(item_id: int, menu: MenuService = Depends(get_menu_service)):
    return menu.get_item(item_id)


@router.post(
    "",
    response_model=MenuItemOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_menu_item(body: MenuItemIn, menu: MenuService = Depends(get_menu_service)):
    return menu.create_item(body.model_dump())


@router.put("/{item_id}", response_model=MenuItemOut, dependencies=[Depends(require_admin)])
def update_menu_item(item_id: int, body: MenuItemUpdate, menu: MenuService = Depends(get_menu_service)):
    return menu.update_item(item_id, body.model_dump(exclude_unset=True))


@router.delete("/{item_id}", response_model=MessageOut, dependencies=[Depends(require_admin)])
def delete_menu_item(item_id: int, menu: MenuService = Depends(get_menu_service)):
    menu.delete_item(item_id)
    return MessageOut(message="Menu item deleted successfully")
