import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from tableside.application.cart_service import CartService
from tableside.interfaces.dependencies import get_cart_service
from tableside.interfaces.schemas import (
    AddCartItemRequest,
    CartLineOut,
    CartUpdateOut,
    MessageOut,
    TableBindingOut,
    TableBindingRequest,
    UpdateCartItemRequest,
)

router = APIRouter(prefix="/cart", tags=["cart"])
logger = logging.getLogger(__name__)


@router.get("/{guest_id}", response_model=List[CartLineOut])
def get_cart(guest_id: str, carts: CartService = Depends(get_cart_service)):
    return carts.get_cart(guest_id)


@router.post("/{guest_id}/items", response_model=CartLineOut)
def add_item(
    guest_id: str,
    body: AddCartItemRequest,
    response: Response,
    carts: CartService = Depends(get_cart_service),
):
    """201 for a new line, 200 when merged into an existing (item, size) line."""
    line, created = carts.add_item(
        guest_id,
        menu_item_id=body.menu_item_id,
        size_code=body.size_code,
        qty=body.qty,
        table_number=body.table_number,
    )
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return line


@router.put("/{guest_id}/items/{line_id}", response_model=CartUpdateOut)
def update_item(
    guest_id: str,
    line_id: str,
    body: UpdateCartItemRequest,
    carts: CartService = Depends(get_cart_service),
):
    if body.delta is not None:
        line = carts.update_quantity(guest_id, line_id, body.delta)
    else:
        line = carts.set_quantity(guest_id, line_id, body.qty)
    return CartUpdateOut(
        id=line_id,
        removed=line is None,
        line=CartLineOut.model_validate(line) if line else None,
    )


@router.delete("/{guest_id}/items/{line_id}", response_model=MessageOut)
def remove_item(guest_id: str, line_id: str, carts: CartService = Depends(get_cart_service)):
    carts.remove_item(guest_id, line_id)
    return MessageOut(message="Cart item removed successfully")


@router.delete("/{guest_id}", response_model=MessageOut)
def clear_cart(guest_id: str, carts: CartService = Depends(get_cart_service)):
    carts.clear(guest_id)
    return MessageOut(message="Cart cleared successfully")


# ---------------------------------------------------------
# TABLE BINDING
# ---------------------------------------------------------
@router.get("/{guest_id}/table", response_model=TableBindingOut)
def get_table(guest_id: str, carts: CartService = Depends(get_cart_service)):
    return TableBindingOut(guest_id=guest_id, table_number=carts.get_table(guest_id))


@router.put("/{guest_id}/table", response_model=TableBindingOut)
def bind_table(guest_id: str, body: TableBindingRequest, carts: CartService = Depends(get_cart_service)):
    carts.bind_table(guest_id, body.table_number)
    return TableBindingOut(guest_id=guest_id, table_number=body.table_number)


@router.delete("/{guest_id}/table", response_model=TableBindingOut)
def unbind_table(guest_id: str, carts: CartService = Depends(get_cart_service)):
    carts.unbind_table(guest_id)
    return TableBindingOut(guest_id=guest_id, table_number=None)
