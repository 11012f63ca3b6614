import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from starlette.concurrency import run_in_threadpool

from tableside.application.admin_console import AdminConsole
from tableside.application.checkout_service import CheckoutService
from tableside.interfaces.dependencies import get_admin_console, get_checkout_service, require_admin
from tableside.interfaces.schemas import (
    CompleteOrderRequest,
    CreateOrderRequest,
    OrderOut,
    OrderStatsOut,
    PaymentUpdateRequest,
    StatusUpdateRequest,
)

router = APIRouter(prefix="/orders", tags=["orders"])
logger = logging.getLogger(__name__)


@router.post("", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
async def create_order(body: CreateOrderRequest, checkout: CheckoutService = Depends(get_checkout_service)):
    customer_info = body.model_dump(exclude={"guest_id"}, exclude_none=True)
    return await checkout.create_order(body.guest_id, customer_info)


@router.get("", response_model=List[OrderOut])
def list_orders(
    status: Optional[str] = None,
    table_number: Optional[int] = Query(None, alias="tableNumber"),
    payment_status: Optional[str] = Query(None, alias="paymentStatus"),
    console: AdminConsole = Depends(get_admin_console),
):
    return console.list_orders(status=status, table_number=table_number, payment_status=payment_status)


@router.get("/stats", response_model=OrderStatsOut)
def order_stats(console: AdminConsole = Depends(get_admin_console)):
    return console.order_stats()


@router.get("/guest/{guest_id}", response_model=List[OrderOut])
def guest_orders(guest_id: str, checkout: CheckoutService = Depends(get_checkout_service)):
    return checkout.list_guest_orders(guest_id)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: int, checkout: CheckoutService = Depends(get_checkout_service)):
    return checkout.get_order(order_id)


# ---------------------------------------------------------
# ADMIN MUTATIONS
# ---------------------------------------------------------
@router.put("/{order_id}/status", response_model=OrderOut, dependencies=[Depends(require_admin)])
async def set_status(order_id: int, body: StatusUpdateRequest, console: AdminConsole = Depends(get_admin_console)):
    order = await run_in_threadpool(console.set_status, order_id, body.status)
    await console.push_to_guest(order, "order_status_updated")
    return order


@router.put("/{order_id}/payment", response_model=OrderOut, dependencies=[Depends(require_admin)])
async def set_payment_status(order_id: int, body: PaymentUpdateRequest, console: AdminConsole = Depends(get_admin_console)):
    order = await run_in_threadpool(console.set_payment_status, order_id, body.payment_status)
    await console.push_to_guest(order, "order_status_updated")
    return order


@router.put("/{order_id}/complete", response_model=OrderOut, dependencies=[Depends(require_admin)])
async def complete_order(order_id: int, body: CompleteOrderRequest, console: AdminConsole = Depends(get_admin_console)):
    order = await run_in_threadpool(console.complete_order, order_id, body.payment_method)
    await console.push_to_guest(order, "order_completed")
    return order
