from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """JSON uses camelCase; Python uses snake_case."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ---------------------------------------------------------
# MENU
# ---------------------------------------------------------
class SizeOption(CamelModel):
    name: str
    code: str
    price: float
    available: bool = True


class MenuItemIn(CamelModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    category: str = ""
    price: float = Field(0.0, ge=0)
    has_sizes: bool = False
    sizes: List[SizeOption] = []
    available: bool = True


class MenuItemUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    has_sizes: Optional[bool] = None
    sizes: Optional[List[SizeOption]] = None
    available: Optional[bool] = None


class MenuItemOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = ""
    category: Optional[str] = ""
    price: float
    has_sizes: bool
    sizes: List[SizeOption] = []
    available: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ---------------------------------------------------------
# CART
# ---------------------------------------------------------
class AddCartItemRequest(CamelModel):
    menu_item_id: int
    qty: int = Field(1, ge=1)
    size_code: Optional[str] = None
    table_number: Optional[int] = Field(None, ge=1)


class UpdateCartItemRequest(CamelModel):
    qty: Optional[int] = None  # Absolute quantity
    delta: Optional[int] = None  # Relative change

    @model_validator(mode="after")
    def exactly_one(self):
        if (self.qty is None) == (self.delta is None):
            raise ValueError("Provide exactly one of 'qty' or 'delta'")
        return self


class TableBindingRequest(CamelModel):
    table_number: int = Field(..., ge=1)


class TableBindingOut(CamelModel):
    guest_id: str
    table_number: Optional[int] = None


class SelectedSizeOut(CamelModel):
    name: str
    code: str
    price: float


class CartLineOut(CamelModel):
    id: str
    menu_item_id: int
    name: str
    display_name: str
    category: str = ""
    unit_price: float
    quantity: int
    selected_size: Optional[SelectedSizeOut] = None
    table_number: Optional[int] = None
    unique_key: str
    created_at: str
    updated_at: str


class CartUpdateOut(CamelModel):
    id: str
    removed: bool
    line: Optional[CartLineOut] = None


class MessageOut(CamelModel):
    message: str
    count: Optional[int] = None


# ---------------------------------------------------------
# ORDERS
# ---------------------------------------------------------
class CreateOrderRequest(CamelModel):
    guest_id: str = Field(..., min_length=1)
    table_number: Optional[int] = Field(None, ge=1)
    customer_name: str = "Guest"
    customer_email: str = ""
    customer_phone: str = ""
    payment_method: str = "cash"
    order_type: str = "dine-in"
    notes: str = ""
    special_instructions: str = ""


class StatusUpdateRequest(CamelModel):
    status: str


class PaymentUpdateRequest(CamelModel):
    payment_status: str


class CompleteOrderRequest(CamelModel):
    payment_method: str = "cash"


class OrderLineOut(CamelModel):
    menu_item_id: int
    name: str
    display_name: str
    unit_price: float
    quantity: int
    selected_size: Optional[SelectedSizeOut] = None
    subtotal: float


class OrderOut(CamelModel):
    id: int
    order_number: str
    guest_id: str
    table_number: int
    customer_name: str
    customer_email: str
    customer_phone: str
    items: List[OrderLineOut]
    item_count: int
    subtotal: float
    tax: float
    discount: float
    total: float
    status: str
    payment_status: str
    payment_method: str
    order_type: str
    notes: str
    special_instructions: str
    created_at: datetime
    updated_at: datetime
    ready_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class OrderStatsOut(CamelModel):
    total_orders: int
    total_revenue: float
    total_items: int
    average_order_value: float
    status_breakdown: dict
    payment_breakdown: dict


# ---------------------------------------------------------
# NOTIFICATIONS
# ---------------------------------------------------------
class NotificationOut(CamelModel):
    id: int
    order_id: int
    type: str
    table_number: int
    customer_name: str
    items: List[OrderLineOut]
    item_count: int
    total: float
    is_read: bool
    created_at: datetime
    read_at: Optional[datetime] = None
