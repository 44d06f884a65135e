# campuslink/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Dict, List, Literal
from decimal import Decimal
from datetime import datetime

from campuslink.domain.order_status import OrderStatus


class UserCreate(BaseModel):
    """Schema dla tworzenia użytkownika."""

    id: int = Field(..., gt=0, description="ID użytkownika (musi być > 0)")
    name: str = Field(..., min_length=1, max_length=100, description="Imię użytkownika")


class UserRead(BaseModel):
    """Schema dla użytkownika (response)."""

    id: int
    name: str
    phone: str | None = None
    phone_verified: bool = False
    merchant_id: int | None = None

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------- verification

class SendCodeIn(BaseModel):
    phone: str = Field(..., min_length=1, max_length=32)


class SendCodeOut(BaseModel):
    success: bool = True
    method: Literal["api", "click_to_send"]
    expires_at: datetime
    whatsapp_url: str | None = None


class VerifyCodeIn(BaseModel):
    code: str = Field(..., max_length=16)


class VerifyCodeOut(BaseModel):
    verified: bool
    reason: str | None = None


# ---------------------------------------------------------------- cart

class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, description="Ilość produktu (min 1)")


class QuantityIn(BaseModel):
    quantity: int


class CartItemOut(BaseModel):
    id: int
    product_id: int
    product_name: str
    merchant_id: int
    quantity: int
    price: Decimal
    subtotal: Decimal


class CartOut(BaseModel):
    user_id: int
    items: List[CartItemOut]
    total: Decimal


class MerchantGroupOut(BaseModel):
    merchant_id: int
    business_name: str
    has_contact_channel: bool
    item_ids: List[int]
    subtotal: Decimal


class ContactIn(BaseModel):
    first_name: str = ""
    last_name: str = ""
    location: str = ""
    phone: str = ""


class HandoffIn(BaseModel):
    excluded_line_ids: List[int] = Field(default_factory=list)
    contact: ContactIn


class HandoffLineOut(BaseModel):
    item_id: int
    product_name: str
    quantity: int
    subtotal: Decimal


class HandoffOut(BaseModel):
    merchant_id: int
    lines: List[HandoffLineOut]
    line_count: int
    total: Decimal
    message: str
    deep_link: str


# ---------------------------------------------------------------- orders

class OrderItemIn(BaseModel):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., description="Ilość (min 1)")


class OrderCreate(BaseModel):
    """Zamówienie wprowadzane ręcznie przez sprzedawcę."""

    contact: ContactIn
    items: List[OrderItemIn]
    customer_user_id: int | None = None
    notes: str | None = Field(None, max_length=1000)


class OrderItemOut(BaseModel):
    product_id: int | None
    product_name: str
    product_price: Decimal
    quantity: int
    subtotal: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema dla zamówienia (response)."""

    id: int
    merchant_id: int
    customer_user_id: int | None
    status: OrderStatus
    total_amount: Decimal
    first_name: str
    last_name: str
    delivery_location: str
    delivery_phone: str
    notes: str | None = None
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemOut]

    model_config = ConfigDict(from_attributes=True)


class StatusIn(BaseModel):
    status: str


class TransitionsOut(BaseModel):
    order_id: int
    status: OrderStatus
    allowed: List[OrderStatus]


class OrderStatsOut(BaseModel):
    """Liczniki zamówień per status."""

    total: int
    by_status: Dict[str, int]
    total_amount: Decimal = Field(..., description="Suma bez anulowanych")
    revenue: Decimal = Field(..., description="Suma zakończonych")
