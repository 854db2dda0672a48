"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer): separate from
internal Protean commands.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class LineItemSchema(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)
    unit_price: float | None = Field(default=None, ge=0)


class OrderSchema(BaseModel):
    id: str
    user_id: str
    address_id: str
    line_items: list[LineItemSchema]
    payment_method: str
    payment_status: str
    order_status: str
    raw_total: float
    discount: float
    total_amount: float
    voucher_code: str | None = None
    payment_id: str | None = None
    payer_id: str | None = None
    pay_url: str | None = None
    stock_reserved: bool
    order_date: str | None = None
    order_update_date: str | None = None


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class CreateOrderRequest(BaseModel):
    # Presence of the required fields is checked by the workflow so that
    # missing data is reported as a workflow error, not a schema error.
    user_id: str | None = None
    line_items: list[LineItemSchema] = Field(default_factory=list)
    address_id: str | None = None
    payment_method: str | None = None
    voucher_code: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "user_id": "user-001",
                    "line_items": [
                        {"product_id": "prod-001", "quantity": 2, "unit_price": 50000},
                    ],
                    "address_id": "addr-001",
                    "payment_method": "cash",
                    "voucher_code": "SALE10",
                }
            ]
        }
    }


class CaptureRequest(BaseModel):
    order_id: str
    payment_id: str
    payer_id: str | None = None


class UpdateOrderStatusRequest(BaseModel):
    order_status: str


class ExpireStaleOrdersRequest(BaseModel):
    threshold_hours: int | None = Field(default=None, ge=1)
    as_of: datetime | None = None


# ---------------------------------------------------------------------------
# Payment / Cart / Voucher / Stock Request Schemas
# ---------------------------------------------------------------------------
class CreatePayPalPaymentRequest(BaseModel):
    amount: float = Field(gt=0)
    currency: str = "VND"
    description: str = "Storefront order"
    order_id: str | None = None


class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)


class CreateVoucherRequest(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    discount_type: Literal["percent", "fixed"]
    value: float = Field(gt=0)
    max_discount: float | None = Field(default=None, ge=0)
    min_order_amount: float = Field(default=0.0, ge=0)
    expired_at: datetime | None = None


class RegisterProductRequest(BaseModel):
    product_id: str
    title: str | None = None
    price: float = Field(default=0.0, ge=0)
    total_stock: int = Field(default=0, ge=0)


class RestockRequest(BaseModel):
    quantity: int = Field(ge=1)


class ChangePriceRequest(BaseModel):
    price: float = Field(ge=0)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class CreateOrderResponse(BaseModel):
    success: bool = True
    order_id: str
    pay_url: str | None = None
    requires_payment: bool | None = None
    message: str | None = None


class OrderResponse(BaseModel):
    success: bool = True
    order: OrderSchema


class OrderListResponse(BaseModel):
    success: bool = True
    orders: list[OrderSchema]


class ModifiedCountResponse(BaseModel):
    success: bool = True
    modified_count: int


class ExpiredCountResponse(BaseModel):
    success: bool = True
    expired_count: int


class PayPalPaymentResponse(BaseModel):
    success: bool = True
    payment_id: str
    approval_url: str
    original_amount: float
    original_currency: str
    amount: float
    currency: str


class StatusResponse(BaseModel):
    success: bool = True
    status: str = "ok"


class IdResponse(BaseModel):
    success: bool = True
    id: str
