"""Application DTOs for Order operations."""

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from core.domain.enums import OrderStatus, PaymentMethod

RefundReason = Literal["wrong_item", "damaged", "defective", "not_as_described", "other"]


class OrderLineRequest(BaseModel):
    """One requested product line. Prices come from the catalog, never the client."""

    product_id: int = Field(..., gt=0, description="Catalog product id")
    quantity: int = Field(..., gt=0, le=1000, description="Quantity ordered")

    model_config = {"frozen": True}


class ShippingAddressDTO(BaseModel):
    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    country: str = Field(..., min_length=2, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=20)

    model_config = {"frozen": True}

    @field_validator("country", mode="before")
    @classmethod
    def _country_code(cls, value):
        # Tax rates are keyed by upper-case region codes
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("state")
    @classmethod
    def _state_code(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip().upper()


class PlaceOrderRequest(BaseModel):
    """Request DTO for placing an order."""

    items: List[OrderLineRequest] = Field(..., min_length=1, description="Order lines")
    shipping_address: ShippingAddressDTO
    shipping_method_id: int = Field(..., gt=0, description="Shipping method id")
    coupon_code: Optional[str] = Field(None, max_length=50, description="Coupon code")
    payment_method: PaymentMethod = Field(default=PaymentMethod.GCASH)

    model_config = {"frozen": True}

    @field_validator("coupon_code")
    @classmethod
    def _blank_coupon_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value


class OrderItemDTO(BaseModel):
    """DTO for order item."""

    product_id: int
    product_name: str
    unit: Optional[str] = None
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0, description="Price captured at order time")

    model_config = {"frozen": True}


class OrderDTO(BaseModel):
    """Response DTO for order details."""

    order_id: str
    user_id: str
    status: OrderStatus
    items: List[OrderItemDTO] = Field(default_factory=list)
    shipping_address: ShippingAddressDTO
    shipping_method_id: int
    payment_method: str
    coupon_code: Optional[str] = None
    subtotal: Decimal
    discount_amount: Decimal
    shipping_cost: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    currency: str
    created_at: datetime
    updated_at: datetime

    model_config = {"frozen": True}


class OrderListDTO(BaseModel):
    """DTO for listing orders."""

    orders: List[OrderDTO] = Field(default_factory=list, description="List of orders")
    total: int = Field(..., ge=0, description="Count in this page")

    model_config = {"frozen": True}


class RefundRequest(BaseModel):
    reason: RefundReason
    details: Optional[str] = Field(None, max_length=2000)

    model_config = {"frozen": True}


class RefundDTO(BaseModel):
    refund_id: int
    order_id: str
    reason: str
    amount: Decimal
    status: str

    model_config = {"frozen": True}


class UpdateOrderStatusRequest(BaseModel):
    status: OrderStatus
    reason: Optional[str] = Field(None, max_length=255)

    model_config = {"frozen": True}
