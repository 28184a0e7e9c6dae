"""Application DTOs."""
from .coupon_dto import AvailableCouponsDTO, CouponDTO, CouponValidationDTO, ValidateCouponRequest
from .order_dto import (
    OrderDTO,
    OrderItemDTO,
    OrderLineRequest,
    OrderListDTO,
    PlaceOrderRequest,
    RefundDTO,
    RefundRequest,
    ShippingAddressDTO,
    UpdateOrderStatusRequest,
)
from .payment_dto import (
    CreatePaymentSourceRequest,
    PaymentSourceDTO,
    PaymentStatusDTO,
    VerifyPaymentRequest,
    WebhookAckDTO,
)

__all__ = [
    "AvailableCouponsDTO",
    "CouponDTO",
    "CouponValidationDTO",
    "ValidateCouponRequest",
    "OrderDTO",
    "OrderItemDTO",
    "OrderLineRequest",
    "OrderListDTO",
    "PlaceOrderRequest",
    "RefundDTO",
    "RefundRequest",
    "ShippingAddressDTO",
    "UpdateOrderStatusRequest",
    "CreatePaymentSourceRequest",
    "PaymentSourceDTO",
    "PaymentStatusDTO",
    "VerifyPaymentRequest",
    "WebhookAckDTO",
]
