"""
Checkout domain errors.

Every business-rule failure raised by the domain and application layers
derives from CheckoutError. The API layer maps ``code`` to an HTTP status.
"""
from decimal import Decimal
from typing import Any, Dict, Optional


class CheckoutError(Exception):
    """Base exception for checkout business-rule failures."""

    code = "checkout_error"

    def __init__(self, message: str, **details: Any):
        self.message = message
        self.details: Dict[str, Any] = details
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.code, "message": self.message}
        for key, value in self.details.items():
            payload[key] = str(value) if isinstance(value, Decimal) else value
        return payload


class ProductNotFound(CheckoutError):
    code = "product_not_found"

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found", product_id=product_id)


class InsufficientStock(CheckoutError):
    code = "insufficient_stock"

    def __init__(self, product_id: int, available: int, requested: int):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for product {product_id}: "
            f"{available} available, {requested} requested",
            product_id=product_id,
            available=available,
            requested=requested,
        )


class InvalidShippingMethod(CheckoutError):
    code = "invalid_shipping_method"

    def __init__(self, shipping_method_id: int):
        self.shipping_method_id = shipping_method_id
        super().__init__(
            f"Shipping method {shipping_method_id} is not available",
            shipping_method_id=shipping_method_id,
        )


class InvalidCoupon(CheckoutError):
    """Base for coupon rejections."""

    code = "invalid_coupon"


class CouponNotFound(InvalidCoupon):
    code = "coupon_not_found"

    def __init__(self, coupon_code: str):
        self.coupon_code = coupon_code
        super().__init__("Invalid or expired coupon code", coupon_code=coupon_code)


class MinimumNotMet(InvalidCoupon):
    code = "minimum_not_met"

    def __init__(self, coupon_code: str, min_purchase_amount: Decimal):
        self.coupon_code = coupon_code
        self.min_purchase_amount = min_purchase_amount
        super().__init__(
            f"Minimum purchase amount of {min_purchase_amount} required for this coupon",
            coupon_code=coupon_code,
            min_purchase_amount=min_purchase_amount,
        )


class OrderNotFound(CheckoutError):
    code = "order_not_found"

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found", order_id=order_id)


class InvalidStatusTransition(CheckoutError):
    code = "invalid_status_transition"

    def __init__(self, order_id: str, current: str, target: str):
        self.order_id = order_id
        self.current = current
        self.target = target
        super().__init__(
            f"Order {order_id} cannot move from {current} to {target}",
            order_id=order_id,
            current_status=current,
            target_status=target,
        )


class OrderNotCancellable(CheckoutError):
    code = "order_not_cancellable"

    def __init__(self, order_id: str, status: str):
        self.order_id = order_id
        self.status = status
        super().__init__(
            "Only pending orders can be cancelled",
            order_id=order_id,
            status=status,
        )


class NotEligibleForRefund(CheckoutError):
    code = "not_eligible_for_refund"

    def __init__(self, order_id: str, status: str):
        self.order_id = order_id
        self.status = status
        super().__init__(
            "Only completed orders can be refunded",
            order_id=order_id,
            status=status,
        )


class OrderNotPayable(CheckoutError):
    code = "order_not_payable"

    def __init__(self, order_id: str, status: str):
        self.order_id = order_id
        self.status = status
        super().__init__(
            f"Order {order_id} is {status} and cannot accept payment",
            order_id=order_id,
            status=status,
        )


class AmountMismatch(CheckoutError):
    code = "amount_mismatch"

    def __init__(self, order_id: str, expected: Decimal, received: Decimal):
        self.order_id = order_id
        self.expected = expected
        self.received = received
        super().__init__(
            "Total amount mismatch",
            order_id=order_id,
            expected=expected,
            received=received,
        )


class PaymentSourceNotFound(CheckoutError):
    code = "payment_source_not_found"

    def __init__(self, source_id: str):
        self.source_id = source_id
        super().__init__(f"Payment source {source_id} not found", source_id=source_id)


class InvalidWebhookSignature(CheckoutError):
    code = "invalid_webhook_signature"

    def __init__(self, reason: str = "Signature verification failed"):
        super().__init__(reason)


class PaymentGatewayError(CheckoutError):
    """The payment gateway was unreachable or rejected the request."""

    code = "payment_gateway_error"

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message, gateway_status=status)
