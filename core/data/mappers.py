"""Static mappers for domain entities ↔ database models."""

from decimal import Decimal
from typing import Optional

from core.domain.entities.coupon import Coupon
from core.domain.entities.order import Order, OrderItem, ShippingAddress
from core.domain.entities.payment import PaymentSource
from core.domain.entities.product import Refund, ShippingMethod, StockLevel
from core.domain.enums import DiscountType, OrderStatus, PaymentResult
from core.domain.value_objects import OrderId

from .models.catalog_model import ProductModel, ShippingMethodModel
from .models.coupon_model import CouponModel
from .models.order_model import OrderItemModel, OrderModel, RefundModel
from .models.payment_model import PaymentSourceModel


def to_decimal(value) -> Optional[Decimal]:
    # SQLite hands back floats for Numeric columns
    if value is None:
        return None
    return Decimal(str(value)).quantize(Decimal("0.01"))


class OrderItemMapper:
    """Static mapper for OrderItem ↔ OrderItemModel transformation."""

    @staticmethod
    def to_domain(model: OrderItemModel) -> OrderItem:
        return OrderItem(
            product_id=model.product_id,
            product_name=model.product_name,
            unit=model.unit,
            quantity=model.quantity,
            unit_price=to_decimal(model.unit_price),
        )

    @staticmethod
    def to_persistence(entity: OrderItem, order_id: str) -> OrderItemModel:
        return OrderItemModel(
            order_id=order_id,
            product_id=entity.product_id,
            product_name=entity.product_name,
            unit=entity.unit,
            quantity=entity.quantity,
            unit_price=entity.unit_price,
        )


class OrderMapper:
    """Static mapper for Order ↔ OrderModel transformation with nested items."""

    @staticmethod
    def to_domain(model: OrderModel) -> Order:
        """Convert ORM model to domain aggregate (with nested items).

        Args:
            model: OrderModel instance with items loaded

        Returns:
            Order domain aggregate with no pending events
        """
        return Order(
            order_id=OrderId(value=model.id),
            user_id=model.user_id,
            items=[OrderItemMapper.to_domain(item) for item in model.items],
            shipping_address=ShippingAddress(
                street=model.shipping_street,
                city=model.shipping_city,
                state=model.shipping_state,
                country=model.shipping_country,
                postal_code=model.shipping_postal_code,
            ),
            shipping_method_id=model.shipping_method_id,
            payment_method=model.payment_method,
            subtotal=to_decimal(model.subtotal),
            discount_amount=to_decimal(model.discount_amount),
            shipping_cost=to_decimal(model.shipping_cost),
            tax_rate=to_decimal(model.tax_rate),
            tax_amount=to_decimal(model.tax_amount),
            total=to_decimal(model.total),
            currency=model.currency,
            coupon_code=model.coupon_code,
            status=OrderStatus(model.status),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @staticmethod
    def to_persistence(entity: Order) -> OrderModel:
        """Convert domain aggregate to ORM model (with nested items)."""
        address = entity.shipping_address
        order_model = OrderModel(
            id=entity.id,
            user_id=entity.user_id,
            status=entity.status.value,
            subtotal=entity.subtotal,
            discount_amount=entity.discount_amount,
            shipping_cost=entity.shipping_cost,
            tax_rate=entity.tax_rate,
            tax_amount=entity.tax_amount,
            total=entity.total,
            currency=entity.currency,
            coupon_code=entity.coupon_code,
            payment_method=entity.payment_method,
            shipping_method_id=entity.shipping_method_id,
            shipping_street=address.street,
            shipping_city=address.city,
            shipping_state=address.state,
            shipping_country=address.country,
            shipping_postal_code=address.postal_code,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
        order_model.items = [
            OrderItemMapper.to_persistence(item, entity.id) for item in entity.items
        ]
        return order_model


class CouponMapper:

    @staticmethod
    def to_domain(model: CouponModel) -> Coupon:
        return Coupon(
            id=model.id,
            code=model.code,
            description=model.description,
            discount_type=DiscountType(model.discount_type),
            discount_value=to_decimal(model.discount_value),
            min_purchase_amount=to_decimal(model.min_purchase_amount),
            max_discount_amount=to_decimal(model.max_discount_amount),
            start_date=model.start_date,
            end_date=model.end_date,
            usage_limit=model.usage_limit,
            used_count=model.used_count,
            is_active=model.is_active,
        )


class PaymentSourceMapper:

    @staticmethod
    def to_domain(model: PaymentSourceModel) -> PaymentSource:
        return PaymentSource(
            id=model.id,
            order_id=model.order_id,
            external_id=model.external_id,
            amount=to_decimal(model.amount),
            method=model.method,
            checkout_url=model.checkout_url,
            result=PaymentResult(model.result),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @staticmethod
    def to_persistence(entity: PaymentSource) -> PaymentSourceModel:
        return PaymentSourceModel(
            order_id=entity.order_id,
            external_id=entity.external_id,
            amount=entity.amount,
            method=entity.method,
            checkout_url=entity.checkout_url,
            result=entity.result.value,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )


class CatalogMapper:
    """Products and shipping methods."""

    @staticmethod
    def stock_level(model: ProductModel) -> StockLevel:
        return StockLevel(
            product_id=model.id,
            name=model.name,
            unit=model.unit,
            price=to_decimal(model.price),
            available=model.stock_quantity,
            reorder_threshold=model.reorder_threshold,
        )

    @staticmethod
    def shipping_method(model: ShippingMethodModel) -> ShippingMethod:
        return ShippingMethod(
            id=model.id,
            name=model.name,
            base_cost=to_decimal(model.base_cost),
            estimated_days=model.estimated_days,
            is_active=model.is_active,
        )


class RefundMapper:

    @staticmethod
    def to_persistence(entity: Refund) -> RefundModel:
        return RefundModel(
            order_id=entity.order_id,
            user_id=entity.user_id,
            reason=entity.reason,
            details=entity.details,
            amount=entity.amount,
            status=entity.status,
        )

    @staticmethod
    def to_domain(model: RefundModel) -> Refund:
        return Refund(
            id=model.id,
            order_id=model.order_id,
            user_id=model.user_id,
            reason=model.reason,
            details=model.details,
            amount=to_decimal(model.amount),
            status=model.status,
        )
