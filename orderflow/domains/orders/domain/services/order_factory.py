"""
Order Factory

Builds an Order aggregate from a fresh quote. Persistence (stock
reservation, uniqueness) is the repository's job.
"""

import secrets
import string
from datetime import datetime

from orderflow.core.domain import generate_uuid_str, utc_now

from ..entities.order import Order, OrderItem, VendorSnapshot
from ..value_objects.order_status import OrderStatus, PaymentMethod, PaymentStatus
from ..value_objects.shipping_address import ShippingAddress
from .pricing_service import OrderCalculation

_ORDER_NUMBER_ALPHABET = string.ascii_uppercase + string.digits


def generate_order_number(prefix: str = "ORD", at: datetime | None = None, length: int = 6) -> str:
    """
    Human-readable order number, e.g. ORD-20260118-7K2QXM.

    Random suffix; collisions are caught by the unique constraint and retried.
    """
    day = (at or utc_now()).strftime("%Y%m%d")
    suffix = "".join(secrets.choice(_ORDER_NUMBER_ALPHABET) for _ in range(length))
    return f"{prefix}-{day}-{suffix}"


class OrderFactory:
    """Turns a quote into a new order in status created / payment pending."""

    def __init__(self, order_number_prefix: str = "ORD"):
        self.order_number_prefix = order_number_prefix

    def build(
        self,
        customer_id: str,
        shipping_address: ShippingAddress,
        calculation: OrderCalculation,
        idempotency_key: str | None = None,
    ) -> Order:
        """Create the aggregate; items keep cart order and carry frozen snapshots."""
        now = utc_now()
        items = [
            OrderItem(
                product_id=line.product.product_id,
                vendor_id=line.product.vendor_id,
                title=line.product.title,
                sku=line.product.sku,
                qty=line.quantity,
                price_per_unit=line.unit_price,
                total_price=line.line_total,
                tax_code=line.product.tax_code,
                tax_percentage=line.product.tax_percentage,
                tax_amount=line.tax_amount,
                vendor_snapshot=VendorSnapshot(
                    vendor_name=line.product.vendor_name,
                    vendor_phone=line.product.vendor_phone,
                    is_platform=line.product.vendor_is_platform,
                ),
            )
            for line in calculation.lines
        ]
        return Order(
            id=generate_uuid_str(),
            order_number=self.next_order_number(now),
            customer_id=customer_id,
            shipping_address=shipping_address,
            items=items,
            subtotal=calculation.subtotal,
            shipping_cost=calculation.shipping_cost,
            tax=calculation.tax,
            total=calculation.total,
            currency=calculation.currency,
            status=OrderStatus.CREATED,
            payment_status=PaymentStatus.PENDING,
            payment_method=PaymentMethod.RAZORPAY,
            idempotency_key=idempotency_key,
            placed_at=now,
            created_at=now,
            updated_at=now,
        )

    def next_order_number(self, at: datetime | None = None) -> str:
        return generate_order_number(self.order_number_prefix, at)
