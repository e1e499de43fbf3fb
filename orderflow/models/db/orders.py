"""
Order management models
"""

import uuid
from typing import List

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, relationship

from .base import Base, TimestampMixin

# Repositories translate IntegrityErrors by these names
ORDER_NUMBER_CONSTRAINT = "uq_orders_order_number"
CUSTOMER_IDEMPOTENCY_CONSTRAINT = "uq_orders_customer_idempotency"


class Order(Base, TimestampMixin):
    """Placed orders. Money columns are minor units (paise)"""

    __tablename__ = "orders"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_number = Column(String(50), nullable=False)
    customer_id = Column(String(64), nullable=False)
    idempotency_key = Column(String(128))

    shipping_address = Column(JSONB, nullable=False)  # {"name": "...", "line1": "...", "postal_code": "..."}

    # Pricing
    subtotal = Column(BigInteger, nullable=False)
    shipping_cost = Column(BigInteger, nullable=False, default=0)
    tax = Column(BigInteger, nullable=False, default=0)
    total = Column(BigInteger, nullable=False)
    currency = Column(String(3), nullable=False, default="INR")

    # Status
    status = Column(String(40), nullable=False, default="created")
    payment_status = Column(String(20), nullable=False, default="pending")  # pending, paid, failed, refunded
    payment_method = Column(String(20), nullable=False, default="razorpay")

    # Gateway references
    razorpay_order_id = Column(String(64))
    razorpay_payment_id = Column(String(64))

    # Dates
    placed_at = Column(DateTime(timezone=True), nullable=False)
    expected_delivery_date = Column(Date)
    shipped_date = Column(DateTime(timezone=True))
    delivered_at = Column(DateTime(timezone=True))
    cancelled_at = Column(DateTime(timezone=True))
    paid_at = Column(DateTime(timezone=True))

    status_history = Column(JSONB, nullable=False, default=list)

    # Optimistic concurrency
    version = Column(Integer, nullable=False, default=0)

    items: Mapped[List["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
    )

    __table_args__ = (
        UniqueConstraint(order_number, name=ORDER_NUMBER_CONSTRAINT),
        UniqueConstraint(customer_id, idempotency_key, name=CUSTOMER_IDEMPOTENCY_CONSTRAINT),
        CheckConstraint("total = subtotal + shipping_cost + tax", name="total_equation"),
        Index("idx_orders_customer", customer_id),
        Index("idx_orders_status", status),
        Index("idx_orders_placed_at", placed_at),
        Index("idx_orders_razorpay_order", razorpay_order_id),
        Index("idx_orders_customer_status_date", customer_id, status, placed_at),
    )

    def __repr__(self):
        return f"<Order(number='{self.order_number}', status='{self.status}', total={self.total})>"


class OrderItem(Base):
    """Order line items with the product and vendor snapshot taken at checkout"""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    product_id = Column(String(64), nullable=False)
    vendor_id = Column(String(64), nullable=False)
    title = Column(String(300), nullable=False)
    sku = Column(String(100))

    qty = Column(Integer, nullable=False)
    price_per_unit = Column(BigInteger, nullable=False)
    total_price = Column(BigInteger, nullable=False)

    tax_code = Column(String(20))
    tax_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    tax_amount = Column(BigInteger, nullable=False, default=0)

    # Vendor snapshot
    vendor_name = Column(String(200), nullable=False)
    vendor_phone = Column(String(32))
    vendor_is_platform = Column(Boolean, nullable=False, default=False)

    order: Mapped["Order"] = relationship("Order", back_populates="items")

    __table_args__ = (
        CheckConstraint("qty >= 1", name="qty_positive"),
        Index("idx_order_items_order", order_id),
        Index("idx_order_items_vendor", vendor_id),
    )

    def __repr__(self):
        return f"<OrderItem(order_id={self.order_id}, product_id='{self.product_id}', qty={self.qty})>"
