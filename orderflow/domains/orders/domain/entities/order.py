"""
Order Entity for the Orders Domain

A placed order with frozen pricing, per-item vendor snapshots, payment
tracking and status history. Amounts are integer minor units.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from orderflow.core.domain import AggregateRoot, BusinessRuleViolationException, utc_now

from ..value_objects.order_status import (
    OrderStatus,
    OrderStatusTransition,
    PaymentMethod,
    PaymentStatus,
)
from ..value_objects.shipping_address import ShippingAddress


@dataclass(frozen=True)
class VendorSnapshot:
    """Vendor identity copied into an order item at checkout."""

    vendor_name: str
    vendor_phone: str | None = None
    is_platform: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "vendor_name": self.vendor_name,
            "vendor_phone": self.vendor_phone,
            "is_platform": self.is_platform,
        }


@dataclass
class OrderItem:
    """
    Line item of an order.

    Title, sku, price and tax are copied from the catalog at checkout and
    never follow later product edits.
    """

    product_id: str
    vendor_id: str
    title: str
    sku: str | None
    qty: int
    price_per_unit: int
    total_price: int
    vendor_snapshot: VendorSnapshot
    tax_code: str | None = None
    tax_percentage: Decimal = Decimal("0")
    tax_amount: int = 0

    def __post_init__(self):
        if self.qty < 1:
            raise BusinessRuleViolationException(
                "item_quantity_positive",
                f"Order item {self.product_id} must have a positive quantity",
            )
        if self.total_price != self.qty * self.price_per_unit:
            raise BusinessRuleViolationException(
                "item_total_matches_unit_price",
                f"Order item {self.product_id}: total_price {self.total_price} != "
                f"{self.qty} x {self.price_per_unit}",
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "product_id": self.product_id,
            "vendor_id": self.vendor_id,
            "title": self.title,
            "sku": self.sku,
            "qty": self.qty,
            "price_per_unit": self.price_per_unit,
            "total_price": self.total_price,
            "tax_code": self.tax_code,
            "tax_percentage": str(self.tax_percentage),
            "tax_amount": self.tax_amount,
            "vendor_snapshot": self.vendor_snapshot.to_dict(),
        }


@dataclass
class Order(AggregateRoot[str]):
    """
    Order aggregate root.

    Totals are fixed at creation: `total == subtotal + shipping_cost + tax`
    is checked on construction and nothing recomputes them afterwards.
    Status changes go through the OrderStatusMachine, which calls
    `apply_transition`.
    """

    order_number: str = ""
    customer_id: str = ""
    shipping_address: ShippingAddress | None = None
    items: list[OrderItem] = field(default_factory=list)

    # Pricing (minor units)
    subtotal: int = 0
    shipping_cost: int = 0
    tax: int = 0
    total: int = 0
    currency: str = "INR"

    # Status
    status: OrderStatus = OrderStatus.CREATED
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: PaymentMethod = PaymentMethod.RAZORPAY

    # Gateway references
    razorpay_order_id: str | None = None
    razorpay_payment_id: str | None = None
    idempotency_key: str | None = None

    # Dates
    placed_at: datetime = field(default_factory=utc_now)
    expected_delivery_date: date | None = None
    shipped_date: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    paid_at: datetime | None = None

    status_history: list[OrderStatusTransition] = field(default_factory=list)

    def __post_init__(self):
        if self.total != self.subtotal + self.shipping_cost + self.tax:
            raise BusinessRuleViolationException(
                "order_total_equation",
                f"Order total {self.total} != subtotal {self.subtotal} + shipping "
                f"{self.shipping_cost} + tax {self.tax}",
            )
        if self.items and sum(item.total_price for item in self.items) != self.subtotal:
            raise BusinessRuleViolationException(
                "order_subtotal_matches_items",
                f"Order subtotal {self.subtotal} does not match its items",
            )

    # Vendor attribution

    def items_by_vendor(self) -> dict[str, list[OrderItem]]:
        """Group items by vendor; groups and items inside them keep cart order."""
        groups: dict[str, list[OrderItem]] = {}
        for item in self.items:
            groups.setdefault(item.vendor_id, []).append(item)
        return groups

    def items_for_vendor(self, vendor_id: str) -> list[OrderItem]:
        return [item for item in self.items if item.vendor_id == vendor_id]

    def contains_vendor(self, vendor_id: str) -> bool:
        return any(item.vendor_id == vendor_id for item in self.items)

    def vendor_subtotal(self, vendor_id: str) -> int:
        return sum(item.total_price for item in self.items_for_vendor(vendor_id))

    def has_platform_items(self) -> bool:
        return any(item.vendor_snapshot.is_platform for item in self.items)

    def quantities_by_product(self) -> dict[str, int]:
        """Total quantity ordered per product."""
        quantities: dict[str, int] = {}
        for item in self.items:
            quantities[item.product_id] = quantities.get(item.product_id, 0) + item.qty
        return quantities

    # Payment

    def is_payable(self) -> bool:
        """Only a live, not yet paid order can take a payment."""
        return self.status == OrderStatus.CREATED and self.payment_status.accepts_payment()

    def attach_gateway_order(self, gateway_order_id: str) -> None:
        self.razorpay_order_id = gateway_order_id
        self.touch()

    def mark_paid(self, gateway_order_id: str, gateway_payment_id: str, at: datetime | None = None) -> None:
        """Record a verified payment. Callers handle the already-paid case."""
        if self.payment_status == PaymentStatus.PAID:
            raise BusinessRuleViolationException("payment_recorded_once", f"Order {self.id} is already paid")
        now = at or utc_now()
        self.razorpay_order_id = gateway_order_id
        self.razorpay_payment_id = gateway_payment_id
        self.payment_status = PaymentStatus.PAID
        self.paid_at = now
        self.touch(now)

    def mark_payment_failed(self, at: datetime | None = None) -> bool:
        """Flag a failed attempt. Never downgrades a paid order; returns whether anything changed."""
        if self.payment_status != PaymentStatus.PENDING:
            return False
        self.payment_status = PaymentStatus.FAILED
        self.touch(at)
        return True

    # Status

    def apply_transition(self, transition: OrderStatusTransition) -> None:
        """Apply a transition already validated by the status machine."""
        self.status = transition.to_status
        if transition.to_status == OrderStatus.SHIPPED:
            self.shipped_date = transition.at
        elif transition.to_status == OrderStatus.DELIVERED:
            self.delivered_at = transition.at
        elif transition.to_status == OrderStatus.CANCELLED:
            self.cancelled_at = transition.at
        self.status_history.append(transition)
        self.touch(transition.at)

    def set_expected_delivery_date(self, value: date | None, at: datetime | None = None) -> None:
        self.expected_delivery_date = value
        self.touch(at)

    def to_dict(self) -> dict[str, Any]:
        """Full representation, used for customer and admin views."""
        return {
            "id": self.id,
            "order_number": self.order_number,
            "customer_id": self.customer_id,
            "shipping_address": self.shipping_address.to_dict() if self.shipping_address else None,
            "items": [item.to_dict() for item in self.items],
            "subtotal": self.subtotal,
            "shipping_cost": self.shipping_cost,
            "tax": self.tax,
            "total": self.total,
            "currency": self.currency,
            "status": self.status.value,
            "payment_status": self.payment_status.value,
            "payment_method": self.payment_method.value,
            "razorpay_order_id": self.razorpay_order_id,
            "razorpay_payment_id": self.razorpay_payment_id,
            "placed_at": self.placed_at.isoformat(),
            "expected_delivery_date": self.expected_delivery_date.isoformat() if self.expected_delivery_date else None,
            "shipped_date": self.shipped_date.isoformat() if self.shipped_date else None,
            "delivered_at": self.delivered_at.isoformat() if self.delivered_at else None,
            "cancelled_at": self.cancelled_at.isoformat() if self.cancelled_at else None,
            "updated_at": self.updated_at.isoformat(),
            "status_history": [transition.to_dict() for transition in self.status_history],
        }
