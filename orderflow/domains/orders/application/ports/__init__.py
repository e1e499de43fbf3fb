"""
Orders Application Ports

Interface definitions (ports) for the Orders domain.
Uses Protocol for structural typing.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from orderflow.domains.orders.application.dto import OrderPage, OrderSearchCriteria
from orderflow.domains.orders.domain.entities import Cart, CatalogSnapshot, Order, ProductSnapshot
from orderflow.domains.orders.domain.services import ShippingConfig
from orderflow.domains.orders.domain.value_objects import GatewayOrder


@runtime_checkable
class IOrderRepository(Protocol):
    """
    Interface for order repository.

    Every write after `place` is a compare-and-swap on `Order.version`.
    """

    async def get_by_id(self, order_id: str) -> Order | None:
        """Get order by ID"""
        ...

    async def get_by_gateway_order_id(self, gateway_order_id: str) -> Order | None:
        """Get order by its Razorpay order id"""
        ...

    async def get_by_idempotency_key(self, customer_id: str, idempotency_key: str) -> Order | None:
        """Get the order a customer already placed with this checkout key"""
        ...

    async def place(self, order: Order) -> Order:
        """
        Reserve stock and insert the order in one transaction.

        Raises OutOfStockException, DuplicateOrderNumberException or
        DuplicateIdempotencyKeyException and leaves nothing behind.
        """
        ...

    async def save(self, order: Order, release_stock: bool = False) -> Order:
        """Persist changes if nobody else wrote since it was read; raises ConflictingUpdateException otherwise"""
        ...

    async def search(self, criteria: OrderSearchCriteria) -> OrderPage:
        """Filtered, paginated listing, newest first"""
        ...


@runtime_checkable
class ICatalogRepository(Protocol):
    """
    Interface for reading the product catalog.
    """

    async def get_snapshot(self, product_ids: Sequence[str]) -> CatalogSnapshot:
        """Current state of the given products; unknown ids are simply absent"""
        ...

    async def get_product(self, product_id: str) -> ProductSnapshot | None:
        """Current state of one product"""
        ...


@runtime_checkable
class ICartRepository(Protocol):
    """
    Interface for cart repository.
    """

    async def get(self, customer_id: str) -> Cart:
        """Get the customer's cart (empty if none)"""
        ...

    async def save(self, cart: Cart) -> Cart:
        """Replace the stored lines with the cart's lines"""
        ...

    async def clear(self, customer_id: str) -> None:
        """Remove every line"""
        ...


@runtime_checkable
class IShippingConfigRepository(Protocol):
    """
    Interface for the store-wide shipping configuration.
    """

    async def get(self) -> ShippingConfig:
        """Current configuration (defaults if never saved)"""
        ...

    async def save(self, config: ShippingConfig) -> ShippingConfig:
        """Store a new configuration"""
        ...


@runtime_checkable
class IPaymentGateway(Protocol):
    """
    Interface for the external payment gateway.
    """

    async def create_order(self, amount: int, currency: str, receipt: str, idempotency_key: str) -> GatewayOrder:
        """Register an amount (minor units) with the gateway"""
        ...

    def verify_payment_signature(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
        """Check the checkout callback signature"""
        ...

    def verify_webhook_signature(self, body: bytes, signature: str) -> bool:
        """Check a webhook body signature"""
        ...


@runtime_checkable
class IWebhookDeduplicator(Protocol):
    """
    Interface for remembering which webhook events were handled.
    """

    async def check_and_lock(self, event_id: str) -> tuple[bool, str | None]:
        """Returns (is_duplicate, previous_outcome)"""
        ...

    async def mark_complete(self, event_id: str, outcome: str) -> None:
        """Record the outcome of a handled event"""
        ...

    async def mark_failed(self, event_id: str, error: str) -> None:
        """Release the lock so the gateway's retry is processed"""
        ...


__all__ = [
    "IOrderRepository",
    "ICatalogRepository",
    "ICartRepository",
    "IShippingConfigRepository",
    "IPaymentGateway",
    "IWebhookDeduplicator",
]
