"""
Shared pytest fixtures for all tests.

This module provides in-memory implementations of the orders ports, a small
sample catalog, and use cases wired against them.
"""

import asyncio
import copy
import hmac
import os
from dataclasses import replace
from datetime import datetime, timedelta
from decimal import Decimal
from itertools import count

import pytest

# Ensure test environment before any settings are read
os.environ["ENVIRONMENT"] = "test"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["RAZORPAY_KEY_ID"] = "rzp_test_key"
os.environ["RAZORPAY_KEY_SECRET"] = "test-key-secret"
os.environ["RAZORPAY_WEBHOOK_SECRET"] = "test-webhook-secret"

from orderflow.config.settings import Settings, get_settings  # noqa: E402
from orderflow.core.domain import ConflictingUpdateException, utc_now  # noqa: E402
from orderflow.domains.orders.application.dto import OrderPage, OrderSearchCriteria  # noqa: E402
from orderflow.domains.orders.application.use_cases import (  # noqa: E402
    CalculateOrderUseCase,
    CreateOrderRequest,
    CreateOrderUseCase,
    CreatePaymentIntentUseCase,
    HandlePaymentWebhookUseCase,
    ManageCartUseCase,
    OrderQueryService,
    SettlePaymentUseCase,
    ShippingConfigUseCase,
    UpdateDeliveryDateUseCase,
    UpdateOrderStatusUseCase,
    VerifyPaymentUseCase,
)
from orderflow.domains.orders.domain.entities import (  # noqa: E402
    Cart,
    CartLine,
    CatalogSnapshot,
    Order,
    OrderItem,
    PricingTier,
    ProductSnapshot,
    VendorSnapshot,
)
from orderflow.domains.orders.domain.exceptions import (  # noqa: E402
    DuplicateIdempotencyKeyException,
    DuplicateOrderNumberException,
    OutOfStockException,
)
from orderflow.domains.orders.domain.services import (  # noqa: E402
    OrderFactory,
    OrderStatusMachine,
    PricingService,
    ShippingConfig,
)
from orderflow.domains.orders.domain.value_objects import (  # noqa: E402
    ActorRole,
    GatewayOrder,
    OrderStatus,
    PaymentStatus,
    RequestContext,
    ShippingAddress,
)
from orderflow.domains.orders.infrastructure.services import hmac_sha256_hex  # noqa: E402

CUSTOMER_ID = "cust-1001"
OTHER_CUSTOMER_ID = "cust-2002"
ADMIN_ID = "admin-1"
VENDOR_A = "vendor-anand"
VENDOR_B = "vendor-bharat"
PLATFORM_VENDOR = "vendor-platform"


# ============================================================================
# IN-MEMORY PORT IMPLEMENTATIONS
# ============================================================================


class InMemoryCatalogRepository:
    """Catalog kept in a dict; stock changes replace the frozen snapshot."""

    def __init__(self, products=()):
        self.products = {product.product_id: product for product in products}

    async def get_snapshot(self, product_ids):
        snapshot = CatalogSnapshot(
            self.products[product_id] for product_id in dict.fromkeys(product_ids) if product_id in self.products
        )
        # Yield after reading so concurrent checkouts both quote before either reserves
        await asyncio.sleep(0)
        return snapshot

    async def get_product(self, product_id):
        return self.products.get(product_id)

    def stock_of(self, product_id: str) -> int:
        return self.products[product_id].stock

    def adjust_stock(self, product_id: str, delta: int) -> None:
        product = self.products[product_id]
        self.products[product_id] = replace(product, stock=product.stock + delta)


class InMemoryCartRepository:
    def __init__(self):
        self.carts: dict[str, list[CartLine]] = {}

    async def get(self, customer_id):
        lines = [CartLine(line.product_id, line.quantity) for line in self.carts.get(customer_id, [])]
        return Cart(id=customer_id, customer_id=customer_id, lines=lines)

    async def save(self, cart):
        self.carts[cart.customer_id] = [CartLine(line.product_id, line.quantity) for line in cart.lines]
        return cart

    async def clear(self, customer_id):
        self.carts.pop(customer_id, None)


class InMemoryShippingConfigRepository:
    def __init__(self, config: ShippingConfig):
        self.config = config

    async def get(self):
        return self.config

    async def save(self, config):
        self.config = config
        return config


class InMemoryOrderRepository:
    """
    Orders stored as deep copies, so changes only land through `place` and `save`.

    `place` reserves stock against the catalog; `save` is a compare-and-swap on version.
    """

    def __init__(self, catalog: InMemoryCatalogRepository):
        self.catalog = catalog
        self.orders: dict[str, Order] = {}
        self.place_attempts = 0
        self.order_number_collisions = 0
        self._lock = asyncio.Lock()

    async def get_by_id(self, order_id):
        order = self.orders.get(order_id)
        return copy.deepcopy(order) if order else None

    async def get_by_gateway_order_id(self, gateway_order_id):
        for order in self.orders.values():
            if order.razorpay_order_id == gateway_order_id:
                return copy.deepcopy(order)
        return None

    async def get_by_idempotency_key(self, customer_id, idempotency_key):
        for order in self.orders.values():
            if order.customer_id == customer_id and order.idempotency_key == idempotency_key:
                return copy.deepcopy(order)
        return None

    async def place(self, order):
        async with self._lock:
            self.place_attempts += 1
            if self.order_number_collisions > 0:
                self.order_number_collisions -= 1
                raise DuplicateOrderNumberException(order.order_number)
            for existing in self.orders.values():
                if existing.order_number == order.order_number:
                    raise DuplicateOrderNumberException(order.order_number)
                if (
                    order.idempotency_key
                    and existing.customer_id == order.customer_id
                    and existing.idempotency_key == order.idempotency_key
                ):
                    raise DuplicateIdempotencyKeyException(order.customer_id, order.idempotency_key)

            quantities = order.quantities_by_product()
            for product_id, quantity in sorted(quantities.items()):
                if self.catalog.stock_of(product_id) < quantity:
                    raise OutOfStockException(product_id, quantity)
            for product_id, quantity in quantities.items():
                self.catalog.adjust_stock(product_id, -quantity)

            self.orders[order.id] = copy.deepcopy(order)
        return order

    async def save(self, order, release_stock=False):
        async with self._lock:
            stored = self.orders.get(order.id)
            if stored is None or stored.version != order.version:
                raise ConflictingUpdateException("Order", order.id, order.version)
            if release_stock:
                for product_id, quantity in order.quantities_by_product().items():
                    self.catalog.adjust_stock(product_id, quantity)
            order.increment_version()
            self.orders[order.id] = copy.deepcopy(order)
        return order

    async def search(self, criteria: OrderSearchCriteria) -> OrderPage:
        matches = [order for order in self.orders.values() if self._matches(order, criteria)]
        matches.sort(key=lambda order: order.placed_at, reverse=True)
        page = matches[criteria.skip : criteria.skip + criteria.limit]
        return OrderPage(
            orders=[copy.deepcopy(order) for order in page],
            total=len(matches),
            skip=criteria.skip,
            limit=criteria.limit,
        )

    @staticmethod
    def _matches(order: Order, criteria: OrderSearchCriteria) -> bool:
        if criteria.customer_id and order.customer_id != criteria.customer_id:
            return False
        if criteria.vendor_id and not order.contains_vendor(criteria.vendor_id):
            return False
        if criteria.admin_only and not order.has_platform_items():
            return False
        if criteria.status and order.status != criteria.status:
            return False
        if criteria.search:
            needle = criteria.search.lower()
            haystack = [order.order_number]
            haystack += [item.vendor_snapshot.vendor_name for item in order.items]
            haystack += [item.title for item in order.items]
            if not any(needle in value.lower() for value in haystack):
                return False
        return True

    def stored(self, order_id: str) -> Order:
        return self.orders[order_id]


class FakePaymentGateway:
    """Gateway double that signs with the configured secrets like Razorpay does."""

    def __init__(self, key_secret: str, webhook_secret: str):
        self.key_secret = key_secret
        self.webhook_secret = webhook_secret
        self.created: list[dict] = []
        self.fail_with: Exception | None = None
        self._ids = count(1)

    async def create_order(self, amount, currency, receipt, idempotency_key):
        if self.fail_with is not None:
            raise self.fail_with
        self.created.append(
            {"amount": amount, "currency": currency, "receipt": receipt, "idempotency_key": idempotency_key}
        )
        return GatewayOrder(id=f"order_test{next(self._ids):06d}", amount=amount, currency=currency, receipt=receipt)

    def sign_payment(self, gateway_order_id: str, gateway_payment_id: str) -> str:
        return hmac_sha256_hex(self.key_secret, f"{gateway_order_id}|{gateway_payment_id}".encode())

    def sign_webhook(self, body: bytes) -> str:
        return hmac_sha256_hex(self.webhook_secret, body)

    def verify_payment_signature(self, gateway_order_id, gateway_payment_id, signature):
        return hmac.compare_digest(self.sign_payment(gateway_order_id, gateway_payment_id), signature)

    def verify_webhook_signature(self, body, signature):
        return hmac.compare_digest(self.sign_webhook(body), signature)


class InMemoryWebhookDeduplicator:
    def __init__(self):
        self.events: dict[str, str] = {}

    async def check_and_lock(self, event_id):
        state = self.events.get(event_id)
        if state is None:
            self.events[event_id] = "processing"
            return (False, None)
        if state == "processing":
            return (True, None)
        return (True, state)

    async def mark_complete(self, event_id, outcome):
        self.events[event_id] = outcome

    async def mark_failed(self, event_id, error):
        self.events.pop(event_id, None)


# ============================================================================
# SETTINGS AND CALLERS
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest.fixture
def customer() -> RequestContext:
    return RequestContext(user_id=CUSTOMER_ID, role=ActorRole.CUSTOMER)


@pytest.fixture
def other_customer() -> RequestContext:
    return RequestContext(user_id=OTHER_CUSTOMER_ID, role=ActorRole.CUSTOMER)


@pytest.fixture
def admin() -> RequestContext:
    return RequestContext(user_id=ADMIN_ID, role=ActorRole.ADMIN)


@pytest.fixture
def vendor_a() -> RequestContext:
    return RequestContext(user_id=VENDOR_A, role=ActorRole.VENDOR)


@pytest.fixture
def vendor_b() -> RequestContext:
    return RequestContext(user_id=VENDOR_B, role=ActorRole.VENDOR)


@pytest.fixture
def shipping_address() -> ShippingAddress:
    return ShippingAddress(
        name="Priya Sharma",
        phone="+919876543210",
        line1="12 MG Road",
        line2="Flat 4B",
        city="Bengaluru",
        state="Karnataka",
        postal_code="560001",
    )


# ============================================================================
# CATALOG FIXTURES
# ============================================================================


@pytest.fixture
def make_product():
    """Factory for product snapshots with sensible defaults."""

    def _make(product_id: str = "prod-sample", **overrides) -> ProductSnapshot:
        values = {
            "product_id": product_id,
            "title": "Sample Product",
            "sku": None,
            "vendor_id": VENDOR_A,
            "vendor_name": "Anand Traders",
            "vendor_phone": "+919800000001",
            "price": 10000,
            "stock": 100,
        }
        values.update(overrides)
        return ProductSnapshot(**values)

    return _make


@pytest.fixture
def sample_products(make_product) -> list[ProductSnapshot]:
    """
    - prod-rice: tiers at 10 and 50 units, 5% tax
    - prod-oil: another vendor, minimum order of 2, 18% tax
    - prod-tea: sold by the platform itself, last unit in stock
    - prod-retired: inactive
    """
    return [
        make_product(
            "prod-rice",
            title="Basmati Rice 1kg",
            sku="RICE-1KG",
            price=10000,
            stock=100,
            pricing_tiers=(PricingTier(min_qty=10, price_per_unit=9000), PricingTier(min_qty=50, price_per_unit=8000)),
            tax_code="GST",
            tax_percentage=Decimal("5"),
            weight_kg=Decimal("1"),
        ),
        make_product(
            "prod-oil",
            title="Groundnut Oil 1L",
            sku="OIL-1L",
            vendor_id=VENDOR_B,
            vendor_name="Bharat Oils",
            vendor_phone="+919800000002",
            price=25000,
            stock=20,
            min_order_qty=2,
            tax_code="GST",
            tax_percentage=Decimal("18"),
            weight_kg=Decimal("0.9"),
        ),
        make_product(
            "prod-tea",
            title="Assam Tea 250g",
            sku="TEA-250",
            vendor_id=PLATFORM_VENDOR,
            vendor_name="Orderflow Store",
            vendor_phone=None,
            vendor_is_platform=True,
            price=5000,
            stock=1,
            tax_code="GST",
            tax_percentage=Decimal("12"),
        ),
        make_product("prod-retired", title="Discontinued Soap", price=1000, stock=10, is_active=False),
    ]


@pytest.fixture
def shipping_config() -> ShippingConfig:
    return ShippingConfig(is_enabled=True, flat_rate=10000, free_shipping_threshold=500000)


# ============================================================================
# REPOSITORY AND GATEWAY FIXTURES
# ============================================================================


@pytest.fixture
def catalog_repository(sample_products) -> InMemoryCatalogRepository:
    return InMemoryCatalogRepository(sample_products)


@pytest.fixture
def cart_repository() -> InMemoryCartRepository:
    return InMemoryCartRepository()


@pytest.fixture
def shipping_config_repository(shipping_config) -> InMemoryShippingConfigRepository:
    return InMemoryShippingConfigRepository(shipping_config)


@pytest.fixture
def order_repository(catalog_repository) -> InMemoryOrderRepository:
    return InMemoryOrderRepository(catalog_repository)


@pytest.fixture
def payment_gateway(settings) -> FakePaymentGateway:
    return FakePaymentGateway(settings.RAZORPAY_KEY_SECRET, settings.RAZORPAY_WEBHOOK_SECRET)


@pytest.fixture
def deduplicator() -> InMemoryWebhookDeduplicator:
    return InMemoryWebhookDeduplicator()


# ============================================================================
# USE CASE FIXTURES
# ============================================================================


@pytest.fixture
def pricing_service() -> PricingService:
    return PricingService(currency="INR")


@pytest.fixture
def status_machine() -> OrderStatusMachine:
    return OrderStatusMachine()


@pytest.fixture
def calculate_order_use_case(cart_repository, catalog_repository, shipping_config_repository, pricing_service):
    return CalculateOrderUseCase(
        cart_repository=cart_repository,
        catalog_repository=catalog_repository,
        shipping_config_repository=shipping_config_repository,
        pricing_service=pricing_service,
    )


@pytest.fixture
def create_payment_intent_use_case(order_repository, payment_gateway):
    return CreatePaymentIntentUseCase(order_repository=order_repository, payment_gateway=payment_gateway)


@pytest.fixture
def create_order_use_case(order_repository, cart_repository, calculate_order_use_case, create_payment_intent_use_case):
    return CreateOrderUseCase(
        order_repository=order_repository,
        cart_repository=cart_repository,
        calculate_order=calculate_order_use_case,
        create_payment_intent=create_payment_intent_use_case,
        order_factory=OrderFactory(order_number_prefix="ORD"),
    )


@pytest.fixture
def settle_payment_use_case(order_repository):
    return SettlePaymentUseCase(order_repository=order_repository)


@pytest.fixture
def verify_payment_use_case(order_repository, payment_gateway, settle_payment_use_case):
    return VerifyPaymentUseCase(
        order_repository=order_repository,
        payment_gateway=payment_gateway,
        settle_payment=settle_payment_use_case,
    )


@pytest.fixture
def webhook_use_case(order_repository, payment_gateway, settle_payment_use_case, deduplicator):
    return HandlePaymentWebhookUseCase(
        order_repository=order_repository,
        payment_gateway=payment_gateway,
        settle_payment=settle_payment_use_case,
        deduplicator=deduplicator,
    )


@pytest.fixture
def update_status_use_case(order_repository, status_machine):
    return UpdateOrderStatusUseCase(order_repository=order_repository, status_machine=status_machine)


@pytest.fixture
def update_delivery_date_use_case(order_repository):
    return UpdateDeliveryDateUseCase(order_repository=order_repository)


@pytest.fixture
def query_service(order_repository):
    return OrderQueryService(order_repository=order_repository, max_limit=100)


@pytest.fixture
def manage_cart_use_case(cart_repository, catalog_repository):
    return ManageCartUseCase(cart_repository=cart_repository, catalog_repository=catalog_repository)


@pytest.fixture
def shipping_config_use_case(shipping_config_repository):
    return ShippingConfigUseCase(shipping_config_repository=shipping_config_repository)


# ============================================================================
# SCENARIO HELPERS
# ============================================================================


@pytest.fixture
def fill_cart(cart_repository):
    """Put (product_id, quantity) lines into a customer's cart."""

    async def _fill(customer_id: str, *lines: tuple[str, int]) -> Cart:
        cart = await cart_repository.get(customer_id)
        for product_id, quantity in lines:
            cart.add(product_id, quantity)
        return await cart_repository.save(cart)

    return _fill


@pytest.fixture
def place_order(fill_cart, create_order_use_case, shipping_address):
    """Fill the cart and check out; returns the CheckoutResult."""

    async def _place(
        customer_id: str = CUSTOMER_ID,
        lines: tuple[tuple[str, int], ...] = (("prod-rice", 12), ("prod-oil", 2)),
        idempotency_key: str | None = None,
    ):
        await fill_cart(customer_id, *lines)
        return await create_order_use_case.execute(
            CreateOrderRequest(
                customer_id=customer_id,
                shipping_address=shipping_address,
                idempotency_key=idempotency_key,
            )
        )

    return _place


@pytest.fixture
def make_item():
    """Factory for order items; total_price follows qty x price."""

    def _make(
        product_id: str = "prod-rice",
        vendor_id: str = VENDOR_A,
        vendor_name: str = "Anand Traders",
        qty: int = 1,
        price_per_unit: int = 10000,
        title: str = "Basmati Rice 1kg",
        is_platform: bool = False,
    ) -> OrderItem:
        return OrderItem(
            product_id=product_id,
            vendor_id=vendor_id,
            title=title,
            sku=None,
            qty=qty,
            price_per_unit=price_per_unit,
            total_price=qty * price_per_unit,
            vendor_snapshot=VendorSnapshot(vendor_name=vendor_name, is_platform=is_platform),
        )

    return _make


@pytest.fixture
def make_order(make_item, shipping_address):
    """Factory for orders built directly, bypassing checkout."""
    numbers = count(1)

    def _make(
        customer_id: str = CUSTOMER_ID,
        status: OrderStatus = OrderStatus.CREATED,
        payment_status: PaymentStatus = PaymentStatus.PENDING,
        items: list[OrderItem] | None = None,
        placed_at: datetime | None = None,
        order_id: str | None = None,
    ) -> Order:
        if items is None:
            items = [
                make_item(),
                make_item("prod-oil", VENDOR_B, "Bharat Oils", qty=2, price_per_unit=25000, title="Groundnut Oil 1L"),
            ]
        subtotal = sum(item.total_price for item in items)
        sequence = next(numbers)
        at = placed_at or utc_now() - timedelta(minutes=sequence)
        return Order(
            id=order_id or f"00000000-0000-4000-8000-{sequence:012d}",
            order_number=f"ORD-{at:%Y%m%d}-T{sequence:05d}",
            customer_id=customer_id,
            shipping_address=shipping_address,
            items=items,
            subtotal=subtotal,
            shipping_cost=0,
            tax=0,
            total=subtotal,
            status=status,
            payment_status=payment_status,
            placed_at=at,
        )

    return _make
