"""
Create Order Use Case

Business logic for checkout: re-quote the cart, materialize the order,
reserve stock and open a payment intent.
"""

import logging
from dataclasses import dataclass

from orderflow.core.domain import IntegrationException, ValidationException
from orderflow.domains.orders.application.dto import CheckoutResult
from orderflow.domains.orders.application.ports import ICartRepository, IOrderRepository
from orderflow.domains.orders.domain.entities import Order
from orderflow.domains.orders.domain.exceptions import (
    BelowMinOrderQtyException,
    DuplicateIdempotencyKeyException,
    DuplicateOrderNumberException,
    OrderCreationFailedException,
    OutOfStockException,
    ProductUnavailableException,
)
from orderflow.domains.orders.domain.services import OrderFactory
from orderflow.domains.orders.domain.value_objects import ActorRole, RequestContext, ShippingAddress

from .calculate_order import CalculateOrderUseCase
from .create_payment_intent import CreatePaymentIntentUseCase, gateway_order_for

logger = logging.getLogger(__name__)

# Failures that mean the cart cannot become an order as it stands
_CART_ERRORS = (
    ValidationException,
    ProductUnavailableException,
    BelowMinOrderQtyException,
    OutOfStockException,
)


@dataclass
class CreateOrderRequest:
    """Request for creating an order."""

    customer_id: str
    shipping_address: ShippingAddress
    idempotency_key: str | None = None


class CreateOrderUseCase:
    """
    Use Case: Create Order

    Responsibilities:
    - Re-price the cart from current catalog state (client totals are never used)
    - Snapshot items, vendors and the address into a new order
    - Persist with stock reservation, all or nothing
    - Retry on order number collisions
    - Clear the cart and open a payment intent

    A repeated idempotency key returns the order already placed with it.
    A gateway outage after the order is stored does not undo the order;
    the customer retries the payment intent.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        cart_repository: ICartRepository,
        calculate_order: CalculateOrderUseCase,
        create_payment_intent: CreatePaymentIntentUseCase,
        order_factory: OrderFactory,
        max_order_number_attempts: int = 5,
    ):
        """
        Initialize use case with dependencies.

        Args:
            order_repository: Repository for order data access
            cart_repository: Customer carts
            calculate_order: Quoting use case
            create_payment_intent: Payment intent use case
            order_factory: Builds the aggregate
            max_order_number_attempts: Attempts before giving up on order number collisions
        """
        self.order_repository = order_repository
        self.cart_repository = cart_repository
        self.calculate_order = calculate_order
        self.create_payment_intent = create_payment_intent
        self.order_factory = order_factory
        self.max_order_number_attempts = max_order_number_attempts

    async def execute(self, request: CreateOrderRequest) -> CheckoutResult:
        """
        Place an order from the customer's cart.

        Raises:
            OrderCreationFailedException: The cart cannot be ordered; nothing was written
        """
        if request.idempotency_key:
            existing = await self.order_repository.get_by_idempotency_key(
                request.customer_id, request.idempotency_key
            )
            if existing is not None:
                logger.info(f"Checkout replay for key {request.idempotency_key}: {existing.order_number}")
                return self._replay(existing)

        cart = await self.cart_repository.get(request.customer_id)

        try:
            calculation = await self.calculate_order.quote(cart.lines)
            if calculation.total <= 0:
                raise ValidationException("Order total must be greater than zero", field="total")
            order = self.order_factory.build(
                customer_id=request.customer_id,
                shipping_address=request.shipping_address,
                calculation=calculation,
                idempotency_key=request.idempotency_key,
            )
            order = await self._place(order)
        except _CART_ERRORS as e:
            logger.info(f"Order creation failed for customer {request.customer_id}: {e.code} {e.message}")
            raise OrderCreationFailedException.from_error(e) from e
        except DuplicateIdempotencyKeyException:
            existing = await self.order_repository.get_by_idempotency_key(
                request.customer_id, request.idempotency_key or ""
            )
            if existing is None:
                raise
            return self._replay(existing)

        await self.cart_repository.clear(request.customer_id)
        logger.info(
            f"Order created: {order.order_number} for customer {request.customer_id} "
            f"total={order.total} {order.currency} items={len(order.items)}"
        )

        actor = RequestContext(user_id=request.customer_id, role=ActorRole.CUSTOMER)
        try:
            order, gateway_order = await self.create_payment_intent.execute(order.id or "", actor)
        except IntegrationException as e:
            # Order and reservation stand; the intent is retried via /payment-intent
            logger.warning(f"[PAYMENT] Intent for {order.order_number} deferred: {e.code} {e.message}")
            return CheckoutResult(order=order, gateway_order=None, payment_retryable=True)

        return CheckoutResult(order=order, gateway_order=gateway_order)

    async def _place(self, order: Order) -> Order:
        for attempt in range(1, self.max_order_number_attempts + 1):
            try:
                return await self.order_repository.place(order)
            except DuplicateOrderNumberException:
                logger.warning(f"Order number collision on {order.order_number} (attempt {attempt})")
                order.order_number = self.order_factory.next_order_number()
        raise OrderCreationFailedException(
            reason="ORDER_NUMBER_EXHAUSTED",
            message="could not allocate a unique order number",
            status_code=503,
        )

    def _replay(self, order: Order) -> CheckoutResult:
        gateway_order = gateway_order_for(order) if order.razorpay_order_id else None
        return CheckoutResult(
            order=order,
            gateway_order=gateway_order,
            payment_retryable=gateway_order is None and order.is_payable(),
            replayed=True,
        )
