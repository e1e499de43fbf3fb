"""
Order Status Machine

The one transition table for orders. Admin screens, vendor screens and
customer cancellation all go through it.
"""

import logging
from datetime import datetime

from orderflow.core.domain import DomainException, ForbiddenException, utc_now

from ..entities.order import Order
from ..exceptions import InvalidTransitionException
from ..value_objects.actor import ActorRole, RequestContext
from ..value_objects.order_status import OrderStatus, OrderStatusTransition, PaymentStatus

logger = logging.getLogger(__name__)

_ADMIN = frozenset({ActorRole.ADMIN})

# (from, to) -> roles allowed to take the edge
TRANSITIONS: dict[tuple[OrderStatus, OrderStatus], frozenset[ActorRole]] = {
    (OrderStatus.CREATED, OrderStatus.VENDOR_SHIPPED_TO_WAREHOUSE): frozenset({ActorRole.VENDOR}),
    (OrderStatus.CREATED, OrderStatus.CANCELLED): frozenset({ActorRole.VENDOR, ActorRole.ADMIN, ActorRole.CUSTOMER}),
    # Admin override straight from created
    (OrderStatus.CREATED, OrderStatus.RECEIVED_IN_WAREHOUSE): _ADMIN,
    (OrderStatus.CREATED, OrderStatus.PACKED): _ADMIN,
    (OrderStatus.CREATED, OrderStatus.SHIPPED): _ADMIN,
    (OrderStatus.CREATED, OrderStatus.DELIVERED): _ADMIN,
    # Warehouse path
    (OrderStatus.VENDOR_SHIPPED_TO_WAREHOUSE, OrderStatus.RECEIVED_IN_WAREHOUSE): _ADMIN,
    (OrderStatus.RECEIVED_IN_WAREHOUSE, OrderStatus.PACKED): _ADMIN,
    (OrderStatus.PACKED, OrderStatus.SHIPPED): _ADMIN,
    (OrderStatus.SHIPPED, OrderStatus.DELIVERED): _ADMIN,
}


class OrderStatusMachine:
    """
    Validates and applies order status transitions.

    Checks, in order:
    1. Ownership: vendors must have an item in the order, customers must own it (Forbidden)
    2. Vendors act only on created, paid orders (Forbidden)
    3. The (from, to) edge exists for the caller's role (InvalidTransition)
    4. Customers only cancel unpaid orders (Forbidden)

    Terminal states have no outgoing edges, so nothing leaves them.
    """

    def __init__(self, transitions: dict[tuple[OrderStatus, OrderStatus], frozenset[ActorRole]] | None = None):
        self._transitions = transitions or TRANSITIONS

    def check(self, order: Order, target: OrderStatus, actor: RequestContext) -> DomainException | None:
        """Return the error a transition would raise, or None if it is allowed."""
        source = order.status

        if actor.role == ActorRole.VENDOR and not order.contains_vendor(actor.user_id):
            return ForbiddenException("update_status", f"order {order.id}", "order has no items from this vendor")
        if actor.role == ActorRole.CUSTOMER and order.customer_id != actor.user_id:
            return ForbiddenException("update_status", f"order {order.id}", "order belongs to another customer")

        if actor.role == ActorRole.VENDOR and source != OrderStatus.CREATED:
            return ForbiddenException("update_status", f"order {order.id}", "vendors can only act on created orders")
        if actor.role == ActorRole.VENDOR and order.payment_status != PaymentStatus.PAID:
            return ForbiddenException("update_status", f"order {order.id}", "vendors can only act on paid orders")

        roles = self._transitions.get((source, target))
        if source.is_terminal() or not roles or actor.role not in roles:
            return InvalidTransitionException(source.value, target.value, actor.role.value)

        if actor.role == ActorRole.CUSTOMER and order.payment_status == PaymentStatus.PAID:
            return ForbiddenException("update_status", f"order {order.id}", "paid orders are cancelled by support")

        return None

    def transition(
        self,
        order: Order,
        target: OrderStatus,
        actor: RequestContext,
        at: datetime | None = None,
    ) -> OrderStatusTransition:
        """
        Move the order to `target`.

        Raises:
            ForbiddenException: Caller may not act on this order
            InvalidTransitionException: No such edge for the caller

        Returns:
            The applied transition (also appended to the order's history)
        """
        error = self.check(order, target, actor)
        if error is not None:
            logger.info(
                f"Rejected transition {order.status.value} -> {target.value} on order {order.id} "
                f"by {actor.role.value}:{actor.user_id}: {error.code}"
            )
            raise error

        transition = OrderStatusTransition(
            from_status=order.status,
            to_status=target,
            actor_role=actor.role.value,
            actor_id=actor.user_id,
            at=at or utc_now(),
        )
        order.apply_transition(transition)
        return transition

    def allowed_targets(self, order: Order, actor: RequestContext) -> list[OrderStatus]:
        """Statuses the caller could move the order to right now."""
        return [status for status in OrderStatus if self.check(order, status, actor) is None]
