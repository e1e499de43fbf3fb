"""
Order loading helpers shared by use cases.
"""

from orderflow.core.domain import EntityNotFoundException
from orderflow.domains.orders.application.ports import IOrderRepository
from orderflow.domains.orders.domain.entities import Order
from orderflow.domains.orders.domain.value_objects import ActorRole, RequestContext


async def get_order_or_404(order_repository: IOrderRepository, order_id: str) -> Order:
    order = await order_repository.get_by_id(order_id)
    if order is None:
        raise EntityNotFoundException("Order", order_id)
    return order


def can_view(order: Order, actor: RequestContext) -> bool:
    """Admins see everything, vendors orders with their items, customers their own."""
    if actor.role == ActorRole.ADMIN:
        return True
    if actor.role == ActorRole.VENDOR:
        return order.contains_vendor(actor.user_id)
    return order.customer_id == actor.user_id


async def get_visible_order(order_repository: IOrderRepository, order_id: str, actor: RequestContext) -> Order:
    """Load an order the caller may see; others' orders look missing."""
    order = await get_order_or_404(order_repository, order_id)
    if not can_view(order, actor):
        raise EntityNotFoundException("Order", order_id)
    return order
