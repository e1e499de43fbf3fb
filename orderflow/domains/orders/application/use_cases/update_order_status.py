"""
Update Order Status Use Case

Drives an order through the status machine on behalf of a vendor, an
admin or the buying customer.
"""

import logging

from orderflow.domains.orders.application.ports import IOrderRepository
from orderflow.domains.orders.domain.entities import Order
from orderflow.domains.orders.domain.services import OrderStatusMachine
from orderflow.domains.orders.domain.value_objects import OrderStatus, RequestContext

from .order_access import get_order_or_404, get_visible_order

logger = logging.getLogger(__name__)


class UpdateOrderStatusUseCase:
    """
    Use Case: Update Order Status

    The transition and its guards belong to OrderStatusMachine. The write is
    a compare-and-swap, so of two concurrent requests only one applies; the
    other gets ConflictingUpdateException. Cancelling returns reserved stock.
    """

    def __init__(self, order_repository: IOrderRepository, status_machine: OrderStatusMachine):
        self.order_repository = order_repository
        self.status_machine = status_machine

    async def execute(self, order_id: str, target: OrderStatus, actor: RequestContext) -> Order:
        order = await get_order_or_404(self.order_repository, order_id)
        transition = self.status_machine.transition(order, target, actor)

        saved = await self.order_repository.save(order, release_stock=target == OrderStatus.CANCELLED)
        logger.info(f"Order {saved.order_number}: {transition} by {actor.role.value}:{actor.user_id}")
        return saved

    async def allowed_targets(self, order_id: str, actor: RequestContext) -> list[OrderStatus]:
        """Statuses the caller may move the order to now."""
        order = await get_visible_order(self.order_repository, order_id, actor)
        return self.status_machine.allowed_targets(order, actor)
