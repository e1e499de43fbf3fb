"""
Update Delivery Date Use Case

Admin edit of an order's expected delivery date.
"""

import logging
from datetime import date

from orderflow.core.domain import ForbiddenException, ValidationException
from orderflow.domains.orders.application.ports import IOrderRepository
from orderflow.domains.orders.domain.entities import Order
from orderflow.domains.orders.domain.value_objects import RequestContext

from .order_access import get_order_or_404

logger = logging.getLogger(__name__)


class UpdateDeliveryDateUseCase:
    """Use Case: Set or clear the expected delivery date (admin only)."""

    def __init__(self, order_repository: IOrderRepository):
        self.order_repository = order_repository

    async def execute(self, order_id: str, expected_delivery_date: date | None, actor: RequestContext) -> Order:
        if not actor.is_admin:
            raise ForbiddenException("update_delivery_date", f"order {order_id}", "admin only")

        order = await get_order_or_404(self.order_repository, order_id)
        if expected_delivery_date is not None and expected_delivery_date < order.placed_at.date():
            raise ValidationException(
                "Expected delivery date cannot be before the order date",
                field="expected_delivery_date",
            )

        order.set_expected_delivery_date(expected_delivery_date)
        saved = await self.order_repository.save(order)
        logger.info(f"Order {saved.order_number}: expected delivery set to {expected_delivery_date}")
        return saved
