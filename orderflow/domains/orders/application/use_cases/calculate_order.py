"""
Calculate Order Use Case

Quotes the caller's cart against the live catalog.
"""

import logging
from collections.abc import Sequence

from orderflow.domains.orders.application.ports import (
    ICartRepository,
    ICatalogRepository,
    IShippingConfigRepository,
)
from orderflow.domains.orders.domain.entities import CartLine
from orderflow.domains.orders.domain.services import OrderCalculation, PricingService

logger = logging.getLogger(__name__)


class CalculateOrderUseCase:
    """
    Use Case: Calculate Order

    Loads the cart, a fresh catalog snapshot and the current shipping
    configuration, then prices the cart. Nothing is cached between calls.
    """

    def __init__(
        self,
        cart_repository: ICartRepository,
        catalog_repository: ICatalogRepository,
        shipping_config_repository: IShippingConfigRepository,
        pricing_service: PricingService,
    ):
        """
        Initialize use case with dependencies.

        Args:
            cart_repository: Customer carts
            catalog_repository: Live product data
            shipping_config_repository: Store shipping settings
            pricing_service: Pricing domain service
        """
        self.cart_repository = cart_repository
        self.catalog_repository = catalog_repository
        self.shipping_config_repository = shipping_config_repository
        self.pricing_service = pricing_service

    async def execute(self, customer_id: str) -> OrderCalculation:
        """Quote the customer's current cart."""
        cart = await self.cart_repository.get(customer_id)
        return await self.quote(cart.lines)

    async def quote(self, lines: Sequence[CartLine]) -> OrderCalculation:
        """Quote arbitrary lines against current catalog and shipping data."""
        catalog = await self.catalog_repository.get_snapshot([line.product_id for line in lines])
        shipping_config = await self.shipping_config_repository.get()
        calculation = self.pricing_service.quote(lines, catalog, shipping_config.to_policy())
        logger.debug(
            f"Quoted {len(lines)} lines: subtotal={calculation.subtotal} "
            f"shipping={calculation.shipping_cost} tax={calculation.tax} total={calculation.total}"
        )
        return calculation
