"""
Manage Cart Use Case

Customer cart edits. Prices are not stored on lines; the cart is quoted
on demand.
"""

import logging

from orderflow.core.domain import EntityNotFoundException
from orderflow.domains.orders.application.ports import ICartRepository, ICatalogRepository
from orderflow.domains.orders.domain.entities import Cart
from orderflow.domains.orders.domain.exceptions import ProductUnavailableException

logger = logging.getLogger(__name__)


class ManageCartUseCase:
    """
    Use Case: Manage Cart

    Adding an inactive or unknown product is refused up front. Stock and
    minimum quantities are only enforced when the cart is priced.
    """

    def __init__(self, cart_repository: ICartRepository, catalog_repository: ICatalogRepository):
        self.cart_repository = cart_repository
        self.catalog_repository = catalog_repository

    async def get_cart(self, customer_id: str) -> Cart:
        return await self.cart_repository.get(customer_id)

    async def add_item(self, customer_id: str, product_id: str, quantity: int) -> Cart:
        product = await self.catalog_repository.get_product(product_id)
        if product is None or not product.is_active:
            raise ProductUnavailableException(product_id)

        cart = await self.cart_repository.get(customer_id)
        cart.add(product_id, quantity)
        logger.debug(f"Cart {customer_id}: +{quantity} x {product_id}")
        return await self.cart_repository.save(cart)

    async def update_item(self, customer_id: str, product_id: str, quantity: int) -> Cart:
        cart = await self.cart_repository.get(customer_id)
        cart.update(product_id, quantity)
        return await self.cart_repository.save(cart)

    async def remove_item(self, customer_id: str, product_id: str) -> Cart:
        cart = await self.cart_repository.get(customer_id)
        if not cart.remove(product_id):
            raise EntityNotFoundException("CartItem", product_id)
        return await self.cart_repository.save(cart)

    async def clear(self, customer_id: str) -> None:
        await self.cart_repository.clear(customer_id)
        logger.debug(f"Cart {customer_id} cleared")
