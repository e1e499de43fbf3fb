"""
Cart Repository Implementation
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from orderflow.domains.orders.application.ports import ICartRepository
from orderflow.domains.orders.domain.entities import Cart, CartLine
from orderflow.models.db.cart import CartItem as CartItemModel

logger = logging.getLogger(__name__)


class SQLAlchemyCartRepository(ICartRepository):
    """Carts stored as one row per line, ordered by `position`."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, customer_id: str) -> Cart:
        result = await self.session.execute(
            select(CartItemModel)
            .where(CartItemModel.customer_id == customer_id)
            .order_by(CartItemModel.position, CartItemModel.created_at)
        )
        rows = result.scalars().all()
        cart = Cart(
            id=customer_id,
            customer_id=customer_id,
            lines=[CartLine(product_id=row.product_id, quantity=row.quantity) for row in rows],
        )
        if rows:
            cart.created_at = min(row.created_at for row in rows)
            cart.updated_at = max(row.updated_at for row in rows)
        return cart

    async def save(self, cart: Cart) -> Cart:
        try:
            await self.session.execute(delete(CartItemModel).where(CartItemModel.customer_id == cart.customer_id))
            self.session.add_all(
                CartItemModel(
                    customer_id=cart.customer_id,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    position=position,
                )
                for position, line in enumerate(cart.lines)
            )
            await self.session.commit()
        except Exception as e:
            logger.error(f"Error saving cart for {cart.customer_id}: {e}")
            await self.session.rollback()
            raise
        return cart

    async def clear(self, customer_id: str) -> None:
        try:
            await self.session.execute(delete(CartItemModel).where(CartItemModel.customer_id == customer_id))
            await self.session.commit()
        except Exception as e:
            logger.error(f"Error clearing cart for {customer_id}: {e}")
            await self.session.rollback()
            raise
