"""
Order Repository Implementation

SQLAlchemy implementation of IOrderRepository.
"""

import logging
import uuid
from decimal import Decimal

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from orderflow.core.domain import ConflictingUpdateException
from orderflow.domains.orders.application.dto import OrderPage, OrderSearchCriteria
from orderflow.domains.orders.application.ports import IOrderRepository
from orderflow.domains.orders.domain.entities import Order, OrderItem, VendorSnapshot
from orderflow.domains.orders.domain.exceptions import (
    DuplicateIdempotencyKeyException,
    DuplicateOrderNumberException,
    OutOfStockException,
)
from orderflow.domains.orders.domain.value_objects import (
    OrderStatus,
    OrderStatusTransition,
    PaymentMethod,
    PaymentStatus,
    ShippingAddress,
)
from orderflow.models.db.catalog import Product as ProductModel
from orderflow.models.db.orders import CUSTOMER_IDEMPOTENCY_CONSTRAINT, ORDER_NUMBER_CONSTRAINT
from orderflow.models.db.orders import Order as OrderModel
from orderflow.models.db.orders import OrderItem as OrderItemModel

logger = logging.getLogger(__name__)


def _parse_uuid(value: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def search_condition(text: str):
    """
    Case-insensitive substring match on order number, vendor name or product title.

    `%` and `_` in the text match themselves, not any character.
    """
    return or_(
        OrderModel.order_number.icontains(text, autoescape=True),
        OrderModel.items.any(OrderItemModel.vendor_name.icontains(text, autoescape=True)),
        OrderModel.items.any(OrderItemModel.title.icontains(text, autoescape=True)),
    )


class SQLAlchemyOrderRepository(IOrderRepository):
    """
    SQLAlchemy implementation of order repository.

    `place` reserves stock with conditional decrements and inserts the order
    in the same transaction. Later writes are compare-and-swap on `version`.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def get_by_id(self, order_id: str) -> Order | None:
        """Get order by ID."""
        order_uuid = _parse_uuid(order_id)
        if order_uuid is None:
            logger.warning(f"Invalid order_id format: {order_id}")
            return None
        result = await self.session.execute(
            select(OrderModel).options(selectinload(OrderModel.items)).where(OrderModel.id == order_uuid)
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_by_gateway_order_id(self, gateway_order_id: str) -> Order | None:
        result = await self.session.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.razorpay_order_id == gateway_order_id)
        )
        model = result.scalars().first()
        return self._to_entity(model) if model else None

    async def get_by_idempotency_key(self, customer_id: str, idempotency_key: str) -> Order | None:
        result = await self.session.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(
                OrderModel.customer_id == customer_id,
                OrderModel.idempotency_key == idempotency_key,
            )
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def place(self, order: Order) -> Order:
        """Reserve stock for every item and insert the order, all or nothing."""
        try:
            # Fixed lock order across concurrent checkouts
            for product_id, quantity in sorted(order.quantities_by_product().items()):
                result = await self.session.execute(
                    update(ProductModel)
                    .where(ProductModel.id == product_id, ProductModel.stock >= quantity)
                    .values(stock=ProductModel.stock - quantity)
                )
                if result.rowcount == 0:
                    await self.session.rollback()
                    logger.info(f"Stock reservation failed for {product_id} x{quantity} ({order.order_number})")
                    raise OutOfStockException(product_id, quantity)

            self.session.add(self._to_model(order))
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            detail = str(e.orig)
            if ORDER_NUMBER_CONSTRAINT in detail:
                raise DuplicateOrderNumberException(order.order_number) from e
            if CUSTOMER_IDEMPOTENCY_CONSTRAINT in detail:
                raise DuplicateIdempotencyKeyException(order.customer_id, order.idempotency_key or "") from e
            logger.error(f"Integrity error placing order {order.order_number}: {e}")
            raise
        except OutOfStockException:
            raise
        except Exception as e:
            logger.error(f"Error placing order {order.order_number}: {e}")
            await self.session.rollback()
            raise

        logger.info(f"Order {order.order_number} placed for customer {order.customer_id}, total={order.total}")
        return order

    async def save(self, order: Order, release_stock: bool = False) -> Order:
        """Write mutable order state if `order.version` is still current."""
        expected_version = order.version
        try:
            result = await self.session.execute(
                update(OrderModel)
                .where(OrderModel.id == uuid.UUID(order.id), OrderModel.version == expected_version)
                .values(
                    status=order.status.value,
                    payment_status=order.payment_status.value,
                    razorpay_order_id=order.razorpay_order_id,
                    razorpay_payment_id=order.razorpay_payment_id,
                    expected_delivery_date=order.expected_delivery_date,
                    shipped_date=order.shipped_date,
                    delivered_at=order.delivered_at,
                    cancelled_at=order.cancelled_at,
                    paid_at=order.paid_at,
                    status_history=[transition.to_dict() for transition in order.status_history],
                    updated_at=order.updated_at,
                    version=expected_version + 1,
                )
            )
            if result.rowcount == 0:
                await self.session.rollback()
                raise ConflictingUpdateException("Order", order.id, expected_version)

            if release_stock:
                for product_id, quantity in order.quantities_by_product().items():
                    await self.session.execute(
                        update(ProductModel)
                        .where(ProductModel.id == product_id)
                        .values(stock=ProductModel.stock + quantity)
                    )

            await self.session.commit()
        except ConflictingUpdateException:
            logger.info(f"Stale write rejected for order {order.id} at version {expected_version}")
            raise
        except Exception as e:
            logger.error(f"Error saving order {order.id}: {e}")
            await self.session.rollback()
            raise

        order.increment_version()
        return order

    async def search(self, criteria: OrderSearchCriteria) -> OrderPage:
        conditions = []
        if criteria.customer_id:
            conditions.append(OrderModel.customer_id == criteria.customer_id)
        if criteria.vendor_id:
            conditions.append(OrderModel.items.any(OrderItemModel.vendor_id == criteria.vendor_id))
        if criteria.admin_only:
            conditions.append(OrderModel.items.any(OrderItemModel.vendor_is_platform.is_(True)))
        if criteria.status:
            conditions.append(OrderModel.status == criteria.status.value)
        if criteria.search:
            conditions.append(search_condition(criteria.search))

        count_result = await self.session.execute(select(func.count()).select_from(OrderModel).where(*conditions))
        total = count_result.scalar_one()

        result = await self.session.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(*conditions)
            .order_by(OrderModel.placed_at.desc(), OrderModel.id)
            .offset(criteria.skip)
            .limit(criteria.limit)
        )
        orders = [self._to_entity(m) for m in result.scalars().all()]
        return OrderPage(orders=orders, total=total, skip=criteria.skip, limit=criteria.limit)

    # Mapping methods

    def _to_entity(self, model: OrderModel) -> Order:
        """Convert model to entity."""
        items = [
            OrderItem(
                product_id=item.product_id,
                vendor_id=item.vendor_id,
                title=item.title,
                sku=item.sku,
                qty=item.qty,
                price_per_unit=item.price_per_unit,
                total_price=item.total_price,
                vendor_snapshot=VendorSnapshot(
                    vendor_name=item.vendor_name,
                    vendor_phone=item.vendor_phone,
                    is_platform=bool(item.vendor_is_platform),
                ),
                tax_code=item.tax_code,
                tax_percentage=Decimal(str(item.tax_percentage or 0)),
                tax_amount=item.tax_amount or 0,
            )
            for item in sorted(model.items or [], key=lambda i: i.position)
        ]

        return Order(
            id=str(model.id),
            order_number=model.order_number,
            customer_id=model.customer_id,
            shipping_address=ShippingAddress.from_dict(model.shipping_address),
            items=items,
            subtotal=model.subtotal,
            shipping_cost=model.shipping_cost,
            tax=model.tax,
            total=model.total,
            currency=model.currency,
            status=OrderStatus(model.status),
            payment_status=PaymentStatus(model.payment_status),
            payment_method=PaymentMethod(model.payment_method),
            razorpay_order_id=model.razorpay_order_id,
            razorpay_payment_id=model.razorpay_payment_id,
            idempotency_key=model.idempotency_key,
            placed_at=model.placed_at,
            expected_delivery_date=model.expected_delivery_date,
            shipped_date=model.shipped_date,
            delivered_at=model.delivered_at,
            cancelled_at=model.cancelled_at,
            paid_at=model.paid_at,
            status_history=[OrderStatusTransition.from_dict(entry) for entry in model.status_history or []],
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, order: Order) -> OrderModel:
        """Convert a new entity to a model, items included."""
        model = OrderModel(
            id=uuid.UUID(order.id),
            order_number=order.order_number,
            customer_id=order.customer_id,
            idempotency_key=order.idempotency_key,
            shipping_address=order.shipping_address.to_dict() if order.shipping_address else None,
            subtotal=order.subtotal,
            shipping_cost=order.shipping_cost,
            tax=order.tax,
            total=order.total,
            currency=order.currency,
            status=order.status.value,
            payment_status=order.payment_status.value,
            payment_method=order.payment_method.value,
            razorpay_order_id=order.razorpay_order_id,
            razorpay_payment_id=order.razorpay_payment_id,
            placed_at=order.placed_at,
            expected_delivery_date=order.expected_delivery_date,
            status_history=[transition.to_dict() for transition in order.status_history],
            version=order.version,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
        model.items = [
            OrderItemModel(
                position=position,
                product_id=item.product_id,
                vendor_id=item.vendor_id,
                title=item.title,
                sku=item.sku,
                qty=item.qty,
                price_per_unit=item.price_per_unit,
                total_price=item.total_price,
                tax_code=item.tax_code,
                tax_percentage=item.tax_percentage,
                tax_amount=item.tax_amount,
                vendor_name=item.vendor_snapshot.vendor_name,
                vendor_phone=item.vendor_snapshot.vendor_phone,
                vendor_is_platform=item.vendor_snapshot.is_platform,
            )
            for position, item in enumerate(order.items)
        ]
        return model
