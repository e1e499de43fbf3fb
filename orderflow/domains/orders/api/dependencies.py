"""
Orders API Dependencies

FastAPI dependencies building orders use cases around the request's session.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from orderflow.api.dependencies import get_container
from orderflow.core.container import OrdersContainer
from orderflow.database.async_db import get_async_db
from orderflow.domains.orders.application.use_cases import (
    CalculateOrderUseCase,
    CreateOrderUseCase,
    CreatePaymentIntentUseCase,
    ManageCartUseCase,
    OrderQueryService,
    ShippingConfigUseCase,
    UpdateDeliveryDateUseCase,
    UpdateOrderStatusUseCase,
    VerifyPaymentUseCase,
)


def get_calculate_order_use_case(
    db: AsyncSession = Depends(get_async_db),  # noqa: B008
    container: OrdersContainer = Depends(get_container),  # noqa: B008
) -> CalculateOrderUseCase:
    return container.create_calculate_order_use_case(db)


def get_create_order_use_case(
    db: AsyncSession = Depends(get_async_db),  # noqa: B008
    container: OrdersContainer = Depends(get_container),  # noqa: B008
) -> CreateOrderUseCase:
    return container.create_order_use_case(db)


def get_create_payment_intent_use_case(
    db: AsyncSession = Depends(get_async_db),  # noqa: B008
    container: OrdersContainer = Depends(get_container),  # noqa: B008
) -> CreatePaymentIntentUseCase:
    return container.create_payment_intent_use_case(db)


def get_verify_payment_use_case(
    db: AsyncSession = Depends(get_async_db),  # noqa: B008
    container: OrdersContainer = Depends(get_container),  # noqa: B008
) -> VerifyPaymentUseCase:
    return container.create_verify_payment_use_case(db)


def get_update_order_status_use_case(
    db: AsyncSession = Depends(get_async_db),  # noqa: B008
    container: OrdersContainer = Depends(get_container),  # noqa: B008
) -> UpdateOrderStatusUseCase:
    return container.create_update_order_status_use_case(db)


def get_update_delivery_date_use_case(
    db: AsyncSession = Depends(get_async_db),  # noqa: B008
    container: OrdersContainer = Depends(get_container),  # noqa: B008
) -> UpdateDeliveryDateUseCase:
    return container.create_update_delivery_date_use_case(db)


def get_order_query_service(
    db: AsyncSession = Depends(get_async_db),  # noqa: B008
    container: OrdersContainer = Depends(get_container),  # noqa: B008
) -> OrderQueryService:
    return container.create_order_query_service(db)


def get_manage_cart_use_case(
    db: AsyncSession = Depends(get_async_db),  # noqa: B008
    container: OrdersContainer = Depends(get_container),  # noqa: B008
) -> ManageCartUseCase:
    return container.create_manage_cart_use_case(db)


def get_shipping_config_use_case(
    db: AsyncSession = Depends(get_async_db),  # noqa: B008
    container: OrdersContainer = Depends(get_container),  # noqa: B008
) -> ShippingConfigUseCase:
    return container.create_shipping_config_use_case(db)


__all__ = [
    "get_calculate_order_use_case",
    "get_create_order_use_case",
    "get_create_payment_intent_use_case",
    "get_verify_payment_use_case",
    "get_update_order_status_use_case",
    "get_update_delivery_date_use_case",
    "get_order_query_service",
    "get_manage_cart_use_case",
    "get_shipping_config_use_case",
]
