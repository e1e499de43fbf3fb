"""
Orders Domain Container.

Single Responsibility: Wire all orders domain dependencies.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from orderflow.config.settings import Settings, get_settings
from orderflow.domains.orders.application.ports import IPaymentGateway, IWebhookDeduplicator
from orderflow.domains.orders.application.use_cases import (
    CalculateOrderUseCase,
    CreateOrderUseCase,
    CreatePaymentIntentUseCase,
    HandlePaymentWebhookUseCase,
    ManageCartUseCase,
    OrderQueryService,
    SettlePaymentUseCase,
    ShippingConfigUseCase,
    UpdateDeliveryDateUseCase,
    UpdateOrderStatusUseCase,
    VerifyPaymentUseCase,
)
from orderflow.domains.orders.domain.services import OrderFactory, OrderStatusMachine, PricingService
from orderflow.domains.orders.infrastructure.repositories import (
    SQLAlchemyCartRepository,
    SQLAlchemyCatalogRepository,
    SQLAlchemyOrderRepository,
    SQLAlchemyShippingConfigRepository,
)
from orderflow.domains.orders.infrastructure.services import RazorpayGateway

logger = logging.getLogger(__name__)


class OrdersContainer:
    """
    Orders domain container.

    Stateless services are created once; repositories and use cases are
    built per request around the request's session.
    """

    def __init__(self, settings: Settings | None = None, payment_gateway: IPaymentGateway | None = None):
        self.settings = settings or get_settings()
        self._payment_gateway = payment_gateway
        self._pricing_service = PricingService(currency=self.settings.CURRENCY)
        self._status_machine = OrderStatusMachine()
        self._order_factory = OrderFactory(order_number_prefix=self.settings.ORDER_NUMBER_PREFIX)

    # ==================== SERVICES ====================

    def get_payment_gateway(self) -> IPaymentGateway:
        """Payment gateway adapter; a fresh HTTP client per call keeps requests independent."""
        return self._payment_gateway or RazorpayGateway(self.settings)

    # ==================== REPOSITORIES ====================

    def create_order_repository(self, db: AsyncSession) -> SQLAlchemyOrderRepository:
        return SQLAlchemyOrderRepository(session=db)

    def create_catalog_repository(self, db: AsyncSession) -> SQLAlchemyCatalogRepository:
        return SQLAlchemyCatalogRepository(session=db)

    def create_cart_repository(self, db: AsyncSession) -> SQLAlchemyCartRepository:
        return SQLAlchemyCartRepository(session=db)

    def create_shipping_config_repository(self, db: AsyncSession) -> SQLAlchemyShippingConfigRepository:
        return SQLAlchemyShippingConfigRepository(session=db, settings=self.settings)

    # ==================== USE CASES ====================

    def create_calculate_order_use_case(self, db: AsyncSession) -> CalculateOrderUseCase:
        return CalculateOrderUseCase(
            cart_repository=self.create_cart_repository(db),
            catalog_repository=self.create_catalog_repository(db),
            shipping_config_repository=self.create_shipping_config_repository(db),
            pricing_service=self._pricing_service,
        )

    def create_payment_intent_use_case(self, db: AsyncSession) -> CreatePaymentIntentUseCase:
        return CreatePaymentIntentUseCase(
            order_repository=self.create_order_repository(db),
            payment_gateway=self.get_payment_gateway(),
        )

    def create_order_use_case(self, db: AsyncSession) -> CreateOrderUseCase:
        return CreateOrderUseCase(
            order_repository=self.create_order_repository(db),
            cart_repository=self.create_cart_repository(db),
            calculate_order=self.create_calculate_order_use_case(db),
            create_payment_intent=self.create_payment_intent_use_case(db),
            order_factory=self._order_factory,
            max_order_number_attempts=self.settings.ORDER_NUMBER_MAX_ATTEMPTS,
        )

    def create_settle_payment_use_case(self, db: AsyncSession) -> SettlePaymentUseCase:
        return SettlePaymentUseCase(order_repository=self.create_order_repository(db))

    def create_verify_payment_use_case(self, db: AsyncSession) -> VerifyPaymentUseCase:
        return VerifyPaymentUseCase(
            order_repository=self.create_order_repository(db),
            payment_gateway=self.get_payment_gateway(),
            settle_payment=self.create_settle_payment_use_case(db),
        )

    def create_handle_payment_webhook_use_case(
        self, db: AsyncSession, deduplicator: IWebhookDeduplicator
    ) -> HandlePaymentWebhookUseCase:
        return HandlePaymentWebhookUseCase(
            order_repository=self.create_order_repository(db),
            payment_gateway=self.get_payment_gateway(),
            settle_payment=self.create_settle_payment_use_case(db),
            deduplicator=deduplicator,
        )

    def create_update_order_status_use_case(self, db: AsyncSession) -> UpdateOrderStatusUseCase:
        return UpdateOrderStatusUseCase(
            order_repository=self.create_order_repository(db),
            status_machine=self._status_machine,
        )

    def create_update_delivery_date_use_case(self, db: AsyncSession) -> UpdateDeliveryDateUseCase:
        return UpdateDeliveryDateUseCase(order_repository=self.create_order_repository(db))

    def create_order_query_service(self, db: AsyncSession) -> OrderQueryService:
        return OrderQueryService(
            order_repository=self.create_order_repository(db),
            max_limit=self.settings.ORDERS_PAGE_MAX_LIMIT,
        )

    def create_manage_cart_use_case(self, db: AsyncSession) -> ManageCartUseCase:
        return ManageCartUseCase(
            cart_repository=self.create_cart_repository(db),
            catalog_repository=self.create_catalog_repository(db),
        )

    def create_shipping_config_use_case(self, db: AsyncSession) -> ShippingConfigUseCase:
        return ShippingConfigUseCase(shipping_config_repository=self.create_shipping_config_repository(db))


_orders_container: OrdersContainer | None = None


def get_orders_container() -> OrdersContainer:
    """Get or create the global orders container."""
    global _orders_container
    if _orders_container is None:
        _orders_container = OrdersContainer()
        logger.info("OrdersContainer initialized")
    return _orders_container
