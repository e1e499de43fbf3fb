"""
Shipping Configuration Use Case

Admin read and update of the store-wide shipping settings.
"""

import logging

from orderflow.core.domain import ForbiddenException
from orderflow.domains.orders.application.ports import IShippingConfigRepository
from orderflow.domains.orders.domain.services import ShippingConfig
from orderflow.domains.orders.domain.value_objects import RequestContext

logger = logging.getLogger(__name__)


class ShippingConfigUseCase:
    """Use Case: Get / update shipping configuration (admin only)."""

    def __init__(self, shipping_config_repository: IShippingConfigRepository):
        self.shipping_config_repository = shipping_config_repository

    async def get(self, actor: RequestContext) -> ShippingConfig:
        self._require_admin(actor, "get_shipping_config")
        return await self.shipping_config_repository.get()

    async def update(self, config: ShippingConfig, actor: RequestContext) -> ShippingConfig:
        self._require_admin(actor, "update_shipping_config")
        saved = await self.shipping_config_repository.save(config)
        logger.info(
            f"Shipping config updated by {actor.user_id}: enabled={saved.is_enabled} "
            f"strategy={saved.strategy.value} flat_rate={saved.flat_rate} "
            f"free_threshold={saved.free_shipping_threshold}"
        )
        return saved

    def _require_admin(self, actor: RequestContext, operation: str) -> None:
        if not actor.is_admin:
            raise ForbiddenException(operation, "shipping config", "admin only")
