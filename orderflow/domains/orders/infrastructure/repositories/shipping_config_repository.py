"""
Shipping Configuration Repository Implementation
"""

import logging

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from orderflow.config.settings import Settings, get_settings
from orderflow.domains.orders.application.ports import IShippingConfigRepository
from orderflow.domains.orders.domain.services import ShippingConfig, ShippingStrategy
from orderflow.models.db.shipping import ShippingConfigModel

logger = logging.getLogger(__name__)

CONFIG_ROW_ID = 1


def default_shipping_config(settings: Settings) -> ShippingConfig:
    """Configuration used until an admin saves one."""
    return ShippingConfig(
        is_enabled=settings.SHIPPING_ENABLED,
        flat_rate=settings.SHIPPING_FLAT_RATE,
        free_shipping_threshold=settings.SHIPPING_FREE_THRESHOLD,
        strategy=ShippingStrategy.FLAT_RATE,
    )


class SQLAlchemyShippingConfigRepository(IShippingConfigRepository):
    """Single-row shipping configuration with settings-based defaults."""

    def __init__(self, session: AsyncSession, settings: Settings | None = None):
        self.session = session
        self.settings = settings or get_settings()

    async def get(self) -> ShippingConfig:
        result = await self.session.execute(select(ShippingConfigModel).where(ShippingConfigModel.id == CONFIG_ROW_ID))
        model = result.scalar_one_or_none()
        if model is None:
            return default_shipping_config(self.settings)
        return ShippingConfig(
            is_enabled=bool(model.is_enabled),
            flat_rate=model.flat_rate,
            free_shipping_threshold=model.free_shipping_threshold,
            strategy=ShippingStrategy(model.strategy),
            per_kg_rate=model.per_kg_rate,
        )

    async def save(self, config: ShippingConfig) -> ShippingConfig:
        values = {
            "is_enabled": config.is_enabled,
            "strategy": config.strategy.value,
            "flat_rate": config.flat_rate,
            "free_shipping_threshold": config.free_shipping_threshold,
            "per_kg_rate": config.per_kg_rate,
        }
        stmt = insert(ShippingConfigModel).values(id=CONFIG_ROW_ID, **values)
        stmt = stmt.on_conflict_do_update(index_elements=[ShippingConfigModel.id], set_=values)
        try:
            await self.session.execute(stmt)
            await self.session.commit()
        except Exception as e:
            logger.error(f"Error saving shipping config: {e}")
            await self.session.rollback()
            raise
        return config
