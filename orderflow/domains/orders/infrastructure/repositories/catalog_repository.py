"""
Catalog Repository Implementation

Reads products with their vendor into snapshots for pricing.
"""

import logging
from collections.abc import Sequence
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from orderflow.domains.orders.application.ports import ICatalogRepository
from orderflow.domains.orders.domain.entities import CatalogSnapshot, PricingTier, ProductSnapshot
from orderflow.models.db.catalog import Product as ProductModel

logger = logging.getLogger(__name__)


class SQLAlchemyCatalogRepository(ICatalogRepository):
    """Read-only access to products and vendors."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_snapshot(self, product_ids: Sequence[str]) -> CatalogSnapshot:
        ids = list(dict.fromkeys(product_ids))
        if not ids:
            return CatalogSnapshot()
        result = await self.session.execute(
            select(ProductModel).options(joinedload(ProductModel.vendor)).where(ProductModel.id.in_(ids))
        )
        products = result.unique().scalars().all()
        if len(products) != len(ids):
            logger.debug(f"Catalog snapshot found {len(products)} of {len(ids)} products")
        return CatalogSnapshot(self._to_snapshot(p) for p in products)

    async def get_product(self, product_id: str) -> ProductSnapshot | None:
        result = await self.session.execute(
            select(ProductModel).options(joinedload(ProductModel.vendor)).where(ProductModel.id == product_id)
        )
        model = result.unique().scalar_one_or_none()
        return self._to_snapshot(model) if model else None

    def _to_snapshot(self, model: ProductModel) -> ProductSnapshot:
        """Convert model to snapshot."""
        tiers = tuple(
            sorted(
                (PricingTier(min_qty=int(t["min_qty"]), price_per_unit=int(t["price_per_unit"])) for t in model.pricing_tiers or []),
                key=lambda tier: tier.min_qty,
            )
        )
        vendor = model.vendor
        return ProductSnapshot(
            product_id=model.id,
            title=model.title,
            sku=model.sku,
            vendor_id=model.vendor_id,
            vendor_name=vendor.business_name or vendor.name,
            vendor_phone=vendor.phone,
            price=model.price,
            stock=model.stock,
            pricing_tiers=tiers,
            min_order_qty=model.min_order_qty or 1,
            tax_code=model.tax_code,
            tax_percentage=Decimal(str(model.tax_percentage or 0)),
            weight_kg=Decimal(str(model.weight_kg or 0)),
            is_active=bool(model.is_active),
            vendor_is_platform=bool(vendor.is_platform),
        )
