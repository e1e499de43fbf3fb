"""
Catalog models (read by the order engine, managed by the catalog service)
"""

from typing import List

from sqlalchemy import BigInteger, Boolean, CheckConstraint, Column, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, relationship

from .base import Base, TimestampMixin


class Vendor(Base, TimestampMixin):
    """Marketplace vendors; `is_platform` marks the store's own catalog"""

    __tablename__ = "vendors"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    business_name = Column(String(200))
    phone = Column(String(32))
    gst_number = Column(String(20))
    is_platform = Column(Boolean, nullable=False, default=False)

    products: Mapped[List["Product"]] = relationship("Product", back_populates="vendor")

    def __repr__(self):
        return f"<Vendor(id='{self.id}', name='{self.name}')>"


class Product(Base, TimestampMixin):
    """Sellable products. Money columns are minor units (paise)"""

    __tablename__ = "products"

    id = Column(String(64), primary_key=True)
    title = Column(String(300), nullable=False)
    sku = Column(String(100))
    vendor_id = Column(String(64), ForeignKey("vendors.id"), nullable=False)

    price = Column(BigInteger, nullable=False)
    pricing_tiers = Column(JSONB, nullable=False, default=list)  # [{"min_qty": 10, "price_per_unit": 9000}]
    stock = Column(Integer, nullable=False, default=0)
    min_order_qty = Column(Integer, nullable=False, default=1)
    weight_kg = Column(Numeric(10, 3), nullable=False, default=0)

    tax_code = Column(String(20))  # GST, IGST, CGST_SGST, EXEMPT
    tax_percentage = Column(Numeric(5, 2), nullable=False, default=0)

    is_active = Column(Boolean, nullable=False, default=True)

    vendor: Mapped["Vendor"] = relationship("Vendor", back_populates="products", lazy="joined")

    __table_args__ = (
        CheckConstraint("stock >= 0", name="stock_non_negative"),
        CheckConstraint("min_order_qty >= 1", name="min_order_qty_positive"),
        Index("idx_products_vendor", vendor_id),
    )

    def __repr__(self):
        return f"<Product(id='{self.id}', title='{self.title}', stock={self.stock})>"
