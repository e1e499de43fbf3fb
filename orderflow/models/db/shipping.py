"""
Store-wide shipping configuration (single row)
"""

from datetime import UTC, datetime

from sqlalchemy import BigInteger, Boolean, Column, DateTime, Integer, String

from .base import Base


class ShippingConfigModel(Base):
    """Shipping settings; the application keeps exactly one row with id=1"""

    __tablename__ = "shipping_config"

    id = Column(Integer, primary_key=True, default=1)
    is_enabled = Column(Boolean, nullable=False, default=True)
    strategy = Column(String(20), nullable=False, default="flat_rate")  # flat_rate, weight_based
    flat_rate = Column(BigInteger, nullable=False, default=0)
    free_shipping_threshold = Column(BigInteger)
    per_kg_rate = Column(BigInteger, nullable=False, default=0)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self):
        return f"<ShippingConfig(enabled={self.is_enabled}, strategy='{self.strategy}', flat_rate={self.flat_rate})>"
