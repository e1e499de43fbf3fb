"""
Customer cart model
"""

from sqlalchemy import CheckConstraint, Column, Integer, String

from .base import Base, TimestampMixin


class CartItem(Base, TimestampMixin):
    """One row per (customer, product); prices are resolved at quote time"""

    __tablename__ = "cart_items"

    customer_id = Column(String(64), primary_key=True)
    product_id = Column(String(64), primary_key=True)
    quantity = Column(Integer, nullable=False)
    position = Column(Integer, nullable=False, default=0)

    __table_args__ = (CheckConstraint("quantity >= 1", name="quantity_positive"),)

    def __repr__(self):
        return f"<CartItem(customer_id='{self.customer_id}', product_id='{self.product_id}', qty={self.quantity})>"
