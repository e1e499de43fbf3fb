"""Orders baseline schema.

Revision ID: 001_orders_baseline
Revises: None
Create Date: 2026-10-19

Tables created:
- vendors, products: catalog read by pricing and stock reservation
- cart_items: one row per (customer, product)
- orders, order_items: placed orders with item and vendor snapshots
- shipping_config: single-row store shipping settings
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_orders_baseline"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Create orders schema."""
    op.create_table(
        "vendors",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("business_name", sa.String(200)),
        sa.Column("phone", sa.String(32)),
        sa.Column("gst_number", sa.String(20)),
        sa.Column("is_platform", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_vendors"),
    )

    op.create_table(
        "products",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("sku", sa.String(100)),
        sa.Column("vendor_id", sa.String(64), nullable=False),
        sa.Column("price", sa.BigInteger, nullable=False),
        sa.Column("pricing_tiers", postgresql.JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("stock", sa.Integer, nullable=False, server_default="0"),
        sa.Column("min_order_qty", sa.Integer, nullable=False, server_default="1"),
        sa.Column("weight_kg", sa.Numeric(10, 3), nullable=False, server_default="0"),
        sa.Column("tax_code", sa.String(20)),
        sa.Column("tax_percentage", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_products"),
        sa.ForeignKeyConstraint(["vendor_id"], ["vendors.id"], name="fk_products_vendor_id_vendors"),
        sa.CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        sa.CheckConstraint("min_order_qty >= 1", name="ck_products_min_order_qty_positive"),
    )
    op.create_index("idx_products_vendor", "products", ["vendor_id"])

    op.create_table(
        "cart_items",
        sa.Column("customer_id", sa.String(64), nullable=False),
        sa.Column("product_id", sa.String(64), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("customer_id", "product_id", name="pk_cart_items"),
        sa.CheckConstraint("quantity >= 1", name="ck_cart_items_quantity_positive"),
    )

    op.create_table(
        "orders",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("order_number", sa.String(50), nullable=False),
        sa.Column("customer_id", sa.String(64), nullable=False),
        sa.Column("idempotency_key", sa.String(128)),
        sa.Column("shipping_address", postgresql.JSONB, nullable=False),
        sa.Column("subtotal", sa.BigInteger, nullable=False),
        sa.Column("shipping_cost", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("tax", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("total", sa.BigInteger, nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="INR"),
        sa.Column("status", sa.String(40), nullable=False, server_default="created"),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("payment_method", sa.String(20), nullable=False, server_default="razorpay"),
        sa.Column("razorpay_order_id", sa.String(64)),
        sa.Column("razorpay_payment_id", sa.String(64)),
        sa.Column("placed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expected_delivery_date", sa.Date),
        sa.Column("shipped_date", sa.DateTime(timezone=True)),
        sa.Column("delivered_at", sa.DateTime(timezone=True)),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
        sa.Column("paid_at", sa.DateTime(timezone=True)),
        sa.Column("status_history", postgresql.JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("version", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_orders"),
        sa.UniqueConstraint("order_number", name="uq_orders_order_number"),
        sa.UniqueConstraint("customer_id", "idempotency_key", name="uq_orders_customer_idempotency"),
        sa.CheckConstraint("total = subtotal + shipping_cost + tax", name="ck_orders_total_equation"),
    )
    op.create_index("idx_orders_customer", "orders", ["customer_id"])
    op.create_index("idx_orders_status", "orders", ["status"])
    op.create_index("idx_orders_placed_at", "orders", ["placed_at"])
    op.create_index("idx_orders_razorpay_order", "orders", ["razorpay_order_id"])
    op.create_index("idx_orders_customer_status_date", "orders", ["customer_id", "status", "placed_at"])

    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer, autoincrement=True, nullable=False),
        sa.Column("order_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.Column("product_id", sa.String(64), nullable=False),
        sa.Column("vendor_id", sa.String(64), nullable=False),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("sku", sa.String(100)),
        sa.Column("qty", sa.Integer, nullable=False),
        sa.Column("price_per_unit", sa.BigInteger, nullable=False),
        sa.Column("total_price", sa.BigInteger, nullable=False),
        sa.Column("tax_code", sa.String(20)),
        sa.Column("tax_percentage", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("tax_amount", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("vendor_name", sa.String(200), nullable=False),
        sa.Column("vendor_phone", sa.String(32)),
        sa.Column("vendor_is_platform", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id", name="pk_order_items"),
        sa.ForeignKeyConstraint(
            ["order_id"], ["orders.id"], name="fk_order_items_order_id_orders", ondelete="CASCADE"
        ),
        sa.CheckConstraint("qty >= 1", name="ck_order_items_qty_positive"),
    )
    op.create_index("idx_order_items_order", "order_items", ["order_id"])
    op.create_index("idx_order_items_vendor", "order_items", ["vendor_id"])

    op.create_table(
        "shipping_config",
        sa.Column("id", sa.Integer, nullable=False),
        sa.Column("is_enabled", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("strategy", sa.String(20), nullable=False, server_default="flat_rate"),
        sa.Column("flat_rate", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("free_shipping_threshold", sa.BigInteger),
        sa.Column("per_kg_rate", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_shipping_config"),
    )


def downgrade() -> None:
    """Drop orders schema."""
    op.drop_table("shipping_config")
    op.drop_table("order_items")
    op.drop_table("orders")
    op.drop_table("cart_items")
    op.drop_table("products")
    op.drop_table("vendors")
