"""initial ledger schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PK = sa.BigInteger().with_variant(sa.Integer(), "sqlite")
MONEY = sa.Numeric(14, 2)
QTY = sa.Numeric(14, 3)

USER_ROLE = sa.Enum("Kasir", "Barista", "Manager", "Pengadaan", name="user_role")
USER_STATUS = sa.Enum("Aktif", "Nonaktif", name="user_status")
PRODUCT_CATEGORY = sa.Enum("Kopi", "Non-Kopi", "Makanan", name="product_category")
MATERIAL_UNIT = sa.Enum("kg", "liter", "pcs", "gram", "ml", name="material_unit")
FULFILLMENT_STATUS = sa.Enum("waiting", "processing", "ready", "completed", name="fulfillment_status")
PROCUREMENT_STATUS = sa.Enum("Pending", "Dikirim", "Diterima", name="procurement_status")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", PK, primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("role", USER_ROLE, nullable=False),
        sa.Column("status", USER_STATUS, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "products",
        sa.Column("id", PK, primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("price", MONEY, nullable=False),
        sa.Column("category", PRODUCT_CATEGORY, nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("price >= 0", name="ck_product_price_nonneg"),
    )

    op.create_table(
        "materials",
        sa.Column("id", PK, primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("unit", MATERIAL_UNIT, nullable=False),
        sa.Column("stock", QTY, nullable=False),
        sa.Column("min_stock", QTY, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("stock >= 0", name="ck_material_stock_nonneg"),
        sa.CheckConstraint("min_stock >= 0", name="ck_material_min_stock_nonneg"),
    )

    op.create_table(
        "recipe_lines",
        sa.Column("product_id", sa.BigInteger(), sa.ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("material_id", sa.BigInteger(), sa.ForeignKey("materials.id", ondelete="RESTRICT"), primary_key=True),
        sa.Column("quantity_per_unit", QTY, nullable=False),
        sa.CheckConstraint("quantity_per_unit > 0", name="ck_recipe_qty_pos"),
    )

    op.create_table(
        "sales_transactions",
        sa.Column("id", PK, primary_key=True),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("total", MONEY, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("total >= 0", name="ck_sales_total_nonneg"),
    )
    op.create_index("ix_sales_transactions_user_id", "sales_transactions", ["user_id"])
    op.create_index("ix_sales_transactions_created", "sales_transactions", ["created_at"])

    op.create_table(
        "sales_transaction_lines",
        sa.Column("id", PK, primary_key=True),
        sa.Column(
            "transaction_id",
            sa.BigInteger(),
            sa.ForeignKey("sales_transactions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("product_id", sa.BigInteger(), sa.ForeignKey("products.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("product_name", sa.String(100), nullable=False),
        sa.Column("unit_price", MONEY, nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("subtotal", MONEY, nullable=False),
        sa.CheckConstraint("quantity >= 1", name="ck_sales_line_qty_pos"),
        sa.CheckConstraint("unit_price >= 0", name="ck_sales_line_price_nonneg"),
    )
    op.create_index("ix_sales_transaction_lines_transaction_id", "sales_transaction_lines", ["transaction_id"])

    op.create_table(
        "fulfillment_orders",
        sa.Column("id", PK, primary_key=True),
        sa.Column("order_number", sa.String(20), unique=True),
        sa.Column("status", FULFILLMENT_STATUS, nullable=False),
        sa.Column(
            "transaction_id",
            sa.BigInteger(),
            sa.ForeignKey("sales_transactions.id", ondelete="SET NULL"),
        ),
        sa.Column("cashier_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_fulfillment_orders_status", "fulfillment_orders", ["status"])
    op.create_index("ix_fulfillment_orders_created", "fulfillment_orders", ["created_at"])

    op.create_table(
        "fulfillment_order_lines",
        sa.Column("id", PK, primary_key=True),
        sa.Column(
            "order_id",
            sa.BigInteger(),
            sa.ForeignKey("fulfillment_orders.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("product_id", sa.BigInteger(), sa.ForeignKey("products.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text()),
        sa.CheckConstraint("quantity >= 1", name="ck_fulfillment_line_qty_pos"),
    )
    op.create_index("ix_fulfillment_order_lines_order_id", "fulfillment_order_lines", ["order_id"])

    op.create_table(
        "procurement_orders",
        sa.Column("id", PK, primary_key=True),
        sa.Column("material_id", sa.BigInteger(), sa.ForeignKey("materials.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantity", QTY, nullable=False),
        sa.Column("order_date", sa.Date(), nullable=False),
        sa.Column("status", PROCUREMENT_STATUS, nullable=False),
        sa.Column("received_date", sa.Date()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_procurement_qty_pos"),
    )
    op.create_index("ix_procurement_orders_material_id", "procurement_orders", ["material_id"])
    op.create_index("ix_procurement_orders_status", "procurement_orders", ["status"])


def downgrade() -> None:
    op.drop_table("procurement_orders")
    op.drop_table("fulfillment_order_lines")
    op.drop_table("fulfillment_orders")
    op.drop_table("sales_transaction_lines")
    op.drop_table("sales_transactions")
    op.drop_table("recipe_lines")
    op.drop_table("materials")
    op.drop_table("products")
    op.drop_table("users")

    # Types ENUM nommés (Postgres) : survivent au DROP TABLE
    bind = op.get_bind()
    for enum_type in (
        PROCUREMENT_STATUS,
        FULFILLMENT_STATUS,
        MATERIAL_UNIT,
        PRODUCT_CATEGORY,
        USER_STATUS,
        USER_ROLE,
    ):
        enum_type.drop(bind, checkfirst=True)
