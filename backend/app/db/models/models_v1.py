from __future__ import annotations

from datetime import datetime, date, timezone
from decimal import Decimal

from sqlalchemy import (
    String,
    Integer,
    BigInteger,
    DateTime,
    Date,
    ForeignKey,
    Numeric,
    Text,
    Enum,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.app.db.base import Base
from backend.app.db.models.core_types import (
    Role,
    UserStatus,
    ProductCategory,
    MaterialUnit,
    MaterialStatus,
    FulfillmentStatus,
    ProcurementStatus,
)

# SQLite n'auto-incrémente que les INTEGER PRIMARY KEY
PK = BigInteger().with_variant(Integer(), "sqlite")

MONEY = Numeric(14, 2)
QTY = Numeric(14, 3)

# Bornes des colonnes ci-dessus (et de Integer) : validées avant écriture
MAX_INT = 2_147_483_647
MAX_MONEY = Decimal("999999999999.99")
MAX_QTY = Decimal("99999999999.999")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum(enum_cls, name: str) -> Enum:
    # on stocke les valeurs ("Diterima", "Non-Kopi"), pas les noms Python
    return Enum(enum_cls, name=name, values_callable=lambda e: [m.value for m in e])


# ---------- IDENTITÉ / CATALOGUE (externes au cœur, lus seulement) ----------
class User(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    role: Mapped[Role] = mapped_column(_enum(Role, "user_role"), nullable=False)
    status: Mapped[UserStatus] = mapped_column(
        _enum(UserStatus, "user_status"),
        default=UserStatus.aktif,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)


class Product(Base):
    __tablename__ = "products"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    category: Mapped[ProductCategory] = mapped_column(_enum(ProductCategory, "product_category"), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    recipe: Mapped[list["RecipeLine"]] = relationship(back_populates="product", cascade="all, delete-orphan")

    __table_args__ = (CheckConstraint("price >= 0", name="ck_product_price_nonneg"),)


# ---------- MATERIAL LEDGER ----------
class Material(Base):
    __tablename__ = "materials"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    unit: Mapped[MaterialUnit] = mapped_column(_enum(MaterialUnit, "material_unit"), nullable=False)
    stock: Mapped[Decimal] = mapped_column(QTY, default=Decimal("0"), nullable=False)
    min_stock: Mapped[Decimal] = mapped_column(QTY, default=Decimal("0"), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_material_stock_nonneg"),
        CheckConstraint("min_stock >= 0", name="ck_material_min_stock_nonneg"),
    )

    @property
    def status(self) -> MaterialStatus:
        # import local : services -> models, pas l'inverse au chargement
        from backend.services.inventory import derive_status

        return derive_status(self.stock, self.min_stock)


class RecipeLine(Base):
    __tablename__ = "recipe_lines"
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="CASCADE"), primary_key=True)
    material_id: Mapped[int] = mapped_column(ForeignKey("materials.id", ondelete="RESTRICT"), primary_key=True)
    quantity_per_unit: Mapped[Decimal] = mapped_column(QTY, nullable=False)

    product: Mapped[Product] = relationship(back_populates="recipe")
    material: Mapped[Material] = relationship()

    __table_args__ = (CheckConstraint("quantity_per_unit > 0", name="ck_recipe_qty_pos"),)


# ---------- VENTES ----------
class SalesTransaction(Base):
    __tablename__ = "sales_transactions"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    total: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    user: Mapped[User] = relationship()
    lines: Mapped[list["SalesTransactionLine"]] = relationship(
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="SalesTransactionLine.id",
    )

    __table_args__ = (
        CheckConstraint("total >= 0", name="ck_sales_total_nonneg"),
        Index("ix_sales_transactions_created", "created_at"),
    )


class SalesTransactionLine(Base):
    __tablename__ = "sales_transaction_lines"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    transaction_id: Mapped[int] = mapped_column(
        ForeignKey("sales_transactions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    product_name: Mapped[str] = mapped_column(String(100), nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    transaction: Mapped[SalesTransaction] = relationship(back_populates="lines")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_sales_line_qty_pos"),
        CheckConstraint("unit_price >= 0", name="ck_sales_line_price_nonneg"),
    )


# ---------- BARISTA (FULFILLMENT) ----------
class FulfillmentOrder(Base):
    __tablename__ = "fulfillment_orders"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    order_number: Mapped[str | None] = mapped_column(String(20), unique=True)
    status: Mapped[FulfillmentStatus] = mapped_column(
        _enum(FulfillmentStatus, "fulfillment_status"),
        default=FulfillmentStatus.waiting,
        nullable=False,
    )
    transaction_id: Mapped[int | None] = mapped_column(ForeignKey("sales_transactions.id", ondelete="SET NULL"))
    cashier_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    lines: Mapped[list["FulfillmentOrderLine"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="FulfillmentOrderLine.id",
    )

    __table_args__ = (
        Index("ix_fulfillment_orders_status", "status"),
        Index("ix_fulfillment_orders_created", "created_at"),
    )


class FulfillmentOrderLine(Base):
    __tablename__ = "fulfillment_order_lines"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("fulfillment_orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)

    order: Mapped[FulfillmentOrder] = relationship(back_populates="lines")

    __table_args__ = (CheckConstraint("quantity >= 1", name="ck_fulfillment_line_qty_pos"),)


# ---------- PENGADAAN (PROCUREMENT) ----------
class ProcurementOrder(Base):
    __tablename__ = "procurement_orders"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    material_id: Mapped[int] = mapped_column(
        ForeignKey("materials.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(QTY, nullable=False)
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[ProcurementStatus] = mapped_column(
        _enum(ProcurementStatus, "procurement_status"),
        default=ProcurementStatus.pending,
        nullable=False,
    )
    received_date: Mapped[date | None] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    material: Mapped[Material] = relationship()

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_procurement_qty_pos"),
        Index("ix_procurement_orders_status", "status"),
    )
