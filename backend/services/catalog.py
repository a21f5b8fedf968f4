"""
Catalogue produits et identité utilisateurs.

Frontière externe du cœur : le cœur ne fait que lire ces enregistrements
(prix courant d'un produit, utilisateur actif). Les créations servent au seed
et aux écrans de gestion.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.core.errors import InvalidInputError, ProductNotFoundError, UserInvalidError
from backend.app.db.models.core_types import ProductCategory, Role, UserStatus
from backend.app.db.models.models_v1 import MAX_MONEY, Product, User
from backend.app.db.session import unit_of_work


def get_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if not product:
        raise ProductNotFoundError(product_id)
    return product


def list_products(db: Session) -> list[Product]:
    return list(db.execute(select(Product).order_by(Product.name)).scalars().all())


def create_product(
    db: Session,
    *,
    name: str,
    price: Decimal,
    category: ProductCategory | str,
    description: str | None = None,
) -> Product:
    try:
        price = Decimal(str(price))
    except ArithmeticError:
        raise InvalidInputError("Price must be a number", field="price") from None
    if not price.is_finite() or not 0 <= price <= MAX_MONEY:
        raise InvalidInputError(f"Price must be between 0 and {MAX_MONEY}", field="price")
    try:
        category = ProductCategory(category)
    except ValueError:
        raise InvalidInputError(f"Unknown product category {category!r}", field="category") from None

    with unit_of_work(db):
        product = Product(name=name, price=price, category=category, description=description)
        db.add(product)
    db.refresh(product)
    return product


def require_active_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user or user.status != UserStatus.aktif:
        raise UserInvalidError(user_id)
    return user


def create_user(
    db: Session,
    *,
    name: str,
    email: str,
    role: Role | str,
    status: UserStatus | str = UserStatus.aktif,
) -> User:
    try:
        role = Role(role)
    except ValueError:
        raise InvalidInputError(f"Unknown role {role!r}", field="role") from None
    try:
        status = UserStatus(status)
    except ValueError:
        raise InvalidInputError(f"Unknown user status {status!r}", field="status") from None

    with unit_of_work(db):
        user = User(name=name, email=email, role=role, status=status)
        db.add(user)
    db.refresh(user)
    return user
