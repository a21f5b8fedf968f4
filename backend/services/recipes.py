"""
Recipe registry (bill of materials).

Produit -> [(matière, quantité par unité)]. Un produit sans ligne est valide :
il ne consomme aucune matière (article de revente).
"""

from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.core.errors import ConflictError, InvalidInputError, NotFoundError
from backend.app.db.models.models_v1 import MAX_QTY, RecipeLine
from backend.app.db.session import unit_of_work
from backend.services.catalog import get_product
from backend.services.inventory import get_material


def _to_quantity_per_unit(value) -> Decimal:
    try:
        qty = Decimal(str(value))
    except ArithmeticError:
        raise InvalidInputError("quantity_per_unit must be a number", field="quantity_per_unit") from None
    if not qty.is_finite() or not 0 < qty <= MAX_QTY:
        raise InvalidInputError(f"quantity_per_unit must be in ]0, {MAX_QTY}]", field="quantity_per_unit")
    return qty


def get_recipe(db: Session, product_id: int) -> list[RecipeLine]:
    rows = db.execute(
        select(RecipeLine)
        .where(RecipeLine.product_id == product_id)
        .order_by(RecipeLine.material_id)
    )
    return list(rows.scalars().all())


def _get_line(db: Session, product_id: int, material_id: int) -> RecipeLine:
    line = db.get(RecipeLine, (product_id, material_id))
    if not line:
        raise NotFoundError("Recipe line", f"{product_id}/{material_id}")
    return line


def add_recipe_line(db: Session, product_id: int, material_id: int, quantity_per_unit) -> RecipeLine:
    qty = _to_quantity_per_unit(quantity_per_unit)

    with unit_of_work(db):
        get_product(db, product_id)
        get_material(db, material_id)
        if db.get(RecipeLine, (product_id, material_id)):
            raise ConflictError(f"Material {material_id} is already in the recipe of product {product_id}")

        line = RecipeLine(product_id=product_id, material_id=material_id, quantity_per_unit=qty)
        db.add(line)
    db.refresh(line)
    return line


def update_recipe_line(db: Session, product_id: int, material_id: int, quantity_per_unit) -> RecipeLine:
    qty = _to_quantity_per_unit(quantity_per_unit)

    with unit_of_work(db):
        line = _get_line(db, product_id, material_id)
        line.quantity_per_unit = qty
    db.refresh(line)
    return line


def remove_recipe_line(db: Session, product_id: int, material_id: int) -> None:
    with unit_of_work(db):
        db.delete(_get_line(db, product_id, material_id))


def compute_consumption(db: Session, lines: Iterable[tuple[int, int]]) -> dict[int, Decimal]:
    """
    Consommation totale par matière pour des lignes (product_id, quantity).

    Les lignes d'un même produit sont cumulées avant multiplication ;
    le résultat est trié par material_id (ordre de verrouillage stable).
    """
    per_product: dict[int, int] = defaultdict(int)
    for product_id, quantity in lines:
        per_product[int(product_id)] += int(quantity)

    consumption: dict[int, Decimal] = defaultdict(Decimal)
    for product_id, quantity in per_product.items():
        for rl in get_recipe(db, product_id):
            consumption[rl.material_id] += rl.quantity_per_unit * quantity

    return {mid: consumption[mid] for mid in sorted(consumption)}
