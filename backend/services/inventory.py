"""
Material ledger.

Seul propriétaire du stock courant des matières premières.
Toute écriture de `Material.stock` passe par `apply_adjustment`.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import case, select, update
from sqlalchemy.orm import Session

from backend.app.core.errors import ConflictError, InvalidInputError, MaterialNotFoundError
from backend.app.db.models.core_types import MaterialStatus, MaterialUnit, ProcurementStatus
from backend.app.db.models.models_v1 import MAX_QTY, Material, ProcurementOrder, RecipeLine
from backend.app.db.session import unit_of_work

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def derive_status(stock: Decimal, min_stock: Decimal) -> MaterialStatus:
    """Statut dérivé, jamais stocké."""
    return MaterialStatus.aman if stock >= min_stock else MaterialStatus.stok_rendah


def to_quantity(value, field: str) -> Decimal:
    try:
        qty = Decimal(str(value))
    except ArithmeticError:
        raise InvalidInputError(f"{field} must be a number", field=field) from None
    if not qty.is_finite():
        raise InvalidInputError(f"{field} must be a finite number", field=field)
    if abs(qty) > MAX_QTY:
        raise InvalidInputError(f"{field} must not exceed {MAX_QTY} in absolute value", field=field)
    return qty


def get_material(db: Session, material_id: int) -> Material:
    material = db.get(Material, material_id)
    if not material:
        raise MaterialNotFoundError(material_id)
    return material


def list_materials(db: Session) -> list[Material]:
    return list(db.execute(select(Material).order_by(Material.name)).scalars().all())


def list_low_stock(db: Session) -> list[Material]:
    rows = db.execute(
        select(Material)
        .where(Material.stock < Material.min_stock)
        .order_by(Material.name)
    )
    return list(rows.scalars().all())


def apply_adjustment(db: Session, material_id: int, delta) -> Material:
    """
    Applique stock = max(0, stock + delta) SANS commit.

    Règle métier :
        une consommation supérieure au stock est bornée à 0 (jamais d'échec)

    Propriétés :
    - verrou ligne (FOR UPDATE) sur la matière touchée uniquement
    - UPDATE relatif en une seule instruction : pas de lecture-écriture
      côté appelant, donc pas de mise à jour perdue entre deux ajustements
      concurrents de la même matière
    - à appeler dans l'unité de travail de l'appelant
    """
    delta = to_quantity(delta, "delta")

    current = (
        db.execute(
            select(Material)
            .where(Material.id == material_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        .scalar_one_or_none()
    )
    if current is None:
        raise MaterialNotFoundError(material_id)

    before = current.stock
    raw = Material.stock + delta
    db.execute(
        update(Material)
        .where(Material.id == material_id)
        .values(stock=case((raw < 0, ZERO), else_=raw))
        .execution_options(synchronize_session=False)
    )
    db.refresh(current)

    if before + delta < 0:
        # Borné en silence pour l'appelant, mais tracé distinctement
        logger.warning(
            "material stock clamped: material_id=%s name=%r stock_before=%s delta=%s shortfall=%s",
            material_id,
            current.name,
            before,
            delta,
            -(before + delta),
        )
    else:
        logger.debug("material %s adjusted by %s -> %s", material_id, delta, current.stock)

    return current


def adjust_material(db: Session, material_id: int, delta) -> Material:
    """Ajustement isolé, committé dans sa propre unité de travail."""
    with unit_of_work(db):
        material = apply_adjustment(db, material_id, delta)
    db.refresh(material)
    return material


def create_material(
    db: Session,
    *,
    name: str,
    unit: MaterialUnit | str,
    stock=ZERO,
    min_stock=ZERO,
) -> Material:
    stock = to_quantity(stock, "stock")
    min_stock = to_quantity(min_stock, "min_stock")
    if stock < 0:
        raise InvalidInputError("stock must not be negative", field="stock")
    if min_stock < 0:
        raise InvalidInputError("min_stock must not be negative", field="min_stock")
    try:
        unit = MaterialUnit(unit)
    except ValueError:
        raise InvalidInputError(f"Unknown unit {unit!r}", field="unit") from None

    exists = db.execute(select(Material).where(Material.name == name)).scalar_one_or_none()
    if exists:
        raise ConflictError(f"Material already exists: {name}")

    with unit_of_work(db):
        material = Material(name=name, unit=unit, stock=stock, min_stock=min_stock)
        db.add(material)
    db.refresh(material)
    return material


def update_material(
    db: Session,
    material_id: int,
    *,
    name: str | None = None,
    unit: MaterialUnit | str | None = None,
    min_stock=None,
) -> Material:
    """Fiche matière uniquement : le stock ne bouge que via adjust_material."""
    with unit_of_work(db):
        material = get_material(db, material_id)
        if name is not None:
            material.name = name
        if unit is not None:
            try:
                material.unit = MaterialUnit(unit)
            except ValueError:
                raise InvalidInputError(f"Unknown unit {unit!r}", field="unit") from None
        if min_stock is not None:
            min_stock = to_quantity(min_stock, "min_stock")
            if min_stock < 0:
                raise InvalidInputError("min_stock must not be negative", field="min_stock")
            material.min_stock = min_stock
    db.refresh(material)
    return material


def delete_material(db: Session, material_id: int) -> None:
    with unit_of_work(db):
        material = get_material(db, material_id)

        in_recipe = db.execute(
            select(RecipeLine.product_id).where(RecipeLine.material_id == material_id).limit(1)
        ).first()
        if in_recipe:
            raise ConflictError(f"Material {material_id} is used by a product recipe")

        open_order = db.execute(
            select(ProcurementOrder.id)
            .where(ProcurementOrder.material_id == material_id)
            .where(ProcurementOrder.status != ProcurementStatus.diterima)
            .limit(1)
        ).first()
        if open_order:
            raise ConflictError(f"Material {material_id} has an open procurement order")

        # Les commandes reçues restent rattachées : la FK RESTRICT tranche
        db.delete(material)
