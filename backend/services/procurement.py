"""
Procurement service.

Cycle d'une commande fournisseur (pengadaan) :

    Pending -> Dikirim -> Diterima

Le stock matière est incrémenté UNE seule fois, à la première entrée dans
`Diterima`. Le calcul du stock lui-même reste centralisé dans :
    backend.services.inventory
"""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from backend.app.core.errors import ConflictError, InvalidInputError, InvalidStatusError, NotFoundError
from backend.app.db.models.core_types import PROCUREMENT_FLOW, ProcurementStatus
from backend.app.db.models.models_v1 import ProcurementOrder
from backend.app.db.session import unit_of_work
from backend.services.catalog import require_active_user
from backend.services.inventory import apply_adjustment, get_material, to_quantity

logger = logging.getLogger(__name__)


def parse_status(value) -> ProcurementStatus:
    try:
        return ProcurementStatus(value)
    except ValueError:
        raise InvalidStatusError(value, [s.value for s in PROCUREMENT_FLOW]) from None


def get_order(db: Session, order_id: int) -> ProcurementOrder:
    order = (
        db.execute(
            select(ProcurementOrder)
            .where(ProcurementOrder.id == order_id)
            .execution_options(populate_existing=True)
        )
        .scalar_one_or_none()
    )
    if not order:
        raise NotFoundError("Procurement order", order_id)
    return order


def list_orders(db: Session) -> list[ProcurementOrder]:
    rows = db.execute(
        select(ProcurementOrder).order_by(ProcurementOrder.created_at.desc(), ProcurementOrder.id.desc())
    )
    return list(rows.scalars().all())


def create_order(
    db: Session,
    material_id: int,
    user_id: int,
    quantity,
    order_date: date | None = None,
) -> ProcurementOrder:
    quantity = to_quantity(quantity, "quantity")
    if quantity <= 0:
        raise InvalidInputError("quantity must be greater than 0", field="quantity")

    with unit_of_work(db):
        get_material(db, material_id)
        require_active_user(db, user_id)

        order = ProcurementOrder(
            material_id=material_id,
            user_id=user_id,
            quantity=quantity,
            order_date=order_date or date.today(),
            status=ProcurementStatus.pending,
        )
        db.add(order)
        db.flush()
        order_id = order.id

    logger.info("procurement order %s created: material=%s quantity=%s", order_id, material_id, quantity)
    return get_order(db, order_id)


def update_status(
    db: Session,
    order_id: int,
    status,
    received_date: date | None = None,
) -> ProcurementOrder:
    """
    Règle métier :
        si destination == Diterima ET statut stocké != Diterima
            -> stock matière += quantité commandée, received_date posée
        sinon aucun effet stock, received_date inchangée

    Propriétés :
    - transaction-safe : statut + incrément committés ensemble
    - idempotent : prise du statut `Diterima` par UPDATE conditionnel
    - pas de retour arrière (Diterima -> Pending/Dikirim refusé)
    """
    target = parse_status(status)

    with unit_of_work(db):
        order = (
            db.execute(
                select(ProcurementOrder)
                .where(ProcurementOrder.id == order_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            .scalar_one_or_none()
        )
        if not order:
            raise NotFoundError("Procurement order", order_id)

        current = order.status
        if PROCUREMENT_FLOW.index(target) < PROCUREMENT_FLOW.index(current):
            raise ConflictError(
                f"Procurement order {order_id} cannot move from {current.value} back to {target.value}",
                {"current": current.value, "target": target.value},
            )

        if target is ProcurementStatus.diterima:
            claimed = db.execute(
                update(ProcurementOrder)
                .where(ProcurementOrder.id == order_id)
                .where(ProcurementOrder.status != ProcurementStatus.diterima)
                .values(status=ProcurementStatus.diterima, received_date=received_date or date.today())
                .execution_options(synchronize_session=False)
            ).rowcount

            if claimed:
                material = apply_adjustment(db, order.material_id, order.quantity)
                logger.info(
                    "procurement order %s received: material=%s +%s -> %s",
                    order_id,
                    order.material_id,
                    order.quantity,
                    material.stock,
                )
            else:
                logger.info("procurement order %s already received, stock untouched", order_id)
        elif target is not current:
            order.status = target
            logger.info("procurement order %s: %s -> %s", order_id, current.value, target.value)

    return get_order(db, order_id)
