"""
Fulfillment (barista) order state machine.

    waiting -> processing -> ready -> completed
    (raccourci waiting -> completed autorisé)

La consommation matière est appliquée UNE seule fois, lors de la première
entrée dans `completed`. Le statut stocké est l'unique témoin d'idempotence :
pas de drapeau "déjà déduit".
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, NamedTuple

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from backend.app.core.errors import ConflictError, InvalidInputError, InvalidStatusError, NotFoundError
from backend.app.db.models.core_types import FULFILLMENT_FLOW, FulfillmentStatus
from backend.app.db.models.models_v1 import FulfillmentOrder, FulfillmentOrderLine
from backend.app.db.session import unit_of_work
from backend.services.catalog import get_product, require_active_user
from backend.services.inventory import apply_adjustment
from backend.services.recipes import compute_consumption
from backend.services.sales import get_transaction, validate_lines

logger = logging.getLogger(__name__)


class OrderItem(NamedTuple):
    product_id: int
    quantity: int
    notes: str | None = None


def parse_status(value) -> FulfillmentStatus:
    try:
        return FulfillmentStatus(value)
    except ValueError:
        raise InvalidStatusError(value, [s.value for s in FULFILLMENT_FLOW]) from None


def _lock_order(db: Session, order_id: int) -> FulfillmentOrder:
    order = (
        db.execute(
            select(FulfillmentOrder)
            .where(FulfillmentOrder.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        .scalar_one_or_none()
    )
    if not order:
        raise NotFoundError("Fulfillment order", order_id)
    return order


def get_order(db: Session, order_id: int) -> FulfillmentOrder:
    order = (
        db.execute(
            select(FulfillmentOrder)
            .where(FulfillmentOrder.id == order_id)
            .options(selectinload(FulfillmentOrder.lines))
            .execution_options(populate_existing=True)
        )
        .scalar_one_or_none()
    )
    if not order:
        raise NotFoundError("Fulfillment order", order_id)
    return order


def list_orders(db: Session) -> list[FulfillmentOrder]:
    rows = db.execute(
        select(FulfillmentOrder)
        .options(selectinload(FulfillmentOrder.lines))
        .order_by(FulfillmentOrder.created_at.desc(), FulfillmentOrder.id.desc())
    )
    return list(rows.scalars().all())


def create_order(
    db: Session,
    cashier_id: int,
    items: Iterable[OrderItem] | None = None,
    transaction_id: int | None = None,
) -> FulfillmentOrder:
    """
    Crée une commande barista au statut `waiting`.

    Sans `items`, les lignes sont reprises de la transaction de vente référencée.
    """
    if items is not None:
        items = [OrderItem(*it) for it in items]
        validate_lines((it.product_id, it.quantity) for it in items)
    elif transaction_id is None:
        raise InvalidInputError("items are required when no transaction_id is given", field="items")

    with unit_of_work(db):
        require_active_user(db, cashier_id)

        if transaction_id is not None:
            trx = get_transaction(db, transaction_id)
            if items is None:
                items = [OrderItem(ln.product_id, ln.quantity) for ln in trx.lines]

        for it in items:
            get_product(db, it.product_id)

        order = FulfillmentOrder(
            status=FulfillmentStatus.waiting,
            transaction_id=transaction_id,
            cashier_id=cashier_id,
        )
        for it in items:
            order.lines.append(
                FulfillmentOrderLine(product_id=it.product_id, quantity=it.quantity, notes=it.notes)
            )
        db.add(order)
        db.flush()

        order.order_number = f"BO-{datetime.now(timezone.utc):%y%m%d}-{order.id:04d}"
        order_id = order.id

    logger.info("fulfillment order %s created (transaction=%s)", order_id, transaction_id)
    return get_order(db, order_id)


def advance(db: Session, order_id: int, target_status) -> FulfillmentOrder:
    """
    Fait avancer la commande vers `target_status`.

    Règle métier :
        si destination == completed ET statut stocké != completed
            -> déduire la recette de chaque ligne du stock matière
        sinon aucun effet stock (re-complétion = succès sans effet)

    Propriétés :
    - vérification + déduction + nouveau statut dans une seule unité de travail
    - la prise du statut `completed` est un UPDATE conditionnel
      (WHERE status <> 'completed') : deux complétions concurrentes
      donnent exactement une passe de déduction
    - retour en arrière ou sortie de `completed` -> ConflictError
    """
    target = parse_status(target_status)

    with unit_of_work(db):
        order = _lock_order(db, order_id)
        current = order.status

        if FULFILLMENT_FLOW.index(target) < FULFILLMENT_FLOW.index(current):
            raise ConflictError(
                f"Fulfillment order {order_id} cannot move from {current.value} back to {target.value}",
                {"current": current.value, "target": target.value},
            )

        if target is FulfillmentStatus.completed:
            claimed = db.execute(
                update(FulfillmentOrder)
                .where(FulfillmentOrder.id == order_id)
                .where(FulfillmentOrder.status != FulfillmentStatus.completed)
                .values(status=FulfillmentStatus.completed)
                .execution_options(synchronize_session=False)
            ).rowcount

            if claimed:
                consumption = compute_consumption(db, ((ln.product_id, ln.quantity) for ln in order.lines))
                for material_id, total in consumption.items():
                    apply_adjustment(db, material_id, -total)
                logger.info(
                    "fulfillment order %s completed: %d material deduction(s)",
                    order_id,
                    len(consumption),
                )
            else:
                logger.info("fulfillment order %s already completed, stock untouched", order_id)
        elif target is not current:
            order.status = target
            logger.info("fulfillment order %s: %s -> %s", order_id, current.value, target.value)

    return get_order(db, order_id)


def delete_order(db: Session, order_id: int) -> None:
    """Suppression permise à tout statut ; une déduction déjà appliquée reste acquise."""
    with unit_of_work(db):
        order = _lock_order(db, order_id)
        if order.status is FulfillmentStatus.completed:
            logger.info("deleting completed fulfillment order %s, stock deduction is kept", order_id)
        db.delete(order)
