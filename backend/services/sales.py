"""
Sales transaction recorder.

Re-tarifie le panier depuis le catalogue au moment de l'appel et enregistre
une transaction immuable. Ne touche JAMAIS au stock matière : la consommation
a lieu à la préparation (voir backend.services.fulfillment).
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from backend.app.core.errors import InvalidInputError, NotFoundError
from backend.app.db.models.models_v1 import MAX_INT, MAX_MONEY, SalesTransaction, SalesTransactionLine
from backend.app.db.session import unit_of_work
from backend.services.catalog import get_product, require_active_user

logger = logging.getLogger(__name__)


def validate_lines(lines: Iterable[tuple[int, int]] | None) -> list[tuple[int, int]]:
    """Lignes (product_id, quantity) : liste non vide, quantités entières dans ]0, MAX_INT]."""
    checked = []
    for product_id, quantity in lines or []:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or not 0 < quantity <= MAX_INT:
            raise InvalidInputError(
                f"Quantity must be an integer between 1 and {MAX_INT} (product {product_id})",
                field="quantity",
            )
        checked.append((product_id, quantity))
    if not checked:
        raise InvalidInputError("At least one line is required", field="items")
    return checked


def create_transaction(db: Session, user_id: int, lines: Iterable[tuple[int, int]]) -> SalesTransaction:
    """
    Règle métier :
        subtotal = prix catalogue courant x quantité
        total    = somme des subtotals

    Tout est validé avant la moindre écriture ; entête et lignes sont
    committées ensemble ou pas du tout.
    """
    checked = validate_lines(lines)

    with unit_of_work(db):
        require_active_user(db, user_id)

        priced = []
        for product_id, quantity in checked:
            product = get_product(db, product_id)
            unit_price = Decimal(product.price)
            priced.append((product, unit_price, quantity, unit_price * quantity))

        total = sum((subtotal for *_, subtotal in priced), Decimal("0"))
        if total > MAX_MONEY:
            raise InvalidInputError(f"Transaction total exceeds {MAX_MONEY}", field="items")

        trx = SalesTransaction(user_id=user_id, total=total)
        for product, unit_price, quantity, subtotal in priced:
            trx.lines.append(
                SalesTransactionLine(
                    product_id=product.id,
                    product_name=product.name,
                    unit_price=unit_price,
                    quantity=quantity,
                    subtotal=subtotal,
                )
            )
        db.add(trx)
        db.flush()
        trx_id = trx.id

    logger.info("sales transaction %s recorded: %d line(s), total=%s", trx_id, len(priced), total)
    return get_transaction(db, trx_id)


def get_transaction(db: Session, transaction_id: int) -> SalesTransaction:
    trx = (
        db.execute(
            select(SalesTransaction)
            .where(SalesTransaction.id == transaction_id)
            .options(selectinload(SalesTransaction.lines))
        )
        .scalar_one_or_none()
    )
    if not trx:
        raise NotFoundError("Transaction", transaction_id)
    return trx


def list_transactions(db: Session) -> list[SalesTransaction]:
    rows = db.execute(
        select(SalesTransaction)
        .options(selectinload(SalesTransaction.lines))
        .order_by(SalesTransaction.created_at.desc(), SalesTransaction.id.desc())
    )
    return list(rows.scalars().all())
