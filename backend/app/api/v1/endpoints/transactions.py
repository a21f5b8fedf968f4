from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.api.responses import ok
from backend.app.api.v1.serializers import transaction_out
from backend.app.db.models.models_v1 import MAX_INT
from backend.services import sales

router = APIRouter(prefix="/transactions")


class TransactionLineCreate(BaseModel):
    product_id: int
    quantity: int = Field(gt=0, le=MAX_INT)


class TransactionCreate(BaseModel):
    user_id: int
    items: list[TransactionLineCreate] = Field(min_length=1)


@router.get("")
def list_transactions(db: Session = Depends(get_db)):
    return ok([transaction_out(t) for t in sales.list_transactions(db)])


@router.get("/{transaction_id}")
def get_transaction(transaction_id: int, db: Session = Depends(get_db)):
    return ok(transaction_out(sales.get_transaction(db, transaction_id)))


@router.post("", status_code=201)
def create_transaction(payload: TransactionCreate, db: Session = Depends(get_db)):
    # Le prix client n'est jamais accepté : re-tarification depuis le catalogue
    trx = sales.create_transaction(
        db,
        payload.user_id,
        [(ln.product_id, ln.quantity) for ln in payload.items],
    )
    return ok(transaction_out(trx), "Transaction recorded")
