from __future__ import annotations

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.api.responses import ok
from backend.app.api.v1.serializers import procurement_order_out
from backend.app.db.models.models_v1 import MAX_QTY
from backend.services import procurement

router = APIRouter(prefix="/procurement-orders")


class ProcurementOrderCreate(BaseModel):
    material_id: int
    user_id: int
    quantity: Decimal = Field(gt=0, le=MAX_QTY)
    order_date: date | None = None


class ProcurementStatusUpdate(BaseModel):
    status: str
    received_date: date | None = None


@router.get("")
def list_orders(db: Session = Depends(get_db)):
    return ok([procurement_order_out(o) for o in procurement.list_orders(db)])


@router.get("/{order_id}")
def get_order(order_id: int, db: Session = Depends(get_db)):
    return ok(procurement_order_out(procurement.get_order(db, order_id)))


@router.post("", status_code=201)
def create_order(payload: ProcurementOrderCreate, db: Session = Depends(get_db)):
    order = procurement.create_order(
        db,
        payload.material_id,
        payload.user_id,
        payload.quantity,
        order_date=payload.order_date,
    )
    return ok(procurement_order_out(order), "Procurement order created")


@router.patch("/{order_id}")
def update_order_status(order_id: int, payload: ProcurementStatusUpdate, db: Session = Depends(get_db)):
    order = procurement.update_status(db, order_id, payload.status, received_date=payload.received_date)
    return ok(procurement_order_out(order), "Procurement order updated")
