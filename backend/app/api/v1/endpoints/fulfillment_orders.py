from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.api.responses import ok
from backend.app.api.v1.serializers import fulfillment_order_out
from backend.app.db.models.models_v1 import MAX_INT
from backend.services import fulfillment
from backend.services.fulfillment import OrderItem

router = APIRouter(prefix="/fulfillment-orders")


class OrderItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(gt=0, le=MAX_INT)
    notes: str | None = Field(default=None, max_length=500)


class FulfillmentOrderCreate(BaseModel):
    cashier_id: int
    transaction_id: int | None = None
    # absent -> lignes reprises de la transaction
    items: list[OrderItemCreate] | None = None


class StatusUpdate(BaseModel):
    status: str


@router.get("")
def list_orders(db: Session = Depends(get_db)):
    return ok([fulfillment_order_out(o) for o in fulfillment.list_orders(db)])


@router.get("/{order_id}")
def get_order(order_id: int, db: Session = Depends(get_db)):
    return ok(fulfillment_order_out(fulfillment.get_order(db, order_id)))


@router.post("", status_code=201)
def create_order(payload: FulfillmentOrderCreate, db: Session = Depends(get_db)):
    items = None
    if payload.items is not None:
        items = [OrderItem(it.product_id, it.quantity, it.notes) for it in payload.items]

    order = fulfillment.create_order(
        db,
        payload.cashier_id,
        items=items,
        transaction_id=payload.transaction_id,
    )
    return ok(fulfillment_order_out(order), "Order sent to barista")


@router.patch("/{order_id}")
def update_order_status(order_id: int, payload: StatusUpdate, db: Session = Depends(get_db)):
    order = fulfillment.advance(db, order_id, payload.status)
    return ok(fulfillment_order_out(order), "Order status updated")


@router.delete("/{order_id}")
def delete_order(order_id: int, db: Session = Depends(get_db)):
    fulfillment.delete_order(db, order_id)
    return ok(None, "Order deleted")
