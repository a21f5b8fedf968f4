from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.api.responses import ok
from backend.app.api.v1.serializers import material_out
from backend.app.db.models.core_types import MaterialUnit
from backend.app.db.models.models_v1 import MAX_QTY
from backend.services import inventory

router = APIRouter(prefix="/materials")


class MaterialCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    unit: MaterialUnit
    stock: Decimal = Field(default=Decimal("0"), ge=0, le=MAX_QTY)
    min_stock: Decimal = Field(ge=0, le=MAX_QTY)


class MaterialUpdate(BaseModel):
    # stock volontairement absent : il ne bouge que par ajustement
    name: str | None = Field(default=None, min_length=1, max_length=100)
    unit: MaterialUnit | None = None
    min_stock: Decimal | None = Field(default=None, ge=0, le=MAX_QTY)


class AdjustmentCreate(BaseModel):
    delta: Decimal = Field(ge=-MAX_QTY, le=MAX_QTY)


@router.get("")
def list_materials(db: Session = Depends(get_db)):
    """
    Stock matières (status dérivé à la lecture, jamais stocké)
    """
    return ok([material_out(m) for m in inventory.list_materials(db)])


@router.get("/low-stock")
def list_low_stock(db: Session = Depends(get_db)):
    return ok([material_out(m) for m in inventory.list_low_stock(db)])


@router.get("/{material_id}")
def get_material(material_id: int, db: Session = Depends(get_db)):
    return ok(material_out(inventory.get_material(db, material_id)))


@router.post("", status_code=201)
def create_material(payload: MaterialCreate, db: Session = Depends(get_db)):
    m = inventory.create_material(
        db,
        name=payload.name,
        unit=payload.unit,
        stock=payload.stock,
        min_stock=payload.min_stock,
    )
    return ok(material_out(m), "Material created")


@router.patch("/{material_id}")
def update_material(material_id: int, payload: MaterialUpdate, db: Session = Depends(get_db)):
    m = inventory.update_material(
        db,
        material_id,
        name=payload.name,
        unit=payload.unit,
        min_stock=payload.min_stock,
    )
    return ok(material_out(m), "Material updated")


@router.delete("/{material_id}")
def delete_material(material_id: int, db: Session = Depends(get_db)):
    inventory.delete_material(db, material_id)
    return ok(None, "Material deleted")


@router.post("/{material_id}/adjustments")
def adjust_material(material_id: int, payload: AdjustmentCreate, db: Session = Depends(get_db)):
    m = inventory.adjust_material(db, material_id, payload.delta)
    return ok(material_out(m), "Stock adjusted")
