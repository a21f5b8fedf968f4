from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.api.responses import ok
from backend.app.api.v1.serializers import product_out, recipe_line_out
from backend.app.db.models.core_types import ProductCategory
from backend.app.db.models.models_v1 import MAX_MONEY, MAX_QTY
from backend.services import catalog, recipes

router = APIRouter(prefix="/products")


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    price: Decimal = Field(ge=0, le=MAX_MONEY)
    category: ProductCategory
    description: str | None = None


class RecipeLineCreate(BaseModel):
    material_id: int
    quantity_per_unit: Decimal = Field(gt=0, le=MAX_QTY)


class RecipeLineUpdate(BaseModel):
    quantity_per_unit: Decimal = Field(gt=0, le=MAX_QTY)


@router.get("")
def list_products(db: Session = Depends(get_db)):
    return ok([product_out(p) for p in catalog.list_products(db)])


@router.post("", status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    p = catalog.create_product(
        db,
        name=payload.name,
        price=payload.price,
        category=payload.category,
        description=payload.description,
    )
    return ok(product_out(p), "Product created")


# ---------- Recette (bill of materials) ----------
@router.get("/{product_id}/materials")
def get_recipe(product_id: int, db: Session = Depends(get_db)):
    catalog.get_product(db, product_id)
    return ok([recipe_line_out(rl) for rl in recipes.get_recipe(db, product_id)])


@router.post("/{product_id}/materials", status_code=201)
def add_recipe_line(product_id: int, payload: RecipeLineCreate, db: Session = Depends(get_db)):
    rl = recipes.add_recipe_line(db, product_id, payload.material_id, payload.quantity_per_unit)
    return ok(recipe_line_out(rl), "Material added to recipe")


@router.put("/{product_id}/materials/{material_id}")
def update_recipe_line(
    product_id: int,
    material_id: int,
    payload: RecipeLineUpdate,
    db: Session = Depends(get_db),
):
    rl = recipes.update_recipe_line(db, product_id, material_id, payload.quantity_per_unit)
    return ok(recipe_line_out(rl), "Recipe updated")


@router.delete("/{product_id}/materials/{material_id}")
def remove_recipe_line(product_id: int, material_id: int, db: Session = Depends(get_db)):
    recipes.remove_recipe_line(db, product_id, material_id)
    return ok(None, "Material removed from recipe")
