"""Sérialisation ORM -> dict JSON (montants et quantités en float)."""

from __future__ import annotations

from backend.app.db.models.models_v1 import (
    FulfillmentOrder,
    Material,
    ProcurementOrder,
    Product,
    RecipeLine,
    SalesTransaction,
)


def material_out(m: Material) -> dict:
    return {
        "id": m.id,
        "name": m.name,
        "unit": m.unit,
        "stock": float(m.stock),
        "min_stock": float(m.min_stock),
        "status": m.status,
        "updated_at": m.updated_at,
    }


def product_out(p: Product) -> dict:
    return {
        "id": p.id,
        "name": p.name,
        "price": float(p.price),
        "category": p.category,
        "description": p.description,
    }


def recipe_line_out(rl: RecipeLine) -> dict:
    return {
        "product_id": rl.product_id,
        "material_id": rl.material_id,
        "material_name": rl.material.name,
        "unit": rl.material.unit,
        "quantity_per_unit": float(rl.quantity_per_unit),
    }


def transaction_out(t: SalesTransaction) -> dict:
    return {
        "id": t.id,
        "user_id": t.user_id,
        "total": float(t.total),
        "created_at": t.created_at,
        "lines": [
            {
                "product_id": l.product_id,
                "product_name": l.product_name,
                "unit_price": float(l.unit_price),
                "quantity": l.quantity,
                "subtotal": float(l.subtotal),
            }
            for l in t.lines
        ],
    }


def fulfillment_order_out(o: FulfillmentOrder) -> dict:
    return {
        "id": o.id,
        "order_number": o.order_number,
        "status": o.status,
        "transaction_id": o.transaction_id,
        "cashier_id": o.cashier_id,
        "created_at": o.created_at,
        "updated_at": o.updated_at,
        "items": [
            {"product_id": l.product_id, "quantity": l.quantity, "notes": l.notes}
            for l in o.lines
        ],
    }


def procurement_order_out(o: ProcurementOrder) -> dict:
    return {
        "id": o.id,
        "material_id": o.material_id,
        "user_id": o.user_id,
        "quantity": float(o.quantity),
        "order_date": o.order_date,
        "status": o.status,
        "received_date": o.received_date,
        "created_at": o.created_at,
    }
