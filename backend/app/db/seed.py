from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import select

from backend.app.db.session import SessionLocal
from backend.app.db.models.models_v1 import Material, Product, RecipeLine, User
from backend.app.db.models.core_types import MaterialUnit, ProductCategory, Role, UserStatus

logger = logging.getLogger(__name__)

USERS = [
    ("Kasir Satu", "kasir@merahputih.cafe", Role.kasir),
    ("Barista Satu", "barista@merahputih.cafe", Role.barista),
    ("Manager", "manager@merahputih.cafe", Role.manager),
    ("Pengadaan", "pengadaan@merahputih.cafe", Role.pengadaan),
]

MATERIALS = [
    # nom, unité, stock, stock minimum
    ("Biji Kopi Arabika", MaterialUnit.kg, "5", "2"),
    ("Susu Segar", MaterialUnit.liter, "10", "4"),
    ("Gula Aren", MaterialUnit.kg, "3", "1"),
    ("Tepung Terigu", MaterialUnit.kg, "10", "5"),
]

PRODUCTS = [
    ("Espresso", "18000", ProductCategory.kopi, {"Biji Kopi Arabika": "0.018"}),
    ("Kopi Susu Gula Aren", "25000", ProductCategory.kopi, {
        "Biji Kopi Arabika": "0.018",
        "Susu Segar": "0.15",
        "Gula Aren": "0.02",
    }),
    ("Croissant", "22000", ProductCategory.makanan, {"Tepung Terigu": "0.08"}),
    # article de revente : pas de recette
    ("Air Mineral", "8000", ProductCategory.non_kopi, {}),
]


def run_seed():
    db = SessionLocal()
    try:
        # 1) Utilisateurs de démo (un par rôle)
        for name, email, role in USERS:
            if not db.scalar(select(User).where(User.email == email)):
                db.add(User(name=name, email=email, role=role, status=UserStatus.aktif))
        db.commit()

        # 2) Matières premières
        materials = {}
        for name, unit, stock, min_stock in MATERIALS:
            m = db.scalar(select(Material).where(Material.name == name))
            if not m:
                m = Material(name=name, unit=unit, stock=Decimal(stock), min_stock=Decimal(min_stock))
                db.add(m)
                db.flush()
            materials[name] = m
        db.commit()

        # 3) Produits + recettes
        for name, price, category, recipe in PRODUCTS:
            p = db.scalar(select(Product).where(Product.name == name))
            if p:
                continue
            p = Product(name=name, price=Decimal(price), category=category)
            for material_name, qty in recipe.items():
                p.recipe.append(
                    RecipeLine(material_id=materials[material_name].id, quantity_per_unit=Decimal(qty))
                )
            db.add(p)
        db.commit()

        logger.info("seed OK: %d users, %d materials, %d products", len(USERS), len(MATERIALS), len(PRODUCTS))
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_seed()
