from fastapi import APIRouter

from backend.app.api.v1.endpoints.health import router as health_router
from backend.app.api.v1.endpoints.products import router as products_router
from backend.app.api.v1.endpoints.materials import router as materials_router
from backend.app.api.v1.endpoints.transactions import router as transactions_router
from backend.app.api.v1.endpoints.fulfillment_orders import router as fulfillment_orders_router
from backend.app.api.v1.endpoints.procurement_orders import router as procurement_orders_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(products_router, tags=["products"])
router.include_router(materials_router, tags=["materials"])
router.include_router(transactions_router, tags=["transactions"])
router.include_router(fulfillment_orders_router, tags=["fulfillment_orders"])
router.include_router(procurement_orders_router, tags=["procurement_orders"])
