from fastapi import APIRouter

from stockledger.app.api.v1.endpoints.health import router as health_router
from stockledger.app.api.v1.endpoints.items import router as items_router
from stockledger.app.api.v1.endpoints.transactions import router as transactions_router
from stockledger.app.api.v1.endpoints.procedures import router as procedures_router
from stockledger.app.api.v1.endpoints.analytics import router as analytics_router
from stockledger.app.api.v1.endpoints.warehouses import router as warehouses_router
from stockledger.app.api.v1.endpoints.suppliers import router as suppliers_router
from stockledger.app.api.v1.endpoints.customers import router as customers_router
from stockledger.app.api.v1.endpoints.employees import router as employees_router
from stockledger.app.api.v1.endpoints.directory import router as directory_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(items_router, tags=["items"])
router.include_router(transactions_router, tags=["transactions"])
router.include_router(procedures_router, tags=["procedures"])
router.include_router(analytics_router, tags=["analytics"])
router.include_router(warehouses_router, tags=["warehouses"])
router.include_router(suppliers_router, tags=["suppliers"])
router.include_router(customers_router, tags=["customers"])
router.include_router(employees_router, tags=["employees"])
router.include_router(directory_router, tags=["directory"])
