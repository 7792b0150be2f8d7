from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from stockledger.app.api.deps import get_db
from stockledger.app.schemas.reports import LowStockRow, SupplierPerformance, WarehouseValue
from stockledger.services import reports

router = APIRouter(prefix="/analytics")


@router.get("/inventory-value", response_model=list[WarehouseValue])
def get_inventory_value(db: Session = Depends(get_db)):
    return reports.inventory_value(db)


@router.get("/supplier-performance", response_model=list[SupplierPerformance])
def get_supplier_performance(db: Session = Depends(get_db)):
    return reports.supplier_performance(db)


@router.get("/top-supplier", response_model=SupplierPerformance | None)
def get_top_supplier(db: Session = Depends(get_db)):
    return reports.top_supplier(db)


@router.get("/low-stock/{threshold}", response_model=list[LowStockRow])
def get_low_stock(threshold: int, db: Session = Depends(get_db)):
    return reports.low_stock(db, threshold=threshold)


@router.get("/warehouse-value/{warehouse_id}")
def get_warehouse_value(warehouse_id: int, db: Session = Depends(get_db)):
    return {
        "warehouse_id": warehouse_id,
        "total_value": reports.warehouse_value(db, warehouse_id=warehouse_id),
    }


@router.get("/total-stock/{item_id}")
def get_total_stock(item_id: int, db: Session = Depends(get_db)):
    return {"item_id": item_id, "total_stock": reports.total_item_stock(db, item_id=item_id)}


@router.get("/check-low-stock/{item_id}/{warehouse_id}/{threshold}")
def check_low_stock(item_id: int, warehouse_id: int, threshold: int, db: Session = Depends(get_db)):
    return {
        "item_id": item_id,
        "warehouse_id": warehouse_id,
        "threshold": threshold,
        "is_low_stock": reports.is_low_stock(
            db, item_id=item_id, warehouse_id=warehouse_id, threshold=threshold
        ),
    }
