from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from stockledger.app.api.deps import get_db
from stockledger.app.schemas.procedures import (
    PriceUpdate,
    PriceUpdateResult,
    TransferCreate,
    TransferResult,
)
from stockledger.app.schemas.reports import EmployeeSummary, InventoryReportRow
from stockledger.services.engine import bulk_adjust_prices, transfer_stock
from stockledger.services.reports import employee_summary, inventory_report

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/procedures")


@router.post("/transfer-stock", response_model=TransferResult)
def transfer(payload: TransferCreate, db: Session = Depends(get_db)):
    result = transfer_stock(
        db,
        item_id=payload.item_id,
        from_warehouse_id=payload.from_warehouse_id,
        to_warehouse_id=payload.to_warehouse_id,
        quantity=payload.quantity,
        employee_id=payload.employee_id,
        supplier_id=payload.supplier_id,
    )
    logger.info(
        "Transfer %s: item=%s x%s warehouse %s -> %s",
        result.transfer_id,
        payload.item_id,
        payload.quantity,
        payload.from_warehouse_id,
        payload.to_warehouse_id,
    )
    return result


@router.post("/update-prices", response_model=PriceUpdateResult)
def update_prices(payload: PriceUpdate, db: Session = Depends(get_db)):
    result = bulk_adjust_prices(db, category=payload.category, percent=payload.price_change_percent)
    logger.info(
        "Prices of category %r changed by %s%% on %s rows",
        result.category,
        result.price_change_percent,
        result.rows_affected,
    )
    return result


@router.get("/inventory-report", response_model=list[InventoryReportRow])
def full_inventory_report(db: Session = Depends(get_db)):
    return inventory_report(db)


@router.get("/inventory-report/{warehouse_id}", response_model=list[InventoryReportRow])
def warehouse_inventory_report(warehouse_id: int, db: Session = Depends(get_db)):
    return inventory_report(db, warehouse_id=warehouse_id)


@router.get("/employee-summary", response_model=list[EmployeeSummary])
def all_employee_summary(db: Session = Depends(get_db)):
    return employee_summary(db)


@router.get("/employee-summary/{employee_id}", response_model=list[EmployeeSummary])
def single_employee_summary(employee_id: int, db: Session = Depends(get_db)):
    return employee_summary(db, employee_id=employee_id)
