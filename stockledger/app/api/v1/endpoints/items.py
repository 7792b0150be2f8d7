from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from stockledger.app.api.deps import get_db
from stockledger.app.schemas.stock_row import (
    StockingCreate,
    StockingResult,
    StockRowRead,
    StockRowUpdate,
)
from stockledger.services.engine import create_stocking
from stockledger.services.stock_rows import list_stock_rows, remove_stock_row, update_stock_row

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/items")


@router.get("")
def list_items(
    warehouse_id: int | None = None,
    item_id: int | None = None,
    category: str | None = None,
    db: Session = Depends(get_db),
):
    return list_stock_rows(db, warehouse_id=warehouse_id, item_id=item_id, category=category)


@router.post("", status_code=201, response_model=StockingResult)
def create_item(payload: StockingCreate, db: Session = Depends(get_db)):
    result = create_stocking(
        db,
        name=payload.name,
        category=payload.category,
        warehouse_id=payload.warehouse_id,
        price=payload.price,
        quantity=payload.stock_quantity,
        supplier_id=payload.supplier_id,
    )
    if result.is_new_item:
        logger.info("Created new ItemID %s for %r", result.item_id, result.name)
    else:
        logger.info(
            "Reusing ItemID %s for %r in warehouse %s (category %r)",
            result.item_id,
            result.name,
            result.warehouse_id,
            result.category,
        )
    return result


@router.patch("/{item_id}/{warehouse_id}", response_model=StockRowRead)
def update_item(
    item_id: int,
    warehouse_id: int,
    payload: StockRowUpdate,
    db: Session = Depends(get_db),
):
    row = update_stock_row(
        db,
        item_id=item_id,
        warehouse_id=warehouse_id,
        price=payload.price,
        supplier_id=payload.supplier_id,
    )
    logger.info("Updated stock row item=%s warehouse=%s", item_id, warehouse_id)
    return row


@router.delete("/{item_id}/{warehouse_id}")
def delete_item(item_id: int, warehouse_id: int, db: Session = Depends(get_db)):
    """Remove a stocking. 409 STOCK_ROW_IN_USE while the row still has ledger entries."""
    remove_stock_row(db, item_id=item_id, warehouse_id=warehouse_id)
    logger.info("Removed item %s from warehouse %s", item_id, warehouse_id)
    return {"item_id": item_id, "warehouse_id": warehouse_id, "deleted": True}
