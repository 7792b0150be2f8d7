from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from stockledger.app.api.deps import get_db
from stockledger.app.db.models.core_types import MovementType
from stockledger.app.schemas.ledger import (
    LedgerLine,
    MovementCreate,
    MovementResult,
    ReplayResult,
    ReversalResult,
)
from stockledger.services.engine import record_movement, reverse_movement
from stockledger.services.ledger import list_movements, replay_stock_row

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions")


@router.get("", response_model=list[LedgerLine])
def list_transactions(
    item_id: int | None = None,
    warehouse_id: int | None = None,
    employee_id: int | None = None,
    transaction_type: MovementType | None = None,
    db: Session = Depends(get_db),
):
    return list_movements(
        db,
        item_id=item_id,
        warehouse_id=warehouse_id,
        employee_id=employee_id,
        movement_type=transaction_type,
    )


@router.post("", status_code=201, response_model=MovementResult)
def create_transaction(payload: MovementCreate, db: Session = Depends(get_db)):
    result = record_movement(
        db,
        movement_type=payload.transaction_type,
        item_id=payload.item_id,
        warehouse_id=payload.warehouse_id,
        quantity=payload.quantity,
        employee_id=payload.employee_id,
        customer_id=payload.customer_id,
        supplier_id=payload.supplier_id,
    )
    logger.info(
        "Transaction %s %s x%s item=%s warehouse=%s: %s -> %s",
        result.transaction_id,
        payload.transaction_type.value,
        payload.quantity,
        payload.item_id,
        payload.warehouse_id,
        result.previous_qty,
        result.new_qty,
    )
    return result


@router.delete("/{transaction_id}", response_model=ReversalResult)
def delete_transaction(transaction_id: int, db: Session = Depends(get_db)):
    result = reverse_movement(db, transaction_id=transaction_id)
    logger.info(
        "Reversed transactions %s: %s -> %s",
        result.reversed_transaction_ids,
        result.previous_qty,
        result.new_qty,
    )
    return result


@router.get("/audit/{item_id}/{warehouse_id}", response_model=ReplayResult)
def audit_stock_row(item_id: int, warehouse_id: int, db: Session = Depends(get_db)):
    return replay_stock_row(db, item_id=item_id, warehouse_id=warehouse_id)
