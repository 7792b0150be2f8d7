from __future__ import annotations

import uuid

from sqlalchemy.orm import Session

from stockledger.app.db.models.core_types import MovementType
from stockledger.app.db.models.models_v1 import Employee, LedgerEntry, Supplier, Warehouse
from stockledger.app.schemas.procedures import TransferResult
from stockledger.services.errors import InsufficientStock, NotFound, ValidationError
from stockledger.services.inventory import atomic, create_stock_row, lock_stock_rows
from stockledger.services.ledger import require_quantity


def transfer_stock(
    db: Session,
    *,
    item_id: int,
    from_warehouse_id: int,
    to_warehouse_id: int,
    quantity: int,
    employee_id: int,
    supplier_id: int,
) -> TransferResult:
    """
    Move stock of one item between two warehouses.

    Both rows are locked in (warehouse_id, item_id) order. A missing
    destination row is created on the fly with the source price and the
    given supplier. The move is recorded as an OUT leg and an IN leg
    sharing one transfer id; reversing either leg reverses both.
    """
    missing = [
        field
        for field, value in (
            ("item_id", item_id),
            ("from_warehouse_id", from_warehouse_id),
            ("to_warehouse_id", to_warehouse_id),
            ("employee_id", employee_id),
            ("supplier_id", supplier_id),
        )
        if value is None
    ]
    if missing:
        raise ValidationError("Missing required fields", required=missing)
    qty = require_quantity(quantity)
    if from_warehouse_id == to_warehouse_id:
        raise ValidationError("Source and destination warehouses must differ")

    with atomic(db):
        if not db.get(Employee, employee_id):
            raise NotFound("Employee not found", employee_id=employee_id)
        if not db.get(Supplier, supplier_id):
            raise NotFound("Supplier not found", supplier_id=supplier_id)
        if not db.get(Warehouse, to_warehouse_id):
            raise NotFound("Destination warehouse not found", warehouse_id=to_warehouse_id)

        src_key = (item_id, from_warehouse_id)
        dst_key = (item_id, to_warehouse_id)
        rows = lock_stock_rows(db, [src_key, dst_key])

        src = rows[src_key]
        if not src:
            raise NotFound(
                "Item not found in source warehouse",
                item_id=item_id,
                warehouse_id=from_warehouse_id,
            )
        if src.stock_quantity < qty:
            raise InsufficientStock(available=src.stock_quantity, requested=qty)

        dst = rows[dst_key]
        destination_created = dst is None
        if destination_created:
            dst = create_stock_row(
                db,
                item_id=item_id,
                warehouse_id=to_warehouse_id,
                supplier_id=supplier_id,
                price=src.price,
            )

        transfer_id = str(uuid.uuid4())
        out_leg = LedgerEntry(
            movement_type=MovementType.outbound,
            item_id=item_id,
            warehouse_id=from_warehouse_id,
            quantity=qty,
            employee_id=employee_id,
            transfer_id=transfer_id,
        )
        in_leg = LedgerEntry(
            movement_type=MovementType.inbound,
            item_id=item_id,
            warehouse_id=to_warehouse_id,
            quantity=qty,
            employee_id=employee_id,
            supplier_id=supplier_id,
            transfer_id=transfer_id,
        )
        db.add_all([out_leg, in_leg])

        src.stock_quantity -= qty
        dst.stock_quantity += qty
        db.flush()

        result = TransferResult(
            ok=True,
            transfer_id=transfer_id,
            from_qty=src.stock_quantity,
            to_qty=dst.stock_quantity,
            out_transaction_id=int(out_leg.id),
            in_transaction_id=int(in_leg.id),
            destination_created=destination_created,
        )

    return result
