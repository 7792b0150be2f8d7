from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from stockledger.app.db.models.models_v1 import Item, LedgerEntry, StockRow, Supplier, Warehouse
from stockledger.services.errors import NotFound, StockRowInUse, ValidationError
from stockledger.services.identity import to_price
from stockledger.services.inventory import atomic, lock_stock_row


def list_stock_rows(
    db: Session,
    *,
    warehouse_id: int | None = None,
    item_id: int | None = None,
    category: str | None = None,
) -> list[dict]:
    stmt = (
        select(StockRow, Item, Warehouse.location, Supplier.name)
        .join(Item, Item.id == StockRow.item_id)
        .join(Warehouse, Warehouse.id == StockRow.warehouse_id)
        .join(Supplier, Supplier.id == StockRow.supplier_id)
        .order_by(StockRow.item_id.desc(), StockRow.warehouse_id)
    )
    if warehouse_id is not None:
        stmt = stmt.where(StockRow.warehouse_id == warehouse_id)
    if item_id is not None:
        stmt = stmt.where(StockRow.item_id == item_id)
    if category is not None:
        stmt = stmt.where(Item.category == category)

    return [
        {
            "item_id": row.item_id,
            "warehouse_id": row.warehouse_id,
            "supplier_id": row.supplier_id,
            "name": item.name,
            "category": item.category,
            "price": row.price,
            "stock_quantity": row.stock_quantity,
            "warehouse_location": location,
            "supplier_name": supplier_name,
        }
        for row, item, location, supplier_name in db.execute(stmt).all()
    ]


def update_stock_row(
    db: Session,
    *,
    item_id: int,
    warehouse_id: int,
    price=None,
    supplier_id: int | None = None,
) -> StockRow:
    """
    Change the price or default supplier of a stocking.

    Quantity is deliberately not editable here: it only moves through
    ledger movements, so replay stays exact.
    """
    if price is None and supplier_id is None:
        raise ValidationError("Nothing to update: provide price and/or supplier_id")
    new_price = to_price(price) if price is not None else None

    with atomic(db):
        if supplier_id is not None and not db.get(Supplier, supplier_id):
            raise NotFound("Supplier not found", supplier_id=supplier_id)
        row = lock_stock_row(db, item_id, warehouse_id)
        if not row:
            raise NotFound("Item not found", item_id=item_id, warehouse_id=warehouse_id)
        if new_price is not None:
            row.price = new_price
        if supplier_id is not None:
            row.supplier_id = supplier_id
        db.flush()

    return row


def remove_stock_row(db: Session, *, item_id: int, warehouse_id: int) -> None:
    """
    Remove an item from a warehouse.

    Refused with StockRowInUse while any ledger entry references the row:
    a row with history can only go once every entry has been reversed,
    and a reversal itself is refused if it would make stock negative.
    """
    with atomic(db):
        row = lock_stock_row(db, item_id, warehouse_id)
        if not row:
            raise NotFound("Item not found", item_id=item_id, warehouse_id=warehouse_id)

        entries = db.scalar(
            select(func.count(LedgerEntry.id))
            .where(LedgerEntry.item_id == item_id)
            .where(LedgerEntry.warehouse_id == warehouse_id)
        )
        if entries:
            raise StockRowInUse(
                "Stock row has ledger history and cannot be removed; "
                "reverse its transactions first (reversals that would make stock negative are refused)",
                item_id=item_id,
                warehouse_id=warehouse_id,
                entries=int(entries),
            )
        db.delete(row)
