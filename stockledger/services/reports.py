"""
Read-only views over committed stock state.

Nothing here locks or writes; every function is a single SELECT.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from stockledger.app.db.models.core_types import MovementType
from stockledger.app.db.models.models_v1 import (
    Employee,
    Item,
    LedgerEntry,
    StockRow,
    Supplier,
    Warehouse,
)
from stockledger.app.schemas.reports import (
    EmployeeSummary,
    InventoryReportRow,
    LowStockRow,
    SupplierPerformance,
    WarehouseValue,
)
from stockledger.services.errors import NotFound, ValidationError

CENT = Decimal("0.01")


def _money(value) -> Decimal:
    # SQLite hands back floats for SUM/AVG over NUMERIC
    return Decimal(str(value or 0)).quantize(CENT, rounding=ROUND_HALF_UP)


def _stock_value():
    return func.coalesce(func.sum(StockRow.price * StockRow.stock_quantity), 0)


def inventory_value(db: Session) -> list[WarehouseValue]:
    rows = db.execute(
        select(
            Warehouse.id,
            Warehouse.location,
            _stock_value().label("total_value"),
            func.count(func.distinct(StockRow.item_id)).label("total_items"),
            func.coalesce(func.sum(StockRow.stock_quantity), 0).label("total_quantity"),
        )
        .outerjoin(StockRow, StockRow.warehouse_id == Warehouse.id)
        .group_by(Warehouse.id, Warehouse.location)
    ).all()

    values = [
        WarehouseValue(
            warehouse_id=int(wid),
            location=location,
            total_inventory_value=_money(total_value),
            total_items=int(total_items),
            total_quantity=int(total_quantity),
        )
        for wid, location, total_value, total_items, total_quantity in rows
    ]
    values.sort(key=lambda v: v.total_inventory_value, reverse=True)
    return values


def supplier_performance(db: Session) -> list[SupplierPerformance]:
    rows = db.execute(
        select(
            Supplier.id,
            Supplier.name,
            func.count(StockRow.item_id).label("items_supplied"),
            func.avg(StockRow.price).label("avg_price"),
            func.coalesce(func.sum(StockRow.stock_quantity), 0).label("total_quantity"),
            _stock_value().label("total_value"),
        )
        .outerjoin(StockRow, StockRow.supplier_id == Supplier.id)
        .group_by(Supplier.id, Supplier.name)
    ).all()

    performance = [
        SupplierPerformance(
            supplier_id=int(sid),
            name=name,
            items_supplied=int(items_supplied),
            avg_item_price=_money(avg_price) if avg_price is not None else None,
            total_quantity_supplied=int(total_quantity),
            total_value=_money(total_value),
        )
        for sid, name, items_supplied, avg_price, total_quantity, total_value in rows
    ]
    performance.sort(key=lambda p: p.total_value, reverse=True)
    return performance


def top_supplier(db: Session) -> SupplierPerformance | None:
    """Supplier with the highest stock value among those supplying anything."""
    ranked = [p for p in supplier_performance(db) if p.items_supplied > 0]
    return ranked[0] if ranked else None


def low_stock(db: Session, *, threshold: int) -> list[LowStockRow]:
    if threshold is None or threshold < 0:
        raise ValidationError("Threshold must be a non-negative integer", threshold=threshold)

    rows = db.execute(
        select(StockRow, Item.name, Item.category, Warehouse.location, Supplier.name)
        .join(Item, Item.id == StockRow.item_id)
        .join(Warehouse, Warehouse.id == StockRow.warehouse_id)
        .join(Supplier, Supplier.id == StockRow.supplier_id)
        .where(StockRow.stock_quantity < threshold)
        .order_by(StockRow.stock_quantity.asc(), StockRow.item_id)
    ).all()

    return [
        LowStockRow(
            item_id=row.item_id,
            warehouse_id=row.warehouse_id,
            name=name,
            category=category,
            stock_quantity=row.stock_quantity,
            price=_money(row.price),
            location=location,
            supplier_name=supplier_name,
        )
        for row, name, category, location, supplier_name in rows
    ]


def inventory_report(db: Session, *, warehouse_id: int | None = None) -> list[InventoryReportRow]:
    stmt = (
        select(StockRow, Item.name, Item.category, Warehouse.location, Supplier.name)
        .join(Item, Item.id == StockRow.item_id)
        .join(Warehouse, Warehouse.id == StockRow.warehouse_id)
        .join(Supplier, Supplier.id == StockRow.supplier_id)
        .order_by(StockRow.warehouse_id, Item.category, Item.name)
    )
    if warehouse_id is not None:
        stmt = stmt.where(StockRow.warehouse_id == warehouse_id)

    return [
        InventoryReportRow(
            item_id=row.item_id,
            name=name,
            category=category,
            warehouse_id=row.warehouse_id,
            location=location,
            stock_quantity=row.stock_quantity,
            price=_money(row.price),
            stock_value=_money(Decimal(row.price) * row.stock_quantity),
            supplier_name=supplier_name,
        )
        for row, name, category, location, supplier_name in db.execute(stmt).all()
    ]


def employee_summary(db: Session, *, employee_id: int | None = None) -> list[EmployeeSummary]:
    in_qty = case((LedgerEntry.movement_type == MovementType.inbound, LedgerEntry.quantity), else_=0)
    out_qty = case((LedgerEntry.movement_type == MovementType.outbound, LedgerEntry.quantity), else_=0)

    stmt = (
        select(
            Employee.id,
            Employee.name,
            func.count(LedgerEntry.id),
            func.coalesce(func.sum(in_qty), 0),
            func.coalesce(func.sum(out_qty), 0),
            func.max(LedgerEntry.happened_at),
        )
        .outerjoin(LedgerEntry, LedgerEntry.employee_id == Employee.id)
        .group_by(Employee.id, Employee.name)
        .order_by(Employee.id)
    )
    if employee_id is not None:
        stmt = stmt.where(Employee.id == employee_id)

    return [
        EmployeeSummary(
            employee_id=int(eid),
            name=name,
            total_transactions=int(count),
            total_in_qty=int(total_in),
            total_out_qty=int(total_out),
            last_transaction_at=last_at,
        )
        for eid, name, count, total_in, total_out, last_at in db.execute(stmt).all()
    ]


def warehouse_value(db: Session, *, warehouse_id: int) -> Decimal:
    if not db.get(Warehouse, warehouse_id):
        raise NotFound("Warehouse not found", warehouse_id=warehouse_id)
    total = db.scalar(select(_stock_value()).where(StockRow.warehouse_id == warehouse_id))
    return _money(total)


def total_item_stock(db: Session, *, item_id: int) -> int:
    if not db.get(Item, item_id):
        raise NotFound("Item not found", item_id=item_id)
    total = db.scalar(
        select(func.coalesce(func.sum(StockRow.stock_quantity), 0)).where(StockRow.item_id == item_id)
    )
    return int(total)


def is_low_stock(db: Session, *, item_id: int, warehouse_id: int, threshold: int) -> bool:
    row = db.get(StockRow, (item_id, warehouse_id))
    if not row:
        raise NotFound("Item not found in specified warehouse", item_id=item_id, warehouse_id=warehouse_id)
    return row.stock_quantity < threshold
