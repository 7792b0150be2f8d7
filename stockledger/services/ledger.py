from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, aliased

from stockledger.app.db.models.core_types import MovementType
from stockledger.app.db.models.models_v1 import (
    Customer,
    Employee,
    Item,
    LedgerEntry,
    StockRow,
    Supplier,
    Warehouse,
)
from stockledger.app.schemas.ledger import (
    LedgerLine,
    MovementResult,
    ReplayResult,
    ReversalResult,
)
from stockledger.services.errors import (
    InsufficientStock,
    NotFound,
    ValidationError,
    WouldGoNegative,
)
from stockledger.services.inventory import atomic, lock_stock_row, lock_stock_rows


def parse_movement_type(value) -> MovementType:
    if isinstance(value, MovementType):
        return value
    try:
        return MovementType(str(value).strip().upper())
    except ValueError:
        raise ValidationError("TransactionType must be either IN or OUT", transaction_type=value)


def require_quantity(quantity) -> int:
    if quantity is None or isinstance(quantity, bool) or int(quantity) != quantity or quantity <= 0:
        raise ValidationError("Quantity must be a positive integer", quantity=quantity)
    return int(quantity)


def signed_quantity(entry: LedgerEntry) -> int:
    """Effect of an entry on its stock row."""
    return entry.quantity if entry.movement_type == MovementType.inbound else -entry.quantity


def _check_counterparty(movement_type: MovementType, customer_id, supplier_id) -> None:
    if movement_type == MovementType.outbound:
        if customer_id is None:
            raise ValidationError("CustomerID is required for OUT transactions")
        if supplier_id is not None:
            raise ValidationError("SupplierID must be empty for OUT transactions")
    else:
        if supplier_id is None:
            raise ValidationError("SupplierID is required for IN transactions")
        if customer_id is not None:
            raise ValidationError("CustomerID must be empty for IN transactions")


def record_movement(
    db: Session,
    *,
    movement_type,
    item_id: int,
    warehouse_id: int,
    quantity: int,
    employee_id: int,
    customer_id: int | None = None,
    supplier_id: int | None = None,
) -> MovementResult:
    """
    Apply one IN or OUT movement to a stock row.

    The row is locked for the whole unit of work: two concurrent OUTs on
    the same row queue, and the second one sees the first one's result.
    """
    mtype = parse_movement_type(movement_type)
    qty = require_quantity(quantity)
    if item_id is None or warehouse_id is None:
        raise ValidationError("ItemID and WarehouseID are required")
    if employee_id is None:
        raise ValidationError("EmployeeID is required")
    _check_counterparty(mtype, customer_id, supplier_id)

    with atomic(db):
        if not db.get(Employee, employee_id):
            raise NotFound("Employee not found", employee_id=employee_id)
        if customer_id is not None and not db.get(Customer, customer_id):
            raise NotFound("Customer not found", customer_id=customer_id)
        if supplier_id is not None and not db.get(Supplier, supplier_id):
            raise NotFound("Supplier not found", supplier_id=supplier_id)

        row = lock_stock_row(db, item_id, warehouse_id)
        if not row:
            raise NotFound(
                "Item not found in specified warehouse",
                item_id=item_id,
                warehouse_id=warehouse_id,
            )

        previous = row.stock_quantity
        if mtype == MovementType.outbound and qty > previous:
            raise InsufficientStock(available=previous, requested=qty)

        entry = LedgerEntry(
            movement_type=mtype,
            item_id=item_id,
            warehouse_id=warehouse_id,
            quantity=qty,
            employee_id=employee_id,
            customer_id=customer_id,
            supplier_id=supplier_id,
        )
        db.add(entry)
        row.stock_quantity = previous + signed_quantity(entry)
        db.flush()

        result = MovementResult(
            transaction_id=int(entry.id),
            previous_qty=previous,
            new_qty=row.stock_quantity,
        )

    return result


def reverse_movement(db: Session, *, transaction_id: int) -> ReversalResult:
    """
    Delete a ledger entry and undo its effect on stock, all or nothing.

    A transfer leg takes its sibling leg with it. If any restored quantity
    would be negative nothing is touched and WouldGoNegative is raised.
    """
    if transaction_id is None:
        raise ValidationError("TransactionID is required")

    with atomic(db):
        entry = (
            db.execute(
                select(LedgerEntry)
                .where(LedgerEntry.id == transaction_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            .scalar_one_or_none()
        )
        if not entry:
            raise NotFound("Transaction not found", transaction_id=transaction_id)

        entries = [entry]
        if entry.transfer_id:
            entries = (
                db.execute(
                    select(LedgerEntry)
                    .where(LedgerEntry.transfer_id == entry.transfer_id)
                    .order_by(LedgerEntry.id)
                    .with_for_update()
                    .execution_options(populate_existing=True)
                )
                .scalars()
                .all()
            )

        rows = lock_stock_rows(db, [(e.item_id, e.warehouse_id) for e in entries])

        restored: dict[tuple[int, int], int] = {}
        for e in entries:
            key = (e.item_id, e.warehouse_id)
            row = rows[key]
            if not row:
                raise NotFound("Item not found", item_id=e.item_id, warehouse_id=e.warehouse_id)
            current = restored.get(key, row.stock_quantity)
            restored[key] = current - signed_quantity(e)

        for e in entries:
            key = (e.item_id, e.warehouse_id)
            if restored[key] < 0:
                raise WouldGoNegative(rows[key].stock_quantity, e.quantity, e.warehouse_id)

        own_key = (entry.item_id, entry.warehouse_id)
        previous = rows[own_key].stock_quantity
        reversed_ids = [int(e.id) for e in entries]

        for key, qty in restored.items():
            rows[key].stock_quantity = qty
        for e in entries:
            db.delete(e)
        db.flush()

        result = ReversalResult(
            transaction_id=int(transaction_id),
            previous_qty=previous,
            new_qty=restored[own_key],
            reversed_transaction_ids=reversed_ids,
        )

    return result


def list_movements(
    db: Session,
    *,
    item_id: int | None = None,
    warehouse_id: int | None = None,
    employee_id: int | None = None,
    movement_type=None,
    limit: int = 500,
) -> list[LedgerLine]:
    """Ledger entries, newest first, with the names they reference."""
    customer = aliased(Customer)
    supplier = aliased(Supplier)

    stmt = (
        select(
            LedgerEntry,
            Item.name,
            Warehouse.location,
            Employee.name,
            customer.name,
            supplier.name,
        )
        .join(Item, Item.id == LedgerEntry.item_id)
        .join(Warehouse, Warehouse.id == LedgerEntry.warehouse_id)
        .join(Employee, Employee.id == LedgerEntry.employee_id)
        .outerjoin(customer, customer.id == LedgerEntry.customer_id)
        .outerjoin(supplier, supplier.id == LedgerEntry.supplier_id)
        .order_by(LedgerEntry.happened_at.desc(), LedgerEntry.id.desc())
        .limit(limit)
    )

    if item_id is not None:
        stmt = stmt.where(LedgerEntry.item_id == item_id)
    if warehouse_id is not None:
        stmt = stmt.where(LedgerEntry.warehouse_id == warehouse_id)
    if employee_id is not None:
        stmt = stmt.where(LedgerEntry.employee_id == employee_id)
    if movement_type is not None:
        stmt = stmt.where(LedgerEntry.movement_type == parse_movement_type(movement_type))

    return [
        LedgerLine(
            transaction_id=int(e.id),
            transaction_type=e.movement_type,
            quantity=e.quantity,
            happened_at=e.happened_at,
            item_id=e.item_id,
            item_name=item_name,
            warehouse_id=e.warehouse_id,
            warehouse_location=location,
            employee_name=employee_name,
            customer_name=customer_name,
            supplier_name=supplier_name,
            transfer_id=e.transfer_id,
        )
        for e, item_name, location, employee_name, customer_name, supplier_name in db.execute(stmt).all()
    ]


def replay_stock_row(db: Session, *, item_id: int, warehouse_id: int) -> ReplayResult:
    """
    Rebuild a stock row's quantity from its opening quantity and its
    ledger entries in time order, and compare with the stored value.
    """
    row = db.get(StockRow, (item_id, warehouse_id))
    if not row:
        raise NotFound("Item not found in specified warehouse", item_id=item_id, warehouse_id=warehouse_id)

    entries = (
        db.execute(
            select(LedgerEntry)
            .where(LedgerEntry.item_id == item_id)
            .where(LedgerEntry.warehouse_id == warehouse_id)
            .order_by(LedgerEntry.happened_at.asc(), LedgerEntry.id.asc())
        )
        .scalars()
        .all()
    )

    qty = row.opening_quantity
    never_negative = qty >= 0
    for e in entries:
        qty += signed_quantity(e)
        if qty < 0:
            never_negative = False

    return ReplayResult(
        item_id=item_id,
        warehouse_id=warehouse_id,
        opening_qty=row.opening_quantity,
        replayed_qty=qty,
        current_qty=row.stock_quantity,
        entries=len(entries),
        never_negative=never_negative,
        consistent=qty == row.stock_quantity,
    )
