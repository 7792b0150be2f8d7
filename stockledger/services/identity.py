from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stockledger.app.db.models.models_v1 import (
    Item,
    StockRow,
    Supplier,
    Warehouse,
    normalize_name,
)
from stockledger.app.schemas.stock_row import StockingResult
from stockledger.services.errors import DuplicateInWarehouse, NotFound, Unavailable, ValidationError
from stockledger.services.inventory import atomic, create_stock_row

CENT = Decimal("0.01")
# Numeric(10, 2): eight integer digits
MAX_PRICE = Decimal(10) ** 8


def to_price(value) -> Decimal:
    """Money input to a 2-decimal Decimal; rejects negative, non-finite and out-of-range values."""
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError("Price must be a number", price=str(value))
    if not price.is_finite() or price < 0:
        raise ValidationError("Price must be a non-negative number", price=str(value))
    return bounded_price(price)


def bounded_price(price: Decimal) -> Decimal:
    """Round half-up to cents and make sure the result fits the price column."""
    if price >= MAX_PRICE:
        raise ValidationError("Price must be below 100000000", price=str(price))
    # below MAX_PRICE the quantize stays within the default context precision
    price = price.quantize(CENT, rounding=ROUND_HALF_UP)
    if price >= MAX_PRICE:
        raise ValidationError("Price must be below 100000000", price=str(price))
    return price


def lock_item(db: Session, name_key: str) -> Item | None:
    """Lock the logical item so concurrent stockings of one name serialize."""
    return (
        db.execute(
            select(Item)
            .where(Item.name_key == name_key)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        .scalar_one_or_none()
    )


def insert_item(db: Session, *, name: str, name_key: str, category: str) -> Item | None:
    """
    Insert a new item inside a savepoint. Returns None when another
    transaction inserted the same name key first; the enclosing unit of
    work stays usable.
    """
    item = Item(name=name, name_key=name_key, category=category)
    try:
        with db.begin_nested():
            db.add(item)
            db.flush()
    except IntegrityError:
        return None
    return item


def create_stocking(
    db: Session,
    *,
    name: str,
    category: str,
    warehouse_id: int,
    price,
    quantity: int,
    supplier_id: int,
) -> StockingResult:
    """
    Stock an item in a warehouse, resolving its identity by name.

    Names are compared trimmed and case-folded:
    1. already stocked in this warehouse -> DuplicateInWarehouse
    2. known in another warehouse -> reuse its item id and category
       (the submitted category is ignored)
    3. never seen -> new item id with the submitted category

    The opening quantity lands on the stock row directly, not as a
    ledger movement.
    """
    display_name = (name or "").strip()
    category = (category or "").strip()
    if not display_name:
        raise ValidationError("Name is required")
    if not category:
        raise ValidationError("Category is required")
    if warehouse_id is None or supplier_id is None:
        raise ValidationError("warehouse_id and supplier_id are required")
    if quantity is None or isinstance(quantity, bool) or int(quantity) != quantity or quantity < 0:
        raise ValidationError("Stock quantity must be a non-negative integer", quantity=quantity)
    unit_price = to_price(price)
    name_key = normalize_name(display_name)

    with atomic(db):
        if not db.get(Warehouse, warehouse_id):
            raise NotFound("Warehouse not found", warehouse_id=warehouse_id)
        if not db.get(Supplier, supplier_id):
            raise NotFound("Supplier not found", supplier_id=supplier_id)

        item = lock_item(db, name_key)
        is_new_item = False
        if item is None:
            item = insert_item(db, name=display_name, name_key=name_key, category=category)
            is_new_item = item is not None
        if item is None:
            # lost the race for a new name: the winner committed, reuse its item
            item = lock_item(db, name_key)
            if item is None:
                raise Unavailable("Item was created concurrently, retry", name=display_name)

        if not is_new_item and db.get(StockRow, (item.id, warehouse_id)):
            raise DuplicateInWarehouse(display_name, int(item.id), warehouse_id)

        create_stock_row(
            db,
            item_id=item.id,
            warehouse_id=warehouse_id,
            supplier_id=supplier_id,
            price=unit_price,
            quantity=int(quantity),
        )

        result = StockingResult(
            item_id=int(item.id),
            warehouse_id=warehouse_id,
            name=item.name,
            category=item.category,
            is_new_item=is_new_item,
            stock_quantity=int(quantity),
        )

    return result
