from __future__ import annotations

from decimal import Decimal, DecimalException, InvalidOperation

from sqlalchemy import select
from sqlalchemy.orm import Session

from stockledger.app.db.models.models_v1 import Item, StockRow
from stockledger.app.schemas.procedures import PriceUpdateResult
from stockledger.services.errors import ValidationError
from stockledger.services.identity import bounded_price
from stockledger.services.inventory import atomic

ZERO = Decimal("0")


def bulk_adjust_prices(db: Session, *, category: str, percent) -> PriceUpdateResult:
    """
    Scale the price of every stock row whose item is in ``category`` by
    (1 + percent/100), rounded half-up to cents. No ledger entry: a price
    change is not a stock movement.
    """
    category = (category or "").strip()
    if not category:
        raise ValidationError("Category is required")
    try:
        change = Decimal(str(percent))
    except (InvalidOperation, ValueError):
        raise ValidationError("PriceChangePercent must be a number", price_change_percent=str(percent))
    if not change.is_finite():
        raise ValidationError("PriceChangePercent must be a number", price_change_percent=str(percent))
    if change < -100:
        raise ValidationError(
            "PriceChangePercent below -100 would make prices negative",
            price_change_percent=str(change),
        )

    try:
        factor = 1 + change / 100
    except DecimalException:
        raise ValidationError("PriceChangePercent is out of range", price_change_percent=str(change))

    with atomic(db):
        rows = (
            db.execute(
                select(StockRow)
                .join(Item, Item.id == StockRow.item_id)
                .where(Item.category == category)
                .order_by(StockRow.warehouse_id, StockRow.item_id)
                .with_for_update(of=StockRow)
                .execution_options(populate_existing=True)
            )
            .scalars()
            .all()
        )
        if not rows:
            raise ValidationError("No items found in category", category=category)

        for row in rows:
            try:
                scaled = max(Decimal(row.price) * factor, ZERO)
            except DecimalException:
                raise ValidationError(
                    "PriceChangePercent is out of range", price_change_percent=str(change)
                )
            # raises ValidationError when the new price no longer fits the column
            row.price = bounded_price(scaled)
        db.flush()

    return PriceUpdateResult(category=category, price_change_percent=change, rows_affected=len(rows))
