"""
Error taxonomy of the stock ledger core.

Every failure leaving a service is one of five kinds, each with a stable
``code`` for callers and structured attributes instead of message parsing:

    StockLedgerError
    |
    +-- ValidationError       malformed / missing / out-of-range input
    +-- NotFound              item, warehouse, stock row or ledger entry absent
    +-- Conflict              business rule violated (not transient)
    |   +-- DuplicateInWarehouse
    |   +-- InsufficientStock
    |   +-- WouldGoNegative
    |   +-- StockRowInUse
    +-- Unavailable           backend unreachable / pool exhausted, retryable
    +-- Internal              unexpected storage failure, already rolled back
"""

from __future__ import annotations

from typing import Any


class StockLedgerError(Exception):
    code: str = "STOCK_LEDGER_ERROR"
    retryable: bool = False

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, **self.details}


class ValidationError(StockLedgerError):
    code = "VALIDATION_ERROR"


class NotFound(StockLedgerError):
    code = "NOT_FOUND"


class Conflict(StockLedgerError):
    code = "CONFLICT"


class DuplicateInWarehouse(Conflict):
    code = "DUPLICATE_IN_WAREHOUSE"

    def __init__(self, name: str, item_id: int, warehouse_id: int):
        super().__init__(
            f'Item "{name}" already exists in this warehouse (ID: {item_id}). '
            "Update the existing item or choose a different warehouse.",
            item_id=item_id,
            warehouse_id=warehouse_id,
        )
        self.item_id = item_id
        self.warehouse_id = warehouse_id


class InsufficientStock(Conflict):
    code = "INSUFFICIENT_STOCK"

    def __init__(self, available: int, requested: int):
        super().__init__(
            f"Insufficient stock (available={available}, requested={requested})",
            available=available,
            requested=requested,
        )
        self.available = available
        self.requested = requested


class WouldGoNegative(Conflict):
    code = "WOULD_GO_NEGATIVE"

    def __init__(self, current: int, quantity: int, warehouse_id: int):
        super().__init__(
            "Cannot delete transaction: would result in negative stock",
            current_stock=current,
            transaction_quantity=quantity,
            warehouse_id=warehouse_id,
        )
        self.current = current
        self.quantity = quantity
        self.warehouse_id = warehouse_id


class StockRowInUse(Conflict):
    code = "STOCK_ROW_IN_USE"


class Unavailable(StockLedgerError):
    code = "UNAVAILABLE"
    retryable = True


class Internal(StockLedgerError):
    code = "INTERNAL"
