from datetime import datetime

from pydantic import BaseModel

from stockledger.app.db.models.core_types import MovementType


class MovementCreate(BaseModel):
    transaction_type: MovementType
    item_id: int
    warehouse_id: int
    quantity: int
    employee_id: int
    customer_id: int | None = None
    supplier_id: int | None = None


class MovementResult(BaseModel):
    transaction_id: int
    previous_qty: int
    new_qty: int


class ReversalResult(BaseModel):
    transaction_id: int
    previous_qty: int
    new_qty: int
    reversed_transaction_ids: list[int]


class LedgerLine(BaseModel):
    """Ledger entry joined with the display names of what it references."""

    transaction_id: int
    transaction_type: MovementType
    quantity: int
    happened_at: datetime
    item_id: int
    item_name: str
    warehouse_id: int
    warehouse_location: str
    employee_name: str
    customer_name: str | None
    supplier_name: str | None
    transfer_id: str | None


class ReplayResult(BaseModel):
    item_id: int
    warehouse_id: int
    opening_qty: int
    replayed_qty: int
    current_qty: int
    entries: int
    never_negative: bool
    consistent: bool
