from decimal import Decimal

from pydantic import BaseModel


class TransferCreate(BaseModel):
    item_id: int
    from_warehouse_id: int
    to_warehouse_id: int
    quantity: int
    employee_id: int
    supplier_id: int


class TransferResult(BaseModel):
    ok: bool
    transfer_id: str
    from_qty: int
    to_qty: int
    out_transaction_id: int
    in_transaction_id: int
    destination_created: bool


class PriceUpdate(BaseModel):
    category: str
    price_change_percent: Decimal


class PriceUpdateResult(BaseModel):
    category: str
    price_change_percent: Decimal
    rows_affected: int
