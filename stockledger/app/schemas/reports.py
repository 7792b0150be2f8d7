from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class WarehouseValue(BaseModel):
    warehouse_id: int
    location: str
    total_inventory_value: Decimal
    total_items: int
    total_quantity: int


class SupplierPerformance(BaseModel):
    supplier_id: int
    name: str
    items_supplied: int
    avg_item_price: Decimal | None
    total_quantity_supplied: int
    total_value: Decimal


class LowStockRow(BaseModel):
    item_id: int
    warehouse_id: int
    name: str
    category: str
    stock_quantity: int
    price: Decimal
    location: str
    supplier_name: str


class InventoryReportRow(BaseModel):
    item_id: int
    name: str
    category: str
    warehouse_id: int
    location: str
    stock_quantity: int
    price: Decimal
    stock_value: Decimal
    supplier_name: str


class EmployeeSummary(BaseModel):
    employee_id: int
    name: str
    total_transactions: int
    total_in_qty: int
    total_out_qty: int
    last_transaction_at: datetime | None
