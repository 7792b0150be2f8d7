from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class StockingCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    category: str = Field(min_length=1, max_length=100)
    warehouse_id: int
    supplier_id: int
    price: Decimal
    stock_quantity: int


class StockingResult(BaseModel):
    item_id: int
    warehouse_id: int
    name: str
    category: str
    is_new_item: bool
    stock_quantity: int


class StockRowUpdate(BaseModel):
    price: Decimal | None = None
    supplier_id: int | None = None


class StockRowRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    item_id: int
    warehouse_id: int
    supplier_id: int

    price: Decimal
    stock_quantity: int
    opening_quantity: int  # replay origin, never rewritten
