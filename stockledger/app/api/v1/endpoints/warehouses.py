from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from stockledger.app.api.deps import get_db
from stockledger.app.db.models.models_v1 import Warehouse
from stockledger.services.errors import Conflict
from stockledger.services.inventory import atomic

router = APIRouter(prefix="/warehouses")


class WarehouseIn(BaseModel):
    location: str = Field(min_length=1, max_length=200)
    capacity: int = Field(default=0, ge=0)  # advisory only, never enforced on stock


class WarehouseOut(WarehouseIn):
    model_config = ConfigDict(from_attributes=True)

    id: int


@router.get("", response_model=list[WarehouseOut])
def list_warehouses(db: Session = Depends(get_db)):
    return db.scalars(select(Warehouse).order_by(Warehouse.id)).all()


@router.post("", status_code=201, response_model=WarehouseOut)
def create_warehouse(payload: WarehouseIn, db: Session = Depends(get_db)):
    with atomic(db):
        if db.scalar(select(Warehouse.id).where(Warehouse.location == payload.location)):
            raise Conflict("Warehouse location already exists", location=payload.location)
        warehouse = Warehouse(**payload.model_dump())
        db.add(warehouse)
        db.flush()
    return warehouse
