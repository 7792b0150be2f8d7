from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from stockledger.app.api.deps import get_db
from stockledger.app.db.models.models_v1 import Supplier
from stockledger.services.errors import Conflict
from stockledger.services.inventory import atomic

router = APIRouter(prefix="/suppliers")


class SupplierIn(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    contact_no: str | None = Field(default=None, max_length=32)
    email: str | None = Field(default=None, max_length=255)
    address: str | None = Field(default=None, max_length=255)


class SupplierOut(SupplierIn):
    model_config = ConfigDict(from_attributes=True)

    id: int


@router.get("", response_model=list[SupplierOut])
def list_suppliers(db: Session = Depends(get_db)):
    return db.scalars(select(Supplier).order_by(Supplier.id)).all()


@router.post("", status_code=201, response_model=SupplierOut)
def create_supplier(payload: SupplierIn, db: Session = Depends(get_db)):
    with atomic(db):
        if db.scalar(select(Supplier.id).where(Supplier.name == payload.name)):
            raise Conflict("Supplier already exists", name=payload.name)
        supplier = Supplier(**payload.model_dump())
        db.add(supplier)
        db.flush()
    return supplier
