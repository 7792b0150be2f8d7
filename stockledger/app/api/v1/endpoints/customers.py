from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from stockledger.app.api.deps import get_db
from stockledger.app.db.models.models_v1 import Customer
from stockledger.services.errors import Conflict
from stockledger.services.inventory import atomic

router = APIRouter(prefix="/customers")


class CustomerIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=3, max_length=255)
    contact_no: str | None = Field(default=None, max_length=32)
    address: str | None = Field(default=None, max_length=255)


class CustomerOut(CustomerIn):
    model_config = ConfigDict(from_attributes=True)

    id: int


@router.get("", response_model=list[CustomerOut])
def list_customers(db: Session = Depends(get_db)):
    return db.scalars(select(Customer).order_by(Customer.id)).all()


@router.post("", status_code=201, response_model=CustomerOut)
def create_customer(payload: CustomerIn, db: Session = Depends(get_db)):
    with atomic(db):
        if db.scalar(select(Customer.id).where(Customer.email == payload.email)):
            raise Conflict("Customer email already exists", email=payload.email)
        customer = Customer(**payload.model_dump())
        db.add(customer)
        db.flush()
    return customer
