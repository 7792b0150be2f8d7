from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from stockledger.app.api.deps import get_db
from stockledger.app.db.models.models_v1 import Employee, Warehouse
from stockledger.services.errors import Conflict, NotFound
from stockledger.services.inventory import atomic

router = APIRouter(prefix="/employees")


class EmployeeIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=3, max_length=255)
    role: str = Field(default="Staff", min_length=1, max_length=64)
    warehouse_id: int | None = None


class EmployeeOut(EmployeeIn):
    model_config = ConfigDict(from_attributes=True)

    id: int


@router.get("", response_model=list[EmployeeOut])
def list_employees(db: Session = Depends(get_db)):
    return db.scalars(select(Employee).order_by(Employee.id)).all()


@router.post("", status_code=201, response_model=EmployeeOut)
def create_employee(payload: EmployeeIn, db: Session = Depends(get_db)):
    with atomic(db):
        if db.scalar(select(Employee.id).where(Employee.email == payload.email)):
            raise Conflict("Employee email already exists", email=payload.email)
        if payload.warehouse_id is not None and not db.get(Warehouse, payload.warehouse_id):
            raise NotFound("Warehouse not found", warehouse_id=payload.warehouse_id)
        employee = Employee(**payload.model_dump())
        db.add(employee)
        db.flush()
    return employee
