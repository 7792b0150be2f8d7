from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from stockledger.app.api.deps import get_db
from stockledger.app.db.models.core_types import Role
from stockledger.app.db.models.models_v1 import Customer, Employee
from stockledger.services.errors import ValidationError

router = APIRouter(prefix="/directory")

# closed mapping: the table queried never comes from request text
DIRECTORY_MODELS: dict[Role, type[Customer] | type[Employee] | None] = {
    Role.customer: Customer,
    Role.employee: Employee,
    Role.admin: None,
}


@router.get("/{role}")
def list_people(role: Role, db: Session = Depends(get_db)):
    model = DIRECTORY_MODELS[role]
    if model is None:
        raise ValidationError("Admin accounts are not stored in the directory", role=role.value)

    rows = db.execute(select(model).order_by(model.id)).scalars().all()
    return [{"id": r.id, "name": r.name, "email": r.email, "role": role.value} for r in rows]
