from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from stockledger.app.api.deps import get_db
from stockledger.services.inventory import atomic

router = APIRouter(prefix="/health")


@router.get("")
def health(db: Session = Depends(get_db)):
    with atomic(db):
        db.execute(text("SELECT 1"))
    return {"status": "ok"}
