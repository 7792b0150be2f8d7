from __future__ import annotations

from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session


def get_db(request: Request) -> Generator[Session, None, None]:
    # session factory is owned by the app lifespan, see app.main
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
