from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from stockledger.app.api.v1.router import router as v1_router
from stockledger.app.core.config import settings
from stockledger.app.core.logger import setup_logger
from stockledger.app.db.session import create_db_engine, make_session_factory
from stockledger.services.errors import (
    Conflict,
    Internal,
    NotFound,
    StockLedgerError,
    Unavailable,
    ValidationError,
)
from stockledger.services.inventory import storage_error

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: list[tuple[type[StockLedgerError], int]] = [
    (ValidationError, 400),
    (NotFound, 404),
    (Conflict, 409),
    (Unavailable, 503),
    (Internal, 500),
]


def status_for(exc: StockLedgerError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


def create_app(engine: Engine | None = None) -> FastAPI:
    """
    Build the API. The engine (and its connection pool) belongs to the
    process: created here unless the caller hands one in, disposed on
    shutdown only if created here.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logger()
        owned = engine is None
        db_engine = create_db_engine() if owned else engine
        app.state.engine = db_engine
        app.state.session_factory = make_session_factory(db_engine)
        logger.info("Stock ledger API started (%s)", db_engine.url.render_as_string(hide_password=True))
        try:
            yield
        finally:
            if owned:
                db_engine.dispose()
            logger.info("Stock ledger API stopped")

    app = FastAPI(title=settings.app_title, version="0.1.0", lifespan=lifespan)
    app.include_router(v1_router, prefix="/v1")

    @app.exception_handler(SQLAlchemyError)
    async def handle_storage_error(request: Request, exc: SQLAlchemyError):
        # reads run outside atomic(); their storage errors get the same mapping here
        translated = storage_error(exc)
        translated.__cause__ = exc
        translated.__traceback__ = exc.__traceback__
        return await handle_stock_ledger_error(request, translated)

    @app.exception_handler(StockLedgerError)
    async def handle_stock_ledger_error(request: Request, exc: StockLedgerError):
        status_code = status_for(exc)

        if isinstance(exc, Internal) or status_code == 500:
            logger.error(
                "Internal failure on %s %s",
                request.method,
                request.url.path,
                exc_info=(type(exc), exc, exc.__traceback__),
            )
            return JSONResponse(
                status_code=500,
                content={"code": Internal.code, "message": "Internal server error"},
            )

        if isinstance(exc, Unavailable):
            logger.warning("Storage unavailable on %s %s: %s", request.method, request.url.path, exc.__cause__)
            return JSONResponse(status_code=503, content=exc.to_dict(), headers={"Retry-After": "1"})

        logger.info("Declined %s %s: %s %s", request.method, request.url.path, exc.code, exc.message)
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("stockledger.app.main:app", host="0.0.0.0", port=8000)
