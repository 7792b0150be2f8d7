from __future__ import annotations

from contextlib import contextmanager
from decimal import Decimal
from typing import Iterable, Iterator

from sqlalchemy import select
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.orm import Session

from stockledger.app.db.models.models_v1 import StockRow
from stockledger.services.errors import (
    Conflict,
    Internal,
    StockLedgerError,
    Unavailable,
)

StockKey = tuple[int, int]  # (item_id, warehouse_id)


def storage_error(exc: SQLAlchemyError) -> StockLedgerError:
    """
    Map a storage exception onto the error taxonomy:
    - pool timeout / lost connection / deadlock -> Unavailable (retryable)
    - constraint violated by a concurrent writer -> Conflict
    - anything else from the driver -> Internal
    """
    if isinstance(exc, (PoolTimeoutError, OperationalError)):
        return Unavailable("Storage backend unavailable, retry later")
    if isinstance(exc, IntegrityError):
        return Conflict("Concurrent change violated a storage constraint")
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return Unavailable("Storage connection lost, retry later")
    return Internal("Unexpected storage failure")


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    Unit of work: commit once at the end, roll back on any failure.

    Storage exceptions leave translated by ``storage_error``; the rollback
    always happens before the error reaches the caller.
    """
    try:
        yield db
        db.commit()
    except StockLedgerError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        raise storage_error(exc) from exc
    except BaseException:
        db.rollback()
        raise


def lock_stock_row(db: Session, item_id: int, warehouse_id: int) -> StockRow | None:
    """SELECT ... FOR UPDATE on one stock row, refreshing any stale copy in the session."""
    return (
        db.execute(
            select(StockRow)
            .where(StockRow.item_id == item_id)
            .where(StockRow.warehouse_id == warehouse_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        .scalar_one_or_none()
    )


def lock_stock_rows(db: Session, keys: Iterable[StockKey]) -> dict[StockKey, StockRow | None]:
    """
    Lock several stock rows in the global order (warehouse_id, item_id).

    Every multi-row writer goes through here, so two transfers moving
    stock in opposite directions always queue on the same first row.
    """
    ordered = sorted({(int(i), int(w)) for i, w in keys}, key=lambda k: (k[1], k[0]))
    return {key: lock_stock_row(db, *key) for key in ordered}


def create_stock_row(
    db: Session,
    *,
    item_id: int,
    warehouse_id: int,
    supplier_id: int,
    price: Decimal,
    quantity: int = 0,
) -> StockRow:
    row = StockRow(
        item_id=item_id,
        warehouse_id=warehouse_id,
        supplier_id=supplier_id,
        price=price,
        stock_quantity=quantity,
        opening_quantity=quantity,
    )
    db.add(row)
    try:
        db.flush()
    except IntegrityError as exc:
        # another transaction stocked the same pair first
        raise Unavailable(
            "Stock row was created concurrently, retry",
            item_id=item_id,
            warehouse_id=warehouse_id,
        ) from exc
    return row
