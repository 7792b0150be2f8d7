from decimal import Decimal

import pytest
from sqlalchemy import func, select

from stockledger.app.db.models.models_v1 import LedgerEntry, StockRow
from stockledger.services.errors import (
    InsufficientStock,
    NotFound,
    ValidationError,
    WouldGoNegative,
)
from stockledger.services.ledger import record_movement, replay_stock_row, reverse_movement
from stockledger.services.transfer import transfer_stock


def _transfer(db, world, item_id, qty, src=None, dst=None, **overrides):
    params = dict(
        item_id=item_id,
        from_warehouse_id=src or world.wh_a,
        to_warehouse_id=dst or world.wh_b,
        quantity=qty,
        employee_id=world.employee,
        supplier_id=world.supplier,
    )
    params.update(overrides)
    return transfer_stock(db, **params)


def _qty(db, item_id, warehouse_id):
    db.expire_all()
    row = db.get(StockRow, (item_id, warehouse_id))
    return row.stock_quantity if row else None


def test_transfer_conserves_total_stock(db_session, world, stock):
    item_id = stock("Widget", world.wh_a, 50)
    stock("widget", world.wh_b, 5)

    result = _transfer(db_session, world, item_id, 20)

    assert result.ok is True
    assert (result.from_qty, result.to_qty) == (30, 25)
    assert result.destination_created is False
    assert _qty(db_session, item_id, world.wh_a) + _qty(db_session, item_id, world.wh_b) == 55

    legs = db_session.execute(select(LedgerEntry).order_by(LedgerEntry.id)).scalars().all()
    assert [leg.id for leg in legs] == [result.out_transaction_id, result.in_transaction_id]
    assert {leg.transfer_id for leg in legs} == {result.transfer_id}


def test_transfer_creates_missing_destination_row(db_session, world, stock):
    """
    GIVEN
    - item stocked only in warehouse A at price 12.50

    WHEN
    - transfer of 8 to warehouse C

    THEN
    - row created in C with the source price, quantity 8, replay consistent
    """
    item_id = stock("Widget", world.wh_a, 10, price="12.50")

    result = _transfer(db_session, world, item_id, 8, dst=world.wh_c, supplier_id=world.other_supplier)

    assert result.destination_created is True
    row = db_session.get(StockRow, (item_id, world.wh_c))
    assert row.stock_quantity == 8
    assert row.opening_quantity == 0
    assert Decimal(row.price) == Decimal("12.50")
    assert row.supplier_id == world.other_supplier

    replay = replay_stock_row(db_session, item_id=item_id, warehouse_id=world.wh_c)
    assert replay.consistent is True


def test_transfer_beyond_source_stock_changes_nothing(db_session, world, stock):
    item_id = stock("Widget", world.wh_a, 10)

    with pytest.raises(InsufficientStock) as exc:
        _transfer(db_session, world, item_id, 11)

    assert exc.value.available == 10
    assert _qty(db_session, item_id, world.wh_a) == 10
    assert _qty(db_session, item_id, world.wh_b) is None
    assert db_session.scalar(select(func.count(LedgerEntry.id))) == 0


def test_transfer_to_same_warehouse_is_rejected(db_session, world, stock):
    item_id = stock("Widget", world.wh_a, 10)

    with pytest.raises(ValidationError):
        _transfer(db_session, world, item_id, 1, dst=world.wh_a)


def test_transfer_needs_source_row_and_known_parties(db_session, world, stock):
    item_id = stock("Widget", world.wh_a, 10)

    with pytest.raises(NotFound):
        _transfer(db_session, world, item_id, 1, src=world.wh_b, dst=world.wh_c)
    with pytest.raises(NotFound):
        _transfer(db_session, world, item_id, 1, employee_id=999_999)
    with pytest.raises(NotFound):
        _transfer(db_session, world, item_id, 1, dst=999_999)

    assert _qty(db_session, item_id, world.wh_a) == 10


def test_reversing_one_leg_reverses_the_whole_transfer(db_session, world, stock):
    item_id = stock("Widget", world.wh_a, 30)
    stock("Widget", world.wh_b, 0)
    result = _transfer(db_session, world, item_id, 12)

    reversal = reverse_movement(db_session, transaction_id=result.in_transaction_id)

    assert sorted(reversal.reversed_transaction_ids) == sorted(
        [result.out_transaction_id, result.in_transaction_id]
    )
    assert (reversal.previous_qty, reversal.new_qty) == (12, 0)
    assert _qty(db_session, item_id, world.wh_a) == 30
    assert _qty(db_session, item_id, world.wh_b) == 0
    assert db_session.scalar(select(func.count(LedgerEntry.id))) == 0


def test_transfer_reversal_refused_once_destination_is_spent(db_session, world, stock):
    item_id = stock("Widget", world.wh_a, 30)
    stock("Widget", world.wh_b, 0)
    result = _transfer(db_session, world, item_id, 12)
    record_movement(
        db_session,
        movement_type="OUT",
        item_id=item_id,
        warehouse_id=world.wh_b,
        quantity=10,
        employee_id=world.employee,
        customer_id=world.customer,
    )

    with pytest.raises(WouldGoNegative):
        reverse_movement(db_session, transaction_id=result.out_transaction_id)

    assert _qty(db_session, item_id, world.wh_a) == 18
    assert _qty(db_session, item_id, world.wh_b) == 2
    assert db_session.scalar(select(func.count(LedgerEntry.id))) == 3
