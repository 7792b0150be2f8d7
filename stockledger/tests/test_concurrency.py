"""
Real threads, one session each, against the same database: the stock
row lock has to serialize them.
"""

import threading

from stockledger.app.db.models.models_v1 import LedgerEntry, StockRow
from stockledger.services.errors import InsufficientStock
from stockledger.services.ledger import record_movement
from stockledger.services.transfer import transfer_stock


def _run_concurrently(session_factory, *jobs):
    barrier = threading.Barrier(len(jobs))
    outcomes: list = [None] * len(jobs)

    def worker(index, job):
        session = session_factory()
        try:
            barrier.wait()
            outcomes[index] = job(session)
        except Exception as exc:  # collected for the assertions below
            outcomes[index] = exc
        finally:
            session.close()

    threads = [threading.Thread(target=worker, args=(i, job)) for i, job in enumerate(jobs)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)
    return outcomes


def test_concurrent_outs_never_oversell(session_factory, world, stock):
    """
    GIVEN
    - stock row at 100

    WHEN
    - two concurrent OUT of 60

    THEN
    - exactly one succeeds, the other gets InsufficientStock(available=40)
    - final quantity 40, one ledger entry
    """
    item_id = stock("Widget", world.wh_a, 100)

    def ship(session):
        return record_movement(
            session,
            movement_type="OUT",
            item_id=item_id,
            warehouse_id=world.wh_a,
            quantity=60,
            employee_id=world.employee,
            customer_id=world.customer,
        )

    outcomes = _run_concurrently(session_factory, ship, ship)

    refused = [o for o in outcomes if isinstance(o, InsufficientStock)]
    shipped = [o for o in outcomes if not isinstance(o, Exception)]
    assert len(shipped) == 1, outcomes
    assert len(refused) == 1, outcomes
    assert refused[0].available == 40
    assert shipped[0].new_qty == 40

    with session_factory() as session:
        assert session.get(StockRow, (item_id, world.wh_a)).stock_quantity == 40
        assert session.query(LedgerEntry).count() == 1


def test_concurrent_ins_are_all_counted(session_factory, world, stock):
    item_id = stock("Widget", world.wh_a, 0)

    def receive(session):
        return record_movement(
            session,
            movement_type="IN",
            item_id=item_id,
            warehouse_id=world.wh_a,
            quantity=5,
            employee_id=world.employee,
            supplier_id=world.supplier,
        )

    outcomes = _run_concurrently(session_factory, *([receive] * 4))

    assert not [o for o in outcomes if isinstance(o, Exception)], outcomes
    with session_factory() as session:
        assert session.get(StockRow, (item_id, world.wh_a)).stock_quantity == 20


def test_opposite_transfers_complete_and_conserve(session_factory, world, stock):
    item_id = stock("Widget", world.wh_a, 50)
    stock("Widget", world.wh_b, 50)

    def move(src, dst):
        def job(session):
            return transfer_stock(
                session,
                item_id=item_id,
                from_warehouse_id=src,
                to_warehouse_id=dst,
                quantity=10,
                employee_id=world.employee,
                supplier_id=world.supplier,
            )

        return job

    outcomes = _run_concurrently(
        session_factory,
        move(world.wh_a, world.wh_b),
        move(world.wh_b, world.wh_a),
    )

    assert not [o for o in outcomes if isinstance(o, Exception)], outcomes
    with session_factory() as session:
        a = session.get(StockRow, (item_id, world.wh_a)).stock_quantity
        b = session.get(StockRow, (item_id, world.wh_b)).stock_quantity
    assert (a, b) == (50, 50)
