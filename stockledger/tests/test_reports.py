from decimal import Decimal

import pytest

from stockledger.services.errors import NotFound, ValidationError
from stockledger.services.ledger import record_movement
from stockledger.services.reports import (
    employee_summary,
    inventory_report,
    inventory_value,
    is_low_stock,
    low_stock,
    supplier_performance,
    top_supplier,
    total_item_stock,
    warehouse_value,
)


@pytest.fixture
def shelves(world, stock):
    """Two items over two warehouses and two suppliers."""
    hammer = stock("Hammer", world.wh_a, 10, price="5.00", category="Tools")
    stock("Hammer", world.wh_b, 2, price="5.50", category="Tools", supplier_id=world.other_supplier)
    seeds = stock("Seeds", world.wh_a, 3, price="1.25", category="Garden")
    return hammer, seeds


def test_inventory_value_per_warehouse(db_session, world, shelves):
    values = {v.warehouse_id: v for v in inventory_value(db_session)}

    assert values[world.wh_a].total_inventory_value == Decimal("53.75")
    assert values[world.wh_a].total_items == 2
    assert values[world.wh_a].total_quantity == 13
    assert values[world.wh_b].total_inventory_value == Decimal("11.00")
    assert values[world.wh_c].total_inventory_value == Decimal("0.00")
    assert values[world.wh_c].total_items == 0

    assert warehouse_value(db_session, warehouse_id=world.wh_a) == Decimal("53.75")
    with pytest.raises(NotFound):
        warehouse_value(db_session, warehouse_id=999_999)


def test_supplier_performance_and_top_supplier(db_session, world, shelves):
    perf = {p.supplier_id: p for p in supplier_performance(db_session)}

    assert perf[world.supplier].items_supplied == 2
    assert perf[world.supplier].total_value == Decimal("53.75")
    assert perf[world.other_supplier].total_quantity_supplied == 2

    best = top_supplier(db_session)
    assert best.supplier_id == world.supplier


def test_top_supplier_empty_when_nothing_stocked(db_session, world):
    assert top_supplier(db_session) is None


def test_low_stock_threshold(db_session, world, shelves):
    hammer, seeds = shelves

    rows = low_stock(db_session, threshold=5)

    assert [(r.item_id, r.warehouse_id) for r in rows] == [(hammer, world.wh_b), (seeds, world.wh_a)]
    assert rows[0].supplier_name == "Bolt Brothers"
    assert is_low_stock(db_session, item_id=hammer, warehouse_id=world.wh_a, threshold=5) is False
    assert is_low_stock(db_session, item_id=seeds, warehouse_id=world.wh_a, threshold=5) is True
    with pytest.raises(ValidationError):
        low_stock(db_session, threshold=-1)


def test_total_item_stock_across_warehouses(db_session, world, shelves):
    hammer, _ = shelves

    assert total_item_stock(db_session, item_id=hammer) == 12
    with pytest.raises(NotFound):
        total_item_stock(db_session, item_id=999_999)


def test_inventory_report_rows(db_session, world, shelves):
    report = inventory_report(db_session, warehouse_id=world.wh_a)

    assert [r.name for r in report] == ["Seeds", "Hammer"]  # Garden sorts before Tools
    assert report[1].stock_value == Decimal("50.00")
    assert len(inventory_report(db_session)) == 3


def test_employee_summary_counts_movements(db_session, world, shelves):
    hammer, _ = shelves
    record_movement(
        db_session,
        movement_type="IN",
        item_id=hammer,
        warehouse_id=world.wh_a,
        quantity=4,
        employee_id=world.employee,
        supplier_id=world.supplier,
    )
    record_movement(
        db_session,
        movement_type="OUT",
        item_id=hammer,
        warehouse_id=world.wh_a,
        quantity=6,
        employee_id=world.employee,
        customer_id=world.customer,
    )

    [summary] = employee_summary(db_session, employee_id=world.employee)

    assert summary.total_transactions == 2
    assert summary.total_in_qty == 4
    assert summary.total_out_qty == 6
    assert summary.last_transaction_at is not None
