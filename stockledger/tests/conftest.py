import os
from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy.orm import Session

from stockledger.app.db.base import Base
from stockledger.app.db.models.models_v1 import Customer, Employee, Supplier, Warehouse
from stockledger.app.db.session import create_db_engine, make_session_factory
from stockledger.services.identity import create_stocking


@pytest.fixture(scope="function")
def engine(tmp_path):
    """
    Fresh schema per test.

    TEST_DATABASE_URL points the suite at PostgreSQL; otherwise a SQLite
    file under tmp_path (a file, not :memory:, so threads get their own
    connections).
    """
    url = os.getenv("TEST_DATABASE_URL") or f"sqlite:///{tmp_path / 'stockledger.db'}"
    engine = create_db_engine(url)
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def world(db_session):
    """Master data every scenario needs: three warehouses and one of each party."""
    wh_a = Warehouse(location="Warehouse A", capacity=1000)
    wh_b = Warehouse(location="Warehouse B", capacity=1000)
    wh_c = Warehouse(location="Warehouse C", capacity=1000)
    supplier = Supplier(name="Acme Supply", contact_no="555-0100", email="acme@example.com")
    other_supplier = Supplier(name="Bolt Brothers", contact_no="555-0199", email="bolts@example.com")
    customer = Customer(name="Jane Buyer", email="jane@example.com")
    employee = Employee(name="Sam Clerk", email="sam@example.com", role="Clerk")
    db_session.add_all([wh_a, wh_b, wh_c, supplier, other_supplier, customer, employee])
    db_session.commit()

    return SimpleNamespace(
        wh_a=wh_a.id,
        wh_b=wh_b.id,
        wh_c=wh_c.id,
        supplier=supplier.id,
        other_supplier=other_supplier.id,
        customer=customer.id,
        employee=employee.id,
    )


@pytest.fixture(scope="function")
def stock(db_session, world):
    """Create a stocking and return its item id."""

    def _stock(name, warehouse_id, quantity, price="10.00", category="Hardware", supplier_id=None):
        result = create_stocking(
            db_session,
            name=name,
            category=category,
            warehouse_id=warehouse_id,
            price=Decimal(price),
            quantity=quantity,
            supplier_id=supplier_id or world.supplier,
        )
        return result.item_id

    return _stock
