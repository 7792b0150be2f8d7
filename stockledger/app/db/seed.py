from __future__ import annotations

import logging

from sqlalchemy import select

from stockledger.app.core.logger import setup_logger
from stockledger.app.db.base import Base
from stockledger.app.db.models.models_v1 import Customer, Employee, Supplier, Warehouse
from stockledger.app.db.session import create_db_engine, make_session_factory

logger = logging.getLogger("stockledger.seed")

WAREHOUSES = [("Main Warehouse - North", 5000), ("Overflow Depot - South", 2000)]
SUPPLIERS = [("Acme Hardware Supply", "555-0100", "orders@acme.example", "12 Forge Road")]
CUSTOMERS = [("Walk-in Customer", "walkin@example.com")]
EMPLOYEES = [("Store Manager", "manager@example.com", "Manager")]


def run_seed(database_url: str | None = None) -> None:
    engine = create_db_engine(database_url)
    Base.metadata.create_all(bind=engine)
    db = make_session_factory(engine)()
    try:
        for location, capacity in WAREHOUSES:
            if not db.scalar(select(Warehouse).where(Warehouse.location == location)):
                db.add(Warehouse(location=location, capacity=capacity))

        for name, contact_no, email, address in SUPPLIERS:
            if not db.scalar(select(Supplier).where(Supplier.name == name)):
                db.add(Supplier(name=name, contact_no=contact_no, email=email, address=address))

        for name, email in CUSTOMERS:
            if not db.scalar(select(Customer).where(Customer.email == email)):
                db.add(Customer(name=name, email=email))

        for name, email, role in EMPLOYEES:
            if not db.scalar(select(Employee).where(Employee.email == email)):
                db.add(Employee(name=name, email=email, role=role))

        db.commit()
        logger.info("SEED OK: %s warehouses, %s suppliers", len(WAREHOUSES), len(SUPPLIERS))
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    setup_logger()
    run_seed()
