from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session

from stockledger.app.db.models.models_v1 import Employee, Warehouse
from stockledger.app.db.seed import WAREHOUSES, run_seed


def test_seed_is_idempotent(tmp_path):
    url = f"sqlite:///{tmp_path / 'seed.db'}"

    run_seed(url)
    run_seed(url)

    engine = create_engine(url)
    try:
        with Session(engine) as db:
            assert db.scalar(select(func.count(Warehouse.id))) == len(WAREHOUSES)
            assert db.scalar(select(func.count(Employee.id))) == 1
    finally:
        engine.dispose()
