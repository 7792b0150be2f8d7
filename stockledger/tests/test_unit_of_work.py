import pytest
from sqlalchemy import create_engine, select, text
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, ProgrammingError

from stockledger.app.db.models.models_v1 import Warehouse
from stockledger.app.db.session import make_session_factory
from stockledger.services.errors import Conflict, Internal, NotFound, Unavailable
from stockledger.services.inventory import atomic


def _location_exists(db, location):
    db.expire_all()
    return db.execute(select(Warehouse).where(Warehouse.location == location)).scalar_one_or_none() is not None


def test_business_error_rolls_back_and_propagates(db_session):
    with pytest.raises(NotFound):
        with atomic(db_session):
            db_session.add(Warehouse(location="Ghost", capacity=1))
            db_session.flush()
            raise NotFound("nope")

    assert not _location_exists(db_session, "Ghost")


def test_commit_on_success(db_session):
    with atomic(db_session):
        db_session.add(Warehouse(location="Real", capacity=1))

    assert _location_exists(db_session, "Real")


@pytest.mark.parametrize(
    "raised, expected",
    [
        (OperationalError("SELECT 1", {}, Exception("database is locked")), Unavailable),
        (IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed")), Conflict),
        (DBAPIError("SELECT 1", {}, Exception("gone"), connection_invalidated=True), Unavailable),
        (ProgrammingError("SELEC 1", {}, Exception("syntax error")), Internal),
    ],
)
def test_storage_errors_are_translated(db_session, raised, expected):
    with pytest.raises(expected) as exc:
        with atomic(db_session):
            db_session.add(Warehouse(location="Doomed", capacity=1))
            db_session.flush()
            raise raised

    assert exc.value.__cause__ is raised
    assert exc.value.retryable is (expected is Unavailable)
    assert not _location_exists(db_session, "Doomed")


def test_exhausted_pool_is_unavailable(tmp_path):
    """
    GIVEN
    - a pool of one connection, already checked out

    THEN
    - the next unit of work gives up after pool_timeout with Unavailable
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'pool.db'}",
        pool_size=1,
        max_overflow=0,
        pool_timeout=0.2,
        connect_args={"check_same_thread": False},
    )
    held = engine.connect()
    session = make_session_factory(engine)()
    try:
        with pytest.raises(Unavailable):
            with atomic(session):
                session.execute(text("SELECT 1"))
    finally:
        session.close()
        held.close()
        engine.dispose()
