"""
Shared test fixtures.

Sets up an isolated SQLite database so tests never touch the real
database. Tables are created before and dropped after every test.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from charter_ledger.main import app
from charter_ledger.models import Base
from charter_ledger.models.base import get_db
from charter_ledger.services.chart_of_accounts import ChartOfAccountsService


TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)


# pysqlite starts transactions lazily, which breaks SAVEPOINT.
# Take over BEGIN so begin_nested() behaves as it does on PostgreSQL.
@event.listens_for(engine, "connect")
def _disable_pysqlite_transactions(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _emit_begin(conn):
    conn.exec_driver_sql("BEGIN")


TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def seeded_session(db_session):
    """A session with the built-in chart of accounts loaded."""
    ChartOfAccountsService(db_session).seed_default_chart()
    db_session.commit()
    return db_session


@pytest.fixture
def client(db_session):
    """
    Provide a test client bound to the test session.

    get_db is overridden so the app uses the same session as
    the test.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seeded_client(client):
    response = client.post("/accounts/seed")
    assert response.status_code == 200
    return client
