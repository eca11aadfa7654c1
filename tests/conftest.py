import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import create_app
from app.db.base import Base
from app.db.session import get_db
from app.db.table import CheckInTable
from app.repositories.checkins import CheckInRepository
from app.repositories.users import UserDirectory
from tests.helpers import TEST_SETTINGS


@pytest.fixture()
def engine():
    # one in-memory database per test, shared across threads
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db_session(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def users(db_session):
    return UserDirectory(db_session)


@pytest.fixture()
def repo(db_session, users):
    return CheckInRepository(CheckInTable(db_session), users)


@pytest.fixture()
def app(db_session):
    app = create_app(TEST_SETTINGS)

    def _get_db_override():
        yield db_session

    app.dependency_overrides[get_db] = _get_db_override
    yield app
    app.dependency_overrides.clear()


@pytest.fixture()
def client(app):
    return TestClient(app)
