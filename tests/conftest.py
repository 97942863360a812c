from collections.abc import Generator
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from dbcreds import models  # noqa: F401
from dbcreds.api.deps import get_db
from dbcreds.core.pool import get_pool_manager
from dbcreds.core.security import create_access_token
from dbcreds.main import app


@pytest.fixture(name="engine")
def engine_fixture() -> Generator:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="db")
def db_fixture(engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture(name="pool")
def pool_fixture() -> MagicMock:
    """Stand-in PoolManager; tests set get_connection.return_value as needed."""
    return MagicMock()


@pytest.fixture(name="client")
def client_fixture(engine, pool: MagicMock) -> Generator[TestClient, None, None]:
    def _get_db() -> Generator[Session, None, None]:
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_pool_manager] = lambda: pool
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def token_headers() -> dict[str, str]:
    token = create_access_token("token", expires_delta=timedelta(minutes=5))
    return {"Authorization": f"Bearer {token}"}
