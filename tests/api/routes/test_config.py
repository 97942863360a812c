"""Tests for the lease and connection configuration API."""

from unittest.mock import MagicMock, patch

import pymssql
from fastapi.testclient import TestClient
from sqlmodel import Session

from dbcreds.core.config import settings
from dbcreds.core.security import decrypt_value
from dbcreds.models import SINGLETON_ID, ConnectionSetting


def _base() -> str:
    return f"{settings.API_V1_STR}/config"


# --- lease ---


def test_read_lease_default(client: TestClient, token_headers: dict[str, str]) -> None:
    r = client.get(f"{_base()}/lease", headers=token_headers)
    assert r.status_code == 200
    data = r.json()
    assert data["lease_seconds"] == settings.DEFAULT_LEASE_SECONDS
    assert data["lease"] == "1h0m0s"


def test_write_lease(client: TestClient, token_headers: dict[str, str]) -> None:
    r = client.post(
        f"{_base()}/lease",
        headers=token_headers,
        json={"lease": "30m", "lease_max": "2h"},
    )
    assert r.status_code == 200
    assert r.json() == {
        "lease": "30m0s",
        "lease_max": "2h0m0s",
        "lease_seconds": 1800,
        "lease_max_seconds": 7200,
    }

    r = client.post(
        f"{_base()}/lease",
        headers=token_headers,
        json={"lease": 600, "lease_max": 600},
    )
    assert r.status_code == 200
    assert r.json()["lease_seconds"] == 600

    r = client.get(f"{_base()}/lease", headers=token_headers)
    assert r.json()["lease_seconds"] == 600


def test_write_lease_invalid_duration(
    client: TestClient, token_headers: dict[str, str]
) -> None:
    r = client.post(
        f"{_base()}/lease",
        headers=token_headers,
        json={"lease": "soon", "lease_max": "1h"},
    )
    assert r.status_code == 422


def test_write_lease_exceeding_max(
    client: TestClient, token_headers: dict[str, str]
) -> None:
    r = client.post(
        f"{_base()}/lease",
        headers=token_headers,
        json={"lease": "2h", "lease_max": "1h"},
    )
    assert r.status_code == 422
    assert "lease_max" in r.json()["detail"]


def test_write_lease_below_one_second(
    client: TestClient, token_headers: dict[str, str]
) -> None:
    r = client.post(
        f"{_base()}/lease",
        headers=token_headers,
        json={"lease": "500ms", "lease_max": "1h"},
    )
    assert r.status_code == 422
    assert "at least 1s" in r.json()["detail"]

    r = client.get(f"{_base()}/lease", headers=token_headers)
    assert r.json()["lease_seconds"] == settings.DEFAULT_LEASE_SECONDS


def test_write_lease_infinite(client: TestClient, token_headers: dict[str, str]) -> None:
    for value in ("inf", "1e400"):
        r = client.post(
            f"{_base()}/lease",
            headers=token_headers,
            json={"lease": value, "lease_max": "1h"},
        )
        assert r.status_code == 422
        assert "finite" in r.json()["detail"]


# --- connection ---


def _connection_body(**overrides) -> dict:
    body = {
        "product_type": "mssql",
        "host": "mssql.local",
        "username": "sa",
        "password": "Passw0rd!",
        "database": "master",
    }
    body.update(overrides)
    return body


def test_read_connection_not_configured(
    client: TestClient, token_headers: dict[str, str]
) -> None:
    r = client.get(f"{_base()}/connection", headers=token_headers)
    assert r.status_code == 404


@patch("dbcreds.api.routes.config.health_check", return_value=True)
@patch("dbcreds.api.routes.config.connect")
def test_write_connection_verifies_and_encrypts(
    mock_connect: MagicMock,
    mock_health: MagicMock,
    client: TestClient,
    db: Session,
    pool: MagicMock,
    token_headers: dict[str, str],
) -> None:
    r = client.post(
        f"{_base()}/connection", headers=token_headers, json=_connection_body()
    )

    assert r.status_code == 200
    data = r.json()
    assert data["port"] == 1433
    assert "password" not in data
    mock_connect.assert_called_once()
    assert mock_connect.call_args.kwargs == {"decrypt": False}
    mock_connect.return_value.close.assert_called_once()
    pool.dispose.assert_called_once()

    row = db.get(ConnectionSetting, SINGLETON_ID)
    assert row.password != "Passw0rd!"
    assert decrypt_value(row.password) == "Passw0rd!"


@patch("dbcreds.api.routes.config.connect")
def test_write_connection_without_verify(
    mock_connect: MagicMock,
    client: TestClient,
    token_headers: dict[str, str],
) -> None:
    r = client.post(
        f"{_base()}/connection",
        headers=token_headers,
        json=_connection_body(product_type="postgres", verify_connection=False),
    )
    assert r.status_code == 200
    assert r.json()["port"] == 5432
    mock_connect.assert_not_called()

    r = client.get(f"{_base()}/connection", headers=token_headers)
    assert r.status_code == 200
    assert r.json()["product_type"] == "postgres"


@patch("dbcreds.api.routes.config.connect")
def test_write_connection_unreachable(
    mock_connect: MagicMock,
    client: TestClient,
    db: Session,
    token_headers: dict[str, str],
) -> None:
    mock_connect.side_effect = pymssql.OperationalError("login failed")

    r = client.post(
        f"{_base()}/connection", headers=token_headers, json=_connection_body()
    )

    assert r.status_code == 400
    assert "Connection failed" in r.json()["detail"]
    assert db.get(ConnectionSetting, SINGLETON_ID) is None
