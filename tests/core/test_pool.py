"""Unit tests for core.pool: connect per product type, PoolManager, health_check."""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from dbcreds.core.config import settings
from dbcreds.core.pool import PoolManager, connect, health_check
from dbcreds.core.security import encrypt_value
from dbcreds.models import ConnectionSetting, ProductTypeEnum


def _setting(product_type: ProductTypeEnum = ProductTypeEnum.MSSQL) -> ConnectionSetting:
    return ConnectionSetting(
        id=1,
        product_type=product_type,
        host="db.local",
        port=1433,
        database="master",
        username="sa",
        password=encrypt_value("s3cret"),
        max_open_connections=2,
        updated_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


# --- connect ---


@patch("dbcreds.core.pool.connect.pymssql")
def test_connect_mssql_decrypts_password(mock_pymssql: MagicMock) -> None:
    connect(_setting())
    kwargs = mock_pymssql.connect.call_args.kwargs
    assert kwargs["server"] == "db.local"
    assert kwargs["password"] == "s3cret"
    assert kwargs["database"] == "master"
    assert kwargs["autocommit"] is False


@patch("dbcreds.core.pool.connect.psycopg")
def test_connect_postgres(mock_psycopg: MagicMock) -> None:
    connect(
        {
            "product_type": "postgres",
            "host": "pg",
            "port": 5432,
            "database": "app",
            "username": "postgres",
            "password": "plain",
        },
        decrypt=False,
    )
    kwargs = mock_psycopg.connect.call_args.kwargs
    assert kwargs["dbname"] == "app"
    assert kwargs["password"] == "plain"
    assert kwargs["autocommit"] is False


@patch("dbcreds.core.pool.connect.pymysql")
def test_connect_mysql_default_port(mock_pymysql: MagicMock) -> None:
    connect(
        {
            "product_type": ProductTypeEnum.MYSQL,
            "host": "my",
            "database": "app",
            "username": "root",
            "password": "",
        },
        decrypt=False,
    )
    assert mock_pymysql.connect.call_args.kwargs["port"] == 3306


def test_connect_requires_host() -> None:
    with pytest.raises(ValueError, match="host"):
        connect(
            {"product_type": "mssql", "database": "d", "username": "u"},
            decrypt=False,
        )


# --- health_check ---


def test_health_check_ok() -> None:
    conn = MagicMock()
    assert health_check(conn) is True
    conn.cursor.return_value.execute.assert_called_once_with("SELECT 1")


def test_health_check_failure() -> None:
    conn = MagicMock()
    conn.cursor.return_value.execute.side_effect = RuntimeError("gone")
    assert health_check(conn) is False


# --- PoolManager ---


@patch("dbcreds.core.pool.manager.connect")
def test_pool_reuses_released_connection(mock_connect: MagicMock) -> None:
    setting = _setting()
    first = MagicMock()
    mock_connect.return_value = first
    pm = PoolManager()

    conn = pm.get_connection(setting)
    pm.release(conn, setting)
    again = pm.get_connection(setting)

    assert again is first
    mock_connect.assert_called_once_with(setting)
    # rolled back on release and on checkout
    assert first.rollback.call_count == 2


@patch("dbcreds.core.pool.manager.connect")
def test_pool_closes_connection_when_full(mock_connect: MagicMock) -> None:
    setting = _setting()
    setting.max_open_connections = 1
    pm = PoolManager()
    a, b = MagicMock(), MagicMock()

    pm.release(a, setting)
    pm.release(b, setting)

    b.close.assert_called_once()
    a.close.assert_not_called()
    assert pm.get_connection(setting) is a
    mock_connect.assert_not_called()


@patch("dbcreds.core.pool.manager.connect")
def test_release_closes_connection_that_cannot_roll_back(mock_connect: MagicMock) -> None:
    setting = _setting()
    pm = PoolManager()
    conn = MagicMock()
    conn.rollback.side_effect = RuntimeError("broken")

    pm.release(conn, setting)

    conn.close.assert_called_once()
    assert pm.get_connection(setting) is mock_connect.return_value


@patch("dbcreds.core.pool.manager.connect")
def test_rewritten_setting_gets_new_pool(mock_connect: MagicMock) -> None:
    old = _setting()
    pm = PoolManager()
    pooled = MagicMock()
    pm.release(pooled, old)

    new = _setting()
    new.updated_at = datetime(2026, 2, 1, tzinfo=timezone.utc)
    fresh = MagicMock()
    mock_connect.return_value = fresh

    assert pm.get_connection(new) is fresh


@patch("dbcreds.core.pool.manager.connect")
def test_dispose_closes_idle_connections(mock_connect: MagicMock) -> None:
    setting = _setting()
    pm = PoolManager()
    conn = MagicMock()
    pm.release(conn, setting)

    pm.dispose()

    conn.close.assert_called_once()
    assert pm.get_connection(setting) is mock_connect.return_value


@patch("dbcreds.core.pool.manager.time.monotonic")
@patch("dbcreds.core.pool.manager.connect")
def test_reused_connection_evicted_after_max_age(
    mock_connect: MagicMock, mock_monotonic: MagicMock
) -> None:
    setting = _setting()
    first, second = MagicMock(), MagicMock()
    mock_connect.side_effect = [first, second]
    clock = [0.0]
    mock_monotonic.side_effect = lambda: clock[0]
    with patch.object(settings, "EXTERNAL_DB_POOL_MAX_AGE_SEC", 100):
        pm = PoolManager()

    conn = pm.get_connection(setting)
    clock[0] = 50.0
    pm.release(conn, setting)
    conn = pm.get_connection(setting)
    assert conn is first

    # Opened at t=0: past max age no matter how recently it was returned
    clock[0] = 150.0
    pm.release(conn, setting)
    first.close.assert_called_once()

    assert pm.get_connection(setting) is second
    assert mock_connect.call_count == 2


@patch("dbcreds.core.pool.manager.time.monotonic")
@patch("dbcreds.core.pool.manager.connect")
def test_pooled_connection_evicted_on_checkout_after_max_age(
    mock_connect: MagicMock, mock_monotonic: MagicMock
) -> None:
    setting = _setting()
    first, second = MagicMock(), MagicMock()
    mock_connect.side_effect = [first, second]
    clock = [0.0]
    mock_monotonic.side_effect = lambda: clock[0]
    with patch.object(settings, "EXTERNAL_DB_POOL_MAX_AGE_SEC", 100):
        pm = PoolManager()

    pm.release(pm.get_connection(setting), setting)
    clock[0] = 101.0

    assert pm.get_connection(setting) is second
    first.close.assert_called_once()
