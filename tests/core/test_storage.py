"""Tests for the storage-backed issuer collaborators."""

from datetime import timedelta
from unittest.mock import MagicMock

import pymssql
import pytest
from sqlmodel import Session

from dbcreds.core.security import encrypt_value
from dbcreds.core.storage import (
    PooledConnectionProvider,
    SessionLeaseStore,
    SessionRoleStore,
)
from dbcreds.engines.credentials import DatabaseConnectionError, ExecutionError
from dbcreds.models import (
    ConnectionSetting,
    CredentialRole,
    LeaseSetting,
    ProductTypeEnum,
)


def _add_connection(db: Session, product_type: ProductTypeEnum) -> ConnectionSetting:
    row = ConnectionSetting(
        id=1,
        product_type=product_type,
        host="db.local",
        port=1433,
        database="creds",
        username="sa",
        password=encrypt_value("pw"),
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def test_role_store(db: Session) -> None:
    db.add(CredentialRole(name="readonly", sql="SELECT 1"))
    db.commit()
    store = SessionRoleStore(db)

    role = store.get_role("readonly")
    assert role is not None
    assert role.sql == "SELECT 1"
    assert store.get_role("missing") is None


def test_lease_store_absent(db: Session) -> None:
    assert SessionLeaseStore(db).get_lease_config() is None


def test_lease_store(db: Session) -> None:
    db.add(LeaseSetting(id=1, lease_seconds=1800, lease_max_seconds=3600))
    db.commit()

    config = SessionLeaseStore(db).get_lease_config()

    assert config is not None
    assert config.lease == timedelta(minutes=30)
    assert config.lease_max == timedelta(hours=1)


def test_acquire_without_setting(db: Session) -> None:
    provider = PooledConnectionProvider(db, MagicMock())
    with pytest.raises(DatabaseConnectionError):
        with provider.acquire():
            pass


def test_acquire_yields_handle_and_releases(db: Session) -> None:
    setting = _add_connection(db, ProductTypeEnum.MSSQL)
    pool = MagicMock()
    conn = pool.get_connection.return_value
    provider = PooledConnectionProvider(db, pool)

    with provider.acquire() as handle:
        assert handle.conn is conn
        assert handle.catalog_statement == "USE [creds]"

    pool.release.assert_called_once_with(conn, setting)


def test_acquire_releases_on_error(db: Session) -> None:
    _add_connection(db, ProductTypeEnum.POSTGRES)
    pool = MagicMock()
    provider = PooledConnectionProvider(db, pool)

    with pytest.raises(ExecutionError):
        with provider.acquire() as handle:
            assert handle.catalog_statement is None
            raise ExecutionError(1, RuntimeError("x"))

    pool.release.assert_called_once()


def test_acquire_driver_error_becomes_connection_error(db: Session) -> None:
    _add_connection(db, ProductTypeEnum.MSSQL)
    pool = MagicMock()
    pool.get_connection.side_effect = pymssql.OperationalError("login failed")
    provider = PooledConnectionProvider(db, pool)

    with pytest.raises(DatabaseConnectionError, match="cannot connect"):
        with provider.acquire():
            pass
    pool.release.assert_not_called()
