"""
Database-backed collaborators of CredentialIssuer.

Each object is bound to one storage Session for the duration of a request.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import timedelta

from cryptography.fernet import InvalidToken
from sqlmodel import Session

from dbcreds.core.pool import DRIVER_ERRORS, PoolManager
from dbcreds.engines.credentials import (
    ConnectionHandle,
    DatabaseConnectionError,
    LeaseConfig,
    Role,
    catalog_statement,
)
from dbcreds.models import (
    SINGLETON_ID,
    ConnectionSetting,
    CredentialRole,
    LeaseSetting,
)

_log = logging.getLogger(__name__)


class SessionRoleStore:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_role(self, name: str) -> Role | None:
        row = self._session.get(CredentialRole, name)
        if row is None:
            return None
        return Role(name=row.name, sql=row.sql)


class SessionLeaseStore:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_lease_config(self) -> LeaseConfig | None:
        row = self._session.get(LeaseSetting, SINGLETON_ID)
        if row is None:
            return None
        return LeaseConfig(
            lease=timedelta(seconds=row.lease_seconds),
            lease_max=timedelta(seconds=row.lease_max_seconds),
        )


class PooledConnectionProvider:
    """Borrows target-database connections from a PoolManager."""

    def __init__(self, session: Session, pool: PoolManager) -> None:
        self._session = session
        self._pool = pool

    @contextmanager
    def acquire(self) -> Iterator[ConnectionHandle]:
        setting = self._session.get(ConnectionSetting, SINGLETON_ID)
        if setting is None:
            raise DatabaseConnectionError("target database connection is not configured")
        try:
            conn = self._pool.get_connection(setting)
        except InvalidToken as e:
            raise DatabaseConnectionError(
                "stored connection password cannot be decrypted"
            ) from e
        except DRIVER_ERRORS as e:
            _log.error(
                "Cannot connect to %s at %s:%s: %s",
                setting.product_type.value,
                setting.host,
                setting.port,
                e,
            )
            raise DatabaseConnectionError(f"cannot connect to target database: {e}") from e

        try:
            yield ConnectionHandle(
                conn=conn,
                catalog_statement=catalog_statement(
                    setting.product_type, setting.database
                ),
            )
        finally:
            self._pool.release(conn, setting)
