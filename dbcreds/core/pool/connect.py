"""
DB connection helpers for the target database.

Uses pymssql (SQL Server), psycopg (PostgreSQL) or pymysql (MySQL) based on
product_type. Connections are opened with autocommit off so every issuance
runs in a driver-managed transaction.
"""

from typing import Any

import psycopg
import pymssql
import pymysql

from dbcreds.core.config import settings
from dbcreds.core.security import decrypt_value
from dbcreds.models import DEFAULT_PORTS, ConnectionSetting, ProductTypeEnum

# Errors a driver raises while connecting or talking to the server
DRIVER_ERRORS: tuple[type[BaseException], ...] = (
    psycopg.Error,
    pymysql.Error,
    pymssql.Error,
    OSError,
    TimeoutError,
)


def _get(setting: Any, key: str) -> Any:
    """Get attribute or dict key from ConnectionSetting, dict, or Pydantic model."""
    if isinstance(setting, dict):
        return setting.get(key)
    return getattr(setting, key, None)


def _resolve_product_type(setting: Any) -> ProductTypeEnum:
    pt = _get(setting, "product_type")
    if pt is None:
        raise ValueError("product_type is required")
    if isinstance(pt, str):
        return ProductTypeEnum(pt)
    return pt


def connect(setting: Any, *, decrypt: bool = True) -> Any:
    """
    Open a connection to the target DB.

    - setting: ConnectionSetting (password Fernet-encrypted, decrypt=True) or a
      dict / schema with a plain password (decrypt=False).
    """
    pt = _resolve_product_type(setting)
    host = _get(setting, "host")
    port = _get(setting, "port") or DEFAULT_PORTS[pt]
    database = _get(setting, "database")
    username = _get(setting, "username")
    password = _get(setting, "password") or ""
    if decrypt:
        password = decrypt_value(password)

    for name, val in [
        ("host", host),
        ("database", database),
        ("username", username),
    ]:
        if val is None:
            raise ValueError(f"connection setting must provide {name}")

    connect_timeout = settings.EXTERNAL_DB_CONNECT_TIMEOUT
    statement_timeout = settings.EXTERNAL_DB_STATEMENT_TIMEOUT or 0

    if pt == ProductTypeEnum.MSSQL:
        return pymssql.connect(
            server=host,
            port=str(port),
            user=username,
            password=password,
            database=database,
            login_timeout=connect_timeout,
            timeout=statement_timeout,
            autocommit=False,
        )
    if pt == ProductTypeEnum.POSTGRES:
        options = None
        if statement_timeout > 0:
            options = f"-c statement_timeout={int(statement_timeout * 1000)}"
        return psycopg.connect(
            host=host,
            port=int(port),
            dbname=database,
            user=username,
            password=password,
            connect_timeout=connect_timeout,
            options=options,
            autocommit=False,
        )
    if pt == ProductTypeEnum.MYSQL:
        return pymysql.connect(
            host=host,
            port=int(port),
            database=database,
            user=username,
            password=password,
            connect_timeout=connect_timeout,
            read_timeout=statement_timeout or None,
            write_timeout=statement_timeout or None,
            autocommit=False,
        )
    raise ValueError(f"Unsupported product_type: {pt}")
