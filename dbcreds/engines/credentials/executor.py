"""
Execute rendered role statements as one transaction on a DB-API connection.

DB-API drivers (pymssql, psycopg, pymysql, sqlite3) open a transaction
implicitly with the first statement, so "begin" is entering
``TransactionScope``. Every exit path other than a successful ``commit()``
rolls back, including cancellation (``KeyboardInterrupt``,
``asyncio.CancelledError``), so a pooled connection is never handed back
with half-applied changes.
"""

import logging
from collections.abc import Sequence
from typing import Any

from dbcreds.engines.credentials.errors import (
    CommitError,
    DatabaseConnectionError,
    ExecutionError,
)
from dbcreds.models import ProductTypeEnum

_log = logging.getLogger(__name__)


def catalog_statement(product_type: ProductTypeEnum, database: str) -> str | None:
    """Statement that pins the session to *database*, or None if the dialect binds it at connect."""
    if product_type == ProductTypeEnum.MSSQL:
        return "USE [%s]" % database.replace("]", "]]")
    if product_type == ProductTypeEnum.MYSQL:
        return "USE `%s`" % database.replace("`", "``")
    return None


class TransactionScope:
    """Context manager: roll back on exit unless ``commit()`` succeeded."""

    def __init__(self, conn: Any) -> None:
        self._conn = conn
        self._committed = False

    def __enter__(self) -> "TransactionScope":
        return self

    def commit(self) -> None:
        try:
            self._conn.commit()
        except Exception as e:
            raise CommitError(f"commit failed: {type(e).__name__}: {e}") from e
        self._committed = True

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if self._committed:
            return
        try:
            self._conn.rollback()
        except Exception:
            # Never mask the error that got us here
            _log.warning("Rollback failed", exc_info=True)


def execute_in_transaction(
    conn: Any,
    statements: Sequence[str],
    *,
    catalog_statement: str | None = None,
) -> None:
    """Run *statements* in order inside one transaction and commit.

    *catalog_statement* (e.g. ``USE [db]``) runs first so the transaction
    does not depend on session state left by a previous borrower.

    Raises ``DatabaseConnectionError`` when the handle cannot open a cursor,
    ``ExecutionError`` on the first failing statement and ``CommitError``
    when the commit fails; all of them leave nothing applied.
    """
    with TransactionScope(conn) as tx:
        try:
            cur = conn.cursor()
        except Exception as e:
            _log.warning("Opening a cursor failed: %s", type(e).__name__)
            raise DatabaseConnectionError(
                f"target database connection is unusable: {type(e).__name__}: {e}"
            ) from e
        try:
            if catalog_statement:
                _execute_one(cur, catalog_statement, 0)
            for position, stmt in enumerate(statements, start=1):
                _execute_one(cur, stmt, position)
        finally:
            try:
                cur.close()
            except Exception:
                pass
        tx.commit()
    _log.debug("Committed %d statement(s)", len(statements))


def _execute_one(cur: Any, stmt: str, position: int) -> None:
    try:
        cur.execute(stmt)
    except Exception as e:
        _log.warning(
            "Statement %d failed: %s", position, type(e).__name__
        )
        raise ExecutionError(position, e) from e
