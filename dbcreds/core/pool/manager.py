"""
Connection pool for the target database.

Reuses connections between issuances. Idle connections are rolled back on
checkout and on release, so no transaction or uncommitted change crosses
from one borrower to the next. Includes health-check on checkout, max-age
eviction, and thread-safe singleton initialisation.
"""

import logging
import threading
import time
from collections.abc import Hashable
from typing import Any, NamedTuple

from dbcreds.core.config import settings
from dbcreds.models import ConnectionSetting

from .connect import connect

_log = logging.getLogger(__name__)

_PING_IDLE_THRESHOLD = 30.0  # only ping connections idle longer than this (seconds)


class _PoolEntry(NamedTuple):
    conn: Any
    opened_at: float  # time.monotonic() when connect() returned it
    last_used: float  # time.monotonic() when last returned to pool


def pool_key(setting: ConnectionSetting) -> Hashable:
    """Pool identity: a rewritten setting gets a fresh pool."""
    return (setting.id, setting.updated_at)


class PoolManager:
    """Per-setting connection pool with health-check and max-age."""

    def __init__(self) -> None:
        self._pools: dict[Hashable, list[_PoolEntry]] = {}
        # id(conn) -> opened_at, for every connection this manager opened
        self._opened: dict[int, float] = {}
        self._lock = threading.Lock()
        self._max_age: float = float(settings.EXTERNAL_DB_POOL_MAX_AGE_SEC)

    def get_connection(self, setting: ConnectionSetting) -> Any:
        """Get a healthy connection for *setting* (from pool or freshly opened)."""
        key = pool_key(setting)
        now = time.monotonic()
        while True:
            entry = self._pop(key)
            if entry is None:
                break
            if self._is_expired(entry.opened_at, now):
                self._close_quiet(entry.conn)
                continue
            idle_sec = now - entry.last_used
            if idle_sec > _PING_IDLE_THRESHOLD and not self._is_alive(entry.conn):
                self._close_quiet(entry.conn)
                continue
            try:
                entry.conn.rollback()
            except Exception:
                self._close_quiet(entry.conn)
                continue
            return entry.conn

        conn = connect(setting)
        with self._lock:
            self._opened[id(conn)] = time.monotonic()
        return conn

    def release(self, conn: Any, setting: ConnectionSetting) -> None:
        """Return a connection to the pool, or close it if expired or the pool is full."""
        try:
            conn.rollback()
        except Exception:
            self._close_quiet(conn)
            return

        now = time.monotonic()
        pool_size = setting.max_open_connections or settings.EXTERNAL_DB_POOL_SIZE
        with self._lock:
            opened_at = self._opened.setdefault(id(conn), now)
            if not self._is_expired(opened_at, now):
                pool = self._pools.setdefault(pool_key(setting), [])
                if len(pool) < pool_size:
                    pool.append(_PoolEntry(conn=conn, opened_at=opened_at, last_used=now))
                    return

        self._close_quiet(conn)

    def dispose(self) -> None:
        """Close all pooled connections."""
        with self._lock:
            entries = [e for pool in self._pools.values() for e in pool]
            self._pools.clear()
        for e in entries:
            self._close_quiet(e.conn)
        if entries:
            _log.info("Disposed %d pooled connection(s)", len(entries))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _pop(self, key: Hashable) -> _PoolEntry | None:
        with self._lock:
            pool = self._pools.get(key)
            if pool:
                return pool.pop()
        return None

    def _is_expired(self, opened_at: float, now: float) -> bool:
        return (now - opened_at) > self._max_age

    @staticmethod
    def _is_alive(conn: Any) -> bool:
        """Lightweight ping: attempt a no-op query to detect broken connections."""
        try:
            cur = conn.cursor()
            cur.execute("SELECT 1")
            cur.close()
            return True
        except Exception:
            return False

    def _close_quiet(self, conn: Any) -> None:
        with self._lock:
            self._opened.pop(id(conn), None)
        try:
            conn.close()
        except Exception:
            _log.debug("Closing pooled connection failed", exc_info=True)


_pool_manager: PoolManager | None = None
_pool_lock = threading.Lock()


def get_pool_manager() -> PoolManager:
    """Return the singleton PoolManager (thread-safe double-checked locking)."""
    global _pool_manager
    if _pool_manager is None:
        with _pool_lock:
            if _pool_manager is None:
                _pool_manager = PoolManager()
    return _pool_manager
