"""
Service configuration: lease defaults and the target database connection.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import APIRouter, HTTPException

from dbcreds.api.deps import CallerDep, PoolDep, SessionDep
from dbcreds.core.config import settings
from dbcreds.core.duration import format_duration
from dbcreds.core.pool import DRIVER_ERRORS, connect, health_check
from dbcreds.core.security import encrypt_value
from dbcreds.models import SINGLETON_ID, ConnectionSetting, LeaseSetting
from dbcreds.schemas import (
    ConnectionPublic,
    ConnectionWrite,
    LeasePublic,
    LeaseWrite,
)

_log = logging.getLogger(__name__)

router = APIRouter(prefix="/config", tags=["config"])


def _lease_public(lease_seconds: int, lease_max_seconds: int) -> LeasePublic:
    return LeasePublic(
        lease=format_duration(timedelta(seconds=lease_seconds)),
        lease_max=format_duration(timedelta(seconds=lease_max_seconds)),
        lease_seconds=lease_seconds,
        lease_max_seconds=lease_max_seconds,
    )


def _verify_connection(body: ConnectionWrite) -> None:
    """Connect with the plain password from *body* and run SELECT 1."""
    try:
        conn = connect(body, decrypt=False)
    except DRIVER_ERRORS as e:
        raise HTTPException(status_code=400, detail=f"Connection failed: {e}")
    try:
        if not health_check(conn):
            raise HTTPException(
                status_code=400, detail="Connection failed: SELECT 1 did not succeed"
            )
    finally:
        try:
            conn.close()
        except Exception:
            pass


# ---------------------------------------------------------------------------
# Lease
# ---------------------------------------------------------------------------


@router.get("/lease", response_model=LeasePublic)
def read_lease(session: SessionDep, caller: CallerDep) -> Any:  # noqa: ARG001
    """Current lease setting, or the built-in default when none was written."""
    row = session.get(LeaseSetting, SINGLETON_ID)
    if row is None:
        default = settings.DEFAULT_LEASE_SECONDS
        return _lease_public(default, default)
    return _lease_public(row.lease_seconds, row.lease_max_seconds)


@router.post("/lease", response_model=LeasePublic)
def write_lease(
    session: SessionDep,
    caller: CallerDep,  # noqa: ARG001
    body: LeaseWrite,
) -> Any:
    row = session.get(LeaseSetting, SINGLETON_ID)
    if row is None:
        row = LeaseSetting(
            id=SINGLETON_ID,
            lease_seconds=int(body.lease),
            lease_max_seconds=int(body.lease_max),
        )
    else:
        row.lease_seconds = int(body.lease)
        row.lease_max_seconds = int(body.lease_max)
        row.updated_at = datetime.now(timezone.utc)
    session.add(row)
    session.commit()
    session.refresh(row)
    _log.info("Lease set to %ss (max %ss)", row.lease_seconds, row.lease_max_seconds)
    return _lease_public(row.lease_seconds, row.lease_max_seconds)


# ---------------------------------------------------------------------------
# Connection
# ---------------------------------------------------------------------------


@router.get("/connection", response_model=ConnectionPublic)
def read_connection(session: SessionDep, caller: CallerDep) -> Any:  # noqa: ARG001
    row = session.get(ConnectionSetting, SINGLETON_ID)
    if row is None:
        raise HTTPException(status_code=404, detail="Connection is not configured")
    return ConnectionPublic.model_validate(row, from_attributes=True)


@router.post("/connection", response_model=ConnectionPublic)
def write_connection(
    session: SessionDep,
    pool: PoolDep,
    caller: CallerDep,  # noqa: ARG001
    body: ConnectionWrite,
) -> Any:
    """Save the target connection (password encrypted at rest) and reset the pool."""
    if body.verify_connection:
        _verify_connection(body)

    values = body.model_dump(exclude={"verify_connection"})
    values["password"] = encrypt_value(body.password)
    row = session.get(ConnectionSetting, SINGLETON_ID)
    if row is None:
        row = ConnectionSetting(id=SINGLETON_ID, **values)
    else:
        row.sqlmodel_update(values)
        row.updated_at = datetime.now(timezone.utc)
    session.add(row)
    session.commit()
    session.refresh(row)
    pool.dispose()
    _log.info(
        "Connection set to %s at %s:%s/%s",
        row.product_type.value,
        row.host,
        row.port,
        row.database,
    )
    return ConnectionPublic.model_validate(row, from_attributes=True)
