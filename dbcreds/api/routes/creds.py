"""
Issue database credentials for a role: GET /creds/{name}.

Credentials are generated on demand, provisioned by the role's SQL in one
transaction, and returned with the lease after which they may be revoked.
"""

from datetime import timedelta
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from dbcreds.api.deps import CallerDep, PoolDep, SessionDep
from dbcreds.core.config import settings
from dbcreds.core.storage import (
    PooledConnectionProvider,
    SessionLeaseStore,
    SessionRoleStore,
)
from dbcreds.engines.credentials import CredentialIssuer, IssuanceRequest
from dbcreds.schemas import CredsIn, CredsOut

router = APIRouter(prefix="/creds", tags=["creds"])


def build_issuer(session: SessionDep, pool: PoolDep) -> CredentialIssuer:
    return CredentialIssuer(
        roles=SessionRoleStore(session),
        leases=SessionLeaseStore(session),
        connections=PooledConnectionProvider(session, pool),
        default_lease=timedelta(seconds=settings.DEFAULT_LEASE_SECONDS),
    )


@router.get("/{name}", response_model=CredsOut)
def read_creds(
    name: str,
    session: SessionDep,
    pool: PoolDep,
    display_name: CallerDep,
) -> Any:
    """Request database credentials for a certain role."""
    try:
        body = CredsIn(role_name=name, display_name=display_name)
    except ValidationError as e:
        detail = "; ".join(
            f"{err['loc'][-1]}: {err['msg']}" for err in e.errors()
        )
        raise HTTPException(status_code=422, detail=detail)

    issuer = build_issuer(session, pool)
    secret = issuer.issue(
        IssuanceRequest(role_name=body.role_name, display_name=body.display_name)
    )
    return CredsOut(
        data=secret.data,
        internal_data=secret.internal_data,
        lease_duration=int(secret.ttl.total_seconds()),
    )
