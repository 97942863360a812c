"""
Credential roles: list, read, write, delete.

A role holds the SQL executed for each issuance. ``{{name}}`` and
``{{password}}`` are replaced with the generated credentials.
"""

import logging
from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import APIRouter, HTTPException, Path
from sqlmodel import select

from dbcreds.api.deps import CallerDep, SessionDep
from dbcreds.engines.credentials import check_role_template, split_statements
from dbcreds.models import CredentialRole, Message
from dbcreds.schemas import (
    ROLE_NAME_PATTERN,
    RoleList,
    RolePublic,
    RoleWrite,
    RoleWriteResult,
)

_log = logging.getLogger(__name__)

router = APIRouter(prefix="/roles", tags=["roles"])

RoleName = Annotated[str, Path(pattern=ROLE_NAME_PATTERN, max_length=255)]


@router.get("", response_model=RoleList)
def list_roles(session: SessionDep, caller: CallerDep) -> Any:  # noqa: ARG001
    """List role names, sorted."""
    names = session.exec(select(CredentialRole.name).order_by(CredentialRole.name)).all()
    return RoleList(keys=list(names))


@router.get("/{name}", response_model=RolePublic)
def read_role(
    session: SessionDep,
    caller: CallerDep,  # noqa: ARG001
    name: RoleName,
) -> Any:
    role = session.get(CredentialRole, name)
    if not role:
        raise HTTPException(status_code=404, detail=f"unknown role: {name}")
    return RolePublic(name=role.name, sql=role.sql)


@router.post("/{name}", response_model=RoleWriteResult)
def write_role(
    session: SessionDep,
    caller: CallerDep,  # noqa: ARG001
    body: RoleWrite,
    name: RoleName,
) -> Any:
    """Create or replace a role. Returns warnings for placeholders that are never filled."""
    if not split_statements(body.sql):
        raise HTTPException(status_code=400, detail="sql contains no statements")

    role = session.get(CredentialRole, name)
    if role is None:
        role = CredentialRole(name=name, sql=body.sql)
    else:
        role.sql = body.sql
        role.updated_at = datetime.now(timezone.utc)
    session.add(role)
    session.commit()
    session.refresh(role)

    warnings = check_role_template(role.sql)
    for w in warnings:
        _log.warning("Role %s: %s", name, w["message"])
    return RoleWriteResult(name=role.name, sql=role.sql, warnings=warnings)


@router.delete("/{name}", response_model=Message)
def delete_role(
    session: SessionDep,
    caller: CallerDep,  # noqa: ARG001
    name: RoleName,
) -> Any:
    """Delete a role. Deleting a missing role is not an error."""
    role = session.get(CredentialRole, name)
    if role is not None:
        session.delete(role)
        session.commit()
    return Message(message="Role deleted successfully")
