"""
Credential issuance: role lookup → lease → generate → split/render → execute → bind.

Collaborators are passed in explicitly (role store, lease store, connection
provider) so one issuance depends only on its inputs.
"""

import logging
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Protocol

from dbcreds.engines.credentials.errors import RoleNotFoundError
from dbcreds.engines.credentials.executor import execute_in_transaction
from dbcreds.engines.credentials.generator import generate_credentials
from dbcreds.engines.credentials.lease import (
    DEFAULT_LEASE,
    LeaseConfig,
    Secret,
    bind_secret,
    resolve_ttl,
)
from dbcreds.engines.credentials.renderer import render_statement
from dbcreds.engines.credentials.splitter import split_statements

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Role:
    name: str
    sql: str


@dataclass(frozen=True)
class IssuanceRequest:
    role_name: str
    display_name: str = ""


@dataclass(frozen=True)
class ConnectionHandle:
    """A borrowed DB-API connection and the statement that pins its catalog."""

    conn: Any
    catalog_statement: str | None = None


class RoleStore(Protocol):
    def get_role(self, name: str) -> Role | None: ...


class LeaseStore(Protocol):
    def get_lease_config(self) -> LeaseConfig | None: ...


class ConnectionProvider(Protocol):
    def acquire(self) -> AbstractContextManager[ConnectionHandle]:
        """Borrow a connection; it goes back to its owner when the context exits.

        Raises ``DatabaseConnectionError`` when no connection can be obtained.
        """
        ...


def render_role_statements(sql: str, values: dict[str, str]) -> list[str]:
    """Split the template first, then substitute, so values never affect splitting."""
    return [render_statement(stmt, values) for stmt in split_statements(sql)]


class CredentialIssuer:
    """
    issue(request) -> Secret

    Raises RoleNotFoundError (no connection is attempted), GenerationError,
    DatabaseConnectionError, ExecutionError or CommitError.
    """

    def __init__(
        self,
        roles: RoleStore,
        leases: LeaseStore,
        connections: ConnectionProvider,
        *,
        default_lease: timedelta = DEFAULT_LEASE,
    ) -> None:
        self._roles = roles
        self._leases = leases
        self._connections = connections
        self._default_lease = default_lease

    def issue(self, request: IssuanceRequest) -> Secret:
        role = self._roles.get_role(request.role_name)
        if role is None:
            raise RoleNotFoundError(request.role_name)

        ttl = resolve_ttl(self._leases.get_lease_config(), self._default_lease)

        credential = generate_credentials(request.display_name)
        statements = render_role_statements(
            role.sql,
            {"name": credential.username, "password": credential.password},
        )

        with self._connections.acquire() as handle:
            execute_in_transaction(
                handle.conn,
                statements,
                catalog_statement=handle.catalog_statement,
            )

        _log.info(
            "Issued credentials for role %s: ttl=%ss statements=%d",
            role.name,
            int(ttl.total_seconds()),
            len(statements),
        )
        return bind_secret(credential, ttl)
