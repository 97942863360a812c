"""
Credential issuance engine.

Exports: CredentialIssuer, split_statements, render_statement,
generate_credentials, execute_in_transaction, bind_secret.
"""

from dbcreds.engines.credentials.errors import (
    CommitError,
    DatabaseConnectionError,
    ExecutionError,
    GenerationError,
    IssuanceError,
    NotFoundError,
    RoleNotFoundError,
)
from dbcreds.engines.credentials.executor import (
    TransactionScope,
    catalog_statement,
    execute_in_transaction,
)
from dbcreds.engines.credentials.generator import (
    GeneratedCredential,
    generate_credentials,
)
from dbcreds.engines.credentials.issuer import (
    ConnectionHandle,
    CredentialIssuer,
    IssuanceRequest,
    Role,
)
from dbcreds.engines.credentials.lease import (
    DEFAULT_LEASE,
    LeaseConfig,
    Secret,
    bind_secret,
    resolve_ttl,
)
from dbcreds.engines.credentials.renderer import (
    check_role_template,
    find_placeholders,
    render_statement,
)
from dbcreds.engines.credentials.splitter import split_statements

__all__ = [
    "CommitError",
    "ConnectionHandle",
    "CredentialIssuer",
    "DEFAULT_LEASE",
    "DatabaseConnectionError",
    "ExecutionError",
    "GeneratedCredential",
    "GenerationError",
    "IssuanceError",
    "IssuanceRequest",
    "LeaseConfig",
    "NotFoundError",
    "Role",
    "RoleNotFoundError",
    "Secret",
    "TransactionScope",
    "bind_secret",
    "catalog_statement",
    "check_role_template",
    "execute_in_transaction",
    "find_placeholders",
    "generate_credentials",
    "render_statement",
    "resolve_ttl",
    "split_statements",
]
