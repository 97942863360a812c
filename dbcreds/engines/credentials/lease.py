"""Resolve the lease of an issued secret and package the result."""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from dbcreds.engines.credentials.generator import GeneratedCredential

DEFAULT_LEASE = timedelta(hours=1)


@dataclass(frozen=True)
class LeaseConfig:
    lease: timedelta
    lease_max: timedelta | None = None


@dataclass(frozen=True)
class Secret:
    """Issued credentials plus what revocation needs later.

    ``data`` is returned to the caller once; ``internal_data`` holds only the
    username, which is enough to drop the principal when the lease ends.
    """

    data: dict[str, Any] = field(repr=False)
    internal_data: dict[str, Any]
    ttl: timedelta = field(default=DEFAULT_LEASE)


def resolve_ttl(
    lease_config: LeaseConfig | None, default: timedelta = DEFAULT_LEASE
) -> timedelta:
    if lease_config is None:
        return default
    return lease_config.lease


def bind_secret(credential: GeneratedCredential, ttl: timedelta) -> Secret:
    return Secret(
        data={"username": credential.username, "password": credential.password},
        internal_data={"username": credential.username},
        ttl=ttl,
    )
