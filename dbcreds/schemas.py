"""
Pydantic schemas for the HTTP API: roles, lease and connection settings, issued creds.
"""

from typing import Any

from pydantic import Field, field_validator, model_validator
from sqlmodel import SQLModel

from dbcreds.core.duration import DurationError, parse_duration
from dbcreds.models import DEFAULT_PORTS, ProductTypeEnum

# Role names: word characters, dots and dashes, not starting/ending with . or -
ROLE_NAME_PATTERN = r"^\w(([\w.-]+)?\w)?$"

# Caller display names end up inside generated usernames
DISPLAY_NAME_PATTERN = r"^[A-Za-z0-9_.@-]*$"


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------


class RoleWrite(SQLModel):
    """Body for POST /roles/{name}."""

    sql: str = Field(..., min_length=1)


class RolePublic(SQLModel):
    name: str
    sql: str


class RoleWriteResult(RolePublic):
    warnings: list[dict[str, Any]] = Field(default_factory=list)


class RoleList(SQLModel):
    keys: list[str]


# ---------------------------------------------------------------------------
# Lease setting
# ---------------------------------------------------------------------------


class LeaseWrite(SQLModel):
    """Body for POST /config/lease. Durations: seconds or ``1h30m``-style strings."""

    lease: int | str
    lease_max: int | str

    @field_validator("lease", "lease_max")
    @classmethod
    def _to_seconds(cls, v: int | str) -> int:
        try:
            td = parse_duration(v)
        except DurationError as e:
            raise ValueError(str(e)) from e
        seconds = int(td.total_seconds())
        # Stored in whole seconds; a sub-second lease would become 0
        if seconds < 1:
            raise ValueError(f"Duration must be at least 1s, got: {v!r}")
        return seconds

    @model_validator(mode="after")
    def lease_within_max(self) -> "LeaseWrite":
        if int(self.lease) > int(self.lease_max):
            raise ValueError("lease must not exceed lease_max")
        return self


class LeasePublic(SQLModel):
    lease: str
    lease_max: str
    lease_seconds: int
    lease_max_seconds: int


# ---------------------------------------------------------------------------
# Connection setting
# ---------------------------------------------------------------------------


class ConnectionWrite(SQLModel):
    """Body for POST /config/connection."""

    product_type: ProductTypeEnum = ProductTypeEnum.MSSQL
    host: str = Field(..., min_length=1, max_length=255)
    port: int | None = Field(default=None, ge=1, le=65535)
    database: str = Field(default="master", min_length=1, max_length=255)
    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(default="", max_length=512)
    max_open_connections: int = Field(default=2, ge=1, le=100)
    verify_connection: bool = Field(
        default=True,
        description="Run SELECT 1 against the target before saving.",
    )

    @model_validator(mode="after")
    def default_port(self) -> "ConnectionWrite":
        if self.port is None:
            self.port = DEFAULT_PORTS[self.product_type]
        return self


class ConnectionPublic(SQLModel):
    """Connection setting without the password."""

    product_type: ProductTypeEnum
    host: str
    port: int
    database: str
    username: str
    max_open_connections: int


# ---------------------------------------------------------------------------
# Issued credentials
# ---------------------------------------------------------------------------


class CredsIn(SQLModel):
    """Validated issuance input (role from the path, display name from the token)."""

    role_name: str = Field(..., pattern=ROLE_NAME_PATTERN, max_length=255)
    display_name: str = Field(default="", pattern=DISPLAY_NAME_PATTERN)


class CredsOut(SQLModel):
    data: dict[str, str]
    internal_data: dict[str, str]
    lease_duration: int
    renewable: bool = False
