"""
Storage models: credential roles, lease setting, target connection setting.

LeaseSetting and ConnectionSetting are single-row tables (id is always 1);
the service talks to exactly one target database.
"""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Column, Enum as SQLEnum, Text
from sqlmodel import Field, SQLModel

SINGLETON_ID = 1


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProductTypeEnum(str, Enum):
    """Supported target database products."""

    MSSQL = "mssql"
    POSTGRES = "postgres"
    MYSQL = "mysql"


DEFAULT_PORTS: dict[ProductTypeEnum, int] = {
    ProductTypeEnum.MSSQL: 1433,
    ProductTypeEnum.POSTGRES: 5432,
    ProductTypeEnum.MYSQL: 3306,
}


# ---------------------------------------------------------------------------
# CredentialRole - SQL template run for every issuance
# ---------------------------------------------------------------------------


class CredentialRole(SQLModel, table=True):
    __tablename__ = "credential_role"

    name: str = Field(primary_key=True, max_length=255)
    sql: str = Field(sa_column=Column(Text, nullable=False))
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


# ---------------------------------------------------------------------------
# LeaseSetting - default TTL for issued secrets
# ---------------------------------------------------------------------------


class LeaseSetting(SQLModel, table=True):
    __tablename__ = "lease_setting"

    id: int = Field(default=SINGLETON_ID, primary_key=True)
    lease_seconds: int = Field(gt=0)
    lease_max_seconds: int = Field(gt=0)
    updated_at: datetime = Field(default_factory=_utc_now)


# ---------------------------------------------------------------------------
# ConnectionSetting - target database credentials are created in
# ---------------------------------------------------------------------------


class ConnectionSetting(SQLModel, table=True):
    __tablename__ = "connection_setting"

    id: int = Field(default=SINGLETON_ID, primary_key=True)
    product_type: ProductTypeEnum = Field(
        sa_column=Column(
            SQLEnum(
                ProductTypeEnum,
                name="producttypeenum",
                values_callable=lambda x: [e.value for e in x],
            ),
            nullable=False,
        )
    )
    host: str = Field(max_length=255)
    port: int = Field(default=1433)
    database: str = Field(max_length=255)
    username: str = Field(max_length=255)
    password: str = Field(max_length=512)  # Encrypted via Fernet (core.security)
    max_open_connections: int = Field(default=2)
    updated_at: datetime = Field(default_factory=_utc_now)


class Message(SQLModel):
    message: str
