from sqlmodel import Session, SQLModel, create_engine

from dbcreds.core.config import settings

# Table classes must be imported before create_all
from dbcreds import models  # noqa: F401

_connect_args = (
    {"check_same_thread": False}
    if settings.SQLALCHEMY_DATABASE_URI.startswith("sqlite")
    else {}
)

engine = create_engine(
    settings.SQLALCHEMY_DATABASE_URI, connect_args=_connect_args, pool_pre_ping=True
)


def init_db(session: Session) -> None:
    """Create storage tables if they do not exist yet."""
    SQLModel.metadata.create_all(session.get_bind())
