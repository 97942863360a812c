from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt.exceptions import InvalidTokenError
from sqlmodel import Session

from dbcreds.core.db import engine
from dbcreds.core.pool import PoolManager, get_pool_manager
from dbcreds.core.security import decode_access_token

reusable_bearer = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


SessionDep = Annotated[Session, Depends(get_db)]
PoolDep = Annotated[PoolManager, Depends(get_pool_manager)]


def get_caller_display_name(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(reusable_bearer)
    ],
) -> str:
    """Verify the bearer token; its ``sub`` claim is the caller display name."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = decode_access_token(credentials.credentials)
    except InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Could not validate credentials",
        )
    sub = payload.get("sub")
    if not isinstance(sub, str):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Could not validate credentials",
        )
    return sub


CallerDep = Annotated[str, Depends(get_caller_display_name)]
