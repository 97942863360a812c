import base64
import hashlib
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from cryptography.fernet import Fernet

from dbcreds.core.config import settings

ALGORITHM = "HS256"

# ---------------------------------------------------------------------------
# JWT helpers
# ---------------------------------------------------------------------------


def create_access_token(subject: str | Any, expires_delta: timedelta) -> str:
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"exp": expire, "sub": str(subject)}
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and verify a bearer token. Raises ``jwt.InvalidTokenError``."""
    return jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[ALGORITHM],
        options={"verify_exp": True},
    )


# ---------------------------------------------------------------------------
# Symmetric encryption for the stored target-database password
# ---------------------------------------------------------------------------

_fernet: Fernet | None = None


def _get_fernet() -> Fernet:
    """Derive a Fernet key from SECRET_KEY (SHA-256 → 32 bytes → base64)."""
    global _fernet
    if _fernet is None:
        key_bytes = hashlib.sha256(settings.SECRET_KEY.encode()).digest()
        _fernet = Fernet(base64.urlsafe_b64encode(key_bytes))
    return _fernet


def encrypt_value(plain: str) -> str:
    """Encrypt a string value. Returns a Fernet token (starts with 'gAAAAA')."""
    if not plain:
        return plain
    return _get_fernet().encrypt(plain.encode()).decode()


def decrypt_value(encrypted: str) -> str:
    """Decrypt a Fernet-encrypted value.

    Raises ``InvalidToken`` if the value cannot be decrypted.
    """
    if not encrypted:
        return encrypted
    return _get_fernet().decrypt(encrypted.encode()).decode()
