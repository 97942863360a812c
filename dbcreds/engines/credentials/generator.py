"""
Username/password generation for one issuance.

Both values are inserted into SQL as raw text, so they are restricted to an
alphabet that is valid inside identifiers and string literals of every
supported dialect.
"""

import os
import re
import uuid
from dataclasses import dataclass

from dbcreds.engines.credentials.errors import GenerationError

DISPLAY_NAME_MAX_LEN = 10

_SAFE_VALUE = re.compile(r"[A-Za-z0-9_.@-]*")


@dataclass(frozen=True)
class GeneratedCredential:
    username: str
    password: str

    def __repr__(self) -> str:
        return f"GeneratedCredential(username={self.username!r}, password='***')"


def _random_token() -> str:
    """Canonical 36-char UUID (version 4) built from the OS CSPRNG."""
    try:
        raw = os.urandom(16)
    except (NotImplementedError, OSError) as e:
        raise GenerationError(f"random source unavailable: {e}") from e
    return str(uuid.UUID(bytes=raw, version=4))


def _check_safe(kind: str, value: str) -> None:
    if not _SAFE_VALUE.fullmatch(value):
        raise GenerationError(f"generated {kind} contains characters unsafe for SQL")


def generate_credentials(display_name: str = "") -> GeneratedCredential:
    """Return a fresh ``<hint>-<uuid>`` username and an independent uuid password.

    *display_name* is truncated to ``DISPLAY_NAME_MAX_LEN`` characters.
    """
    hint = (display_name or "")[:DISPLAY_NAME_MAX_LEN]
    username = f"{hint}-{_random_token()}"
    password = _random_token()
    _check_safe("username", username)
    _check_safe("password", password)
    return GeneratedCredential(username=username, password=password)
