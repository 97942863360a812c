"""
Health-check helpers for liveness and readiness probes.

Liveness:  is the process alive and not deadlocked?  (cheap, no I/O)
Readiness: can it serve traffic?  (storage DB reachable)
"""

import logging

from sqlmodel import Session, select

from dbcreds.core.db import engine

logger = logging.getLogger(__name__)


def check_storage() -> bool:
    """Check the storage DB by running SELECT 1. Returns True if ok."""
    try:
        with Session(engine) as session:
            session.exec(select(1)).first()
        return True
    except Exception:
        logger.warning("Storage check failed", exc_info=True)
        return False


def liveness_check() -> tuple[bool, list[str]]:
    """
    Lightweight liveness probe, just confirms the Python process is responsive.
    Return format matches readiness_check for consistency.
    """
    return (True, [])


def readiness_check() -> tuple[bool, list[str]]:
    """
    Returns (ok, list of failure messages). ok is False if any required check fails.
    """
    failures: list[str] = []

    if not check_storage():
        failures.append("storage")

    return (len(failures) == 0, failures)
