"""
Connection and connection pool for the target database.
"""

from .connect import DRIVER_ERRORS, connect
from .health import health_check
from .manager import PoolManager, get_pool_manager

__all__ = [
    "DRIVER_ERRORS",
    "connect",
    "health_check",
    "PoolManager",
    "get_pool_manager",
]
