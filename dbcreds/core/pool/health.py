"""
Connection health check for the target DB.
"""

from typing import Any


def health_check(conn: Any) -> bool:
    """
    Run SELECT 1 and return True if no exception. All supported products accept SELECT 1.
    """
    cur = None
    try:
        cur = conn.cursor()
        cur.execute("SELECT 1")
        cur.fetchone()
        return True
    except Exception:
        return False
    finally:
        if cur is not None:
            cur.close()
