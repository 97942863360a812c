"""
Duration parsing for lease settings.

Accepts a number of seconds (int or numeric string) or a unit string made of
``<number><unit>`` parts, e.g. ``"1h"``, ``"30m"``, ``"1h30m15s"``.
"""

from __future__ import annotations

import math
import re
from datetime import timedelta
from typing import Any

_UNITS = {"ms": 0.001, "s": 1, "m": 60, "h": 3600, "d": 86400}
_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h|d)")


class DurationError(ValueError):
    """Raised when a value cannot be read as a positive duration."""

    pass


def _seconds_from_string(s: str) -> float:
    try:
        return float(s)
    except ValueError:
        pass
    pos = 0
    total = 0.0
    for m in _PART.finditer(s):
        if m.start() != pos:
            break
        total += float(m.group(1)) * _UNITS[m.group(2)]
        pos = m.end()
    if pos != len(s) or pos == 0:
        raise DurationError(f"Invalid duration: {s!r}")
    return total


def parse_duration(value: Any) -> timedelta:
    """Coerce *value* to a positive ``timedelta``."""
    if value is None:
        raise DurationError("Value is empty")
    if isinstance(value, timedelta):
        seconds = value.total_seconds()
    elif isinstance(value, bool):
        raise DurationError("Boolean not allowed for duration")
    elif isinstance(value, (int, float)):
        seconds = float(value)
    else:
        s = str(value).strip().lower()
        if not s:
            raise DurationError("Value is empty")
        seconds = _seconds_from_string(s)
    if not math.isfinite(seconds):
        raise DurationError(f"Duration must be finite, got: {value!r}")
    if seconds <= 0:
        raise DurationError(f"Duration must be positive, got: {value!r}")
    try:
        return timedelta(seconds=seconds)
    except OverflowError as e:
        raise DurationError(f"Duration too large: {value!r}") from e


def format_duration(td: timedelta) -> str:
    """Render *td* as ``"1h30m0s"`` (whole seconds)."""
    total = int(td.total_seconds())
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{minutes}m{seconds}s"
    return f"{seconds}s"
