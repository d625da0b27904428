"""Lenient value parsing and clock helpers shared by transforms and workers.

Form fields and terminal answers arrive as loosely typed strings. The
helpers here coerce them the way the department forms expect: a number
that cannot be read (or reads as zero) falls back to a default, and
"yes"/"true"/"on" all count as an affirmative answer.
"""

import math
import random
import re
import string
import sys
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional, Sequence

_INT_PREFIX = re.compile(r"^\s*[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")

TRUTHY = ("true", "yes", "y", "on", "1")
BASE36 = string.digits + string.ascii_uppercase


def int_or(value: Any, default: Any = 0) -> Any:
    """Leading integer of ``value``, or ``default`` when absent or zero."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, float) and not math.isfinite(value):
        return default
    if isinstance(value, (int, float)):
        parsed = int(value)
    else:
        match = _INT_PREFIX.match(str(value))
        if not match:
            return default
        try:
            parsed = int(match.group(0))
        except ValueError:  # past the int digit limit
            return default
    return parsed or default


def float_or(value: Any, default: Any = 0.0) -> Any:
    """Leading decimal of ``value``, or ``default`` when absent, zero or not finite."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int) and abs(value) > sys.float_info.max:
        return default
    if isinstance(value, (int, float)):
        parsed = float(value)
    else:
        match = _FLOAT_PREFIX.match(str(value))
        if not match:
            return default
        parsed = float(match.group(0))
    if not math.isfinite(parsed):
        return default
    return parsed or default


def to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUTHY


def split_csv(value: Any, lower: bool = False) -> List[str]:
    """Comma-separated string (or list) to a list of trimmed, non-empty items."""
    if isinstance(value, str):
        items = [part.strip() for part in value.split(",")]
    elif isinstance(value, (list, tuple)):
        items = [str(part).strip() for part in value]
    else:
        return []
    items = [item for item in items if item]
    if lower:
        items = [item.lower() for item in items]
    return items


def as_number(value: Any) -> Any:
    """Integral floats become ints so JSON output matches the form input."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def iso(dt: datetime) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2026-01-05T10:00:00.000Z"""
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def epoch_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def days_from(dt: datetime, days: float) -> datetime:
    """``dt`` shifted by ``days``, pinned to the datetime range at either end."""
    try:
        return dt + timedelta(days=days)
    except OverflowError:
        bound = datetime.max if days > 0 else datetime.min
        return bound.replace(tzinfo=dt.tzinfo)


def format_long_date(dt: datetime) -> str:
    """e.g. Monday, January 5, 2026"""
    return f"{dt.strftime('%A')}, {dt.strftime('%B')} {dt.day}, {dt.year}"


def random_code(length: int, alphabet: Sequence[str] = BASE36, rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    return "".join(rng.choice(alphabet) for _ in range(length))


def round_half_up(value: float) -> int:
    """Round halves toward positive infinity (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))
