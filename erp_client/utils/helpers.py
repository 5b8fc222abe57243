# erp_client/utils/helpers.py
from datetime import date, datetime, timezone
import logging
import math
import time
from typing import Any, Optional, Union

from .validators import try_parse_float

NumberLike = Union[float, int, str]

_log = logging.getLogger(__name__)


def today_str() -> str:
    """Return today's date as ISO string (YYYY-MM-DD)."""
    return date.today().isoformat()


def now_iso() -> str:
    """UTC timestamp in ISO-8601 with a trailing Z."""
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"


def fmt_money(
    v: NumberLike,
    places: int = 2,
    *,
    strict: bool = False,
    sentinel: Optional[str] = None,
) -> str:
    """
    Format a number as money with thousands separators and a fixed number of decimals.

    Used for display only; payloads sent to the backend go through floor_money().

    Behavior on parse failure:
      - By default (strict=False, sentinel=None), returns str(v).
      - If `sentinel` is provided (e.g., "N/A"), returns that sentinel instead.
      - If `strict=True`, raises ValueError.
    """
    ok, x = try_parse_float(v)
    if not ok:
        _log.debug("fmt_money: failed to parse %r as float", v)
        if strict:
            raise ValueError(f"Could not parse {v!r} as a number.")
        return str(sentinel) if sentinel is not None else str(v)
    return f"{x:,.{places}f}"


def floor_money(v: Any) -> int:
    """
    Truncate a monetary value to an integer (floor) for persistence.

    Non-numeric and non-finite values become 0.
    """
    ok, x = try_parse_float(v)
    if not ok or x is None or not math.isfinite(x):
        return 0
    return int(math.floor(x))


def temp_key(prefix: str) -> str:
    """Temporary business key for records the backend returned without one."""
    return f"{prefix}-{int(time.time() * 1000)}"


def error_message(err: Any, fallback: str = "Something went wrong") -> str:
    """
    Best-effort human message from an exception or error payload.

    Order: `err.message` attribute, dict "message"/"error", str(err), fallback.
    """
    if err is None:
        return fallback
    msg = getattr(err, "message", None)
    if isinstance(msg, str) and msg.strip():
        return msg
    if isinstance(err, dict):
        for k in ("message", "error"):
            v = err.get(k)
            if isinstance(v, str) and v.strip():
                return v
    text = str(err)
    return text if text.strip() else fallback
