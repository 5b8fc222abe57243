# erp_client/utils/validators.py
import math

_MISSING_IDS = ("", "undefined", "null", "none")


# ---- Numeric parsing ----

def try_parse_float(x):
    """
    Best-effort parse to float.

    Returns:
        (ok: bool, value: float|None)

    ok == False means parsing failed and value is None.
    """
    if isinstance(x, bool):
        return False, None
    try:
        return True, float(x)
    except (TypeError, ValueError):
        return False, None


def to_number(x, default: float = 0.0) -> float:
    """
    Lenient numeric coercion used when reading backend payloads: anything
    unparseable or non-finite becomes `default`.
    """
    ok, val = try_parse_float(x)
    if not ok or val is None or not math.isfinite(val):
        return default
    return val


def non_negative(x) -> float:
    """to_number() clamped at zero."""
    return max(0.0, to_number(x))


def is_non_negative_number(x) -> bool:
    """
    True iff x parses to a float and value >= 0.
    """
    ok, val = try_parse_float(x)
    return bool(ok and val is not None and val >= 0)


# ---- Identifiers ----

def is_missing_id(value) -> bool:
    """
    True for identifiers that must never reach the network: None, blank,
    or the literal strings "undefined"/"null" that leak from serialized forms.
    """
    if value is None:
        return True
    return str(value).strip().lower() in _MISSING_IDS
