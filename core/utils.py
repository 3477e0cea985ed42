# core/utils.py
"""
Utility functions shared by records, storage and services.
"""
import logging
import time
import uuid
from datetime import datetime, timezone
from decimal import Decimal, Inexact, InvalidOperation, localcontext
from typing import Any, Dict, Iterable, Union

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# IDENTIFIERS
# ═══════════════════════════════════════════════════════════════════════════

def generate_user_id() -> str:
    """Fresh user id, e.g. 'u_3f9a1c0b2d'."""
    return f"u_{uuid.uuid4().hex[:10]}"


def generate_transaction_id() -> str:
    """Fresh transaction id: millisecond timestamp plus random suffix."""
    return f"tx_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


# ═══════════════════════════════════════════════════════════════════════════
# DECIMALS
# ═══════════════════════════════════════════════════════════════════════════

def to_decimal(value: Union[Decimal, int, float, str]) -> Decimal:
    """
    Convert a numeric value to a finite Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1"), not its binary
    expansion.

    Raises:
        TypeError: For bool, None and non-numeric types
        ValueError: For unparsable strings, NaN and infinities
    """
    if isinstance(value, bool) or value is None:
        raise TypeError(f"Not a number: {value!r}")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"Not a number: {value!r}")
    else:
        raise TypeError(f"Not a number: {value!r}")

    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def format_decimal(value: Decimal) -> str:
    return str(value)


def exact_add(a: Decimal, b: Decimal) -> Decimal:
    """
    Sum of two Decimals without rounding, however many digits they carry.

    Raises:
        decimal.Inexact: Never for finite operands; rounding is trapped
    """
    span = max(a.adjusted(), b.adjusted()) - min(a.as_tuple().exponent, b.as_tuple().exponent) + 2
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, span)
        ctx.traps[Inexact] = True
        return a + b


def exact_percentage(amount: Decimal, rate: Decimal) -> Decimal:
    """amount * rate / 100 without rounding."""
    digits = len(amount.as_tuple().digits) + len(rate.as_tuple().digits)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, digits + 1)
        ctx.traps[Inexact] = True
        return amount * rate / Decimal(100)


# ═══════════════════════════════════════════════════════════════════════════
# TIMESTAMPS
# ═══════════════════════════════════════════════════════════════════════════

def format_datetime(value: datetime) -> str:
    return value.isoformat()


def parse_datetime(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp; naive values are taken as UTC.

    Raises:
        TypeError: If value is not a string
        ValueError: If value is not ISO-8601
    """
    if not isinstance(value, str):
        raise TypeError(f"Timestamp must be a string, got {type(value).__name__}")
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ═══════════════════════════════════════════════════════════════════════════
# RECORD SHAPE
# ═══════════════════════════════════════════════════════════════════════════

def check_fields(
        kind: str,
        data: Any,
        required: Iterable[str],
        optional: Iterable[str] = ()
) -> Dict[str, Any]:
    """
    Verify that a decoded record has exactly the expected keys.

    Args:
        kind: Record name for error messages
        data: Decoded JSON value
        required: Keys that must be present
        optional: Keys that may be present

    Returns:
        The same dict, for chaining

    Raises:
        ValueError: If data is not a dict, misses a required key or has an unknown one
    """
    if not isinstance(data, dict):
        raise ValueError(f"{kind} must be an object, got {type(data).__name__}")

    required = set(required)
    allowed = required | set(optional)

    missing = required - data.keys()
    if missing:
        raise ValueError(f"{kind} is missing fields: {', '.join(sorted(missing))}")

    unknown = data.keys() - allowed
    if unknown:
        raise ValueError(f"{kind} has unknown fields: {', '.join(sorted(unknown))}")

    return data


def require_str(kind: str, name: str, value: Any, nullable: bool = False) -> Any:
    """Type-check a string field of a decoded record."""
    if value is None and nullable:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{kind}.{name} must be a string, got {type(value).__name__}")
    return value


def require_bool(kind: str, name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{kind}.{name} must be a boolean, got {type(value).__name__}")
    return value
