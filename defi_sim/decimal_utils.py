"""Shared high-precision Decimal utilities for pool and swap math.

All amounts are Decimals evaluated in a 78-digit context, enough for
reserves far beyond 10^15 without rounding artifacts.
"""

from __future__ import annotations

import decimal
from decimal import Decimal, InvalidOperation
from typing import Any

from defi_sim.amm.errors import InvalidInput

DECIMAL_HIGH_PREC_CONTEXT = decimal.Context(prec=78)

# Same precision, rounding toward zero. Used where a result must never be
# rounded up (amounts paid out of a pool).
DECIMAL_ROUND_DOWN_CONTEXT = decimal.Context(prec=78, rounding=decimal.ROUND_DOWN)

# Same precision, rounding away from zero (amounts owed to a pool).
DECIMAL_ROUND_UP_CONTEXT = decimal.Context(prec=78, rounding=decimal.ROUND_UP)


def to_decimal(value: Any, name: str = "value") -> Decimal:
    """Convert a numeric input to a finite Decimal.

    Floats go through ``str`` so 0.1 becomes Decimal("0.1") rather than its
    binary expansion.

    Raises:
        InvalidInput: If the value is a bool, not numeric, NaN or infinite
    """
    if isinstance(value, bool):
        raise InvalidInput(f"{name} must be a number, got bool")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as err:
            raise InvalidInput(f"{name} is not a number: {value!r}") from err
    else:
        raise InvalidInput(f"{name} must be a number, got {type(value).__name__}")

    if not result.is_finite():
        raise InvalidInput(f"{name} must be finite, got {value!r}")
    return result


def to_positive_decimal(value: Any, name: str = "value") -> Decimal:
    """Convert to Decimal and require it to be strictly positive.

    Raises:
        InvalidInput: If the value is not a finite number > 0
    """
    result = to_decimal(value, name)
    if result <= 0:
        raise InvalidInput(f"{name} must be positive, got {value!r}")
    return result


def decimal_lt(a: Decimal, b: Decimal) -> bool:
    """Compare a < b with high precision for exactness."""
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return (a - b) < 0


__all__ = [
    "DECIMAL_HIGH_PREC_CONTEXT",
    "DECIMAL_ROUND_DOWN_CONTEXT",
    "DECIMAL_ROUND_UP_CONTEXT",
    "to_decimal",
    "to_positive_decimal",
    "decimal_lt",
]
