"""Shared field types for API models.

Amounts travel as decimal strings so no precision is lost to JSON floats.
Numbers are accepted on input and converted to strings; whether they are
valid amounts is decided by the AMM, which rejects them with InvalidInput.
"""

from decimal import Decimal
from typing import Annotated, Any

from pydantic import BeforeValidator, Field


def amount_to_str(value: Any) -> str:
    """Normalize a JSON amount to its string form.

    Raises:
        ValueError: If value is not a string or number
    """
    if isinstance(value, bool):
        raise ValueError("Amount must be a string or number, got bool")
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, str):
        return value
    raise ValueError(f"Amount must be a string or number, got {type(value).__name__}")


# Amount supplied by a client, validated later by the engine
Amount = Annotated[
    str,
    BeforeValidator(amount_to_str),
    Field(description="Token amount as decimal string"),
]

# Amount produced by the engine
DecimalString = Annotated[str, Field(description="Decimal number as string")]


def fmt(value: Decimal) -> str:
    """Render a Decimal without exponent notation."""
    return format(value, "f")
