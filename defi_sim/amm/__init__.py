"""AMM (Automated Market Maker) pricing."""

from defi_sim.amm.errors import AmmError, InvalidInput
from defi_sim.amm.base import AMM, SwapQuote
from defi_sim.amm.constant_product import (
    ConstantProductAMM,
    constant_product,
    quote_swap,
    validate_fee_rate,
)

__all__ = [
    # Errors
    "AmmError",
    "InvalidInput",
    # Base classes
    "AMM",
    "SwapQuote",
    # Constant product
    "ConstantProductAMM",
    "constant_product",
    "quote_swap",
    "validate_fee_rate",
]
