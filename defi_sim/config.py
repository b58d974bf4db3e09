"""Configuration for the simulator."""

import os
from dataclasses import dataclass
from decimal import Decimal

from defi_sim.amm.constant_product import validate_fee_rate
from defi_sim.constants import DEFAULT_FEE_RATE, DEFAULT_SLIPPAGE_PERCENT, HIGH_PRICE_IMPACT


@dataclass(frozen=True)
class AmmConfig:
    """Centralized configuration for swap pricing.

    Attributes:
        fee_rate: Trading fee taken from every swap input (default: 0.3%)
        high_price_impact: Impact above which quotes are flagged (default: 5%)
        default_slippage_percent: Slippage tolerance used when a swap request
            does not name one (default: 0.5%)
    """

    fee_rate: Decimal = DEFAULT_FEE_RATE
    high_price_impact: Decimal = HIGH_PRICE_IMPACT
    default_slippage_percent: Decimal = DEFAULT_SLIPPAGE_PERCENT


def load_amm_config() -> AmmConfig:
    """Build an AmmConfig, honouring DEFI_SIM_FEE_RATE if set.

    Raises:
        InvalidInput: If DEFI_SIM_FEE_RATE is not a rate in [0, 1)
    """
    raw_fee_rate = os.environ.get("DEFI_SIM_FEE_RATE")
    if raw_fee_rate is None:
        return DEFAULT_AMM_CONFIG
    return AmmConfig(fee_rate=validate_fee_rate(raw_fee_rate))


# Default configuration instance
DEFAULT_AMM_CONFIG = AmmConfig()
