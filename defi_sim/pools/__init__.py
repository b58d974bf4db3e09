"""Liquidity pool records and settlement."""

from defi_sim.pools.errors import (
    InsufficientLiquidity,
    PoolError,
    PoolNotFound,
    SlippageExceeded,
)
from defi_sim.pools.manager import LiquidityPoolManager, SwapReceipt
from defi_sim.pools.mock_data import default_pools
from defi_sim.pools.types import LiquidityChange, LiquidityPool, PoolToken

__all__ = [
    # Types
    "LiquidityPool",
    "PoolToken",
    "LiquidityChange",
    "SwapReceipt",
    # Manager
    "LiquidityPoolManager",
    "default_pools",
    # Errors
    "PoolError",
    "PoolNotFound",
    "SlippageExceeded",
    "InsufficientLiquidity",
]
