"""Test helpers module for shared test utilities.

- constants: Token symbols and reference reserves
- factories: Pool factory functions
"""

from tests.helpers.constants import (
    BALANCED_RESERVE,
    BALANCED_TRADE,
    EXECUTION_DELAY,
    FARM_DURATION,
    FARM_START,
    PROPOSAL_THRESHOLD,
    QUORUM,
    RAY,
    SOL,
    SOL_RESERVE,
    USDC,
    USDC_RESERVE,
    VOTING_PERIOD,
)
from tests.helpers.factories import make_pool

__all__ = [
    "BALANCED_RESERVE",
    "BALANCED_TRADE",
    "EXECUTION_DELAY",
    "FARM_DURATION",
    "FARM_START",
    "PROPOSAL_THRESHOLD",
    "QUORUM",
    "RAY",
    "SOL",
    "SOL_RESERVE",
    "USDC",
    "USDC_RESERVE",
    "VOTING_PERIOD",
    "make_pool",
]
