"""Pytest configuration and fixtures."""

import random
from decimal import Decimal
from typing import Any

import pytest

from defi_sim.amm import ConstantProductAMM, SwapQuote
from defi_sim.farming import YieldFarm
from defi_sim.governance import Governance
from defi_sim.pools import LiquidityPoolManager, default_pools
from defi_sim.wallet import MockConnection, MockWallet
from tests.helpers import (
    EXECUTION_DELAY,
    FARM_DURATION,
    FARM_START,
    PROPOSAL_THRESHOLD,
    QUORUM,
    RAY,
    VOTING_PERIOD,
)


@pytest.fixture
def manager() -> LiquidityPoolManager:
    """Pool manager loaded with fresh copies of the demo pools."""
    return LiquidityPoolManager(default_pools())


@pytest.fixture
def farm() -> YieldFarm:
    """Farm emitting 100 reward units per second for FARM_DURATION seconds."""
    return YieldFarm(
        name="SOL-USDC Farm",
        staking_token="SOL-USDC-LP",
        reward_token=RAY,
        reward_rate=100,
        start_time=FARM_START,
        duration=FARM_DURATION,
    )


@pytest.fixture
def governance() -> Governance:
    """Governance with a 3-day vote, 1-day delay and a 100K quorum."""
    return Governance(
        voting_period=VOTING_PERIOD,
        execution_delay=EXECUTION_DELAY,
        proposal_threshold=PROPOSAL_THRESHOLD,
        quorum_threshold=QUORUM,
    )


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def wallet(rng: random.Random) -> MockWallet:
    return MockWallet(MockConnection(rng=rng))


# =============================================================================
# Mock classes for dependency injection
# =============================================================================


class RecordingAMM(ConstantProductAMM):
    """Constant-product AMM that records every quote request.

    Usage:
        amm = RecordingAMM()
        manager = LiquidityPoolManager(pools, amm=amm)
        ...
        assert amm.quote_calls[0]["reserve_in"] == Decimal("25000")
    """

    def __init__(self, fee_rate: Any = Decimal("0.003")) -> None:
        super().__init__(fee_rate)
        self.quote_calls: list[dict] = []  # Track calls for assertions

    def quote_swap(self, amount_in: Any, reserve_in: Any, reserve_out: Any) -> SwapQuote:
        self.quote_calls.append(
            {
                "amount_in": amount_in,
                "reserve_in": reserve_in,
                "reserve_out": reserve_out,
            }
        )
        return super().quote_swap(amount_in, reserve_in, reserve_out)


@pytest.fixture
def recording_amm() -> RecordingAMM:
    return RecordingAMM()
