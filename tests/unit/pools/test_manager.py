"""Tests for LiquidityPoolManager bookkeeping and settlement."""

import decimal
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from defi_sim.amm import InvalidInput
from defi_sim.decimal_utils import DECIMAL_HIGH_PREC_CONTEXT
from defi_sim.pools import (
    InsufficientLiquidity,
    LiquidityPoolManager,
    PoolNotFound,
    SlippageExceeded,
)
from tests.helpers import SOL, SOL_RESERVE, USDC, USDC_RESERVE, make_pool


class TestRegistry:
    """Tests for pool registration and lookup."""

    def test_default_pools_loaded(self, manager):
        assert manager.pool_count == 3
        assert [p.id for p in manager.list_pools()] == ["sol-usdc", "ray-sol", "orca-usdc"]

    def test_get_pool_unknown(self, manager):
        with pytest.raises(PoolNotFound) as exc_info:
            manager.get_pool("btc-eth")
        assert exc_info.value.pool_id == "btc-eth"

    def test_duplicate_pool_rejected(self):
        manager = LiquidityPoolManager([make_pool(pool_id="p")])
        with pytest.raises(ValueError):
            manager.add_pool(make_pool(pool_id="p"))

    def test_get_pool_returns_snapshot(self, manager):
        """Mutating a returned pool does not touch the manager's state."""
        snapshot = manager.get_pool("sol-usdc")
        snapshot.set_reserves(Decimal(1), Decimal(1))

        assert manager.get_pool("sol-usdc").token_a.reserve == SOL_RESERVE


class TestQuote:
    """Tests for quoting against registered pools."""

    def test_orientation_by_symbol(self, recording_amm):
        manager = LiquidityPoolManager([make_pool(pool_id="p")], amm=recording_amm)

        manager.quote("p", SOL, 10)
        manager.quote("p", USDC, 10)

        assert recording_amm.quote_calls[0]["reserve_in"] == SOL_RESERVE
        assert recording_amm.quote_calls[0]["reserve_out"] == USDC_RESERVE
        assert recording_amm.quote_calls[1]["reserve_in"] == USDC_RESERVE
        assert recording_amm.quote_calls[1]["reserve_out"] == SOL_RESERVE

    def test_symbol_case_insensitive(self, manager):
        assert manager.quote("sol-usdc", "sol", 1) == manager.quote("sol-usdc", "SOL", 1)

    def test_unknown_token(self, manager):
        with pytest.raises(InvalidInput):
            manager.quote("sol-usdc", "BTC", 1)

    def test_quote_does_not_settle(self, manager):
        before = manager.get_pool("sol-usdc")
        manager.quote("sol-usdc", SOL, 100)
        assert manager.get_pool("sol-usdc") == before

    def test_empty_pool_rejected(self):
        manager = LiquidityPoolManager([make_pool("0", "0", total_shares=0, pool_id="empty")])
        with pytest.raises(InvalidInput):
            manager.quote("empty", SOL, 1)


class TestSwap:
    """Tests for swap settlement."""

    def test_reserves_updated(self, manager):
        quote = manager.quote("sol-usdc", SOL, 100)
        receipt = manager.swap("sol-usdc", SOL, 100)
        pool = manager.get_pool("sol-usdc")

        assert receipt.quote == quote
        assert receipt.token_out == USDC
        assert pool.token_a.reserve == SOL_RESERVE + 100
        assert pool.token_b.reserve == receipt.reserve_out_after
        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            assert pool.token_b.reserve == USDC_RESERVE - quote.output_amount

    def test_swap_reverse_direction(self, manager):
        receipt = manager.swap("sol-usdc", USDC, 10_400)
        pool = manager.get_pool("sol-usdc")

        assert receipt.token_out == SOL
        assert pool.token_b.reserve == USDC_RESERVE + 10_400
        assert pool.token_a.reserve < SOL_RESERVE

    def test_invariant_grows_with_fees(self, manager):
        """The fee stays in the pool, so k never decreases."""
        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            k_before = SOL_RESERVE * USDC_RESERVE
            manager.swap("sol-usdc", SOL, 500)
            pool = manager.get_pool("sol-usdc")
            assert pool.token_a.reserve * pool.token_b.reserve > k_before

    def test_swap_back_loses_value(self, manager):
        """A trade followed by its inverse returns less than the original input."""
        forward = manager.swap("sol-usdc", SOL, 250)
        back = manager.swap("sol-usdc", USDC, forward.quote.output_amount)

        assert back.quote.output_amount < 250

    def test_min_output_met(self, manager):
        quote = manager.quote("sol-usdc", SOL, 100)
        receipt = manager.swap("sol-usdc", SOL, 100, min_output=quote.output_amount)
        assert receipt.quote.output_amount == quote.output_amount

    def test_slippage_exceeded_leaves_pool_untouched(self, manager):
        before = manager.get_pool("sol-usdc")
        quote = manager.quote("sol-usdc", SOL, 100)

        with pytest.raises(SlippageExceeded):
            manager.swap("sol-usdc", SOL, 100, min_output=quote.output_amount + 1)

        assert manager.get_pool("sol-usdc") == before

    def test_invalid_amount_leaves_pool_untouched(self, manager):
        before = manager.get_pool("sol-usdc")
        with pytest.raises(InvalidInput):
            manager.swap("sol-usdc", SOL, -5)
        assert manager.get_pool("sol-usdc") == before

    def test_unknown_pool(self, manager):
        with pytest.raises(PoolNotFound):
            manager.swap("nope", SOL, 1)

    def test_version_bumped(self, manager):
        version = manager.get_pool("sol-usdc").version
        manager.swap("sol-usdc", SOL, 1)
        assert manager.get_pool("sol-usdc").version == version + 1

    def test_concurrent_swaps_are_serialized(self, manager):
        """Every settled trade is reflected exactly once in the reserves."""

        def trade(i: int):
            token_in = SOL if i % 2 == 0 else USDC
            amount = 3 if token_in == SOL else 300
            return manager.swap("sol-usdc", token_in, amount)

        with ThreadPoolExecutor(max_workers=8) as executor:
            receipts = list(executor.map(trade, range(200)))

        pool = manager.get_pool("sol-usdc")
        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            sol_delta = sum(
                (r.quote.amount_in if r.token_in == SOL else -r.quote.output_amount)
                for r in receipts
            )
            usdc_delta = sum(
                (r.quote.amount_in if r.token_in == USDC else -r.quote.output_amount)
                for r in receipts
            )
            # Exact up to the last of 78 digits
            assert abs(pool.token_a.reserve - (SOL_RESERVE + sol_delta)) < Decimal("1e-60")
            assert abs(pool.token_b.reserve - (USDC_RESERVE + usdc_delta)) < Decimal("1e-60")


class TestLiquidity:
    """Tests for adding and removing liquidity."""

    def test_proportional_deposit(self, manager):
        pool = manager.get_pool("sol-usdc")
        change = manager.add_liquidity("sol-usdc", 250, 26_000)
        after = manager.get_pool("sol-usdc")

        assert change.shares == pool.total_shares * Decimal("0.01")
        assert change.amount_a == 250
        assert change.amount_b == 26_000
        assert after.token_a.reserve == SOL_RESERVE + 250
        assert after.token_b.reserve == USDC_RESERVE + 26_000
        assert after.total_shares == change.total_shares
        assert after.total_liquidity == Decimal("5252000")

    def test_excess_side_not_taken(self, manager):
        """Only the amounts matching the pool ratio are deposited."""
        change = manager.add_liquidity("sol-usdc", 250, 50_000)

        assert change.amount_a == 250
        assert change.amount_b == 26_000
        assert manager.get_pool("sol-usdc").token_b.reserve == USDC_RESERVE + 26_000

    def test_first_deposit_sets_price(self):
        manager = LiquidityPoolManager([make_pool("0", "0", total_shares=0, pool_id="new")])

        change = manager.add_liquidity("new", 100, 400)
        pool = manager.get_pool("new")

        assert change.shares == 200
        assert pool.total_shares == 200
        assert pool.get_reserves(SOL) == (Decimal(100), Decimal(400))

    def test_seeded_pool_without_shares_mints_pro_rata(self):
        """Reserves with no recorded shares count as an implied supply."""
        manager = LiquidityPoolManager(
            [make_pool("1000", "1000", symbol_a="A", symbol_b="B", total_shares=0, pool_id="p")]
        )

        change = manager.add_liquidity("p", 1, 1)
        back = manager.remove_liquidity("p", change.shares)

        assert change.shares == 1
        assert change.total_shares == 1001
        assert (back.amount_a, back.amount_b) == (Decimal(1), Decimal(1))
        assert manager.get_pool("p").get_reserves("A") == (Decimal(1000), Decimal(1000))

    @pytest.mark.parametrize(
        "reserve_a,reserve_b,total_shares",
        [("100", "0", 10), ("0", "100", 10), ("0", "0", 5)],
    )
    def test_deposit_into_one_sided_pool_rejected(self, reserve_a, reserve_b, total_shares):
        manager = LiquidityPoolManager(
            [make_pool(reserve_a, reserve_b, total_shares=total_shares, pool_id="p")]
        )

        with pytest.raises(InsufficientLiquidity):
            manager.add_liquidity("p", 10, 10)

        pool = manager.get_pool("p")
        assert pool.total_shares == total_shares
        assert pool.version == 0

    def test_partial_withdrawal(self):
        manager = LiquidityPoolManager(
            [make_pool("100", "400", total_shares=1000, total_liquidity="800", pool_id="p")]
        )

        change = manager.remove_liquidity("p", 250)
        pool = manager.get_pool("p")

        assert (change.amount_a, change.amount_b) == (Decimal(25), Decimal(100))
        assert pool.get_reserves(SOL) == (Decimal(75), Decimal(300))
        assert pool.total_shares == 750
        assert pool.total_liquidity == 600

    def test_full_withdrawal_empties_pool(self):
        manager = LiquidityPoolManager([make_pool("100", "400", total_shares=1000, pool_id="p")])

        change = manager.remove_liquidity("p", 1000)

        assert (change.amount_a, change.amount_b) == (Decimal(100), Decimal(400))
        assert change.total_shares == 0
        with pytest.raises(InvalidInput):
            manager.quote("p", SOL, 1)

    def test_withdraw_more_than_supply(self):
        manager = LiquidityPoolManager([make_pool("100", "400", total_shares=1000, pool_id="p")])
        with pytest.raises(InsufficientLiquidity):
            manager.remove_liquidity("p", 1001)

    @pytest.mark.parametrize("amount_a,amount_b", [(0, 10), (10, 0), (-1, 10), ("nan", 10)])
    def test_invalid_deposit(self, manager, amount_a, amount_b):
        with pytest.raises(InvalidInput):
            manager.add_liquidity("sol-usdc", amount_a, amount_b)

    def test_deposit_then_withdraw_round_trip(self, manager):
        """Withdrawing freshly minted shares returns no more than was deposited."""
        change = manager.add_liquidity("sol-usdc", 10, 1040)
        back = manager.remove_liquidity("sol-usdc", change.shares)

        assert back.amount_a <= change.amount_a
        assert back.amount_b <= change.amount_b
