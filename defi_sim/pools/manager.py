"""In-memory liquidity pool bookkeeping.

LiquidityPoolManager owns the pool records and is the only place reserves
change. Quotes are computed by the stateless AMM; settlement (swap, add and
remove liquidity) holds the pool's lock across read, compute and write so
concurrent trades never price against a stale reserve snapshot.
"""

from __future__ import annotations

import decimal
import threading
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import structlog

from defi_sim.amm import AMM, SwapQuote, constant_product
from defi_sim.decimal_utils import (
    DECIMAL_HIGH_PREC_CONTEXT,
    DECIMAL_ROUND_DOWN_CONTEXT,
    DECIMAL_ROUND_UP_CONTEXT,
    decimal_lt,
    to_decimal,
    to_positive_decimal,
)
from defi_sim.pools.errors import InsufficientLiquidity, PoolNotFound, SlippageExceeded
from defi_sim.pools.types import LiquidityChange, LiquidityPool

logger = structlog.get_logger()


@dataclass(frozen=True)
class SwapReceipt:
    """A settled swap and the reserves it left behind."""

    pool_id: str
    token_in: str
    token_out: str
    quote: SwapQuote
    reserve_in_after: Decimal
    reserve_out_after: Decimal


class LiquidityPoolManager:
    """Registry and settlement layer for constant-product pools.

    Args:
        pools: Initial pools. Ids must be unique.
        amm: Pricing function (default: constant product at the protocol fee)
    """

    def __init__(self, pools: list[LiquidityPool] | None = None, amm: AMM | None = None) -> None:
        self.amm = amm or constant_product
        self._pools: dict[str, LiquidityPool] = {}
        # One lock per pool; settlement on different pools runs in parallel
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

        for pool in pools or []:
            self.add_pool(pool)

    @property
    def pool_count(self) -> int:
        return len(self._pools)

    def add_pool(self, pool: LiquidityPool) -> None:
        """Register a pool.

        Raises:
            ValueError: If a pool with the same id is already registered
        """
        with self._registry_lock:
            if pool.id in self._pools:
                raise ValueError(f"Pool {pool.id} already registered")
            self._pools[pool.id] = pool
            self._locks[pool.id] = threading.Lock()
        logger.debug("pool_registered", pool_id=pool.id, tokens=pool.symbols)

    def _get(self, pool_id: str) -> tuple[LiquidityPool, threading.Lock]:
        try:
            return self._pools[pool_id], self._locks[pool_id]
        except KeyError:
            raise PoolNotFound(pool_id) from None

    def get_pool(self, pool_id: str) -> LiquidityPool:
        """Snapshot of a pool.

        Raises:
            PoolNotFound: If no pool has this id
        """
        pool, lock = self._get(pool_id)
        with lock:
            return pool.snapshot()

    def list_pools(self) -> list[LiquidityPool]:
        """Snapshots of all pools in registration order."""
        return [self.get_pool(pool_id) for pool_id in list(self._pools)]

    # --- Swaps ---

    def quote(self, pool_id: str, token_in: str, amount_in: Any) -> SwapQuote:
        """Quote a swap against the pool's current reserves.

        Raises:
            PoolNotFound: If no pool has this id
            InvalidInput: If the amount is invalid, the token is not in the
                pool or the pool has no reserves
        """
        pool = self.get_pool(pool_id)
        reserve_in, reserve_out = pool.get_reserves(token_in)
        return self.amm.quote_swap(amount_in, reserve_in, reserve_out)

    def swap(
        self,
        pool_id: str,
        token_in: str,
        amount_in: Any,
        min_output: Any | None = None,
    ) -> SwapReceipt:
        """Quote and settle a swap atomically.

        Args:
            pool_id: Pool to trade against
            token_in: Symbol of the token being sold
            amount_in: Amount sold, fee included
            min_output: Reject the trade if it would pay out less than this

        Returns:
            SwapReceipt with the executed quote and post-trade reserves

        Raises:
            PoolNotFound: If no pool has this id
            InvalidInput: If amounts or token are invalid
            SlippageExceeded: If output would fall below min_output
        """
        pool, lock = self._get(pool_id)
        minimum = to_decimal(min_output, "min_output") if min_output is not None else None

        with lock:
            reserve_in, reserve_out = pool.get_reserves(token_in)
            quote = self.amm.quote_swap(amount_in, reserve_in, reserve_out)

            if minimum is not None and decimal_lt(quote.output_amount, minimum):
                logger.info(
                    "swap_rejected_slippage",
                    pool_id=pool_id,
                    output=str(quote.output_amount),
                    min_output=str(minimum),
                )
                raise SlippageExceeded(
                    f"Output {quote.output_amount} below minimum {minimum} in pool {pool_id}"
                )

            with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
                pool.apply_swap(token_in, quote.amount_in, quote.output_amount)
            reserve_in_after, reserve_out_after = pool.get_reserves(token_in)
            token_out = pool.get_token_out(token_in)

        logger.info(
            "swap_settled",
            pool_id=pool_id,
            token_in=token_in,
            token_out=token_out,
            amount_in=str(quote.amount_in),
            amount_out=str(quote.output_amount),
            price_impact=str(quote.price_impact),
        )
        return SwapReceipt(
            pool_id=pool_id,
            token_in=token_in,
            token_out=token_out,
            quote=quote,
            reserve_in_after=reserve_in_after,
            reserve_out_after=reserve_out_after,
        )

    # --- Liquidity ---

    def add_liquidity(self, pool_id: str, amount_a: Any, amount_b: Any) -> LiquidityChange:
        """Deposit both tokens and mint LP shares.

        The first deposit into an empty pool (no reserves, no shares) sets the
        price and mints sqrt(amount_a * amount_b) shares. Later deposits mint
        shares in proportion to the smaller of the two deposit ratios and only
        take the matching amounts; any excess on the other side is left with
        the caller. A pool seeded with reserves but no recorded shares is
        priced against an implied supply of sqrt(reserve_a * reserve_b).

        Raises:
            PoolNotFound: If no pool has this id
            InvalidInput: If either amount is not a finite number > 0
            InsufficientLiquidity: If exactly one side of the pool is empty
        """
        pool, lock = self._get(pool_id)
        deposit_a = to_positive_decimal(amount_a, "amount_a")
        deposit_b = to_positive_decimal(amount_b, "amount_b")

        with lock:
            reserve_a, reserve_b = pool.token_a.reserve, pool.token_b.reserve

            if reserve_a == 0 and reserve_b == 0 and pool.total_shares == 0:
                with decimal.localcontext(DECIMAL_ROUND_DOWN_CONTEXT):
                    shares = (deposit_a * deposit_b).sqrt()
                used_a, used_b = deposit_a, deposit_b
                new_total = shares
            elif reserve_a == 0 or reserve_b == 0:
                raise InsufficientLiquidity(
                    f"Pool {pool_id} has an empty reserve, deposits cannot be priced"
                )
            else:
                supply = pool.total_shares
                if supply == 0:
                    with decimal.localcontext(DECIMAL_ROUND_UP_CONTEXT):
                        supply = (reserve_a * reserve_b).sqrt()
                with decimal.localcontext(DECIMAL_ROUND_DOWN_CONTEXT):
                    ratio = min(deposit_a / reserve_a, deposit_b / reserve_b)
                    shares = ratio * supply
                with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
                    used_a = min(reserve_a * ratio, deposit_a)
                    used_b = min(reserve_b * ratio, deposit_b)
                    new_total = supply + shares
                    pool.total_liquidity = pool.total_liquidity * new_total / supply

            with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
                pool.set_reserves(reserve_a + used_a, reserve_b + used_b)
            pool.total_shares = new_total

        logger.info(
            "liquidity_added",
            pool_id=pool_id,
            shares=str(shares),
            amount_a=str(used_a),
            amount_b=str(used_b),
        )
        return LiquidityChange(
            pool_id=pool_id,
            shares=shares,
            amount_a=used_a,
            amount_b=used_b,
            total_shares=new_total,
        )

    def remove_liquidity(self, pool_id: str, shares: Any) -> LiquidityChange:
        """Burn LP shares and withdraw the pro-rata reserves.

        Raises:
            PoolNotFound: If no pool has this id
            InvalidInput: If shares is not a finite number > 0
            InsufficientLiquidity: If shares exceed the outstanding supply
        """
        pool, lock = self._get(pool_id)
        burned = to_positive_decimal(shares, "shares")

        with lock:
            if burned > pool.total_shares:
                raise InsufficientLiquidity(
                    f"Cannot burn {burned} shares, pool {pool_id} has {pool.total_shares}"
                )
            reserve_a, reserve_b = pool.token_a.reserve, pool.token_b.reserve

            if burned == pool.total_shares:
                amount_out_a, amount_out_b = reserve_a, reserve_b
                pool.total_liquidity = Decimal(0)
            else:
                with decimal.localcontext(DECIMAL_ROUND_DOWN_CONTEXT):
                    amount_out_a = reserve_a * burned / pool.total_shares
                    amount_out_b = reserve_b * burned / pool.total_shares
                with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
                    remaining = pool.total_shares - burned
                    pool.total_liquidity = pool.total_liquidity * remaining / pool.total_shares

            with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
                pool.set_reserves(reserve_a - amount_out_a, reserve_b - amount_out_b)
                pool.total_shares = pool.total_shares - burned
            new_total = pool.total_shares

        logger.info(
            "liquidity_removed",
            pool_id=pool_id,
            shares=str(burned),
            amount_a=str(amount_out_a),
            amount_b=str(amount_out_b),
        )
        return LiquidityChange(
            pool_id=pool_id,
            shares=burned,
            amount_a=amount_out_a,
            amount_b=amount_out_b,
            total_shares=new_total,
        )


__all__ = ["LiquidityPoolManager", "SwapReceipt"]
