"""Pool record types."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal

from defi_sim.amm.errors import InvalidInput


@dataclass(frozen=True)
class PoolToken:
    """One side of a pool: token symbol and its reserve balance."""

    symbol: str
    reserve: Decimal

    def matches(self, symbol: str) -> bool:
        """Case-insensitive symbol comparison."""
        return self.symbol.upper() == symbol.strip().upper()


@dataclass
class LiquidityPool:
    """A two-token constant-product pool.

    Reserves and ``total_shares`` are bookkeeping state updated by swaps and
    liquidity changes. ``total_liquidity``, ``volume_24h``, ``fees_24h`` and
    ``apy`` are display metrics supplied with the pool (USD and ratios); only
    ``total_liquidity`` is rescaled when LP shares are minted or burned.
    """

    id: str
    name: str
    token_a: PoolToken
    token_b: PoolToken
    # Outstanding LP shares
    total_shares: Decimal = Decimal(0)
    total_liquidity: Decimal = Decimal(0)
    volume_24h: Decimal = Decimal(0)
    fees_24h: Decimal = Decimal(0)
    apy: Decimal = Decimal(0)
    # Bumped on every state change, lets callers detect stale snapshots
    version: int = field(default=0, compare=False)

    @property
    def symbols(self) -> tuple[str, str]:
        return self.token_a.symbol, self.token_b.symbol

    def _side(self, token_in: str) -> bool:
        """True if token_in is token A, False if token B."""
        if self.token_a.matches(token_in):
            return True
        if self.token_b.matches(token_in):
            return False
        raise InvalidInput(f"Token {token_in} not in pool {self.id}")

    def get_reserves(self, token_in: str) -> tuple[Decimal, Decimal]:
        """Get reserves ordered as (reserve_in, reserve_out)."""
        if self._side(token_in):
            return self.token_a.reserve, self.token_b.reserve
        return self.token_b.reserve, self.token_a.reserve

    def get_token_out(self, token_in: str) -> str:
        """Get the output token symbol for a given input token."""
        if self._side(token_in):
            return self.token_b.symbol
        return self.token_a.symbol

    def set_reserves(self, reserve_a: Decimal, reserve_b: Decimal) -> None:
        self.token_a = replace(self.token_a, reserve=reserve_a)
        self.token_b = replace(self.token_b, reserve=reserve_b)
        self.version += 1

    def apply_swap(self, token_in: str, amount_in: Decimal, amount_out: Decimal) -> None:
        """Move a settled trade through the reserves.

        The full input, fee included, stays in the pool.
        """
        if self._side(token_in):
            self.set_reserves(self.token_a.reserve + amount_in, self.token_b.reserve - amount_out)
        else:
            self.set_reserves(self.token_a.reserve - amount_out, self.token_b.reserve + amount_in)

    def snapshot(self) -> LiquidityPool:
        """Copy of the pool safe to hand out while the original keeps changing."""
        return replace(self)


@dataclass(frozen=True)
class LiquidityChange:
    """Result of adding or removing liquidity."""

    pool_id: str
    shares: Decimal
    amount_a: Decimal
    amount_b: Decimal
    total_shares: Decimal
