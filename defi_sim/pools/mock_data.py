"""Demo pools shown on the dashboard.

Reserves are sized so the implied prices sit near SOL = 104 USDC,
RAY = 0.0125 SOL and ORCA = 1.3 USDC.
"""

from decimal import Decimal

from defi_sim.pools.types import LiquidityPool, PoolToken


def _pool(
    pool_id: str,
    name: str,
    token_a: tuple[str, str],
    token_b: tuple[str, str],
    total_liquidity: str,
    volume_24h: str,
    fees_24h: str,
    apy: str,
) -> LiquidityPool:
    reserve_a = Decimal(token_a[1])
    reserve_b = Decimal(token_b[1])
    return LiquidityPool(
        id=pool_id,
        name=name,
        token_a=PoolToken(symbol=token_a[0], reserve=reserve_a),
        token_b=PoolToken(symbol=token_b[0], reserve=reserve_b),
        total_shares=(reserve_a * reserve_b).sqrt(),
        total_liquidity=Decimal(total_liquidity),
        volume_24h=Decimal(volume_24h),
        fees_24h=Decimal(fees_24h),
        apy=Decimal(apy),
    )


def default_pools() -> list[LiquidityPool]:
    """Fresh copies of the demo pools."""
    return [
        _pool(
            "sol-usdc",
            "SOL/USDC",
            ("SOL", "25000"),
            ("USDC", "2600000"),
            total_liquidity="5200000",
            volume_24h="5200000",
            fees_24h="15600",
            apy="0.125",
        ),
        _pool(
            "ray-sol",
            "RAY/SOL",
            ("RAY", "1520000"),
            ("SOL", "19000"),
            total_liquidity="3950000",
            volume_24h="3800000",
            fees_24h="11400",
            apy="0.145",
        ),
        _pool(
            "orca-usdc",
            "ORCA/USDC",
            ("ORCA", "800000"),
            ("USDC", "1040000"),
            total_liquidity="2080000",
            volume_24h="2100000",
            fees_24h="6300",
            apy="0.115",
        ),
    ]
