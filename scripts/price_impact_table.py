#!/usr/bin/env python3
"""Print swap quotes for a ladder of trade sizes against one pool.

Usage:
    # Quote the demo pools locally
    python scripts/price_impact_table.py --pool sol-usdc --token SOL

    # Quote through a running API server
    python scripts/price_impact_table.py --pool ray-sol --token RAY \\
        --url http://localhost:8000
"""

import argparse
import logging
import sys
from decimal import Decimal
from pathlib import Path

import httpx
import structlog

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from defi_sim.amm import InvalidInput  # noqa: E402
from defi_sim.log_config import configure_logging  # noqa: E402
from defi_sim.pools import LiquidityPoolManager, PoolNotFound, default_pools  # noqa: E402

logger = structlog.get_logger()

DEFAULT_SIZES = ["1", "10", "100", "1000", "10000"]


def quote_local(pool_id: str, token: str, sizes: list[str]) -> list[dict[str, str]]:
    manager = LiquidityPoolManager(default_pools())
    rows = []
    for size in sizes:
        quote = manager.quote(pool_id, token, size)
        rows.append(
            {
                "amountIn": str(quote.amount_in),
                "outputAmount": str(quote.output_amount),
                "feeAmount": str(quote.fee_amount),
                "priceImpact": str(quote.price_impact),
            }
        )
    return rows


def quote_remote(url: str, pool_id: str, token: str, sizes: list[str]) -> list[dict[str, str]]:
    rows = []
    with httpx.Client(base_url=url, timeout=10.0) as client:
        for size in sizes:
            response = client.post(
                f"/pools/{pool_id}/quote", json={"tokenIn": token, "amountIn": size}
            )
            response.raise_for_status()
            rows.append(response.json())
    return rows


def print_table(rows: list[dict[str, str]]) -> None:
    print(f"{'amount in':>14} {'output':>18} {'fee':>12} {'impact':>9}")
    for row in rows:
        impact = Decimal(row["priceImpact"]) * 100
        print(
            f"{Decimal(row['amountIn']):>14.4f} "
            f"{Decimal(row['outputAmount']):>18.6f} "
            f"{Decimal(row['feeAmount']):>12.6f} "
            f"{impact:>8.3f}%"
        )


def main() -> int:
    parser = argparse.ArgumentParser(description="Print a price impact ladder for a pool")
    parser.add_argument("--pool", default="sol-usdc", help="Pool id (default: sol-usdc)")
    parser.add_argument("--token", default="SOL", help="Symbol of the token sold")
    parser.add_argument(
        "--sizes",
        nargs="+",
        default=DEFAULT_SIZES,
        help="Trade sizes to quote",
    )
    parser.add_argument("--url", default=None, help="Quote through a running API server")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    args = parser.parse_args()

    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        if args.url:
            rows = quote_remote(args.url, args.pool, args.token, args.sizes)
        else:
            rows = quote_local(args.pool, args.token, args.sizes)
    except (InvalidInput, PoolNotFound) as err:
        logger.error("quote_failed", pool=args.pool, error=str(err))
        return 1
    except httpx.HTTPError as err:
        logger.error("server_request_failed", url=args.url, error=str(err))
        return 1

    print_table(rows)
    return 0


if __name__ == "__main__":
    sys.exit(main())
