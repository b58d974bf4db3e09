"""API endpoints for the dashboard backend."""

from decimal import Decimal
from functools import lru_cache

import structlog
from fastapi import APIRouter, Depends

from defi_sim.amm import ConstantProductAMM, SwapQuote
from defi_sim.config import AmmConfig, load_amm_config
from defi_sim.constants import AIRDROP_AMOUNT_SOL, LAMPORTS_PER_SOL
from defi_sim.decimal_utils import to_decimal
from defi_sim.models import (
    AddLiquidityRequest,
    AirdropRequest,
    AirdropResponse,
    LiquidityResponse,
    PoolQuoteRequest,
    PoolResponse,
    QuoteRequest,
    QuoteResponse,
    RemoveLiquidityRequest,
    SwapRequest,
    SwapResponse,
)
from defi_sim.pools import LiquidityPoolManager, default_pools
from defi_sim.wallet import MockConnection, MockPublicKey

logger = structlog.get_logger()

router = APIRouter()


@lru_cache(maxsize=1)
def get_config() -> AmmConfig:
    """Dependency provider for the AMM configuration."""
    return load_amm_config()


@lru_cache(maxsize=1)
def _default_manager() -> LiquidityPoolManager:
    config = get_config()
    return LiquidityPoolManager(default_pools(), amm=ConstantProductAMM(config.fee_rate))


def get_pool_manager() -> LiquidityPoolManager:
    """Dependency provider for the pool manager.

    Override this in tests to inject a manager with known pools:
        app.dependency_overrides[get_pool_manager] = lambda: manager
    """
    return _default_manager()


@lru_cache(maxsize=1)
def get_connection() -> MockConnection:
    """Dependency provider for the faucet connection."""
    return MockConnection()


@router.get("/pools")
async def list_pools(
    manager: LiquidityPoolManager = Depends(get_pool_manager),
) -> list[PoolResponse]:
    return [PoolResponse.from_pool(pool) for pool in manager.list_pools()]


@router.get("/pools/{pool_id}")
async def get_pool(
    pool_id: str,
    manager: LiquidityPoolManager = Depends(get_pool_manager),
) -> PoolResponse:
    return PoolResponse.from_pool(manager.get_pool(pool_id))


def _slippage(requested: str | None, config: AmmConfig) -> str | Decimal:
    """Requested slippage tolerance, falling back to the configured default."""
    if requested is None:
        return config.default_slippage_percent
    return requested


def _quote_response(
    result: SwapQuote,
    amm: ConstantProductAMM,
    slippage_percent: str | None,
    config: AmmConfig,
) -> QuoteResponse:
    if result.is_high_impact(config.high_price_impact):
        logger.debug(
            "high_price_impact_quote",
            amount_in=str(result.amount_in),
            price_impact=str(result.price_impact),
        )
    return QuoteResponse.from_quote(
        result,
        config.high_price_impact,
        minimum_received=amm.minimum_received(result, _slippage(slippage_percent, config)),
    )


@router.post("/quote")
async def quote(
    request: QuoteRequest,
    config: AmmConfig = Depends(get_config),
) -> QuoteResponse:
    """Quote a swap against caller-supplied reserves.

    Error Handling:
        - Non-positive, non-finite or non-numeric amounts: 400
        - Trades too large to price: 400
        - Invalid request schema: 422 (pydantic)
    """
    fee_rate = request.fee_rate if request.fee_rate is not None else config.fee_rate
    amm = ConstantProductAMM(fee_rate)
    result = amm.quote_swap(request.amount_in, request.reserve_in, request.reserve_out)
    return _quote_response(result, amm, request.slippage_percent, config)


@router.post("/pools/{pool_id}/quote")
async def quote_pool(
    pool_id: str,
    request: PoolQuoteRequest,
    manager: LiquidityPoolManager = Depends(get_pool_manager),
    config: AmmConfig = Depends(get_config),
) -> QuoteResponse:
    result = manager.quote(pool_id, request.token_in, request.amount_in)
    return _quote_response(result, manager.amm, request.slippage_percent, config)


@router.post("/pools/{pool_id}/swap")
async def swap(
    pool_id: str,
    request: SwapRequest,
    manager: LiquidityPoolManager = Depends(get_pool_manager),
    config: AmmConfig = Depends(get_config),
) -> SwapResponse:
    """Settle a swap.

    Error Handling:
        - Unknown pool: 404
        - Invalid amount or token: 400
        - Output below the minimum: 409, pool unchanged
    """
    if request.min_output is not None:
        min_output = to_decimal(request.min_output, "min_output")
    else:
        # Minimum received is fixed from the quote the trader saw
        seen = manager.quote(pool_id, request.token_in, request.amount_in)
        slippage = _slippage(request.slippage_percent, config)
        min_output = manager.amm.minimum_received(seen, slippage)

    receipt = manager.swap(pool_id, request.token_in, request.amount_in, min_output=min_output)
    return SwapResponse.from_receipt(receipt, config.high_price_impact)


@router.post("/pools/{pool_id}/liquidity/add")
async def add_liquidity(
    pool_id: str,
    request: AddLiquidityRequest,
    manager: LiquidityPoolManager = Depends(get_pool_manager),
) -> LiquidityResponse:
    change = manager.add_liquidity(pool_id, request.amount_a, request.amount_b)
    return LiquidityResponse.from_change(change)


@router.post("/pools/{pool_id}/liquidity/remove")
async def remove_liquidity(
    pool_id: str,
    request: RemoveLiquidityRequest,
    manager: LiquidityPoolManager = Depends(get_pool_manager),
) -> LiquidityResponse:
    change = manager.remove_liquidity(pool_id, request.shares)
    return LiquidityResponse.from_change(change)


@router.post("/faucet/airdrop")
async def airdrop(
    request: AirdropRequest,
    connection: MockConnection = Depends(get_connection),
) -> AirdropResponse:
    """Devnet faucet: a fixed mock airdrop per request."""
    lamports = AIRDROP_AMOUNT_SOL * LAMPORTS_PER_SOL
    public_key = MockPublicKey(request.public_key)
    signature = connection.request_airdrop(public_key, lamports)
    connection.confirm_transaction(signature)
    return AirdropResponse(
        public_key=public_key.to_base58(), signature=signature, lamports=lamports
    )
