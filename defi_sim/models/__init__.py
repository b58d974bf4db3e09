"""Pydantic models for the dashboard API."""

from defi_sim.models.schemas import (
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
from defi_sim.models.types import Amount, DecimalString

__all__ = [
    # Types
    "Amount",
    "DecimalString",
    # Requests
    "QuoteRequest",
    "PoolQuoteRequest",
    "SwapRequest",
    "AddLiquidityRequest",
    "RemoveLiquidityRequest",
    "AirdropRequest",
    # Responses
    "QuoteResponse",
    "SwapResponse",
    "PoolResponse",
    "LiquidityResponse",
    "AirdropResponse",
]
