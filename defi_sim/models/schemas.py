"""Pydantic request/response models for the dashboard API.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from defi_sim.amm import SwapQuote
from defi_sim.models.types import Amount, DecimalString, fmt
from defi_sim.pools import LiquidityChange, LiquidityPool, PoolToken, SwapReceipt


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Requests ---


class QuoteRequest(ApiModel):
    """Quote against explicit reserves."""

    amount_in: Amount
    reserve_in: Amount
    reserve_out: Amount
    fee_rate: Amount | None = Field(
        default=None, description="Override the protocol fee rate, in [0, 1)"
    )
    slippage_percent: Amount | None = None


class PoolQuoteRequest(ApiModel):
    """Quote against a registered pool."""

    token_in: str = Field(description="Symbol of the token being sold")
    amount_in: Amount
    slippage_percent: Amount | None = None


class SwapRequest(ApiModel):
    """Settle a swap against a registered pool.

    ``min_output`` wins over ``slippage_percent``; with neither, the
    configured default slippage applies.
    """

    token_in: str
    amount_in: Amount
    min_output: Amount | None = None
    slippage_percent: Amount | None = None


class AddLiquidityRequest(ApiModel):
    amount_a: Amount
    amount_b: Amount


class RemoveLiquidityRequest(ApiModel):
    shares: Amount


class AirdropRequest(ApiModel):
    public_key: str = Field(min_length=1)


# --- Responses ---


class QuoteResponse(ApiModel):
    """Swap economics as shown in the swap panel."""

    amount_in: DecimalString
    output_amount: DecimalString
    fee_amount: DecimalString
    net_input: DecimalString
    price_impact: DecimalString
    fee_rate: DecimalString
    high_impact: bool
    minimum_received: DecimalString | None = None

    @classmethod
    def from_quote(
        cls,
        quote: SwapQuote,
        high_impact_threshold: Decimal,
        minimum_received: Decimal | None = None,
    ) -> QuoteResponse:
        return cls(
            amount_in=fmt(quote.amount_in),
            output_amount=fmt(quote.output_amount),
            fee_amount=fmt(quote.fee_amount),
            net_input=fmt(quote.net_input),
            price_impact=fmt(quote.price_impact),
            fee_rate=fmt(quote.fee_rate),
            high_impact=quote.is_high_impact(high_impact_threshold),
            minimum_received=fmt(minimum_received) if minimum_received is not None else None,
        )


class SwapResponse(ApiModel):
    pool_id: str
    token_in: str
    token_out: str
    quote: QuoteResponse
    reserve_in_after: DecimalString
    reserve_out_after: DecimalString

    @classmethod
    def from_receipt(cls, receipt: SwapReceipt, high_impact_threshold: Decimal) -> SwapResponse:
        return cls(
            pool_id=receipt.pool_id,
            token_in=receipt.token_in,
            token_out=receipt.token_out,
            quote=QuoteResponse.from_quote(receipt.quote, high_impact_threshold),
            reserve_in_after=fmt(receipt.reserve_in_after),
            reserve_out_after=fmt(receipt.reserve_out_after),
        )


class PoolTokenResponse(ApiModel):
    symbol: str
    reserve: DecimalString

    @classmethod
    def from_token(cls, token: PoolToken) -> PoolTokenResponse:
        return cls(symbol=token.symbol, reserve=fmt(token.reserve))


class PoolResponse(ApiModel):
    """Pool card data."""

    id: str
    name: str
    token_a: PoolTokenResponse
    token_b: PoolTokenResponse
    total_shares: DecimalString
    total_liquidity: DecimalString
    volume_24h: DecimalString = Field(alias="volume24h")
    fees_24h: DecimalString = Field(alias="fees24h")
    apy: DecimalString

    @classmethod
    def from_pool(cls, pool: LiquidityPool) -> PoolResponse:
        return cls(
            id=pool.id,
            name=pool.name,
            token_a=PoolTokenResponse.from_token(pool.token_a),
            token_b=PoolTokenResponse.from_token(pool.token_b),
            total_shares=fmt(pool.total_shares),
            total_liquidity=fmt(pool.total_liquidity),
            volume_24h=fmt(pool.volume_24h),
            fees_24h=fmt(pool.fees_24h),
            apy=fmt(pool.apy),
        )


class LiquidityResponse(ApiModel):
    pool_id: str
    shares: DecimalString
    amount_a: DecimalString
    amount_b: DecimalString
    total_shares: DecimalString

    @classmethod
    def from_change(cls, change: LiquidityChange) -> LiquidityResponse:
        return cls(
            pool_id=change.pool_id,
            shares=fmt(change.shares),
            amount_a=fmt(change.amount_a),
            amount_b=fmt(change.amount_b),
            total_shares=fmt(change.total_shares),
        )


class AirdropResponse(ApiModel):
    public_key: str
    signature: str
    lamports: int
