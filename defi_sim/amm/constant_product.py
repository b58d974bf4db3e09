"""Constant-product AMM pricing.

The pool invariant is x * y = k. A proportional trading fee is taken from
the input before the invariant is applied, so the fee stays in the pool.
"""

from __future__ import annotations

import decimal
from decimal import Decimal
from typing import Any

from defi_sim.amm.base import AMM, SwapQuote
from defi_sim.amm.errors import InvalidInput
from defi_sim.constants import DEFAULT_FEE_RATE, DEFAULT_SLIPPAGE_PERCENT
from defi_sim.decimal_utils import (
    DECIMAL_HIGH_PREC_CONTEXT,
    DECIMAL_ROUND_DOWN_CONTEXT,
    DECIMAL_ROUND_UP_CONTEXT,
    to_decimal,
    to_positive_decimal,
)


def validate_fee_rate(fee_rate: Any) -> Decimal:
    """Validate a fee rate and return it as a Decimal.

    Raises:
        InvalidInput: If fee_rate is not in [0, 1)
    """
    rate = to_decimal(fee_rate, "fee_rate")
    if rate < 0 or rate >= 1:
        raise InvalidInput(f"fee_rate must be in [0, 1), got {fee_rate!r}")
    return rate


class ConstantProductAMM(AMM):
    """Constant-product AMM math.

    Formula: output = reserve_out - (reserve_in * reserve_out) / (reserve_in + net_input)
    where net_input = amount_in * (1 - fee_rate).

    Output amounts are rounded toward zero and required inputs away from
    zero, so rounding never favours the trader over the pool.
    """

    def __init__(self, fee_rate: Any = DEFAULT_FEE_RATE) -> None:
        self.fee_rate = validate_fee_rate(fee_rate)

    def __repr__(self) -> str:
        return f"ConstantProductAMM(fee_rate={self.fee_rate})"

    def quote_swap(self, amount_in: Any, reserve_in: Any, reserve_out: Any) -> SwapQuote:
        """Quote an exact-input swap.

        Args:
            amount_in: Input token amount, fee included
            reserve_in: Reserve of input token in pool
            reserve_out: Reserve of output token in pool

        Returns:
            SwapQuote; output_amount is strictly less than reserve_out and
            price_impact lies in [0, 1)

        Raises:
            InvalidInput: If any argument is not a finite number > 0, or the
                trade is too large to price against the reserves
        """
        amount = to_positive_decimal(amount_in, "amount_in")
        res_in = to_positive_decimal(reserve_in, "reserve_in")
        res_out = to_positive_decimal(reserve_out, "reserve_out")

        try:
            with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
                fee_amount = amount * self.fee_rate
                net_input = amount - fee_amount
                new_reserve_in = res_in + net_input

            # reserve_out - k / new_reserve_in, folded into one division so a
            # single round-down keeps the output below reserve_out.
            # Price impact compares output / net_input against the mid price
            # reserve_out / reserve_in, which reduces to net_input / new_reserve_in.
            with decimal.localcontext(DECIMAL_ROUND_DOWN_CONTEXT):
                output_amount = res_out * net_input / new_reserve_in
                price_impact = net_input / new_reserve_in
        except decimal.Overflow as e:
            raise InvalidInput("Swap amounts are out of the representable range") from e

        if output_amount >= res_out:
            # reserve_in vanished from new_reserve_in at 78 digits
            raise InvalidInput(
                f"amount_in {amount} is too large to price against reserve_in {res_in}"
            )

        return SwapQuote(
            amount_in=amount,
            output_amount=output_amount,
            fee_amount=fee_amount,
            price_impact=price_impact,
            net_input=net_input,
            fee_rate=self.fee_rate,
        )

    def get_amount_out(self, amount_in: Any, reserve_in: Any, reserve_out: Any) -> Decimal:
        """Calculate output amount for a given input."""
        return self.quote_swap(amount_in, reserve_in, reserve_out).output_amount

    def get_amount_in(self, amount_out: Any, reserve_in: Any, reserve_out: Any) -> Decimal:
        """Calculate required input for a desired output.

        Formula: amount_in = (reserve_in * out) / ((reserve_out - out) * (1 - fee_rate))

        Args:
            amount_out: Desired output token amount
            reserve_in: Reserve of input token in pool
            reserve_out: Reserve of output token in pool

        Returns:
            Required input amount, fee included, rounded up

        Raises:
            InvalidInput: If arguments are invalid or amount_out >= reserve_out
        """
        out = to_positive_decimal(amount_out, "amount_out")
        res_in = to_positive_decimal(reserve_in, "reserve_in")
        res_out = to_positive_decimal(reserve_out, "reserve_out")
        if out >= res_out:
            # Can't extract the whole reserve
            raise InvalidInput(f"amount_out {out} must be less than reserve_out {res_out}")

        try:
            with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
                numerator = res_in * out
                denominator = (res_out - out) * (1 - self.fee_rate)

            with decimal.localcontext(DECIMAL_ROUND_UP_CONTEXT):
                return numerator / denominator
        except decimal.Overflow as e:
            raise InvalidInput("Swap amounts are out of the representable range") from e

    def minimum_received(
        self,
        quote: SwapQuote,
        slippage_percent: Any = DEFAULT_SLIPPAGE_PERCENT,
    ) -> Decimal:
        """Lowest output a trader accepts for a quote under a slippage tolerance.

        Args:
            quote: The quote being executed
            slippage_percent: Tolerance in percent, in [0, 100)

        Raises:
            InvalidInput: If slippage_percent is out of range
        """
        slippage = to_decimal(slippage_percent, "slippage_percent")
        if slippage < 0 or slippage >= 100:
            raise InvalidInput(f"slippage_percent must be in [0, 100), got {slippage_percent!r}")

        with decimal.localcontext(DECIMAL_ROUND_DOWN_CONTEXT):
            return quote.output_amount * (1 - slippage / 100)


# Singleton instance at the protocol fee rate
constant_product = ConstantProductAMM()


def quote_swap(
    amount_in: Any,
    reserve_in: Any,
    reserve_out: Any,
    fee_rate: Any | None = None,
) -> SwapQuote:
    """Quote a swap through a constant-product pool.

    Uses the protocol fee rate unless ``fee_rate`` is given.

    Raises:
        InvalidInput: If any argument is invalid
    """
    amm = constant_product if fee_rate is None else ConstantProductAMM(fee_rate)
    return amm.quote_swap(amount_in, reserve_in, reserve_out)


__all__ = [
    "ConstantProductAMM",
    "constant_product",
    "quote_swap",
    "validate_fee_rate",
]
