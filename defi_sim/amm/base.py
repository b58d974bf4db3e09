"""Base classes for AMM implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class SwapQuote:
    """Economics of a single exact-input swap.

    Quotes are derived per request and never stored. All amounts are in
    token units of the respective side: ``fee_amount`` and ``net_input`` in
    the input token, ``output_amount`` in the output token.
    """

    amount_in: Decimal
    output_amount: Decimal
    fee_amount: Decimal
    price_impact: Decimal
    net_input: Decimal
    fee_rate: Decimal

    @property
    def execution_price(self) -> Decimal:
        """Output tokens received per input token, fee included."""
        return self.output_amount / self.amount_in

    def is_high_impact(self, threshold: Decimal) -> bool:
        """True if the trade moves the price more than ``threshold``."""
        return self.price_impact > threshold


class AMM(ABC):
    """Abstract base class for AMM pricing functions.

    Implementations are stateless: every call reads only its arguments, so
    a single instance may be shared across threads.
    """

    @abstractmethod
    def quote_swap(self, amount_in: Any, reserve_in: Any, reserve_out: Any) -> SwapQuote:
        """Quote an exact-input swap.

        Args:
            amount_in: Input token amount (fee included)
            reserve_in: Reserve of input token in pool
            reserve_out: Reserve of output token in pool

        Returns:
            SwapQuote with output, fee and price impact

        Raises:
            InvalidInput: If any argument is not a finite positive number
        """
        ...

    @abstractmethod
    def get_amount_in(self, amount_out: Any, reserve_in: Any, reserve_out: Any) -> Decimal:
        """Calculate required input (fee included) for a desired output.

        Raises:
            InvalidInput: If arguments are invalid or the output cannot be met
        """
        ...
