"""DeFi dashboard simulator - Python backend."""

from defi_sim.amm import InvalidInput, SwapQuote, quote_swap

__version__ = "0.1.0"
__all__ = ["InvalidInput", "SwapQuote", "quote_swap", "__version__"]
