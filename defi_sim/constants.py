"""Protocol constants for the simulated DeFi dashboard.

Centralizes protocol parameters and UI thresholds shared by the AMM,
pool bookkeeping and API layers.
"""

from decimal import Decimal

# Trading fee deducted from the input before the constant-product invariant
# is applied (0.3%)
DEFAULT_FEE_RATE = Decimal("0.003")

# Price impact above which the swap UI flags a quote (5%)
HIGH_PRICE_IMPACT = Decimal("0.05")

# Default slippage tolerance in percent, as shown in the swap settings
DEFAULT_SLIPPAGE_PERCENT = Decimal("0.5")

# Solana base units
LAMPORTS_PER_SOL = 1_000_000_000

# Fixed amount handed out per faucet request (in SOL)
AIRDROP_AMOUNT_SOL = 1

# Yield farm reward-per-token scale factor
REWARD_PRECISION = 10**9
