"""Common test constants.

Reserve sizes match the SOL/USDC demo pool.
"""

from decimal import Decimal

SOL = "SOL"
USDC = "USDC"
RAY = "RAY"

SOL_RESERVE = Decimal("25000")
USDC_RESERVE = Decimal("2600000")

# Scenario from the swap panel: 1M/1M pool, 10K in, 0.3% fee
BALANCED_RESERVE = Decimal("1000000")
BALANCED_TRADE = Decimal("10000")

# Reference farm window
FARM_START = 1_700_000_000
FARM_DURATION = 1_000

# Reference governance parameters (quorum as on the governance dashboard)
VOTING_PERIOD = 3 * 86_400
EXECUTION_DELAY = 86_400
PROPOSAL_THRESHOLD = 1_000
QUORUM = 100_000
