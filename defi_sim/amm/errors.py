"""AMM error classes."""


class AmmError(Exception):
    """Base error for AMM operations."""

    pass


class InvalidInput(AmmError, ValueError):
    """Amount, reserve or fee rate is non-positive, non-finite or not a number."""

    pass
