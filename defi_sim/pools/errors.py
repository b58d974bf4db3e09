"""Pool bookkeeping error classes."""


class PoolError(Exception):
    """Base error for pool operations."""

    pass


class PoolNotFound(PoolError):
    """No pool is registered under the requested id."""

    def __init__(self, pool_id: str) -> None:
        super().__init__(f"Pool {pool_id} not found")
        self.pool_id = pool_id


class SlippageExceeded(PoolError):
    """Settled output would be below the caller's minimum."""

    pass


class InsufficientLiquidity(PoolError):
    """The pool cannot cover the request: too few shares or an empty reserve."""

    pass
