from typing import Any

from eth_typing import ChecksumAddress

from swapcore.exceptions.base import SwapcoreError


class LiquidityPoolError(SwapcoreError):
    """
    Exception raised inside pool lookup and pool state helpers.
    """


class PoolNotFound(LiquidityPoolError):
    """
    The factory reports no pool for the token pair and fee tier. This is not fatal: quoting falls
    back to an estimated rate.
    """

    def __init__(self, token_a: ChecksumAddress, token_b: ChecksumAddress, fee: int) -> None:
        self.token_a = token_a
        self.token_b = token_b
        self.fee = fee
        super().__init__(message=f"No pool exists for {token_a} / {token_b} at fee tier {fee}.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.token_a, self.token_b, self.fee)


class PoolNotInitialized(LiquidityPoolError):
    """
    Raised when a pool reports a zero sqrt price, i.e. it was created but never initialized.
    """

    def __init__(self, pool: ChecksumAddress) -> None:
        self.pool = pool
        super().__init__(message=f"Pool {pool} has not been initialized.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.pool,)


class PoolTokenMismatch(LiquidityPoolError):
    """
    The pool reported a token0 that is not one of the requested tokens.
    """

    def __init__(self, pool: ChecksumAddress, token0: ChecksumAddress) -> None:
        self.pool = pool
        self.token0 = token0
        super().__init__(message=f"Pool {pool} reports unexpected token0 {token0}.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.pool, self.token0)
