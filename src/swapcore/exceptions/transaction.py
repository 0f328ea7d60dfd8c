from typing import Any

from hexbytes import HexBytes

from swapcore.exceptions.base import SwapcoreError

"""
Exceptions defined here are raised by the allowance manager, the swap executor and the swap session.

Each carries the transaction hash, if one was obtained, and a `retry_safe` flag. A retry is unsafe
when a transaction may have been broadcast but its outcome is unknown: the caller must query the
chain before submitting again.
"""


class TransactionError(SwapcoreError):
    """
    Exception raised inside transaction helpers.
    """

    retry_safe: bool = True

    def __init__(self, message: str | None = None, tx_hash: HexBytes | None = None) -> None:
        self.tx_hash = tx_hash
        super().__init__(message=message)


class ApprovalError(TransactionError):
    """
    The spending approval for the input token could not be obtained.
    """


class ApprovalRejected(ApprovalError):
    def __init__(self, symbol: str) -> None:
        self.symbol = symbol
        super().__init__(message=f"Approval of {symbol} was rejected in the wallet.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.symbol,)


class ApprovalFailed(ApprovalError):
    def __init__(self, symbol: str, reason: str, tx_hash: HexBytes | None = None) -> None:
        self.symbol = symbol
        self.reason = reason
        super().__init__(message=f"Token approval for {symbol} failed: {reason}", tx_hash=tx_hash)

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.symbol, self.reason, self.tx_hash)


class SwapError(TransactionError):
    """
    The swap transaction could not be submitted or did not succeed.
    """


class SwapRejected(SwapError):
    def __init__(self) -> None:
        super().__init__(message="Swap was rejected in the wallet.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, ()


class SwapSubmissionFailed(SwapError):
    """
    The node refused the transaction. Nothing was broadcast.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(message=f"Swap could not be submitted: {reason}")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.reason,)


class SwapOutcomeUnknown(SwapError):
    """
    The swap may have been broadcast, but its outcome could not be observed: either submission
    failed ambiguously (e.g. a timeout after the request was sent), or the receipt could not be
    read. The hash is attached when the node returned one.
    """

    retry_safe = False

    def __init__(self, reason: str, tx_hash: HexBytes | None = None) -> None:
        self.reason = reason
        super().__init__(message=f"Swap submission outcome is unknown: {reason}", tx_hash=tx_hash)

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.reason, self.tx_hash)


class SwapReverted(SwapError):
    def __init__(self, tx_hash: HexBytes) -> None:
        super().__init__(message=f"Transaction {tx_hash.to_0x_hex()} failed.", tx_hash=tx_hash)

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.tx_hash,)


class SwapTimedOut(SwapError):
    """
    The transaction was broadcast, but no receipt arrived before the timeout.
    """

    retry_safe = False

    def __init__(self, tx_hash: HexBytes, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(
            message=f"No receipt for transaction {tx_hash.to_0x_hex()} after {timeout_seconds} seconds.",  # noqa: E501
            tx_hash=tx_hash,
        )

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.tx_hash, self.timeout_seconds)


class SessionError(SwapcoreError):
    """
    Exception raised by the swap session state machine.
    """


class SessionBusy(SessionError):
    def __init__(self, status: str) -> None:
        self.status = status
        super().__init__(
            message=f"A swap session is already active (status: {status}). Reset it first."
        )

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.status,)


class InvalidStateTransition(SessionError):
    def __init__(self, current: str, requested: str) -> None:
        self.current = current
        self.requested = requested
        super().__init__(message=f"Cannot transition from {current} to {requested}.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.current, self.requested)
