"""
Connection-related exceptions for the swapcore package.

This module contains exceptions related to RPC failures and changes of the active network.
"""

from typing import Any

from swapcore.exceptions.base import SwapcoreError


class SwapcoreConnectionError(SwapcoreError):
    """
    Base exception for connection-related errors.
    """


class NetworkError(SwapcoreConnectionError):
    """
    Raised when reading chain state fails. This is distinct from an empty result (e.g. no pool),
    and should be retried or surfaced as a warning.
    """

    def __init__(self, operation: str, reason: str | None = None) -> None:
        """
        Args:
            operation: A short description of the read that failed, e.g. "getPool"
            reason: The underlying error text, if known
        """
        self.operation = operation
        self.reason = reason

        message = f"RPC failure during {operation}"
        if reason:
            message += f": {reason}"

        super().__init__(message=message)

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.operation, self.reason)


class ChainChanged(SwapcoreConnectionError):
    """
    Raised when the active chain changed while an operation tied to the previous chain was running.
    """

    def __init__(self, expected: int, active: int) -> None:
        self.expected = expected
        self.active = active
        super().__init__(message=f"Active chain changed from {expected} to {active}.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.expected, self.active)
