from typing import Any

from swapcore.exceptions.base import SwapcoreError, SwapcoreValueError

"""
Exceptions defined here are raised by the quote engine and by request validation.
"""


class QuoteError(SwapcoreError):
    """
    Exception raised while producing a quote.
    """


class ValidationError(SwapcoreValueError):
    """
    Raised for bad input, before any network call is made.
    """


class SameTokenSwap(ValidationError):
    def __init__(self, symbol: str) -> None:
        self.symbol = symbol
        super().__init__(message=f"Cannot swap {symbol} for itself.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.symbol,)


class InvalidSwapRequest(ValidationError): ...


class QuoteUnavailable(QuoteError):
    """
    Raised when a swap needs a liquidity-backed quote and none can be produced.
    """


class StaleQuote(QuoteError):
    """
    Raised when a quote result was superseded by a newer request, or was produced for a chain that
    is no longer active. The result must not be displayed.
    """

    def __init__(
        self, request_id: int, latest_request_id: int, reason: str | None = None
    ) -> None:
        self.request_id = request_id
        self.latest_request_id = latest_request_id
        self.reason = reason
        super().__init__(
            message=f"Quote request {request_id} is stale: {reason}"
            if reason
            else f"Quote request {request_id} was superseded by request {latest_request_id}."
        )

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.request_id, self.latest_request_id, self.reason)
