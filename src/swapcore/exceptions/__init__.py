from swapcore.exceptions.base import SwapcoreError, SwapcoreTypeError, SwapcoreValueError
from swapcore.exceptions.connection import ChainChanged, NetworkError, SwapcoreConnectionError
from swapcore.exceptions.liquidity_pool import (
    LiquidityPoolError,
    PoolNotFound,
    PoolNotInitialized,
    PoolTokenMismatch,
)
from swapcore.exceptions.quote import (
    InvalidSwapRequest,
    QuoteError,
    QuoteUnavailable,
    SameTokenSwap,
    StaleQuote,
    ValidationError,
)
from swapcore.exceptions.registry import DexUnavailable, RegistryError, UnknownChain, UnknownToken
from swapcore.exceptions.transaction import (
    ApprovalError,
    ApprovalFailed,
    ApprovalRejected,
    InvalidStateTransition,
    SessionBusy,
    SessionError,
    SwapError,
    SwapOutcomeUnknown,
    SwapRejected,
    SwapReverted,
    SwapSubmissionFailed,
    SwapTimedOut,
    TransactionError,
)

from . import connection, liquidity_pool, quote, registry, transaction

__all__ = (
    "ApprovalError",
    "ApprovalFailed",
    "ApprovalRejected",
    "ChainChanged",
    "DexUnavailable",
    "InvalidStateTransition",
    "InvalidSwapRequest",
    "LiquidityPoolError",
    "NetworkError",
    "PoolNotFound",
    "PoolNotInitialized",
    "PoolTokenMismatch",
    "QuoteError",
    "QuoteUnavailable",
    "RegistryError",
    "SameTokenSwap",
    "SessionBusy",
    "SessionError",
    "StaleQuote",
    "SwapError",
    "SwapOutcomeUnknown",
    "SwapRejected",
    "SwapReverted",
    "SwapSubmissionFailed",
    "SwapTimedOut",
    "SwapcoreConnectionError",
    "SwapcoreError",
    "SwapcoreTypeError",
    "SwapcoreValueError",
    "TransactionError",
    "UnknownChain",
    "UnknownToken",
    "ValidationError",
    "connection",
    "liquidity_pool",
    "quote",
    "registry",
    "transaction",
)
