from .checksum_cache import get_checksum_address
from .config import settings
from .connection import async_connection_manager, get_async_web3, set_async_web3
from .version import __version__

# isort: split

from .erc20 import Token, get_allowance, get_balance, get_balances
from .logging import logger
from .quoting import (
    DegradedQuote,
    EstimatedQuote,
    LiveQuote,
    Quote,
    QuoteEngine,
    QuoteRequest,
    QuoteTracker,
)
from .registry import ChainConfig, ChainRegistry
from .transaction import (
    AllowanceManager,
    SwapExecutor,
    SwapReceipt,
    SwapRequest,
    SwapSession,
    SwapStatus,
)
from .uniswap import PoolReference, PoolState, find_pool, price_from_state, read_pool_state

__all__ = (
    "AllowanceManager",
    "ChainConfig",
    "ChainRegistry",
    "DegradedQuote",
    "EstimatedQuote",
    "LiveQuote",
    "PoolReference",
    "PoolState",
    "Quote",
    "QuoteEngine",
    "QuoteRequest",
    "QuoteTracker",
    "SwapExecutor",
    "SwapReceipt",
    "SwapRequest",
    "SwapSession",
    "SwapStatus",
    "Token",
    "__version__",
    "async_connection_manager",
    "cli",
    "constants",
    "erc20",
    "exceptions",
    "find_pool",
    "functions",
    "get_allowance",
    "get_async_web3",
    "get_balance",
    "get_balances",
    "get_checksum_address",
    "logger",
    "price_from_state",
    "quoting",
    "read_pool_state",
    "registry",
    "set_async_web3",
    "settings",
    "transaction",
    "types",
    "uniswap",
    "validation",
)
