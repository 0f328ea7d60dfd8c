from .allowance import AllowanceManager
from .executor import (
    PreparedSwap,
    SwapExecutor,
    SwapReceipt,
    SwapRequest,
    TransactionStatus,
)
from .session import SwapSession, SwapStatus, SwapStatusMessage

__all__ = (
    "AllowanceManager",
    "PreparedSwap",
    "SwapExecutor",
    "SwapReceipt",
    "SwapRequest",
    "SwapSession",
    "SwapStatus",
    "SwapStatusMessage",
    "TransactionStatus",
)
