from .erc20 import approve_calldata, get_allowance, get_balance, get_balances
from .token import Token

__all__ = (
    "Token",
    "approve_calldata",
    "get_allowance",
    "get_balance",
    "get_balances",
)
