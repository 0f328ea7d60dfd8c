from .pool_locator import find_pool
from .price_oracle import read_pool_state
from .v3_functions import exchange_rate_from_sqrt_price_x96, price_from_state
from .v3_types import PoolReference, PoolState

__all__ = (
    "PoolReference",
    "PoolState",
    "exchange_rate_from_sqrt_price_x96",
    "find_pool",
    "price_from_state",
    "read_pool_state",
)
