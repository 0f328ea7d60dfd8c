from fractions import Fraction

from swapcore.constants import Q96
from swapcore.uniswap.v3_types import PoolState, SqrtPriceX96


def exchange_rate_from_sqrt_price_x96(sqrt_price_x96: SqrtPriceX96) -> Fraction:
    """
    The raw price of token1 in terms of token0, in base units, as an exact fraction.
    """

    # ref: https://blog.uniswap.org/uniswap-v3-math-primer
    return Fraction(sqrt_price_x96**2, Q96**2)


def price_from_state(
    state: PoolState,
    token_in_decimals: int,
    token_out_decimals: int,
    *,
    token_in_is_token0: bool,
) -> float:
    """
    Convert a pool's sqrt price into the number of output tokens received per input token, in
    human units.

    The raw token1/token0 price is scaled by 10**(token0 decimals - token1 decimals), then inverted
    if the input token is token1. All steps are exact, the result is converted to a float last.
    """

    if state.sqrt_price_x96 == 0:
        msg = "A pool with a zero sqrt price has no exchange rate"
        raise ValueError(msg)

    raw_price = exchange_rate_from_sqrt_price_x96(state.sqrt_price_x96)

    if token_in_is_token0:
        token0_decimals, token1_decimals = token_in_decimals, token_out_decimals
    else:
        token0_decimals, token1_decimals = token_out_decimals, token_in_decimals

    price_of_token0 = raw_price * Fraction(10) ** (token0_decimals - token1_decimals)
    rate = price_of_token0 if token_in_is_token0 else 1 / price_of_token0
    return float(rate)
