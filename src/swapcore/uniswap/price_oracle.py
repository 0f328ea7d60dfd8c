import asyncio

from web3 import AsyncBaseProvider, AsyncWeb3
from web3.types import BlockIdentifier

from swapcore.exceptions import PoolNotInitialized
from swapcore.functions import encode_function_calldata, raw_call_async, read_with_retry
from swapcore.uniswap.v3_types import PoolReference, PoolState

SLOT0_STRUCT_TYPES = [
    "uint160",  # sqrtPriceX96
    "int24",  # tick
    "uint16",  # observationIndex
    "uint16",  # observationCardinality
    "uint16",  # observationCardinalityNext
    "uint8",  # feeProtocol
    "bool",  # unlocked
]


async def read_pool_state(
    w3: AsyncWeb3[AsyncBaseProvider],
    pool: PoolReference,
    block_identifier: BlockIdentifier | None = None,
    *,
    max_attempts: int = 3,
) -> PoolState:
    """
    Read the current price, tick and in-range liquidity from the pool contract.

    A pool with zero liquidity is returned as-is. A pool that was never initialized (zero sqrt
    price) raises `PoolNotInitialized`.
    """

    if block_identifier is None:
        block_identifier = await read_with_retry(
            "blockNumber", lambda: w3.eth.block_number, max_attempts=max_attempts
        )

    slot0, (liquidity,) = await asyncio.gather(
        read_with_retry(
            "slot0",
            lambda: raw_call_async(
                w3=w3,
                address=pool.address,
                calldata=encode_function_calldata("slot0()", None),
                return_types=SLOT0_STRUCT_TYPES,
                block_identifier=block_identifier,
            ),
            max_attempts=max_attempts,
        ),
        read_with_retry(
            "liquidity",
            lambda: raw_call_async(
                w3=w3,
                address=pool.address,
                calldata=encode_function_calldata("liquidity()", None),
                return_types=["uint128"],
                block_identifier=block_identifier,
            ),
            max_attempts=max_attempts,
        ),
    )

    sqrt_price_x96: int
    tick: int
    sqrt_price_x96, tick, *_ = slot0

    if sqrt_price_x96 == 0:
        raise PoolNotInitialized(pool=pool.address)

    return PoolState(
        pool=pool.address,
        sqrt_price_x96=sqrt_price_x96,
        tick=tick,
        liquidity=liquidity,
        block=block_identifier if isinstance(block_identifier, int) else None,
    )
