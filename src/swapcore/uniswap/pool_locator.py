from eth_typing import ChecksumAddress
from web3 import AsyncBaseProvider, AsyncWeb3

from swapcore.checksum_cache import get_checksum_address
from swapcore.constants import ZERO_ADDRESS
from swapcore.erc20.token import Token
from swapcore.exceptions import (
    DexUnavailable,
    PoolNotFound,
    PoolTokenMismatch,
    SwapcoreValueError,
)
from swapcore.functions import encode_function_calldata, raw_call_async, read_with_retry
from swapcore.logging import logger
from swapcore.registry.chains import ChainConfig
from swapcore.types.aliases import FeeTier
from swapcore.uniswap.v3_types import PoolReference


async def find_pool(
    w3: AsyncWeb3[AsyncBaseProvider],
    chain: ChainConfig,
    token_a: Token,
    token_b: Token,
    fee_tier: FeeTier,
    *,
    max_attempts: int = 3,
) -> PoolReference:
    """
    Ask the chain's factory for the pool holding the unordered pair at the given fee tier.

    Both tokens must already be in their on-chain form: the native currency has to be replaced by
    the wrapped native token before calling.

    Raises `PoolNotFound` if the factory returns the zero address, and `NetworkError` if the chain
    could not be read. Pools are resolved on every call and never cached.
    """

    if chain.factory_address is None:
        raise DexUnavailable(chain_id=chain.chain_id)
    if token_a.is_native or token_b.is_native:
        raise SwapcoreValueError(
            message="Pool lookup requires on-chain token addresses, not the native currency."
        )
    if token_a == token_b:
        raise SwapcoreValueError(message=f"Cannot locate a pool for {token_a} against itself.")
    if fee_tier not in chain.fee_tiers:
        raise SwapcoreValueError(
            message=f"Fee tier {fee_tier} is not supported on chain {chain.chain_id}."
        )

    address_a = get_checksum_address(token_a.address)
    address_b = get_checksum_address(token_b.address)

    pool_address: str
    (pool_address,) = await read_with_retry(
        "getPool",
        lambda: raw_call_async(
            w3=w3,
            address=chain.factory_address,  # type: ignore[arg-type]
            calldata=encode_function_calldata(
                "getPool(address,address,uint24)",
                [address_a, address_b, fee_tier],
            ),
            return_types=["address"],
        ),
        max_attempts=max_attempts,
    )
    pool_address = get_checksum_address(pool_address)

    if pool_address == ZERO_ADDRESS:
        logger.debug(f"No pool for {token_a}/{token_b} at fee tier {fee_tier}")
        raise PoolNotFound(token_a=address_a, token_b=address_b, fee=fee_tier)

    token0_address = await _read_token0(w3, pool_address, max_attempts=max_attempts)
    if token0_address == address_a:
        token0, token1 = token_a, token_b
    elif token0_address == address_b:
        token0, token1 = token_b, token_a
    else:
        raise PoolTokenMismatch(pool=pool_address, token0=token0_address)

    logger.debug(f"Located {token0}/{token1} pool {pool_address} (fee tier {fee_tier})")
    return PoolReference(
        address=pool_address,
        token0=token0,
        token1=token1,
        fee_tier=fee_tier,
    )


async def _read_token0(
    w3: AsyncWeb3[AsyncBaseProvider],
    pool_address: ChecksumAddress,
    *,
    max_attempts: int,
) -> ChecksumAddress:
    token0: str
    (token0,) = await read_with_retry(
        "token0",
        lambda: raw_call_async(
            w3=w3,
            address=pool_address,
            calldata=encode_function_calldata("token0()", None),
            return_types=["address"],
        ),
        max_attempts=max_attempts,
    )
    return get_checksum_address(token0)
