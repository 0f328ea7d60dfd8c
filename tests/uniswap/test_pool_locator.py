import pytest

from swapcore.erc20.token import Token
from swapcore.exceptions import (
    DexUnavailable,
    NetworkError,
    PoolNotFound,
    PoolTokenMismatch,
    SwapcoreValueError,
)
from swapcore.registry import ZgGalileoTestnet, ZgMainnet
from swapcore.uniswap.pool_locator import find_pool
from tests.conftest import (
    GET_POOL,
    TOKEN0,
    W0G_USDC_POOL,
    FakeAsyncWeb3,
    FakeChain,
)


async def test_find_pool(fake_w3: FakeAsyncWeb3, wrapped_native_token: Token, usdc: Token):
    pool = await find_pool(fake_w3, ZgMainnet, usdc, wrapped_native_token, 3000)

    assert pool.address == W0G_USDC_POOL
    assert pool.fee_tier == 3000
    # token0 has the lower address, regardless of the order the pair was given in
    assert pool.token0 == wrapped_native_token
    assert pool.token1 == usdc
    assert pool.is_token0(wrapped_native_token)
    assert not pool.is_token0(usdc)


async def test_find_pool_returns_same_pool_for_either_order(
    fake_w3: FakeAsyncWeb3, wrapped_native_token: Token, usdc: Token
):
    forward = await find_pool(fake_w3, ZgMainnet, wrapped_native_token, usdc, 3000)
    reverse = await find_pool(fake_w3, ZgMainnet, usdc, wrapped_native_token, 3000)
    assert forward == reverse


async def test_zero_address_means_no_pool(
    fake_w3: FakeAsyncWeb3, fake_chain: FakeChain, wrapped_native_token: Token, usdc: Token
):
    with pytest.raises(PoolNotFound) as exc:
        await find_pool(fake_w3, ZgMainnet, wrapped_native_token, usdc, 500)
    assert exc.value.fee == 500
    # The pool's token0 is not read when the factory reports no pool
    assert fake_chain.call_count(TOKEN0) == 0


async def test_rpc_failure_is_a_network_error(
    fake_w3: FakeAsyncWeb3, fake_chain: FakeChain, wrapped_native_token: Token, usdc: Token
):
    fake_chain.read_errors[GET_POOL] = ConnectionError("connection refused")

    with pytest.raises(NetworkError, match="getPool"):
        await find_pool(
            fake_w3,
            ZgMainnet,
            wrapped_native_token,
            usdc,
            3000,
            max_attempts=2,
        )
    assert fake_chain.call_count(GET_POOL) == 2


async def test_pool_reporting_foreign_token0(
    fake_w3: FakeAsyncWeb3, fake_chain: FakeChain, wrapped_native_token: Token, usdc: Token
):
    fake_chain.pool_state[W0G_USDC_POOL.lower()]["token0"] = "0x" + "ee" * 20

    with pytest.raises(PoolTokenMismatch):
        await find_pool(fake_w3, ZgMainnet, wrapped_native_token, usdc, 3000)


async def test_locator_rejects_invalid_arguments(
    fake_w3: FakeAsyncWeb3,
    fake_chain: FakeChain,
    native_token: Token,
    wrapped_native_token: Token,
    usdc: Token,
):
    with pytest.raises(SwapcoreValueError, match="native currency"):
        await find_pool(fake_w3, ZgMainnet, native_token, usdc, 3000)

    with pytest.raises(SwapcoreValueError, match="against itself"):
        await find_pool(fake_w3, ZgMainnet, usdc, usdc, 3000)

    with pytest.raises(SwapcoreValueError, match="Fee tier 42"):
        await find_pool(fake_w3, ZgMainnet, wrapped_native_token, usdc, 42)

    assert fake_chain.calls == []


async def test_chain_without_factory(fake_w3: FakeAsyncWeb3, usdc: Token):
    (st0g, *_) = ZgGalileoTestnet.tokens
    with pytest.raises(DexUnavailable):
        await find_pool(fake_w3, ZgGalileoTestnet, st0g, usdc, 3000)
