import itertools
import logging
import math
from typing import Any

import eth_abi.abi
import pytest
from eth_utils.crypto import keccak
from hexbytes import HexBytes
from web3.datastructures import AttributeDict
from web3.exceptions import ContractLogicError, TimeExhausted, TransactionNotFound, Web3RPCError

from swapcore.checksum_cache import get_checksum_address
from swapcore.config import FallbackSettings
from swapcore.connection import async_connection_manager
from swapcore.erc20.token import Token
from swapcore.logging import logger
from swapcore.registry import ChainRegistry, ZgGalileoTestnet, ZgMainnet
from swapcore.types.observer import AbstractPublisherMessage, Publisher

MAINNET_CHAIN_ID = ZgMainnet.chain_id
TESTNET_CHAIN_ID = ZgGalileoTestnet.chain_id

OWNER = get_checksum_address("0x" + "11" * 20)
W0G_USDC_POOL = get_checksum_address("0x" + "a1" * 20)

# W0G (18 decimals) is token0 and USDC.e (6 decimals) is token1 of the pool. This sqrt price makes
# one W0G worth 1.5 USDC.e
SQRT_PRICE_X96_1_5 = math.isqrt(3 * 2**192 // (2 * 10**12))


def selector(function_prototype: str) -> bytes:
    return keccak(text=function_prototype)[:4]


GET_POOL = selector("getPool(address,address,uint24)")
SLOT0 = selector("slot0()")
LIQUIDITY = selector("liquidity()")
TOKEN0 = selector("token0()")
ALLOWANCE = selector("allowance(address,address)")
BALANCE_OF = selector("balanceOf(address)")
APPROVE = selector("approve(address,uint256)")
EXACT_INPUT_SINGLE = selector(
    "exactInputSingle((address,address,uint24,address,uint256,uint256,uint256,uint160))"
)


async def _value[T](value: T) -> T:
    return value


class FakeChain:
    """
    In-memory state for a fake EVM node. Answers `eth_call` by function selector and records every
    transaction sent to it.
    """

    def __init__(self, chain_id: int) -> None:
        self.chain_id = chain_id
        self.block_number = 1_000

        self.pools: dict[tuple[str, str, int], str] = {}
        self.pool_state: dict[str, dict[str, Any]] = {}
        self.allowances: dict[tuple[str, str, str], int] = {}
        self.balances: dict[tuple[str, str], int] = {}
        self.native_balances: dict[str, int] = {}

        self.calls: list[tuple[str, bytes]] = []
        self.sent: list[dict[str, Any]] = []
        self.receipts: dict[HexBytes, AttributeDict[str, Any]] = {}

        # Failure injection
        self.read_errors: dict[bytes, Exception] = {}
        self.send_error: Exception | None = None
        self.reverting_selectors: set[bytes] = set()
        self.receipt_timeout = False
        self.receipt_error: Exception | None = None

        self._tx_counter = itertools.count(1)

    def add_pool(
        self,
        address: str,
        token_a: str,
        token_b: str,
        fee: int,
        *,
        sqrt_price_x96: int,
        liquidity: int,
        tick: int = 0,
    ) -> None:
        address = address.lower()
        token0, token1 = sorted((token_a.lower(), token_b.lower()))
        self.pools[token0, token1, fee] = address
        self.pool_state[address] = {
            "token0": token0,
            "sqrt_price_x96": sqrt_price_x96,
            "tick": tick,
            "liquidity": liquidity,
        }

    def call_count(self, function_selector: bytes) -> int:
        return sum(1 for _, call_selector in self.calls if call_selector == function_selector)

    def transactions_to(self, function_selector: bytes) -> list[dict[str, Any]]:
        return [tx for tx in self.sent if bytes(tx["data"])[:4] == function_selector]

    def handle_call(self, to: str, data: bytes) -> bytes:
        to = to.lower()
        function_selector, args = data[:4], data[4:]
        self.calls.append((to, function_selector))

        if (error := self.read_errors.get(function_selector)) is not None:
            raise error

        if function_selector == GET_POOL:
            token_a, token_b, fee = eth_abi.abi.decode(["address", "address", "uint24"], args)
            token0, token1 = sorted((token_a.lower(), token_b.lower()))
            pool = self.pools.get((token0, token1, fee), "0x" + "00" * 20)
            return eth_abi.abi.encode(["address"], [pool])
        if function_selector == TOKEN0:
            return eth_abi.abi.encode(["address"], [self.pool_state[to]["token0"]])
        if function_selector == SLOT0:
            state = self.pool_state[to]
            return eth_abi.abi.encode(
                ["uint160", "int24", "uint16", "uint16", "uint16", "uint8", "bool"],
                [state["sqrt_price_x96"], state["tick"], 0, 1, 1, 0, True],
            )
        if function_selector == LIQUIDITY:
            return eth_abi.abi.encode(["uint128"], [self.pool_state[to]["liquidity"]])
        if function_selector == ALLOWANCE:
            owner, spender = eth_abi.abi.decode(["address", "address"], args)
            amount = self.allowances.get((to, owner.lower(), spender.lower()), 0)
            return eth_abi.abi.encode(["uint256"], [amount])
        if function_selector == BALANCE_OF:
            (owner,) = eth_abi.abi.decode(["address"], args)
            return eth_abi.abi.encode(["uint256"], [self.balances.get((to, owner.lower()), 0)])

        msg = "execution reverted"
        raise ContractLogicError(msg)

    def handle_send(self, tx: dict[str, Any]) -> HexBytes:
        if self.send_error is not None:
            raise self.send_error

        self.sent.append(dict(tx))
        tx_hash = HexBytes(keccak(text=f"{self.chain_id}:{next(self._tx_counter)}"))
        data = bytes(tx["data"])
        reverted = data[:4] in self.reverting_selectors

        if not reverted and data[:4] == APPROVE:
            spender, amount = eth_abi.abi.decode(["address", "uint256"], data[4:])
            self.allowances[str(tx["to"]).lower(), str(tx["from"]).lower(), spender.lower()] = (
                amount
            )

        self.block_number += 1
        self.receipts[tx_hash] = AttributeDict(
            {
                "transactionHash": tx_hash,
                "blockNumber": self.block_number,
                "status": 0 if reverted else 1,
            }
        )
        return tx_hash


class FakeEth:
    def __init__(self, chain: FakeChain) -> None:
        self._chain = chain

    @property
    def chain_id(self) -> Any:
        return _value(self._chain.chain_id)

    @property
    def block_number(self) -> Any:
        return _value(self._chain.block_number)

    async def call(self, transaction: dict[str, Any], block_identifier: Any = None) -> HexBytes:
        return HexBytes(self._chain.handle_call(str(transaction["to"]), bytes(transaction["data"])))

    async def get_balance(self, account: str, block_identifier: Any = None) -> int:
        return self._chain.native_balances.get(account.lower(), 0)

    async def send_transaction(self, transaction: dict[str, Any]) -> HexBytes:
        return self._chain.handle_send(transaction)

    async def get_transaction_receipt(self, transaction_hash: HexBytes) -> AttributeDict[str, Any]:
        try:
            return self._chain.receipts[HexBytes(transaction_hash)]
        except KeyError:
            msg = f"Transaction {HexBytes(transaction_hash).to_0x_hex()} not found"
            raise TransactionNotFound(msg) from None

    async def wait_for_transaction_receipt(
        self,
        transaction_hash: HexBytes,
        timeout: float = 120,
        poll_latency: float = 0.1,
    ) -> AttributeDict[str, Any]:
        if self._chain.receipt_timeout:
            msg = f"Transaction {HexBytes(transaction_hash).to_0x_hex()} is not in the chain"
            raise TimeExhausted(msg)
        if self._chain.receipt_error is not None:
            raise self._chain.receipt_error
        return await self.get_transaction_receipt(transaction_hash)


class FakeMiddlewareOnion:
    def __init__(self) -> None:
        self.middleware: list[Any] = ["validation"]

    def clear(self) -> None:
        self.middleware.clear()


class FakeProvider:
    def decode_rpc_response(self, raw_response: bytes) -> Any: ...


class FakeAsyncWeb3:
    """
    Stands in for `AsyncWeb3`, backed by a `FakeChain`.
    """

    def __init__(self, chain: FakeChain, *, connected: bool = True) -> None:
        self.chain = chain
        self.eth = FakeEth(chain)
        self.middleware_onion = FakeMiddlewareOnion()
        self.provider = FakeProvider()
        self.connected = connected

    async def is_connected(self) -> bool:
        return self.connected


def user_rejection() -> Web3RPCError:
    return Web3RPCError(
        "User rejected the request.",
        rpc_response={
            "jsonrpc": "2.0",
            "id": 1,
            "error": {"code": 4001, "message": "User rejected the request."},
        },
    )


@pytest.fixture(autouse=True)
def _initialize_and_reset_after_each_test():
    """
    Before each test, clear/reset global values and singletons
    """
    async_connection_manager.connections.clear()
    async_connection_manager._default_chain_id = None


@pytest.fixture(scope="session", autouse=True)
def _set_swapcore_logging():
    """
    Set the logging level to DEBUG for the test run
    """
    logger.setLevel(logging.DEBUG)


@pytest.fixture
def registry() -> ChainRegistry:
    return ChainRegistry([ZgMainnet, ZgGalileoTestnet])


@pytest.fixture
def fallback() -> FallbackSettings:
    return FallbackSettings()


@pytest.fixture
def native_token() -> Token:
    return ZgMainnet.native_token


@pytest.fixture
def wrapped_native_token() -> Token:
    wrapped = ZgMainnet.wrapped_native_token
    assert wrapped is not None
    return wrapped


@pytest.fixture
def usdc() -> Token:
    (usdc,) = ZgMainnet.tokens
    return usdc


@pytest.fixture
def fake_chain(wrapped_native_token: Token, usdc: Token) -> FakeChain:
    """
    A mainnet chain with a liquid W0G/USDC.e pool at the default fee tier.
    """

    chain = FakeChain(MAINNET_CHAIN_ID)
    chain.add_pool(
        W0G_USDC_POOL,
        wrapped_native_token.address,
        usdc.address,
        3000,
        sqrt_price_x96=SQRT_PRICE_X96_1_5,
        liquidity=10**24,
        tick=-276324,
    )
    return chain


@pytest.fixture
def fake_w3(fake_chain: FakeChain) -> FakeAsyncWeb3:
    return FakeAsyncWeb3(fake_chain)


@pytest.fixture
async def mainnet(fake_w3: FakeAsyncWeb3) -> FakeAsyncWeb3:
    """
    Register the fake mainnet connection as the active chain.
    """

    await async_connection_manager.register_web3(fake_w3, optimize=False)
    async_connection_manager.set_default_chain(MAINNET_CHAIN_ID)
    return fake_w3


@pytest.fixture
def testnet() -> None:
    """
    Make the DEX-less testnet the active chain. No connection is registered.
    """

    async_connection_manager.set_default_chain(TESTNET_CHAIN_ID)


class FakeSubscriber:
    """
    This subscriber class provides a record of received messages, and can be used to test that
    publisher/subscriber methods operate as expected.
    """

    def __init__(self) -> None:
        self.inbox: list[dict[str, Any]] = list()

    def notify(self, publisher: Publisher, message: AbstractPublisherMessage) -> None:
        self.inbox.append(
            {
                "from": publisher,
                "message": message,
            }
        )

    def subscribe(self, publisher: Publisher) -> None:
        publisher.subscribe(self)

    def unsubscribe(self, publisher: Publisher) -> None:
        publisher.unsubscribe(self)
