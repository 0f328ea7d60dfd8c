import asyncio
import dataclasses
import enum
import secrets
import time
from collections.abc import Callable
from decimal import Decimal
from typing import Self

from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3 import AsyncBaseProvider, AsyncWeb3
from web3.exceptions import TimeExhausted, TransactionNotFound, Web3Exception
from web3.types import TxParams

from swapcore.checksum_cache import get_checksum_address
from swapcore.config import Settings, settings
from swapcore.connection import AsyncConnectionManager, async_connection_manager
from swapcore.constants import MAX_SLIPPAGE_PERCENT
from swapcore.erc20.token import Token
from swapcore.exceptions import (
    InvalidSwapRequest,
    NetworkError,
    QuoteUnavailable,
    SameTokenSwap,
    SwapOutcomeUnknown,
    SwapRejected,
    SwapReverted,
    SwapSubmissionFailed,
    SwapTimedOut,
)
from swapcore.functions import (
    encode_function_calldata,
    is_user_rejection,
    minimum_amount_out,
    parse_decimal_amount,
    parse_units,
    read_with_retry,
)
from swapcore.logging import logger
from swapcore.quoting.engine import QuoteEngine
from swapcore.quoting.quote import LiveQuote, QuoteRequest
from swapcore.registry.chains import ChainRegistry
from swapcore.types.aliases import ChainId, FeeTier

EXACT_INPUT_SINGLE_PROTOTYPE = (
    "exactInputSingle((address,address,uint24,address,uint256,uint256,uint256,uint160))"
)


@dataclasses.dataclass(slots=True, frozen=True)
class SwapRequest:
    """
    A user's exact-input swap order. Validated on construction, before any network call.
    """

    token_in: Token
    token_out: Token
    amount_in: str
    slippage_percent: float = dataclasses.field(
        default_factory=lambda: settings.swap.default_slippage_percent
    )
    deadline_minutes: int = dataclasses.field(
        default_factory=lambda: settings.swap.default_deadline_minutes
    )
    fee_tier: FeeTier | None = None

    def __post_init__(self) -> None:
        amount = parse_decimal_amount(self.amount_in)
        if amount is None or amount <= 0:
            raise InvalidSwapRequest(
                message=f"Swap amount must be positive, got {self.amount_in!r}"
            )
        if (
            self.token_in == self.token_out
            or self.token_in.symbol.lower() == self.token_out.symbol.lower()
        ):
            raise SameTokenSwap(symbol=self.token_in.symbol)
        if not (0 < self.slippage_percent <= MAX_SLIPPAGE_PERCENT):
            raise InvalidSwapRequest(
                message=f"Slippage must be above 0% and at most {MAX_SLIPPAGE_PERCENT}%, "
                f"got {self.slippage_percent}%"
            )
        if self.deadline_minutes <= 0:
            raise InvalidSwapRequest(
                message="Deadline must be a positive number of minutes, "
                f"got {self.deadline_minutes}"
            )

    @property
    def amount(self) -> Decimal:
        amount = parse_decimal_amount(self.amount_in)
        assert amount is not None
        return amount

    @property
    def amount_in_raw(self) -> int:
        return parse_units(self.amount_in, self.token_in.decimals)

    def quote_request(self) -> QuoteRequest:
        return QuoteRequest(
            token_in=self.token_in,
            token_out=self.token_out,
            amount_in=self.amount_in,
            fee_tier=self.fee_tier,
        )


@dataclasses.dataclass(slots=True, frozen=True)
class PreparedSwap:
    """
    A swap with its live quote and slippage bound resolved, ready to be submitted.
    """

    chain_id: ChainId
    request: SwapRequest
    quote: LiveQuote
    router: ChecksumAddress
    amount_in_raw: int
    amount_out_minimum: int

    @property
    def value(self) -> int:
        # The router wraps native input sent as value
        return self.amount_in_raw if self.request.token_in.is_native else 0


@dataclasses.dataclass(slots=True, frozen=True)
class SwapReceipt:
    chain_id: ChainId
    tx_hash: HexBytes
    simulated: bool = False
    amount_in_raw: int | None = None
    amount_out_minimum: int | None = None
    block_number: int | None = None


class TransactionStatus(enum.StrEnum):
    PENDING = "pending"
    SUCCESS = "success"
    REVERTED = "reverted"


class SwapExecutor:
    """
    Builds, submits and confirms exact-input swaps through the chain's router. On chains without a
    DEX, swaps are simulated.
    """

    def __init__(
        self,
        registry: ChainRegistry,
        engine: QuoteEngine,
        *,
        connections: AsyncConnectionManager | None = None,
        receipt_timeout: float = 120.0,
        demo_swap_delay: float = 2.0,
    ) -> None:
        self.registry = registry
        self.engine = engine
        self.connections = connections if connections is not None else async_connection_manager
        self.receipt_timeout = receipt_timeout
        self.demo_swap_delay = demo_swap_delay

    @classmethod
    def from_settings(cls, config: Settings) -> Self:
        engine = QuoteEngine.from_settings(config)
        return cls(
            engine.registry,
            engine,
            receipt_timeout=config.swap.receipt_timeout_seconds,
            demo_swap_delay=config.swap.demo_swap_delay_seconds,
        )

    def _w3(self, chain_id: ChainId) -> AsyncWeb3[AsyncBaseProvider]:
        return self.connections.get_web3(chain_id)

    async def prepare(self, request: SwapRequest, chain_id: ChainId) -> PreparedSwap:
        """
        Quote the swap from current pool state and derive the minimum output.

        Raises `QuoteUnavailable` if no liquidity-backed quote can be produced. An estimated quote
        is never used to bound a real swap.
        """

        chain = self.registry.get(chain_id)
        if chain.router_address is None:
            raise QuoteUnavailable(message=f"No DEX is deployed on chain {chain_id}.")

        quote = await self.engine.get_quote(request.quote_request(), chain_id)
        if not isinstance(quote, LiveQuote):
            reason = "no quote" if quote is None else f"only a {quote.kind} quote is available"
            raise QuoteUnavailable(
                message=f"Cannot swap {request.token_in} for {request.token_out}: {reason}."
            )

        amount_out_minimum = minimum_amount_out(quote.amount_out_raw, request.slippage_percent)
        logger.debug(
            f"Prepared swap of {request.amount_in} {request.token_in}, expecting "
            f"{quote.amount_out} {request.token_out} (minimum {amount_out_minimum} base units)"
        )
        return PreparedSwap(
            chain_id=chain_id,
            request=request,
            quote=quote,
            router=chain.router_address,
            amount_in_raw=request.amount_in_raw,
            amount_out_minimum=amount_out_minimum,
        )

    def build_transaction(
        self,
        prepared: PreparedSwap,
        sender: str,
        recipient: str | None = None,
        *,
        now: int | None = None,
    ) -> TxParams:
        """
        Build the router call. The deadline is counted from `now`, or from the current time.
        """

        if now is None:
            now = int(time.time())
        deadline = now + prepared.request.deadline_minutes * 60

        sender = get_checksum_address(sender)
        recipient = get_checksum_address(recipient) if recipient is not None else sender
        pool = prepared.quote.pool
        if prepared.quote.token_in_is_token0:
            token_in, token_out = pool.token0, pool.token1
        else:
            token_in, token_out = pool.token1, pool.token0

        calldata = encode_function_calldata(
            EXACT_INPUT_SINGLE_PROTOTYPE,
            [
                (
                    get_checksum_address(token_in.address),
                    get_checksum_address(token_out.address),
                    pool.fee_tier,
                    recipient,
                    deadline,
                    prepared.amount_in_raw,
                    prepared.amount_out_minimum,
                    0,  # no price limit
                )
            ],
        )
        return TxParams(
            {
                "from": sender,
                "to": prepared.router,
                "data": HexBytes(calldata),
                "value": prepared.value,
            }
        )

    async def submit(
        self,
        prepared: PreparedSwap,
        sender: str,
        *,
        recipient: str | None = None,
        on_submitted: Callable[[HexBytes], None] | None = None,
    ) -> SwapReceipt:
        """
        Submit the swap and wait for its receipt.

        Raises `SwapRejected` or `SwapSubmissionFailed` if nothing was broadcast, and
        `SwapOutcomeUnknown` if submission failed ambiguously. After broadcast, raises
        `SwapReverted` or `SwapTimedOut` with the transaction hash attached.
        """

        w3 = self._w3(prepared.chain_id)
        tx = self.build_transaction(prepared, sender, recipient)

        try:
            tx_hash = HexBytes(await w3.eth.send_transaction(tx))
        except TimeoutError as exc:
            logger.warning(f"Swap submission timed out, it may have been broadcast: {exc}")
            raise SwapOutcomeUnknown(reason=str(exc) or "request timed out") from exc
        except (Web3Exception, ValueError, OSError) as exc:
            if is_user_rejection(exc):
                logger.warning("Swap rejected by the user")
                raise SwapRejected from exc
            logger.warning(f"Swap could not be submitted: {exc}")
            raise SwapSubmissionFailed(reason=str(exc)) from exc

        logger.info(f"Swap submitted: {tx_hash.to_0x_hex()}")
        if on_submitted is not None:
            on_submitted(tx_hash)

        try:
            receipt = await w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.receipt_timeout
            )
        except TimeExhausted as exc:
            logger.warning(f"No receipt for swap {tx_hash.to_0x_hex()}")
            raise SwapTimedOut(tx_hash=tx_hash, timeout_seconds=self.receipt_timeout) from exc
        except (Web3Exception, OSError) as exc:
            logger.warning(f"Could not read the receipt for swap {tx_hash.to_0x_hex()}: {exc}")
            raise SwapOutcomeUnknown(
                reason=str(exc) or exc.__class__.__name__, tx_hash=tx_hash
            ) from exc

        if receipt["status"] == 0:
            logger.warning(f"Swap {tx_hash.to_0x_hex()} reverted")
            raise SwapReverted(tx_hash=tx_hash)

        logger.info(f"Swap {tx_hash.to_0x_hex()} confirmed in block {receipt['blockNumber']}")
        return SwapReceipt(
            chain_id=prepared.chain_id,
            tx_hash=tx_hash,
            amount_in_raw=prepared.amount_in_raw,
            amount_out_minimum=prepared.amount_out_minimum,
            block_number=receipt["blockNumber"],
        )

    async def execute(
        self,
        request: SwapRequest,
        sender: str,
        chain_id: ChainId,
        *,
        recipient: str | None = None,
    ) -> SwapReceipt:
        """
        Quote and submit a swap. For non-native input, the router must already be approved to
        spend the input amount. On chains without a DEX the swap is simulated.
        """

        if not self.registry.has_dex_support(chain_id):
            return await self.simulate(request, chain_id)

        prepared = await self.prepare(request, chain_id)
        return await self.submit(prepared, sender, recipient=recipient)

    async def simulate(self, request: SwapRequest, chain_id: ChainId) -> SwapReceipt:
        """
        Stand in for a swap on a chain without a DEX: wait, then report success with a random
        transaction hash. No contract is called.
        """

        logger.info(
            f"Simulating swap of {request.amount_in} {request.token_in} on chain {chain_id}"
        )
        await asyncio.sleep(self.demo_swap_delay)
        return SwapReceipt(
            chain_id=chain_id,
            tx_hash=HexBytes("0x" + secrets.token_hex(32)),
            simulated=True,
        )

    async def get_transaction_status(
        self,
        tx_hash: HexBytes | str,
        chain_id: ChainId,
    ) -> TransactionStatus:
        """
        Look up a broadcast transaction. Use this before retrying a swap whose outcome is unknown.
        """

        w3 = self._w3(chain_id)

        async def _get_receipt() -> TransactionStatus:
            try:
                receipt = await w3.eth.get_transaction_receipt(HexBytes(tx_hash))
            except TransactionNotFound:
                return TransactionStatus.PENDING
            if receipt["status"] == 1:
                return TransactionStatus.SUCCESS
            return TransactionStatus.REVERTED

        try:
            return await read_with_retry("getTransactionReceipt", _get_receipt)
        except NetworkError:
            logger.warning(f"Could not read the status of {HexBytes(tx_hash).to_0x_hex()}")
            raise
