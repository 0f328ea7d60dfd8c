import dataclasses
import enum
from weakref import WeakSet

from hexbytes import HexBytes

from swapcore.connection import AsyncConnectionManager, async_connection_manager
from swapcore.exceptions import (
    ChainChanged,
    InvalidStateTransition,
    QuoteUnavailable,
    SessionBusy,
    ValidationError,
)
from swapcore.logging import logger
from swapcore.transaction.allowance import AllowanceManager
from swapcore.transaction.executor import SwapExecutor, SwapReceipt, SwapRequest
from swapcore.types.aliases import ChainId
from swapcore.types.observer import AbstractPublisherMessage, PublisherMixin, Subscriber


class SwapStatus(enum.StrEnum):
    IDLE = "idle"
    APPROVING = "approving"
    SWAPPING = "swapping"
    SUCCESS = "success"
    ERROR = "error"


ALLOWED_TRANSITIONS: dict[SwapStatus, frozenset[SwapStatus]] = {
    SwapStatus.IDLE: frozenset({SwapStatus.APPROVING, SwapStatus.SWAPPING}),
    SwapStatus.APPROVING: frozenset({SwapStatus.SWAPPING, SwapStatus.ERROR}),
    SwapStatus.SWAPPING: frozenset({SwapStatus.SUCCESS, SwapStatus.ERROR}),
    # Terminal states only return to IDLE through reset()
    SwapStatus.SUCCESS: frozenset(),
    SwapStatus.ERROR: frozenset(),
}


@dataclasses.dataclass(slots=True, frozen=True)
class SwapStatusMessage(AbstractPublisherMessage):
    previous: SwapStatus
    status: SwapStatus
    tx_hash: HexBytes | None = None
    error: str | None = None


class SwapSession(PublisherMixin):
    """
    Sequences one swap at a time: approval of the input token (unless it is the native currency),
    then the swap itself. Subscribers are notified of every status change.

    A reset only clears local state. It cannot stop a transaction that was already broadcast.
    """

    def __init__(
        self,
        executor: SwapExecutor,
        owner: str,
        *,
        connections: AsyncConnectionManager | None = None,
    ) -> None:
        self.executor = executor
        self.owner = owner
        self.connections = connections if connections is not None else async_connection_manager

        self._status = SwapStatus.IDLE
        self.tx_hash: HexBytes | None = None
        self.error: str | None = None
        self.exception: Exception | None = None
        self.receipt: SwapReceipt | None = None
        self.history: list[SwapStatus] = [SwapStatus.IDLE]

        self._subscribers: WeakSet[Subscriber] = WeakSet()

    @property
    def status(self) -> SwapStatus:
        return self._status

    @property
    def is_busy(self) -> bool:
        return self._status in (SwapStatus.APPROVING, SwapStatus.SWAPPING)

    def _transition(self, status: SwapStatus) -> None:
        if status not in ALLOWED_TRANSITIONS[self._status]:
            raise InvalidStateTransition(current=self._status, requested=status)

        previous, self._status = self._status, status
        self.history.append(status)
        logger.info(f"Swap session: {previous} -> {status}")
        self._notify_subscribers(
            SwapStatusMessage(
                previous=previous,
                status=status,
                tx_hash=self.tx_hash,
                error=self.error,
            )
        )

    def _fail(self, exc: Exception) -> None:
        self.exception = exc
        self.error = getattr(exc, "message", None) or str(exc) or exc.__class__.__name__
        if self.tx_hash is None:
            self.tx_hash = getattr(exc, "tx_hash", None)
        self._transition(SwapStatus.ERROR)

    def _set_tx_hash(self, tx_hash: HexBytes) -> None:
        self.tx_hash = tx_hash

    def reset(self) -> None:
        """
        Return a finished session to IDLE, clearing its result.
        """

        if self.is_busy:
            raise InvalidStateTransition(current=self._status, requested=SwapStatus.IDLE)

        previous, self._status = self._status, SwapStatus.IDLE
        self.tx_hash = None
        self.error = None
        self.exception = None
        self.receipt = None
        self.history = [SwapStatus.IDLE]

        if previous is not SwapStatus.IDLE:
            logger.info(f"Swap session: {previous} -> {SwapStatus.IDLE} (reset)")
            self._notify_subscribers(SwapStatusMessage(previous=previous, status=SwapStatus.IDLE))

    def _check_chain(self, chain_id: ChainId) -> None:
        active = self.connections.default_chain_id
        if active != chain_id:
            raise ChainChanged(expected=chain_id, active=active)

    async def execute_swap(self, request: SwapRequest) -> SwapReceipt:
        """
        Run a swap on the active chain.

        On a chain with a DEX, a live quote is fetched first. If none is available the session
        stays IDLE and `QuoteUnavailable` is raised. A non-native input token always passes through
        APPROVING, where the allowance is checked again. Any failure after that moves the session
        to ERROR, keeping the message and transaction hash, and the exception is re-raised.

        On a chain without a DEX, the swap is simulated.
        """

        if self._status is not SwapStatus.IDLE:
            raise SessionBusy(status=self._status)

        self.error = None
        self.exception = None
        chain_id = self.connections.default_chain_id

        if not self.executor.registry.has_dex_support(chain_id):
            self._transition(SwapStatus.SWAPPING)
            try:
                self.receipt = await self.executor.simulate(request, chain_id)
            except Exception as exc:
                self._fail(exc)
                raise
            self.tx_hash = self.receipt.tx_hash
            self._transition(SwapStatus.SUCCESS)
            return self.receipt

        try:
            prepared = await self.executor.prepare(request, chain_id)
        except (QuoteUnavailable, ValidationError) as exc:
            # Nothing was attempted, so the session is still idle
            self.exception = exc
            self.error = exc.message or str(exc)
            logger.warning(f"Swap not started: {self.error}")
            raise

        try:
            if not request.token_in.is_native:
                self._transition(SwapStatus.APPROVING)
                self._check_chain(chain_id)
                allowance_manager = AllowanceManager(
                    self.executor.connections.get_web3(chain_id),
                    receipt_timeout=self.executor.receipt_timeout,
                    read_retry_attempts=self.executor.engine.read_retry_attempts,
                )
                await allowance_manager.ensure_approved(
                    token=request.token_in,
                    owner=self.owner,
                    amount=prepared.amount_in_raw,
                    spender=prepared.router,
                )

            self._transition(SwapStatus.SWAPPING)
            self._check_chain(chain_id)
            self.receipt = await self.executor.submit(
                prepared,
                self.owner,
                on_submitted=self._set_tx_hash,
            )
        except Exception as exc:
            # Once the session has left IDLE, every failure must end in ERROR
            self._fail(exc)
            raise

        self.tx_hash = self.receipt.tx_hash
        self._transition(SwapStatus.SUCCESS)
        return self.receipt
