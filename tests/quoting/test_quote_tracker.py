import asyncio

import pytest

from swapcore.config import FallbackSettings
from swapcore.connection import async_connection_manager
from swapcore.exceptions import StaleQuote
from swapcore.quoting import Quote, QuoteEngine, QuoteRequest, QuoteTracker
from swapcore.registry import ChainRegistry, ZgGalileoTestnet
from swapcore.types.aliases import ChainId
from tests.conftest import MAINNET_CHAIN_ID


class GatedQuoteEngine(QuoteEngine):
    """
    Holds every quote until its gate is opened, so tests can control the order of completion.
    """

    def __init__(self, registry: ChainRegistry, fallback: FallbackSettings) -> None:
        super().__init__(registry, fallback)
        self.gates: list[asyncio.Event] = []

    async def get_quote(
        self, request: QuoteRequest, chain_id: ChainId | None = None
    ) -> Quote | None:
        gate = asyncio.Event()
        self.gates.append(gate)
        await gate.wait()
        return await super().get_quote(request, chain_id)


@pytest.fixture
def engine(registry: ChainRegistry, fallback: FallbackSettings) -> GatedQuoteEngine:
    return GatedQuoteEngine(registry, fallback)


def _request(amount: str) -> QuoteRequest:
    native = ZgGalileoTestnet.native_token
    usdc = next(token for token in ZgGalileoTestnet.tokens if token.symbol == "USDCe")
    return QuoteRequest(token_in=native, token_out=usdc, amount_in=amount)


async def test_refresh_applies_quote(registry: ChainRegistry, testnet: None):
    tracker = QuoteTracker(QuoteEngine(registry))

    quote = await tracker.refresh(_request("1"))

    assert quote is not None
    assert tracker.current is quote
    assert tracker.latest_request_id == 1


async def test_empty_amount_clears_quote(registry: ChainRegistry, testnet: None):
    tracker = QuoteTracker(QuoteEngine(registry))
    await tracker.refresh(_request("1"))

    assert await tracker.refresh(_request("")) is None
    assert tracker.current is None


async def test_newer_request_supersedes_older(engine: GatedQuoteEngine, testnet: None):
    tracker = QuoteTracker(engine)

    first = asyncio.create_task(tracker.refresh(_request("1")))
    await asyncio.sleep(0)
    second = asyncio.create_task(tracker.refresh(_request("2")))
    await asyncio.sleep(0)
    assert len(engine.gates) == 2

    # The newer request completes first and is displayed
    engine.gates[1].set()
    newer = await second
    assert newer is not None
    assert newer.amount_out == "3.000000"
    assert tracker.current is newer

    # The older response arrives late and is discarded
    engine.gates[0].set()
    with pytest.raises(StaleQuote) as exc:
        await first
    assert exc.value.request_id == 1
    assert exc.value.latest_request_id == 2
    assert tracker.current is newer


async def test_result_for_previous_chain_is_discarded(engine: GatedQuoteEngine, testnet: None):
    tracker = QuoteTracker(engine)

    pending = asyncio.create_task(tracker.refresh(_request("1")))
    await asyncio.sleep(0)

    async_connection_manager.set_default_chain(MAINNET_CHAIN_ID)
    engine.gates[0].set()

    with pytest.raises(StaleQuote, match="active chain changed"):
        await pending
    assert tracker.current is None


async def test_invalidate_discards_in_flight_refresh(engine: GatedQuoteEngine, testnet: None):
    tracker = QuoteTracker(engine)

    pending = asyncio.create_task(tracker.refresh(_request("1")))
    await asyncio.sleep(0)
    tracker.invalidate()
    engine.gates[0].set()

    with pytest.raises(StaleQuote):
        await pending
    assert tracker.current is None
