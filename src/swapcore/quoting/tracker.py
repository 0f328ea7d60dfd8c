from swapcore.exceptions import StaleQuote
from swapcore.logging import logger
from swapcore.quoting.engine import QuoteEngine
from swapcore.quoting.quote import Quote, QuoteRequest
from swapcore.types.aliases import RequestId


class QuoteTracker:
    """
    Holds the quote currently on display for one swap form. Every refresh takes a new request ID,
    and a result is applied only if no newer refresh was started and the active chain is the one
    it was quoted on.
    """

    def __init__(self, engine: QuoteEngine) -> None:
        self.engine = engine
        self.current: Quote | None = None
        self._latest_request_id: RequestId = 0

    @property
    def latest_request_id(self) -> RequestId:
        return self._latest_request_id

    def invalidate(self) -> None:
        """
        Discard the displayed quote and any refresh still in flight.
        """

        self._latest_request_id += 1
        self.current = None

    async def refresh(self, request: QuoteRequest) -> Quote | None:
        """
        Quote `request` on the active chain and display the result.

        Raises `StaleQuote` if the result was superseded while the quote was being produced. Stale
        results are never applied.
        """

        self._latest_request_id += 1
        request_id = self._latest_request_id
        chain_id = self.engine.connections.default_chain_id

        quote = await self.engine.get_quote(request, chain_id)

        if request_id != self._latest_request_id:
            logger.debug(f"Discarding quote {request_id}, superseded by {self._latest_request_id}")
            raise StaleQuote(request_id=request_id, latest_request_id=self._latest_request_id)

        active_chain_id = self.engine.connections.default_chain_id
        if active_chain_id != chain_id:
            logger.debug(f"Discarding quote {request_id}, chain changed to {active_chain_id}")
            self.current = None
            raise StaleQuote(
                request_id=request_id,
                latest_request_id=self._latest_request_id,
                reason=f"active chain changed from {chain_id} to {active_chain_id}",
            )

        self.current = quote
        return quote
