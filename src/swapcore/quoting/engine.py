from decimal import Decimal
from typing import Self

from swapcore.config import FallbackSettings, Settings
from swapcore.connection import AsyncConnectionManager, async_connection_manager
from swapcore.constants import MAX_PRICE_IMPACT_PERCENT
from swapcore.exceptions import (
    InvalidSwapRequest,
    NetworkError,
    PoolNotFound,
    PoolNotInitialized,
    PoolTokenMismatch,
    SameTokenSwap,
    SwapcoreError,
)
from swapcore.functions import (
    display_precision,
    parse_decimal_amount,
    parse_units,
    truncate_decimal,
)
from swapcore.logging import logger
from swapcore.quoting.quote import (
    DegradedQuote,
    EstimatedQuote,
    EstimateReason,
    LiveQuote,
    Quote,
    QuoteRequest,
)
from swapcore.registry.chains import ChainRegistry
from swapcore.types.aliases import ChainId
from swapcore.uniswap.pool_locator import find_pool
from swapcore.uniswap.price_oracle import read_pool_state
from swapcore.uniswap.v3_functions import price_from_state


def estimate_price_impact(amount_in: Decimal) -> float:
    """
    Heuristic price impact for a trade size: 0.01% plus 0.1% per unit of input, capped at 5%. This
    is not derived from pool depth.
    """

    return min(0.01 + float(amount_in) * 0.001, MAX_PRICE_IMPACT_PERCENT)


class QuoteEngine:
    """
    Produces exact-input quotes from on-chain pool state, falling back to reference rates when the
    active chain has no DEX, the pair has no usable pool, or the chain cannot be read.
    """

    def __init__(
        self,
        registry: ChainRegistry,
        fallback: FallbackSettings | None = None,
        *,
        connections: AsyncConnectionManager | None = None,
        read_retry_attempts: int = 3,
    ) -> None:
        self.registry = registry
        self.fallback = fallback if fallback is not None else FallbackSettings()
        self.connections = connections if connections is not None else async_connection_manager
        self.read_retry_attempts = read_retry_attempts

    @classmethod
    def from_settings(cls, config: Settings) -> Self:
        return cls(
            ChainRegistry.from_settings(config),
            config.fallback,
            read_retry_attempts=config.swap.read_retry_attempts,
        )

    async def get_quote(
        self,
        request: QuoteRequest,
        chain_id: ChainId | None = None,
    ) -> Quote | None:
        """
        Quote a trade on `chain_id`, or on the active chain if not given.

        Returns `None` for an empty, malformed or non-positive input amount. Raises `SameTokenSwap`
        if both sides are the same token.
        """

        amount_in = parse_decimal_amount(request.amount_in)
        if amount_in is None or amount_in <= 0:
            return None

        token_in, token_out = request.token_in, request.token_out
        if token_in == token_out or token_in.symbol.lower() == token_out.symbol.lower():
            raise SameTokenSwap(symbol=token_in.symbol)

        if chain_id is None:
            chain_id = self.connections.default_chain_id
        chain = self.registry.get(chain_id)

        # Checked on every call, the registry may have been replaced after a network switch
        if not self.registry.has_dex_support(chain_id):
            return self._estimated_quote(
                chain_id, request, amount_in, reason=EstimateReason.NO_DEX
            )

        onchain_in = token_in.onchain(chain.wrapped_native_token)
        onchain_out = token_out.onchain(chain.wrapped_native_token)
        if onchain_in == onchain_out:
            raise InvalidSwapRequest(
                message=f"{token_in} and {token_out} resolve to the same token on chain {chain_id}."
            )

        fee_tier = request.fee_tier if request.fee_tier is not None else chain.default_fee_tier
        w3 = self.connections.get_web3(chain_id)

        try:
            pool = await find_pool(
                w3,
                chain,
                onchain_in,
                onchain_out,
                fee_tier,
                max_attempts=self.read_retry_attempts,
            )
            state = await read_pool_state(w3, pool, max_attempts=self.read_retry_attempts)
        except PoolNotFound:
            return self._estimated_quote(
                chain_id, request, amount_in, reason=EstimateReason.POOL_NOT_FOUND
            )
        except PoolNotInitialized:
            return self._estimated_quote(
                chain_id, request, amount_in, reason=EstimateReason.POOL_NOT_INITIALIZED
            )
        except (NetworkError, PoolTokenMismatch) as exc:
            logger.warning(f"Quote for {token_in}/{token_out} degraded to reference rate: {exc}")
            return self._degraded_quote(chain_id, request, amount_in, error=exc)

        if state.liquidity == 0:
            return self._estimated_quote(
                chain_id, request, amount_in, reason=EstimateReason.ZERO_LIQUIDITY
            )

        token_in_is_token0 = pool.is_token0(onchain_in)
        rate = price_from_state(
            state,
            token_in.decimals,
            token_out.decimals,
            token_in_is_token0=token_in_is_token0,
        )
        amount_out = amount_in * Decimal(str(rate))

        logger.debug(f"Live quote {amount_in} {token_in} -> {amount_out} {token_out} @ {rate}")
        return LiveQuote(
            chain_id=chain_id,
            request=request,
            amount_in=amount_in,
            amount_out=truncate_decimal(amount_out, display_precision(token_out.decimals)),
            amount_out_raw=parse_units(amount_out, token_out.decimals),
            rate=rate,
            price_impact_percent=estimate_price_impact(amount_in),
            pool=pool,
            state=state,
            token_in_is_token0=token_in_is_token0,
        )

    def _reference_amounts(
        self, request: QuoteRequest, amount_in: Decimal
    ) -> tuple[float, str, int]:
        rate = self.fallback.rate_for(request.token_in.symbol, request.token_out.symbol)
        amount_out = amount_in * Decimal(str(rate))
        decimals = request.token_out.decimals
        return (
            rate,
            truncate_decimal(amount_out, display_precision(decimals)),
            parse_units(amount_out, decimals),
        )

    def _estimated_quote(
        self,
        chain_id: ChainId,
        request: QuoteRequest,
        amount_in: Decimal,
        *,
        reason: EstimateReason,
    ) -> EstimatedQuote:
        rate, amount_out, amount_out_raw = self._reference_amounts(request, amount_in)
        price_impact = (
            self.fallback.no_dex_price_impact
            if reason is EstimateReason.NO_DEX
            else self.fallback.no_pool_price_impact
        )

        logger.info(
            f"Estimated quote {amount_in} {request.token_in} -> {amount_out} {request.token_out} "
            f"({reason})"
        )
        return EstimatedQuote(
            chain_id=chain_id,
            request=request,
            amount_in=amount_in,
            amount_out=amount_out,
            amount_out_raw=amount_out_raw,
            rate=rate,
            price_impact_percent=price_impact,
            reason=reason,
        )

    def _degraded_quote(
        self,
        chain_id: ChainId,
        request: QuoteRequest,
        amount_in: Decimal,
        *,
        error: SwapcoreError,
    ) -> DegradedQuote:
        rate, amount_out, amount_out_raw = self._reference_amounts(request, amount_in)
        return DegradedQuote(
            chain_id=chain_id,
            request=request,
            amount_in=amount_in,
            amount_out=amount_out,
            amount_out_raw=amount_out_raw,
            rate=rate,
            price_impact_percent=self.fallback.degraded_price_impact,
            error=error,
        )
