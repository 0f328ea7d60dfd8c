import dataclasses
import enum
from decimal import Decimal
from typing import ClassVar

from swapcore.erc20.token import Token
from swapcore.exceptions import SwapcoreError
from swapcore.types.aliases import ChainId, FeeTier
from swapcore.uniswap.v3_types import PoolReference, PoolState


@dataclasses.dataclass(slots=True, frozen=True)
class QuoteRequest:
    token_in: Token
    token_out: Token
    amount_in: str
    fee_tier: FeeTier | None = None


class QuoteKind(enum.StrEnum):
    LIVE = "live"
    ESTIMATED = "estimated"
    DEGRADED = "degraded"


class EstimateReason(enum.StrEnum):
    NO_DEX = "no_dex"
    POOL_NOT_FOUND = "pool_not_found"
    POOL_NOT_INITIALIZED = "pool_not_initialized"
    ZERO_LIQUIDITY = "zero_liquidity"


@dataclasses.dataclass(slots=True, frozen=True, kw_only=True)
class _QuoteBase:
    chain_id: ChainId
    request: QuoteRequest
    amount_in: Decimal
    amount_out: str
    amount_out_raw: int
    rate: float
    price_impact_percent: float

    kind: ClassVar[QuoteKind]

    @property
    def token_in(self) -> Token:
        return self.request.token_in

    @property
    def token_out(self) -> Token:
        return self.request.token_out

    @property
    def is_live(self) -> bool:
        return self.kind is QuoteKind.LIVE


@dataclasses.dataclass(slots=True, frozen=True, kw_only=True)
class LiveQuote(_QuoteBase):
    """
    A quote derived from the state of an on-chain pool.
    """

    kind = QuoteKind.LIVE

    pool: PoolReference
    state: PoolState
    token_in_is_token0: bool

    @property
    def fee_tier(self) -> FeeTier:
        return self.pool.fee_tier


@dataclasses.dataclass(slots=True, frozen=True, kw_only=True)
class EstimatedQuote(_QuoteBase):
    """
    A non-authoritative quote from the reference rate table, used when no DEX is deployed or no
    usable pool exists. No liquidity backs this number.
    """

    kind = QuoteKind.ESTIMATED

    reason: EstimateReason


@dataclasses.dataclass(slots=True, frozen=True, kw_only=True)
class DegradedQuote(_QuoteBase):
    """
    A reference-rate quote produced because the chain could not be read. The error is retained so
    callers can surface a warning and retry.
    """

    kind = QuoteKind.DEGRADED

    error: SwapcoreError


type Quote = LiveQuote | EstimatedQuote | DegradedQuote
