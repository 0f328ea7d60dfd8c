import dataclasses

import pydantic
from eth_typing import ChecksumAddress

from swapcore.erc20.token import Token
from swapcore.types.aliases import BlockNumber, FeeTier
from swapcore.validation.evm_values import ValidatedInt24, ValidatedUint128, ValidatedUint160

type SqrtPriceX96 = int


@dataclasses.dataclass(slots=True, frozen=True)
class PoolReference:
    """
    A located pool. `token0` and `token1` follow the pool's own ordering (lower address first), so
    callers must check which side their input token occupies.
    """

    address: ChecksumAddress
    token0: Token
    token1: Token
    fee_tier: FeeTier

    def is_token0(self, token: Token) -> bool:
        return self.token0 == token


class PoolState(pydantic.BaseModel, frozen=True):
    """
    A point-in-time snapshot of the pool's price and in-range liquidity.
    """

    pool: ChecksumAddress
    sqrt_price_x96: ValidatedUint160
    tick: ValidatedInt24
    liquidity: ValidatedUint128
    block: BlockNumber | None = None
