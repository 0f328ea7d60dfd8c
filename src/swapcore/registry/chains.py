from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any, Self

from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from pydantic import BaseModel, HttpUrl, field_validator, model_validator

from swapcore.checksum_cache import get_checksum_address
from swapcore.constants import DEFAULT_FEE_TIER, FEE_TIERS, NATIVE_MARKER
from swapcore.erc20.token import Token
from swapcore.exceptions import DexUnavailable, UnknownChain, UnknownToken
from swapcore.types.aliases import ChainId
from swapcore.validation.evm_values import ValidatedUint8, ValidatedUint24

if TYPE_CHECKING:
    from swapcore.config import Settings


class NativeCurrency(BaseModel, frozen=True):
    name: str
    symbol: str
    decimals: ValidatedUint8 = 18


class ChainConfig(BaseModel, frozen=True):
    """
    Static description of a network: its native currency, the exchange contracts deployed on it,
    and the tokens offered for swapping. A chain without a router has no DEX, and swaps on it run
    in demo mode.
    """

    chain_id: ChainId
    name: str
    native_currency: NativeCurrency
    router_address: ChecksumAddress | None = None
    factory_address: ChecksumAddress | None = None
    wrapped_native_address: ChecksumAddress | None = None
    fee_tiers: tuple[ValidatedUint24, ...] = FEE_TIERS
    default_fee_tier: ValidatedUint24 = DEFAULT_FEE_TIER
    tokens: tuple[Token, ...] = ()
    explorer_url: HttpUrl | None = None
    testnet: bool = False

    @field_validator("router_address", "factory_address", "wrapped_native_address", mode="before")
    @classmethod
    def checksum_addresses(cls, address: Any) -> ChecksumAddress | None:
        return None if address is None else get_checksum_address(address)

    @model_validator(mode="after")
    def check_deployment(self) -> Self:
        if self.router_address is not None and (
            self.factory_address is None or self.wrapped_native_address is None
        ):
            msg = "A chain with a router must also define the factory and wrapped native addresses"
            raise ValueError(msg)
        if self.default_fee_tier not in self.fee_tiers:
            msg = f"Default fee tier {self.default_fee_tier} is not one of {self.fee_tiers}"
            raise ValueError(msg)
        return self

    @property
    def has_dex(self) -> bool:
        return self.router_address is not None

    @property
    def native_token(self) -> Token:
        return Token(
            address=NATIVE_MARKER,
            symbol=self.native_currency.symbol,
            name=self.native_currency.name,
            decimals=self.native_currency.decimals,
        )

    @property
    def wrapped_native_token(self) -> Token | None:
        if self.wrapped_native_address is None:
            return None
        return Token(
            address=self.wrapped_native_address,
            symbol=f"W{self.native_currency.symbol}",
            name=f"Wrapped {self.native_currency.name}",
            decimals=self.native_currency.decimals,
        )


class ChainRegistry:
    """
    Read-only lookup of chain configurations, keyed by chain ID. A registry is replaced as a whole,
    never edited in place.
    """

    def __init__(self, chains: Iterable[ChainConfig]) -> None:
        self._chains: dict[ChainId, ChainConfig] = {chain.chain_id: chain for chain in chains}

    @classmethod
    def from_settings(cls, settings: "Settings") -> Self:
        """
        Build a registry from the built-in deployments, with chains defined in the settings
        replacing built-in chains with the same ID.
        """

        from swapcore.registry.deployments import BUILTIN_CHAINS

        chains = {chain.chain_id: chain for chain in BUILTIN_CHAINS}
        for chain_id, chain in settings.chains.items():
            chains[chain_id] = chain
        return cls(chains.values())

    def __contains__(self, chain_id: object) -> bool:
        return chain_id in self._chains

    def __iter__(self) -> Iterator[ChainConfig]:
        return iter(self._chains.values())

    def __len__(self) -> int:
        return len(self._chains)

    def get(self, chain_id: ChainId) -> ChainConfig:
        try:
            return self._chains[chain_id]
        except KeyError:
            raise UnknownChain(chain_id=chain_id) from None

    def has_dex_support(self, chain_id: ChainId) -> bool:
        """
        Check if swaps on this chain can use real liquidity. Unknown chains have no DEX support.
        """

        chain = self._chains.get(chain_id)
        return chain is not None and chain.has_dex

    def wrapped_native_token(self, chain_id: ChainId) -> Token:
        wrapped = self.get(chain_id).wrapped_native_token
        if wrapped is None:
            raise DexUnavailable(chain_id=chain_id)
        return wrapped

    def get_token(self, chain_id: ChainId, token: str) -> Token:
        """
        Look up a token on the chain by symbol or address. The native currency matches its own
        symbol and the "native" placeholder.
        """

        chain = self.get(chain_id)
        candidates = [chain.native_token, *chain.tokens]
        if (wrapped := chain.wrapped_native_token) is not None:
            candidates.append(wrapped)

        for candidate in candidates:
            if candidate == token or candidate.symbol.lower() == token.lower():
                return candidate

        raise UnknownToken(chain_id=chain_id, token=token)

    def explorer_tx_url(self, chain_id: ChainId, tx_hash: HexBytes | str) -> str | None:
        explorer = self.get(chain_id).explorer_url
        if explorer is None:
            return None
        tx = tx_hash.to_0x_hex() if isinstance(tx_hash, HexBytes) else tx_hash
        return f"{str(explorer).rstrip('/')}/tx/{tx}"
