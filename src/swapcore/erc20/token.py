from typing import Any

from pydantic import BaseModel, computed_field, field_validator

from swapcore.checksum_cache import get_checksum_address
from swapcore.constants import NATIVE_MARKER
from swapcore.exceptions import SwapcoreValueError
from swapcore.validation.evm_values import ValidatedUint8


class Token(BaseModel, frozen=True):
    """
    A token as listed in the chain registry. The chain's native currency uses the address
    placeholder "native" instead of a contract address.

    Identity is by address, so tokens compare equal to each other and to address strings without
    regard to checksum capitalization.
    """

    address: str
    symbol: str
    name: str
    decimals: ValidatedUint8

    @field_validator("address", mode="before")
    @classmethod
    def normalize_address(cls, address: Any) -> str:
        if isinstance(address, str) and address.lower() == NATIVE_MARKER:
            return NATIVE_MARKER
        return get_checksum_address(address)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_native(self) -> bool:
        return self.address == NATIVE_MARKER

    def onchain(self, wrapped_native: "Token | None") -> "Token":
        """
        The token used for contract calls. The native currency is substituted by the chain's
        wrapped native token.
        """

        if self.is_native:
            if wrapped_native is None:
                raise SwapcoreValueError(
                    message=f"No wrapped native token is configured to stand in for {self.symbol}."
                )
            return wrapped_native
        return self

    def __eq__(self, other: object) -> bool:
        match other:
            case Token():
                return self.address.lower() == other.address.lower()
            case str():
                return self.address.lower() == other.lower()
            case _:
                return NotImplemented

    def __hash__(self) -> int:
        return hash(self.address.lower())

    def __str__(self) -> str:
        return self.symbol

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(address={self.address}, symbol='{self.symbol}', name='{self.name}', decimals={self.decimals})"  # noqa:E501
