from typing import Any

from swapcore.exceptions.base import SwapcoreError

"""
Exceptions defined here are raised by classes and functions in the `registry` module.
"""


class RegistryError(SwapcoreError):
    """
    Exception raised inside registries.
    """


class UnknownChain(RegistryError):
    def __init__(self, chain_id: int) -> None:
        self.chain_id = chain_id
        super().__init__(message=f"Chain ID {chain_id} is not in the chain registry.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.chain_id,)


class UnknownToken(RegistryError):
    def __init__(self, chain_id: int, token: str) -> None:
        self.chain_id = chain_id
        self.token = token
        super().__init__(message=f"Token {token!r} is not registered on chain {chain_id}.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.chain_id, self.token)


class DexUnavailable(RegistryError):
    def __init__(self, chain_id: int) -> None:
        self.chain_id = chain_id
        super().__init__(message=f"No DEX is deployed on chain {chain_id}.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.chain_id,)
