import asyncio
from collections.abc import Iterable

from eth_typing import ChecksumAddress
from web3 import AsyncBaseProvider, AsyncWeb3
from web3.types import BlockIdentifier

from swapcore.checksum_cache import get_checksum_address
from swapcore.erc20.token import Token
from swapcore.functions import encode_function_calldata, raw_call_async, read_with_retry

"""
Chain reads and calldata builders for ERC-20 tokens. Reads are wrapped with `read_with_retry`, so
RPC failures surface as `NetworkError`.
"""


def approve_calldata(spender: str, amount: int) -> bytes:
    return encode_function_calldata(
        "approve(address,uint256)",
        [get_checksum_address(spender), amount],
    )


async def get_allowance(
    w3: AsyncWeb3[AsyncBaseProvider],
    token: ChecksumAddress,
    owner: str,
    spender: str,
    block_identifier: BlockIdentifier | None = None,
    *,
    max_attempts: int = 3,
) -> int:
    """
    Retrieve the amount of `token` that can be spent by `spender` on behalf of `owner`.
    """

    calldata = encode_function_calldata(
        "allowance(address,address)",
        [get_checksum_address(owner), get_checksum_address(spender)],
    )

    allowance: int
    (allowance,) = await read_with_retry(
        "allowance",
        lambda: raw_call_async(
            w3=w3,
            address=token,
            calldata=calldata,
            return_types=["uint256"],
            block_identifier=block_identifier,
        ),
        max_attempts=max_attempts,
    )
    return allowance


async def get_balance(
    w3: AsyncWeb3[AsyncBaseProvider],
    token: Token,
    owner: str,
    block_identifier: BlockIdentifier | None = None,
    *,
    max_attempts: int = 3,
) -> int:
    """
    Retrieve the balance of `owner`, in the token's smallest unit. The native currency balance is
    read from the account itself.
    """

    owner = get_checksum_address(owner)

    if token.is_native:
        return await read_with_retry(
            "getBalance",
            lambda: w3.eth.get_balance(owner, block_identifier=block_identifier),
            max_attempts=max_attempts,
        )

    calldata = encode_function_calldata("balanceOf(address)", [owner])
    balance: int
    (balance,) = await read_with_retry(
        "balanceOf",
        lambda: raw_call_async(
            w3=w3,
            address=get_checksum_address(token.address),
            calldata=calldata,
            return_types=["uint256"],
            block_identifier=block_identifier,
        ),
        max_attempts=max_attempts,
    )
    return balance


async def get_balances(
    w3: AsyncWeb3[AsyncBaseProvider],
    tokens: Iterable[Token],
    owner: str,
    block_identifier: BlockIdentifier | None = None,
) -> dict[Token, int]:
    """
    Retrieve balances for several tokens concurrently.
    """

    tokens = tuple(tokens)
    balances = await asyncio.gather(
        *(get_balance(w3, token, owner, block_identifier) for token in tokens)
    )
    return dict(zip(tokens, balances, strict=True))
