from collections.abc import Awaitable, Callable, Sequence
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from fractions import Fraction
from typing import Any

import eth_abi.abi
from eth_abi.exceptions import DecodingError
from eth_typing import ChecksumAddress
from eth_utils.crypto import keccak
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)
from web3 import AsyncBaseProvider, AsyncWeb3
from web3.exceptions import ContractLogicError, Web3Exception
from web3.types import BlockIdentifier, TxParams

from swapcore.constants import MAX_DISPLAY_DECIMALS, USER_REJECTED_REQUEST_CODE
from swapcore.exceptions import NetworkError, SwapcoreValueError


def encode_function_calldata(
    function_prototype: str, function_arguments: Sequence[Any] | None
) -> bytes:
    """
    Encode the calldata to execute a call to the given function prototype, with ordered arguments.
    The resulting bytes array will include the 4-byte function selector, followed by the
    ABI-encoded arguments.
    """

    if function_arguments is None:
        function_arguments = ()

    return keccak(text=function_prototype)[:4] + eth_abi.abi.encode(
        types=extract_argument_types_from_function_prototype(function_prototype),
        args=function_arguments,
    )


def extract_argument_types_from_function_prototype(function_prototype: str) -> list[str]:
    """
    Extract the argument types from the function prototype. Tuple arguments are kept intact.

    e.g. the argument types for the prototype 'function(address,uint256)' are ['address','uint256'],
    and for 'function((address,uint24),bool)' are ['(address,uint24)','bool']
    """

    function_args = function_prototype[
        function_prototype.find("(") + 1 : function_prototype.rfind(")")
    ]

    argument_types: list[str] = []
    depth = 0
    start = 0
    for position, char in enumerate(function_args):
        match char:
            case "(":
                depth += 1
            case ")":
                depth -= 1
            case "," if depth == 0:
                argument_types.append(function_args[start:position])
                start = position + 1

    if function_args:
        argument_types.append(function_args[start:])

    return argument_types


async def raw_call_async(
    w3: AsyncWeb3[AsyncBaseProvider],
    address: ChecksumAddress,
    calldata: bytes,
    return_types: list[str],
    block_identifier: BlockIdentifier | None = None,
) -> tuple[Any, ...]:
    """
    Perform an eth_call at the given address and return the decoded response.
    """

    return eth_abi.abi.decode(
        types=return_types,
        data=await w3.eth.call(
            transaction=TxParams(
                to=address,
                data=calldata,
            ),
            block_identifier=block_identifier,
        ),
    )


def parse_decimal_amount(amount: str | Decimal | None) -> Decimal | None:
    """
    Convert a user-entered amount to a `Decimal`. Returns `None` for empty, malformed or
    non-finite input.
    """

    if amount is None:
        return None
    if isinstance(amount, Decimal):
        return amount if amount.is_finite() else None

    amount = amount.strip().replace(",", "")
    if not amount:
        return None

    try:
        value = Decimal(amount)
    except InvalidOperation:
        return None

    return value if value.is_finite() else None


def parse_units(amount: str | Decimal, decimals: int) -> int:
    """
    Convert a decimal amount to the token's smallest unit. Fractional digits beyond `decimals` are
    truncated.
    """

    value = parse_decimal_amount(amount)
    if value is None:
        raise SwapcoreValueError(message=f"Invalid amount {amount!r}")
    if value < 0:
        raise SwapcoreValueError(message="Amount cannot be negative")

    return int(value.scaleb(decimals).to_integral_value(rounding=ROUND_DOWN))


def format_units(raw_amount: int, decimals: int, display_decimals: int = 4) -> str:
    """
    Format an amount in the token's smallest unit as a decimal string, truncated to
    `display_decimals` fractional digits with trailing zeros removed.
    """

    integer_part, fractional_part = divmod(raw_amount, 10**decimals)
    fractional = str(fractional_part).rjust(decimals, "0")[:display_decimals].rstrip("0")
    return f"{integer_part}.{fractional}" if fractional else str(integer_part)


def display_precision(decimals: int) -> int:
    return min(decimals, MAX_DISPLAY_DECIMALS)


def truncate_decimal(value: Decimal, places: int) -> str:
    """
    Truncate (never round) a decimal to a fixed number of fractional digits.
    """

    return f"{value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_DOWN):f}"


def minimum_amount_out(expected_amount_out: int, slippage_percent: float | Decimal | str) -> int:
    """
    Calculate the slippage-adjusted output bound, in the token's smallest unit. The result is
    rounded down so the bound never exceeds the tolerance.
    """

    slippage = Fraction(str(slippage_percent))
    if not (0 <= slippage < 100):
        raise SwapcoreValueError(message=f"Invalid slippage tolerance {slippage_percent}%")

    bound = Fraction(expected_amount_out) * (100 - slippage) / 100
    return bound.numerator // bound.denominator


def is_user_rejection(exc: BaseException) -> bool:
    """
    Check if an error raised by a wallet-backed provider means the user declined the request.
    """

    rpc_response = getattr(exc, "rpc_response", None)
    if isinstance(rpc_response, dict):
        error = rpc_response.get("error")
        if isinstance(error, dict) and error.get("code") == USER_REJECTED_REQUEST_CODE:
            return True

    return "user rejected" in str(exc).lower() or "user denied" in str(exc).lower()


_TRANSIENT_READ_ERRORS = (Web3Exception, OSError, TimeoutError)


async def read_with_retry[T](
    operation: str,
    read: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = 3,
) -> T:
    """
    Await a chain read, retrying transient RPC failures. Reverts and undecodable results are not
    retried. Any failure that remains is raised as a `NetworkError`.
    """

    retrier = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential_jitter(initial=0.1, max=2, jitter=0.1),
        retry=(
            retry_if_exception_type(_TRANSIENT_READ_ERRORS)
            & retry_if_not_exception_type(ContractLogicError)
        ),
        reraise=True,
    )

    try:
        async for attempt in retrier:
            with attempt:
                return await read()
    except (*_TRANSIENT_READ_ERRORS, DecodingError) as exc:
        raise NetworkError(operation=operation, reason=str(exc) or exc.__class__.__name__) from exc

    raise NetworkError(operation=operation)  # pragma: no cover
