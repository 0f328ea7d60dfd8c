__all__ = (
    "DEFAULT_FEE_TIER",
    "FEE_TIERS",
    "MAX_DISPLAY_DECIMALS",
    "MAX_INT24",
    "MAX_PRICE_IMPACT_PERCENT",
    "MAX_SLIPPAGE_PERCENT",
    "MAX_UINT8",
    "MAX_UINT24",
    "MAX_UINT128",
    "MAX_UINT160",
    "MAX_UINT256",
    "MIN_INT24",
    "MIN_UINT8",
    "MIN_UINT24",
    "MIN_UINT128",
    "MIN_UINT160",
    "MIN_UINT256",
    "NATIVE_MARKER",
    "Q96",
    "USER_REJECTED_REQUEST_CODE",
    "ZERO_ADDRESS",
)

import typing

from eth_typing import ChecksumAddress

from swapcore.checksum_cache import get_checksum_address


def _min_uint(_: int) -> int:
    return 0


def _max_uint(bits: int) -> int:
    return typing.cast("int", 2**bits - 1)


def _min_int(bits: int) -> int:
    return typing.cast("int", -(2 ** (bits - 1)))


def _max_int(bits: int) -> int:
    return typing.cast("int", (2 ** (bits - 1)) - 1)


MIN_INT24 = _min_int(24)
MAX_INT24 = _max_int(24)

MIN_UINT8 = _min_uint(8)
MAX_UINT8 = _max_uint(8)

MIN_UINT24 = _min_uint(24)
MAX_UINT24 = _max_uint(24)

MIN_UINT128 = _min_uint(128)
MAX_UINT128 = _max_uint(128)

MIN_UINT160 = _min_uint(160)
MAX_UINT160 = _max_uint(160)

MIN_UINT256 = _min_uint(256)
MAX_UINT256 = _max_uint(256)

Q96 = 2**96

ZERO_ADDRESS: ChecksumAddress = get_checksum_address("0x0000000000000000000000000000000000000000")

# Token address placeholder for the chain's native currency
NATIVE_MARKER = "native"

# Pool fee tiers, in hundredths of a basis point
FEE_TIERS = (100, 500, 3000, 10000)
DEFAULT_FEE_TIER = 3000

MAX_DISPLAY_DECIMALS = 6
MAX_PRICE_IMPACT_PERCENT = 5.0
MAX_SLIPPAGE_PERCENT = 50

# EIP-1193 error code returned by a wallet when the user declines a request
USER_REJECTED_REQUEST_CODE = 4001
