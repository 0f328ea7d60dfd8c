import pydantic
import pytest

from swapcore.erc20.token import Token
from swapcore.exceptions import SwapcoreValueError


def test_native_token(wrapped_native_token: Token):
    native = Token(address="NATIVE", symbol="0G", name="0G", decimals=18)
    assert native.is_native
    assert native.address == "native"
    assert native.onchain(wrapped_native_token) is wrapped_native_token

    with pytest.raises(SwapcoreValueError):
        native.onchain(None)


def test_token_addresses_are_checksummed(usdc: Token):
    token = Token(address=usdc.address.lower(), symbol="X", name="X", decimals=6)
    assert token.address == usdc.address
    assert not token.is_native
    assert token.onchain(None) is token


def test_token_equality(usdc: Token):
    same_address = Token(address=usdc.address.lower(), symbol="OTHER", name="Other", decimals=6)
    assert same_address == usdc
    assert hash(same_address) == hash(usdc)
    assert usdc == usdc.address.lower()
    assert usdc == usdc.address.upper().replace("0X", "0x")
    assert usdc != Token(address="0x" + "12" * 20, symbol=usdc.symbol, name="", decimals=6)
    assert usdc != 42
    assert str(usdc) == "USDC.e"


@pytest.mark.parametrize("decimals", [-1, 256, 6.0])
def test_invalid_decimals(decimals):
    with pytest.raises(pydantic.ValidationError):
        Token(address="0x" + "12" * 20, symbol="BAD", name="Bad", decimals=decimals)
