from swapcore.erc20.token import Token
from swapcore.registry.chains import ChainConfig, NativeCurrency

ZG_NATIVE_CURRENCY = NativeCurrency(name="0G", symbol="0G", decimals=18)


# 0G Mainnet --------------- START
ZgMainnet = ChainConfig(
    chain_id=16661,
    name="0G Mainnet",
    native_currency=ZG_NATIVE_CURRENCY,
    router_address="0x8b598a7c136215a95ba0282b4d832b9f9801f2e2",
    factory_address="0x9bdca5798e52e592a08e3b34d3f18eef76af7ef4",
    wrapped_native_address="0x1cd0690ff9a693f5ef2dd976660a8dafc81a109c",
    tokens=(
        Token(
            address="0x1f3aa82227281ca364bfb3d253b0f1af1da6473e",
            symbol="USDC.e",
            name="Bridged USDC",
            decimals=6,
        ),
    ),
    explorer_url="https://chainscan.0g.ai",
)
# 0G Mainnet --------------- END


# 0G Galileo Testnet ------- START
# No exchange is deployed here, so quotes are estimated and swaps are simulated. The token
# addresses are placeholders.
ZgGalileoTestnet = ChainConfig(
    chain_id=16602,
    name="0G Galileo Testnet",
    native_currency=ZG_NATIVE_CURRENCY,
    tokens=(
        Token(
            address="0x0000000000000000000000000000000000000001",
            symbol="st0G",
            name="Staked 0G",
            decimals=18,
        ),
        Token(
            address="0x0000000000000000000000000000000000000002",
            symbol="USDCe",
            name="Bridged USDC",
            decimals=6,
        ),
        Token(
            address="0x0000000000000000000000000000000000000003",
            symbol="wETH",
            name="Wrapped ETH",
            decimals=18,
        ),
        Token(
            address="0x0000000000000000000000000000000000000004",
            symbol="PAI",
            name="PAI Token",
            decimals=18,
        ),
    ),
    explorer_url="https://chainscan-galileo.0g.ai",
    testnet=True,
)
# 0G Galileo Testnet ------- END


BUILTIN_CHAINS: tuple[ChainConfig, ...] = (
    ZgMainnet,
    ZgGalileoTestnet,
)
