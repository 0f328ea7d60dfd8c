from pathlib import Path

from pydantic import HttpUrl, WebsocketUrl
from web3 import (
    AsyncBaseProvider,
    AsyncHTTPProvider,
    AsyncIPCProvider,
    AsyncWeb3,
    WebSocketProvider,
)
from web3.providers.persistent import PersistentConnectionProvider

from swapcore.config import CONFIG_FILE, settings
from swapcore.registry.chains import ChainRegistry
from swapcore.types.aliases import ChainId


def get_registry() -> ChainRegistry:
    return ChainRegistry.from_settings(settings)


async def get_async_web3_from_config(chain_id: ChainId) -> AsyncWeb3[AsyncBaseProvider]:
    w3: AsyncWeb3[AsyncBaseProvider]
    match endpoint := settings.rpc.get(chain_id):
        case HttpUrl():
            w3 = AsyncWeb3(AsyncHTTPProvider(str(endpoint)))
        case WebsocketUrl():
            w3 = await AsyncWeb3(WebSocketProvider(str(endpoint)))
        case Path():
            w3 = await AsyncWeb3(AsyncIPCProvider(str(endpoint)))
        case None:
            msg = f"Chain ID {chain_id} does not have an RPC defined in config file {CONFIG_FILE}"
            raise ValueError(msg)

    if (endpoint_chain_id := await w3.eth.chain_id) != chain_id:
        msg = (
            f"The chain ID ({endpoint_chain_id}) at endpoint {endpoint} does not match "
            f"the chain ID ({chain_id}) defined in the config file."
        )
        raise ValueError(msg)

    return w3


async def close_async_web3(w3: AsyncWeb3[AsyncBaseProvider]) -> None:
    if isinstance(w3.provider, PersistentConnectionProvider):
        await w3.provider.disconnect()
