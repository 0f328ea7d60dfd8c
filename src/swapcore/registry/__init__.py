from .chains import ChainConfig, ChainRegistry, NativeCurrency
from .deployments import BUILTIN_CHAINS, ZgGalileoTestnet, ZgMainnet

__all__ = (
    "BUILTIN_CHAINS",
    "ChainConfig",
    "ChainRegistry",
    "NativeCurrency",
    "ZgGalileoTestnet",
    "ZgMainnet",
)
