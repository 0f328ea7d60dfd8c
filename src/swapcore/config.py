import tomllib
from pathlib import Path
from typing import Annotated

import tomlkit
from pydantic import BaseModel, Field, HttpUrl, WebsocketUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from swapcore.logging import logger
from swapcore.registry.chains import ChainConfig
from swapcore.types.aliases import ChainId

CONFIG_DIR = Path.home() / ".config" / "swapcore"
CONFIG_FILE = CONFIG_DIR / "config.toml"

DEFAULT_CHAIN_ID: ChainId = 16661


class SwapSettings(BaseModel):
    default_slippage_percent: Annotated[float, Field(gt=0, le=50)] = 0.5
    default_deadline_minutes: Annotated[int, Field(gt=0)] = 20
    receipt_timeout_seconds: Annotated[float, Field(gt=0)] = 120.0
    demo_swap_delay_seconds: Annotated[float, Field(ge=0)] = 2.0
    read_retry_attempts: Annotated[int, Field(ge=1)] = 3


class FallbackSettings(BaseModel):
    """
    Reference rates used for estimated quotes when no liquidity-backed price is available. Rates
    are keyed by input token symbol, then output token symbol.
    """

    rates: dict[str, dict[str, Annotated[float, Field(gt=0)]]] = {
        "0G": {"USDCe": 1.5, "USDC.e": 1.5, "wETH": 0.0005, "st0G": 1.05, "PAI": 2.0},
        "W0G": {"USDCe": 1.5, "USDC.e": 1.5, "wETH": 0.0005, "st0G": 1.05, "PAI": 2.0},
        "USDCe": {"0G": 0.667, "W0G": 0.667, "wETH": 0.00033, "st0G": 0.7, "PAI": 1.33},
        "USDC.e": {"0G": 0.667, "W0G": 0.667, "wETH": 0.00033, "st0G": 0.7, "PAI": 1.33},
        "wETH": {"0G": 2000, "W0G": 2000, "USDCe": 3000, "USDC.e": 3000, "st0G": 2100, "PAI": 4000},
        "st0G": {
            "0G": 0.95, "W0G": 0.95, "USDCe": 1.43, "USDC.e": 1.43, "wETH": 0.00048, "PAI": 1.9
        },
        "PAI": {
            "0G": 0.5, "W0G": 0.5, "USDCe": 0.75, "USDC.e": 0.75, "wETH": 0.00025, "st0G": 0.53
        },
    }
    default_rate: Annotated[float, Field(gt=0)] = 1.0
    no_dex_price_impact: Annotated[float, Field(ge=0)] = 0.15
    no_pool_price_impact: Annotated[float, Field(ge=0)] = 0.5
    degraded_price_impact: Annotated[float, Field(ge=0)] = 1.0

    def rate_for(self, symbol_in: str, symbol_out: str) -> float:
        return self.rates.get(symbol_in, {}).get(symbol_out, self.default_rate)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SWAPCORE_", env_nested_delimiter="__")

    default_chain_id: ChainId = DEFAULT_CHAIN_ID
    rpc: dict[
        ChainId,
        HttpUrl | WebsocketUrl | Path,
    ] = {}
    swap: SwapSettings = SwapSettings()
    fallback: FallbackSettings = FallbackSettings()
    chains: dict[ChainId, ChainConfig] = {}

    @field_validator("rpc", mode="after")
    def validate_paths(
        cls,  # noqa: N805
        rpc_dict: dict[ChainId, HttpUrl | WebsocketUrl | Path],
    ) -> dict[ChainId, HttpUrl | WebsocketUrl | Path]:
        """
        Validate the endpoints.

        This will convert all file paths to an absolute reference, leaving HTTP and WS URLs as-is.
        """

        return {
            chain_id: endpoint.expanduser().absolute() if isinstance(endpoint, Path) else endpoint
            for chain_id, endpoint in rpc_dict.items()
        }


def load_config_from_file(config_path: Path) -> Settings:
    return Settings.model_validate(
        tomllib.loads(
            config_path.read_text(),
        ),
    )


def save_config_to_file(config: Settings, config_path: Path = CONFIG_FILE) -> None:
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(
        tomlkit.dumps(
            config.model_dump(mode="json", exclude_none=True),
        ),
    )
    logger.info(f"Saved configuration to {config_path}.")


if CONFIG_FILE.exists():
    settings = load_config_from_file(CONFIG_FILE)
else:
    settings = Settings()
    logger.debug(f"No configuration file at {CONFIG_FILE}, using defaults.")
