import pytest

from swapcore.config import FallbackSettings
from swapcore.quoting import QuoteEngine
from swapcore.registry import ChainRegistry
from swapcore.transaction import SwapExecutor


@pytest.fixture
def executor(registry: ChainRegistry, fallback: FallbackSettings) -> SwapExecutor:
    return SwapExecutor(
        registry,
        QuoteEngine(registry, fallback, read_retry_attempts=1),
        receipt_timeout=1.0,
        demo_swap_delay=0,
    )
