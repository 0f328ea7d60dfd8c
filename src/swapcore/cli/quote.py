import asyncio

import click

from swapcore.cli import cli
from swapcore.cli.utils import close_async_web3, get_async_web3_from_config
from swapcore.config import settings
from swapcore.connection import async_connection_manager, set_async_web3
from swapcore.exceptions import SwapcoreError
from swapcore.quoting import DegradedQuote, EstimatedQuote, LiveQuote, QuoteEngine, QuoteRequest
from swapcore.types.aliases import ChainId


async def _quote(
    chain_id: ChainId,
    token_in: str,
    token_out: str,
    amount: str,
    fee_tier: int | None,
) -> None:
    engine = QuoteEngine.from_settings(settings)
    registry = engine.registry
    request = QuoteRequest(
        token_in=registry.get_token(chain_id, token_in),
        token_out=registry.get_token(chain_id, token_out),
        amount_in=amount,
        fee_tier=fee_tier,
    )

    w3 = None
    if registry.has_dex_support(chain_id):
        w3 = await get_async_web3_from_config(chain_id)
        await set_async_web3(w3)
    else:
        async_connection_manager.set_default_chain(chain_id)

    try:
        quote = await engine.get_quote(request, chain_id)
    finally:
        if w3 is not None:
            await close_async_web3(w3)

    if quote is None:
        click.echo("No quote: the amount must be a positive number.")
        return

    click.echo(
        f"{quote.amount_in} {request.token_in} -> {quote.amount_out} {request.token_out} "
        f"(rate {quote.rate:g}, price impact {quote.price_impact_percent:.2f}%)"
    )
    match quote:
        case LiveQuote():
            click.echo(f"live quote from pool {quote.pool.address} (fee tier {quote.fee_tier})")
        case EstimatedQuote():
            click.echo(f"estimated quote, not backed by liquidity ({quote.reason})")
        case DegradedQuote():
            click.echo(f"degraded quote, the chain could not be read: {quote.error}")


@cli.command("quote")
@click.argument("chain_id", type=int)
@click.argument("token_in")
@click.argument("token_out")
@click.argument("amount")
@click.option("--fee-tier", type=int, default=None, help="Pool fee tier, in hundredths of a bip")
def quote(chain_id: int, token_in: str, token_out: str, amount: str, fee_tier: int | None) -> None:
    """
    Quote an exact-input swap of AMOUNT TOKEN_IN for TOKEN_OUT. Tokens are given by symbol or
    address.
    """

    try:
        asyncio.run(_quote(chain_id, token_in, token_out, amount, fee_tier))
    except (SwapcoreError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc
