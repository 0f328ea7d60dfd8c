import click

from swapcore.cli import cli
from swapcore.cli.utils import get_registry
from swapcore.config import settings


@cli.command("chains")
def chains() -> None:
    """
    List the known chains and whether swaps on them use a DEX. The default chain is marked with *.
    """

    for chain in get_registry():
        marker = "*" if chain.chain_id == settings.default_chain_id else " "
        mode = f"DEX router {chain.router_address}" if chain.has_dex else "demo mode (no DEX)"
        network = " (testnet)" if chain.testnet else ""
        click.echo(f"{marker} {chain.chain_id}: {chain.name}{network} - {mode}")
        tokens = [chain.native_token, *chain.tokens]
        click.echo(f"      tokens: {', '.join(token.symbol for token in tokens)}")
