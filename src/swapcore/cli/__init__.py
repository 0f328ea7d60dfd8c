import click

from swapcore.version import __version__


@click.group()
@click.version_option(version=__version__, prog_name="swapcore")
def cli() -> None: ...


from . import chains, config, quote  # noqa: F401, E402
