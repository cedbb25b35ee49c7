"""
cardbridge CLI entry point.
"""

import click

from cardbridge.config.app import load_config

from .parse import parse
from .registry import registry
from .utils import setup_logging


@click.group()
@click.option(
    "--config",
    type=click.Path(exists=True),
    help="Path to custom configuration file",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """cardbridge - turn chat task lists into tracker cards."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["config"] = load_config(config)
    logging_settings = ctx.obj["config"].logging
    setup_logging(verbose=verbose, level=logging_settings.level, fmt=logging_settings.format)


# Register commands
cli.add_command(parse)
cli.add_command(registry)
