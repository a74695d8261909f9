"""SmartForm CLI entry point."""

import logging

import click

from smartform.config import EngineConfig


@click.group()
@click.option(
    "--log-level",
    default=None,
    help="Logging level (default: SMARTFORM_LOG_LEVEL or WARNING).",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None):
    """SmartForm template engine CLI."""
    try:
        config = EngineConfig.from_env()
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    if log_level:
        config.log_level = log_level.upper()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = config


# Register subcommands
from smartform.cli.template_cmd import evaluate, functions, suggest  # noqa: E402

cli.add_command(evaluate)
cli.add_command(suggest)
cli.add_command(functions)
