"""The ``config`` subcommand: show and check configurations."""

from pathlib import Path

import click

from ort.commands.common import global_options
from ort.config import TEMPLATE, ConfigError, dump, load


@click.command("config")
@click.option("--show-default", is_flag=True, default=False,
              help="Show the reference configuration with all supported settings.")
@click.option("--show-active", is_flag=True, default=False,
              help="Show the active configuration, including command line overrides.")
@click.option("--check-syntax", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None,
              help="Check the syntax of the given configuration file.")
@click.pass_context
def config_command(ctx: click.Context, show_default: bool, show_active: bool, check_syntax: Path | None) -> None:
    """Show different ORT configurations."""
    if not (show_default or show_active or check_syntax):
        click.echo(ctx.get_help())
        return

    if show_default:
        click.echo("The reference configuration is:")
        click.echo(TEMPLATE)

    if show_active:
        click.echo("The active configuration is:")
        click.echo(dump(global_options(ctx).config))

    if check_syntax:
        try:
            load(None, check_syntax)
        except ConfigError as exc:
            click.echo(f"The syntax of the configuration file '{check_syntax}' is invalid:\n{exc}", err=True)
            raise click.exceptions.Exit(2)

        click.echo(f"The syntax of the configuration file '{check_syntax}' is valid.")
