"""CLI entry point: the root ``ort`` command.

Global options are parsed here, the configuration is loaded, and the result
is published as a ``GlobalOptions`` context object for the subcommands listed
in ``ort.commands.COMMANDS``.

Exit status:
    0   normal completion
    1   an error, printed as a short message (or a traceback with --stacktrace)
    2   usage errors, and subcommands signalling severe findings
"""

import logging
import os
import sys
from pathlib import Path

import click

from ort import __version__
from ort.commands import COMMANDS
from ort.config import ConfigError, load, parse_overrides
from ort.environment import (
    ORT_CONFIG_DIR_ENV_NAME,
    ORT_CONFIG_FILENAME,
    ORT_DATA_DIR_ENV_NAME,
    ORT_NAME,
    Environment,
    default_config_file,
    expand_tilde,
    fixup_user_home,
    ort_config_directory,
    ort_data_directory,
)
from ort.options import PRINT_STACK_TRACE_KEY, GlobalOptions, print_stack_trace
from ort.utils import PERFORMANCE, configure_logging, install_log_handler, show_error

logger = logging.getLogger(__name__)

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"], "max_content_width": 120}


# ---------------------------------------------------------------------------
# Banner
# ---------------------------------------------------------------------------

def get_ort_header(env: Environment, command_name: str | None = None) -> str:
    variables = [
        f"{ORT_CONFIG_DIR_ENV_NAME} = {ort_config_directory()}",
        f"{ORT_DATA_DIR_ENV_NAME} = {ort_data_directory()}",
    ]
    variables += [f"{key} = {value}" for key, value in env.variables.items()]

    command = f" '{command_name}'" if command_name else ""
    max_mem_in_mib = env.max_memory // (1024 * 1024)

    logo = [
        r" ________ _____________________",
        rf" \_____  \\______   \__    ___/ the OSS Review Toolkit, version {env.ort_version}.",
        r"  /   |   \|       _/ |    |",
        rf" /    |    \    |   \ |    |    Running{command} under Python {env.python_version} on {env.os} with",
        rf" \_______  /____|_  / |____|    {env.processors} CPUs and a maximum of {max_mem_in_mib} MiB of memory.",
        r"         \/       \/",
    ]

    header = [line.rstrip() for line in logo]
    header.append("Environment variables:")
    header += variables
    return "\n".join(header) + "\n"


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------

class OrtGroup(click.Group):
    """Root group that keeps registration order and reports uncaught errors."""

    def list_commands(self, ctx: click.Context) -> list[str]:
        return list(self.commands)

    def format_help(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        formatter.write(get_ort_header(Environment()))
        formatter.write_paragraph()
        super().format_help(ctx, formatter)

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except (click.exceptions.Exit, click.exceptions.Abort, click.ClickException):
            raise
        except ConfigError as exc:
            click.echo(f"Configuration error: {exc}", err=True)
            ctx.exit(1)
        except Exception as exc:
            show_error(exc, print_stack_trace(ctx))
            ctx.exit(1)


def _resolve_config_file(ctx: click.Context, param: click.Parameter, value: str | None) -> Path:
    if value is None:
        return default_config_file()

    path = Path(expand_tilde(value))
    if not path.is_file():
        raise click.BadParameter(f"File '{path}' does not exist or is not a file.")
    if not os.access(path, os.R_OK):
        raise click.BadParameter(f"File '{path}' is not readable.")
    return path


def _parse_config_arguments(ctx: click.Context, param: click.Parameter, value: tuple[str, ...]) -> dict[str, str]:
    try:
        return parse_overrides(value)
    except ConfigError as exc:
        raise click.BadParameter(str(exc)) from exc


def _resolve_log_level(info: bool, performance: bool, debug: bool) -> int:
    chosen = [level for flag, level in ((info, logging.INFO), (performance, PERFORMANCE), (debug, logging.DEBUG))
              if flag]
    if len(chosen) > 1:
        raise click.UsageError("The options '--info', '--performance' and '--debug' are mutually exclusive.")
    return chosen[0] if chosen else logging.WARNING


def _print_help_all(ctx: click.Context) -> None:
    group = ctx.command
    for name in group.list_commands(ctx):
        command = group.get_command(ctx, name)
        sub_ctx = click.Context(command, info_name=name, parent=ctx)
        click.echo(command.get_help(sub_ctx))
        click.echo()


@click.group(cls=OrtGroup, name=ORT_NAME, invoke_without_command=True, context_settings=CONTEXT_SETTINGS)
@click.option("-c", "--config", "config_file", default=None, callback=_resolve_config_file, metavar="PATH",
              help=f"The path to a configuration file.  [default: ${ORT_CONFIG_DIR_ENV_NAME}/{ORT_CONFIG_FILENAME}]")
@click.option("--info", is_flag=True, default=False, help="Set the verbosity level of log output to INFO.")
@click.option("--performance", is_flag=True, default=False,
              help="Set the verbosity level of log output to PERFORMANCE.")
@click.option("--debug", is_flag=True, default=False, help="Set the verbosity level of log output to DEBUG.")
@click.option("--stacktrace", is_flag=True, default=False, help="Print out the stacktrace for all exceptions.")
@click.option("-P", "config_arguments", multiple=True, metavar="KEY=VALUE", callback=_parse_config_arguments,
              help="Override a key-value pair in the configuration file. For example: "
                   "-P ort.severeIssueThreshold=ERROR")
@click.option("--force-overwrite", is_flag=True, default=False,
              help="Overwrite any output files if they already exist.")
@click.option("--help-all", is_flag=True, default=False, help="Display help for all subcommands.")
@click.version_option(__version__, "-v", "--version", message="%(version)s", help="Show the version and exit.")
@click.pass_context
def cli(ctx: click.Context, config_file: Path, info: bool, performance: bool, debug: bool, stacktrace: bool,
        config_arguments: dict[str, str], force_overwrite: bool, help_all: bool) -> None:
    """The OSS Review Toolkit: analyze, scan, evaluate and report on open source dependencies."""
    configure_logging(_resolve_log_level(info, performance, debug))
    logger.debug("Used command line arguments: %s", " ".join(sys.argv[1:]))

    ctx.meta[PRINT_STACK_TRACE_KEY] = stacktrace

    config = load(config_arguments, config_file)
    ctx.obj = GlobalOptions(config=config, force_overwrite=force_overwrite)

    if help_all:
        _print_help_all(ctx)
        ctx.exit(0)

    click.echo(get_ort_header(Environment(), ctx.invoked_subcommand))


for _command in COMMANDS:
    cli.add_command(_command)


def main() -> None:
    """Console script entry point."""
    fixup_user_home()
    install_log_handler()
    cli(prog_name=ORT_NAME)
