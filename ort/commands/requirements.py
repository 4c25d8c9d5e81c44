"""The ``requirements`` subcommand: list external tools and installed engines."""

import shutil
import subprocess  # nosec B404

import click

from ort.engines import ENGINE_NAMES, find_engine

# (executable, version arguments, what it is used for)
TOOLS = (
    ("asciidoctor", ["--version"], "AsciiDocTemplate reporter, all backends except 'adoc'"),
    ("asciidoctor-pdf", ["--version"], "AsciiDocTemplate reporter, 'pdf' backend"),
)


def get_tool_version(executable: str, version_args: list[str]) -> str | None:
    """Return the first line of the tool's version output, or None if it is not installed."""
    path = shutil.which(executable)
    if path is None:
        return None

    try:
        result = subprocess.run([path, *version_args], capture_output=True, text=True, check=True, timeout=30)  # nosec B603
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError):
        return "unknown version"

    lines = result.stdout.strip().splitlines()
    return lines[0] if lines else "unknown version"


@click.command("requirements")
def requirements_command() -> None:
    """List the required command line tools and the installed engines."""
    missing = 0

    click.echo("Tools:")
    for executable, version_args, purpose in TOOLS:
        version = get_tool_version(executable, version_args)
        if version is None:
            missing += 1
            click.echo(f"\t- {executable}: not found (needed for the {purpose})")
        else:
            click.echo(f"\t* {executable}: {version}")

    click.echo("Engines:")
    for name in ENGINE_NAMES:
        status = "installed" if find_engine(name) is not None else "not installed"
        click.echo(f"\t{name}: {status}")

    if missing:
        click.echo(f"{missing} required tool(s) could not be found.")
        raise click.exceptions.Exit(2)
