"""The ``reporter`` subcommand: render ORT results with report plugins."""

import logging
import time
from pathlib import Path

import click

from ort.commands.common import check_output_files, global_options, read_result
from ort.options import print_stack_trace
from ort.reporter import ReporterInput, get_reporter, reporter_names
from ort.utils import PERFORMANCE, OrtError, show_error

logger = logging.getLogger(__name__)


def _parse_report_formats(ctx: click.Context, param: click.Parameter, value: tuple[str, ...]) -> list[str]:
    known = {name.lower(): name for name in reporter_names()}
    formats: list[str] = []
    for entry in value:
        for name in (part.strip() for part in entry.split(",")):
            if not name:
                continue
            if name.lower() not in known:
                raise click.BadParameter(
                    f"Unknown report format '{name}'. Available formats: {', '.join(known.values())}"
                )
            if known[name.lower()] not in formats:
                formats.append(known[name.lower()])
    if not formats:
        raise click.BadParameter("At least one report format is required.")
    return formats


def _parse_report_options(ctx: click.Context, param: click.Parameter,
                          value: tuple[str, ...]) -> dict[str, dict[str, str]]:
    """Turn ``Reporter=key=value`` entries into ``{reporter: {key: value}}``."""
    options: dict[str, dict[str, str]] = {}
    for entry in value:
        reporter, _, option = entry.partition("=")
        key, sep, option_value = option.partition("=")
        if not reporter.strip() or not key.strip() or not sep:
            raise click.BadParameter(f"Invalid report option '{entry}', expected 'Reporter=key=value'.")
        options.setdefault(reporter.strip().lower(), {})[key.strip()] = option_value
    return options


def _show_report_failure(ctx: click.Context, reporter_name: str, exc: Exception) -> None:
    click.echo(f"Could not create '{reporter_name}' report:", err=True)
    show_error(exc, print_stack_trace(ctx))


@click.command("reporter")
@click.option("-i", "--ort-file", required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="The ORT result file to use.")
@click.option("-o", "--output-dir", required=True, type=click.Path(file_okay=False, path_type=Path),
              help="The output directory to store the generated reports in.")
@click.option("-f", "--report-formats", "report_formats", required=True, multiple=True,
              callback=_parse_report_formats,
              help=f"The comma-separated reports to generate, any of: {', '.join(reporter_names())}.")
@click.option("-O", "--report-option", "report_options", multiple=True, metavar="REPORTER=KEY=VALUE",
              callback=_parse_report_options,
              help="Specify a report-format-specific option, for example "
                   "'AsciiDocTemplate=backend=html'. Overrides options from the configuration file.")
@click.pass_context
def reporter_command(ctx: click.Context, ort_file: Path, output_dir: Path, report_formats: list[str],
                     report_options: dict[str, dict[str, str]]) -> None:
    """Present Analyzer, Scanner, Advisor and Evaluator results in various formats."""
    options = global_options(ctx)
    reporter_input = ReporterInput(read_result(ort_file), options.config, options.force_overwrite)

    failures = 0
    jobs = []
    planned_files: list[Path] = []
    for name in report_formats:
        reporter = get_reporter(name)
        reporter_options = {
            **options.config.reporter_options(reporter.name),
            **report_options.get(reporter.name.lower(), {}),
        }

        try:
            planned_files += reporter.output_files(reporter_input, output_dir, reporter_options)
        except (OrtError, OSError) as exc:
            failures += 1
            _show_report_failure(ctx, reporter.name, exc)
            continue

        jobs.append((reporter, reporter_options))

    check_output_files(planned_files, options.force_overwrite)
    output_dir.mkdir(parents=True, exist_ok=True)

    for reporter, reporter_options in jobs:
        start = time.perf_counter()
        try:
            files = reporter.generate_report(reporter_input, output_dir, reporter_options)
        except (OrtError, OSError) as exc:
            failures += 1
            _show_report_failure(ctx, reporter.name, exc)
            continue

        logger.log(PERFORMANCE, "Generated the '%s' report in %.2f s.", reporter.name, time.perf_counter() - start)
        click.echo(f"Successfully created '{reporter.name}' report(s):")
        for file in files:
            click.echo(f"\t{file}")

    if failures:
        click.echo(f"{failures} of {len(report_formats)} report(s) failed.")
        raise click.exceptions.Exit(2)
